# SPDX-License-Identifier: MIT
"""Helpers for enabling Pydantic Logfire telemetry."""

from __future__ import annotations

import logfire

from orderly.runtime.settings import Settings, load_settings


def _mask_token(value: str | None) -> str | None:
    """Return a masked representation of ``value`` for safe logging."""

    if not value:
        return None
    return f"{value[:4]}..."


def init_logfire(settings: Settings | None = None) -> None:
    """Configure Logfire for the spans and metrics emitted by ``orderly``.

    Args:
        settings: Telemetry settings. Loaded from the environment when omitted.
            Without a token, or with ``send_to_logfire`` disabled, telemetry
            stays local.
    """

    settings = settings or load_settings()
    key = settings.logfire_token
    logfire.debug("Configuring logfire", token=_mask_token(key))
    logfire.configure(
        token=key,
        send_to_logfire=bool(key) and settings.send_to_logfire,
        service_name=settings.service_name,
        console=logfire.ConsoleOptions(
            min_log_level=settings.log_level,
            show_project_link=False,
            verbose=True,
        ),
        min_level=settings.log_level,
    )
