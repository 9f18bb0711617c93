# SPDX-License-Identifier: MIT
"""Configuration for applications embedding ``orderly``.

:class:`Settings` is a ``pydantic-settings`` model read from environment
variables prefixed with ``ORDERLY_`` and from a ``.env`` file in the working
directory when one exists. Only telemetry is configurable; the queue and retry
primitives take their parameters per call.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["fatal", "error", "warn", "notice", "info", "debug", "trace"]


class Settings(BaseSettings):
    """Telemetry settings sourced from the environment."""

    log_level: LogLevel = Field("warn", description="Minimum log level emitted.")
    service_name: str = Field(
        "orderly", min_length=1, description="Service name reported to Logfire."
    )
    logfire_token: str | None = Field(
        None, description="Logfire authentication token, if available.", repr=False
    )
    send_to_logfire: bool = Field(
        False, description="Export telemetry to Logfire instead of keeping it local."
    )

    model_config = SettingsConfigDict(env_prefix="ORDERLY_", extra="ignore")


def load_settings() -> Settings:
    """Load and validate settings from the environment.

    Returns:
        Settings: Validated configuration.

    Raises:
        RuntimeError: If a configured value is invalid.
    """
    env_file_path = Path(".env")
    env_file = env_file_path if env_file_path.exists() else None
    try:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    except ValidationError as exc:
        # Summarise validation issues so the caller receives clear feedback.
        details = "; ".join(
            f"{'.'.join(map(str, error['loc']))}: {error['msg']}"
            for error in exc.errors()
        )
        raise RuntimeError(f"Invalid configuration: {details}") from exc
