# SPDX-License-Identifier: MIT
"""Tests for Logfire initialisation."""

from typing import Any

from orderly.observability import monitoring
from orderly.runtime.settings import Settings


def _capture_configure(monkeypatch) -> dict[str, Any]:
    captured: dict[str, Any] = {}

    def fake_configure(**kwargs: Any) -> None:
        captured.update(kwargs)

    monkeypatch.setattr(monitoring.logfire, "configure", fake_configure)
    return captured


def test_init_logfire_exports_with_token(monkeypatch) -> None:
    captured = _capture_configure(monkeypatch)
    settings = Settings(
        logfire_token="abcd1234", send_to_logfire=True, service_name="billing"
    )
    monitoring.init_logfire(settings)
    assert captured["token"] == "abcd1234"
    assert captured["send_to_logfire"] is True
    assert captured["service_name"] == "billing"
    assert captured["min_level"] == "warn"


def test_init_logfire_stays_local_without_token(monkeypatch) -> None:
    captured = _capture_configure(monkeypatch)
    monitoring.init_logfire(Settings(send_to_logfire=True))
    assert captured["send_to_logfire"] is False


def test_mask_token_hides_secret() -> None:
    assert monitoring._mask_token("abcd1234") == "abcd..."
    assert monitoring._mask_token(None) is None
