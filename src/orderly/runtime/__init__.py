# SPDX-License-Identifier: MIT
"""Runtime configuration for ``orderly``."""

from .settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
