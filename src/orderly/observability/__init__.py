# SPDX-License-Identifier: MIT
"""Observability helpers."""

from .monitoring import init_logfire

__all__ = ["init_logfire"]
