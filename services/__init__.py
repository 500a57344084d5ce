"""services package initializer — explicit exports only."""

from __future__ import annotations

__all__ = ["assessment"]
