# services/assessment/__init__.py
"""assessment services package initializer — explicit exports only; no runtime side effects."""

__all__ = ["app", "bank", "grid_path", "scorer", "store"]
