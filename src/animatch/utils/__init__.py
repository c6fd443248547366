"""Utility modules for animatch."""

from animatch.utils.config import resolve_setting
from animatch.utils.debug import debug, error, info, warn

__all__ = ["resolve_setting", "debug", "info", "warn", "error"]
