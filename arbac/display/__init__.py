"""Logging setup helpers."""

from arbac.display.logging_config import setup_logging

__all__ = ["setup_logging"]
