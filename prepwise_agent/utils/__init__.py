"""Utility modules for logging setup."""

from .logging import setup_logging

__all__ = ["setup_logging"]
