"""Utility modules for the Handle Generator."""

from .validation import ValidationUtils

__all__ = ["ValidationUtils"]
