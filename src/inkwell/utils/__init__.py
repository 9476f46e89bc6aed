"""Utility modules for Inkwell.

Provides:
- logger: get_logger for namespaced logging
"""

from inkwell.utils.logger import get_logger

__all__ = ["get_logger"]
