"""
Utility helpers for logship.
"""

from .identifier import get_identifier

__all__ = ["get_identifier"]
