"""
Configuration for logship.
"""

from .config import UploaderConfig

__all__ = ["UploaderConfig"]
