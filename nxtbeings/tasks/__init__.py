"""
Background Tasks
"""
from .cleanup import OtpSweeper

__all__ = [
    "OtpSweeper",
]
