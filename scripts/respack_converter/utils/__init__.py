"""
Utility modules for image decoding and encoding.
"""

from .image import ImageUtils, DecodeError

__all__ = [
    "ImageUtils",
    "DecodeError",
]
