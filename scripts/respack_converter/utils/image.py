"""
Image processing utilities for the respack converter.
"""

from typing import Tuple, Union
from PIL import Image
import io


class ImageUtils:
    """Utility class for common image processing operations."""

    @staticmethod
    def load_image(data: Union[bytes, Image.Image]) -> Image.Image:
        """
        Load and fully decode an image.

        Args:
            data: Image data as bytes or PIL Image

        Returns:
            PIL Image object with pixel data loaded

        Raises:
            DecodeError: If data cannot be decoded as a raster image
        """
        if isinstance(data, Image.Image):
            return data
        if not isinstance(data, (bytes, bytearray)):
            raise DecodeError(f"Unsupported image data type: {type(data)}")

        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (OSError, ValueError, SyntaxError) as e:
            raise DecodeError(f"Cannot decode image from bytes: {e}")
        return image

    @staticmethod
    def image_size(data: Union[bytes, Image.Image]) -> Tuple[int, int]:
        """
        Read image dimensions without decoding pixel data.

        Raises:
            DecodeError: If the header cannot be parsed
        """
        if isinstance(data, Image.Image):
            return data.size

        try:
            with Image.open(io.BytesIO(data)) as image:
                return image.size
        except (OSError, ValueError, SyntaxError) as e:
            raise DecodeError(f"Cannot read image dimensions: {e}")

    @staticmethod
    def encode_image(image: Image.Image, format: str = 'PNG', **kwargs) -> bytes:
        """
        Encode image to bytes.

        Args:
            image: Image to encode
            format: Image format, PNG keeps the result lossless
            **kwargs: Additional save parameters

        Returns:
            Encoded image bytes
        """
        save_kwargs = {}

        if format.upper() == 'PNG':
            save_kwargs['compress_level'] = kwargs.pop('compress_level', 6)

        save_kwargs.update(kwargs)

        buffer = io.BytesIO()
        image.save(buffer, format=format, **save_kwargs)
        return buffer.getvalue()

    @staticmethod
    def ensure_rgba(image: Image.Image) -> Image.Image:
        """
        Convert image to RGBA mode if not already.

        16-bit grayscale ('I;16*' and 'I', as Pillow loads 16-bit PNGs) is
        scaled down to 8 bits first; a plain convert would clip it.
        """
        if image.mode == 'RGBA':
            return image
        if image.mode.startswith('I;16') or image.mode == 'I':
            image = image.convert('I').point(lambda value: value * (1 / 256)).convert('L')
        return image.convert('RGBA')


class DecodeError(Exception):
    """Exception raised when image bytes are not a usable raster image."""
    pass
