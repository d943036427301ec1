"""
Image transforms required by the target pack format: hit-effect sprite sheet
re-tiling and vertical hold-note compositing.
"""

from dataclasses import dataclass
from typing import Sequence, Union
from PIL import Image

from ..utils.image import ImageUtils, DecodeError


@dataclass(frozen=True)
class HitEffectLayout:
    """Geometry of the hit-effect animation."""
    frames: int = 30
    columns: int = 5

    @property
    def rows(self) -> int:
        return -(-self.frames // self.columns)

    @property
    def grid(self) -> tuple[int, int]:
        return (self.columns, self.rows)


class ImageTranscoder:
    """Converts source images into target-format images."""

    def __init__(self, layout: HitEffectLayout = HitEffectLayout(),
                 strict_frames: bool = True, compress_level: int = 6):
        """
        Initialize transcoder.

        Args:
            layout: Hit-effect frame count and grid width
            strict_frames: Reject strips whose height is not a multiple of the
                frame count instead of dropping the remainder rows
            compress_level: PNG compression level for encoded output
        """
        self.layout = layout
        self.strict_frames = strict_frames
        self.compress_level = compress_level

    def retile_hit_effect(self, data: Union[bytes, Image.Image]) -> bytes:
        """
        Re-tile a single-column hit-effect strip into a grid sprite sheet.

        Raises:
            DecodeError: If the bytes are not an image or the strip geometry
                does not hold the expected number of frames
        """
        image = ImageUtils.load_image(data)
        return self._encode(self.retile_image(image))

    def retile_image(self, image: Image.Image) -> Image.Image:
        """
        Place frame i of a vertical strip at grid cell (i % columns, i // columns).

        The output is exactly (frame_width * columns) x (frame_height * rows).
        """
        frames = self.layout.frames
        frame_width, total_height = image.size
        frame_height = total_height // frames

        if frame_height == 0:
            raise DecodeError(
                f"Hit-effect strip height {total_height} is shorter than {frames} frames"
            )
        if self.strict_frames and total_height % frames != 0:
            raise DecodeError(
                f"Hit-effect strip height {total_height} is not a multiple of {frames} frames"
            )

        image = ImageUtils.ensure_rgba(image)
        columns, rows = self.layout.grid
        sheet = Image.new('RGBA', (frame_width * columns, frame_height * rows), (0, 0, 0, 0))

        for index in range(frames):
            top = index * frame_height
            frame = image.crop((0, top, frame_width, top + frame_height))
            x = (index % columns) * frame_width
            y = (index // columns) * frame_height
            sheet.paste(frame, (x, y))

        return sheet

    def composite_vertical(self, end: Union[bytes, Image.Image],
                           body: Union[bytes, Image.Image],
                           head: Union[bytes, Image.Image]) -> bytes:
        """
        Stack end cap, body and head cap top to bottom into one image.

        Raises:
            DecodeError: If any of the three inputs cannot be decoded
        """
        images = [ImageUtils.load_image(part) for part in (end, body, head)]
        return self._encode(self.stack_images(images))

    def stack_images(self, images: Sequence[Image.Image]) -> Image.Image:
        """
        Stack images vertically, each horizontally centered.

        Output width is the widest input, output height is the sum of all
        heights. Uncovered pixels stay fully transparent.
        """
        if not images:
            raise ValueError("At least one image is required for stacking")

        width = max(image.width for image in images)
        height = sum(image.height for image in images)
        canvas = Image.new('RGBA', (width, height), (0, 0, 0, 0))

        y = 0
        for image in images:
            x = (width - image.width) // 2
            canvas.paste(ImageUtils.ensure_rgba(image), (x, y))
            y += image.height

        return canvas

    def _encode(self, image: Image.Image) -> bytes:
        return ImageUtils.encode_image(image, 'PNG', compress_level=self.compress_level)


__all__ = ["HitEffectLayout", "ImageTranscoder", "DecodeError"]
