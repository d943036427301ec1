"""
Tests for hit-effect re-tiling and hold-note compositing.
"""

import io
import unittest
import numpy as np
from PIL import Image

from respack_converter.processing.transcoder import ImageTranscoder, HitEffectLayout
from respack_converter.utils.image import ImageUtils, DecodeError


def make_strip(frame_width: int, frame_height: int, frames: int = 30, extra_rows: int = 0) -> Image.Image:
    """Create a vertical strip where every frame has a distinct, position-dependent pattern."""
    height = frame_height * frames + extra_rows
    pixels = np.zeros((height, frame_width, 4), dtype=np.uint8)
    for index in range(frames):
        top = index * frame_height
        for y in range(frame_height):
            for x in range(frame_width):
                pixels[top + y, x] = (index * 8, x * 3 % 256, y * 5 % 256, 255)
    return Image.fromarray(pixels)


def encode(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format='PNG')
    return buffer.getvalue()


class TestHitEffectLayout(unittest.TestCase):
    """Test HitEffectLayout geometry."""

    def test_default_grid(self):
        layout = HitEffectLayout()

        self.assertEqual(layout.grid, (5, 6))
        self.assertEqual(layout.rows, 6)


class TestRetileHitEffect(unittest.TestCase):
    """Test hit-effect strip re-tiling."""

    def setUp(self):
        self.transcoder = ImageTranscoder()

    def test_output_size(self):
        strip = make_strip(4, 3)

        sheet = self.transcoder.retile_image(strip)

        self.assertEqual(sheet.size, (20, 18))

    def test_frame_placement(self):
        """Frame i lands at cell (i % 5, i // 5) with an exact pixel copy."""
        w, h = 4, 3
        strip = np.array(make_strip(w, h))

        sheet = np.array(self.transcoder.retile_image(Image.fromarray(strip)))

        for index in range(30):
            source = strip[index * h:(index + 1) * h, 0:w]
            col, row = index % 5, index // 5
            target = sheet[row * h:(row + 1) * h, col * w:(col + 1) * w]
            np.testing.assert_array_equal(target, source, err_msg=f"frame {index}")

    def test_bytes_round_trip(self):
        data = encode(make_strip(40, 3))

        result = self.transcoder.retile_hit_effect(data)

        with Image.open(io.BytesIO(result)) as sheet:
            self.assertEqual(sheet.format, 'PNG')
            self.assertEqual(sheet.size, (200, 18))

    def test_rgb_input_is_converted(self):
        strip = make_strip(2, 2).convert('RGB')

        sheet = self.transcoder.retile_image(strip)

        self.assertEqual(sheet.mode, 'RGBA')
        self.assertEqual(sheet.size, (10, 12))

    def test_uneven_height_rejected(self):
        strip = make_strip(4, 3, extra_rows=7)

        with self.assertRaises(DecodeError):
            self.transcoder.retile_image(strip)

    def test_uneven_height_truncated_when_lenient(self):
        transcoder = ImageTranscoder(strict_frames=False)
        strip = np.array(make_strip(4, 3, extra_rows=7))

        sheet = np.array(transcoder.retile_image(Image.fromarray(strip)))

        self.assertEqual(sheet.shape[:2], (18, 20))
        np.testing.assert_array_equal(sheet[15:18, 16:20], strip[87:90, 0:4])

    def test_strip_shorter_than_frame_count(self):
        transcoder = ImageTranscoder(strict_frames=False)
        strip = Image.new('RGBA', (10, 29))

        with self.assertRaises(DecodeError):
            transcoder.retile_image(strip)

    def test_invalid_bytes(self):
        with self.assertRaises(DecodeError):
            self.transcoder.retile_hit_effect(b"not an image")


class TestCompositeVertical(unittest.TestCase):
    """Test vertical hold-note compositing."""

    def setUp(self):
        self.transcoder = ImageTranscoder()
        self.red = (255, 0, 0, 255)
        self.green = (0, 255, 0, 255)
        self.blue = (0, 0, 255, 255)

    def test_equal_widths_stack_without_offset(self):
        end = Image.new('RGBA', (50, 10), self.red)
        body = Image.new('RGBA', (50, 20), self.green)
        head = Image.new('RGBA', (50, 15), self.blue)

        result = np.array(self.transcoder.stack_images([end, body, head]))

        self.assertEqual(result.shape[:2], (45, 50))
        self.assertTrue((result[0:10] == self.red).all())
        self.assertTrue((result[10:30] == self.green).all())
        self.assertTrue((result[30:45] == self.blue).all())

    def test_dimensions(self):
        images = [Image.new('RGBA', size, self.red) for size in ((10, 3), (31, 7), (20, 5))]

        result = self.transcoder.stack_images(images)

        self.assertEqual(result.size, (31, 15))

    def test_centering_uses_floor(self):
        """A 10px wide image in a 31px canvas starts at x=10."""
        end = Image.new('RGBA', (10, 3), self.red)
        body = Image.new('RGBA', (31, 7), self.green)
        head = Image.new('RGBA', (20, 5), self.blue)

        result = np.array(self.transcoder.stack_images([end, body, head]))

        end_row = result[0]
        self.assertTrue((end_row[:10, 3] == 0).all())
        self.assertTrue((end_row[10:20] == self.red).all())
        self.assertTrue((end_row[20:, 3] == 0).all())

        head_row = result[10]
        self.assertTrue((head_row[:5, 3] == 0).all())
        self.assertTrue((head_row[5:25] == self.blue).all())
        self.assertTrue((head_row[25:, 3] == 0).all())

    def test_composite_from_bytes(self):
        parts = [encode(Image.new('RGBA', (8, h), self.red)) for h in (2, 4, 6)]

        result = self.transcoder.composite_vertical(*parts)

        self.assertEqual(ImageUtils.image_size(result), (8, 12))

    def test_composite_invalid_component(self):
        good = encode(Image.new('RGBA', (8, 2), self.red))

        with self.assertRaises(DecodeError):
            self.transcoder.composite_vertical(good, b"garbage", good)

    def test_empty_stack(self):
        with self.assertRaises(ValueError):
            self.transcoder.stack_images([])


class TestImageUtils(unittest.TestCase):
    """Test image helper functions."""

    def test_image_size(self):
        data = encode(Image.new('RGBA', (7, 9)))

        self.assertEqual(ImageUtils.image_size(data), (7, 9))

    def test_image_size_invalid(self):
        with self.assertRaises(DecodeError):
            ImageUtils.image_size(b"\x89PNG broken")

    def test_load_image_rejects_other_types(self):
        with self.assertRaises(DecodeError):
            ImageUtils.load_image("path/to/file.png")

    def test_ensure_rgba_scales_16_bit(self):
        image = Image.new('I;16', (4, 4), 40000)

        pixel = ImageUtils.ensure_rgba(image).getpixel((0, 0))

        for channel in pixel[:3]:
            self.assertAlmostEqual(channel, 40000 // 256, delta=1)
        self.assertEqual(pixel[3], 255)

    def test_encode_image(self):
        data = ImageUtils.encode_image(Image.new('RGB', (3, 3)), 'PNG', compress_level=9)

        self.assertTrue(data.startswith(b"\x89PNG"))


if __name__ == '__main__':
    unittest.main()
