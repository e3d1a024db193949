"""Tests for CompositeBuffer."""

import numpy as np
import pytest
from PIL import Image

from imaging.composite import CompositeBuffer, crop_rect_for
from shared.constants import BACKGROUND_COLOR, Resample


def bordered_tile(size=450, inner=256, frame=(0, 0, 255), center=(255, 0, 0)):
    """Provider-like response: a solid centre surrounded by a frame."""
    img = Image.new('RGB', (size, size), frame)
    off = (size - inner) // 2
    img.paste(Image.new('RGB', (inner, inner), center), (off, off))
    return img


class TestCropRect:
    def test_default_sizes(self):
        assert crop_rect_for(450, 256) == (97, 97, 256, 256)

    def test_equal_sizes(self):
        assert crop_rect_for(256, 256) == (0, 0, 256, 256)

    def test_request_smaller_than_tile(self):
        with pytest.raises(ValueError, match='must be >='):
            crop_rect_for(200, 256)


class TestCompositeBuffer:
    def test_initialized_with_background(self):
        buf = CompositeBuffer(64)
        assert buf.size == (64, 64)
        assert buf.array.shape == (64, 64, 3)
        assert buf.array.dtype == np.uint8
        assert (buf.array == np.array(BACKGROUND_COLOR, dtype=np.uint8)).all()
        assert buf.is_dirty()

    def test_array_is_read_only(self):
        buf = CompositeBuffer(8)
        with pytest.raises(ValueError):
            buf.array[0, 0] = (1, 2, 3)

    def test_clear_dirty(self):
        buf = CompositeBuffer(8)
        buf.clear_dirty()
        assert not buf.is_dirty()

    def test_draw_crops_frame(self):
        buf = CompositeBuffer(512, resample=Resample.NEAREST)
        buf.clear_dirty()
        buf.draw_tile_image(bordered_tile(), 256, 0, 256, crop_rect_for(450, 256))

        arr = buf.array
        assert (arr[0:256, 256:512] == (255, 0, 0)).all()
        # the rest is untouched
        assert (arr[256:, :] == BACKGROUND_COLOR).all()
        assert (arr[:256, :256] == BACKGROUND_COLOR).all()
        assert buf.is_dirty()

    def test_draw_scales_up(self):
        buf = CompositeBuffer(1024, resample=Resample.NEAREST)
        buf.draw_tile_image(bordered_tile(), 512, 512, 512, crop_rect_for(450, 256))
        assert (buf.array[512:, 512:] == (255, 0, 0)).all()
        assert (buf.array[:512, :] == BACKGROUND_COLOR).all()

    def test_bilinear_scale_of_solid_tile(self):
        buf = CompositeBuffer(512)
        solid = Image.new('RGB', (450, 450), (10, 200, 30))
        buf.draw_tile_image(solid, 0, 0, 512, crop_rect_for(450, 256))
        assert (buf.array == (10, 200, 30)).all()

    def test_non_rgb_source_converted(self):
        buf = CompositeBuffer(256)
        rgba = Image.new('RGBA', (450, 450), (5, 6, 7, 128))
        buf.draw_tile_image(rgba, 0, 0, 256, crop_rect_for(450, 256))
        assert (buf.array == (5, 6, 7)).all()

    def test_draw_clipped_at_edge(self):
        buf = CompositeBuffer(300, resample=Resample.NEAREST)
        solid = Image.new('RGB', (256, 256), (1, 2, 3))
        buf.draw_tile_image(solid, 200, 200, 256, (0, 0, 256, 256))
        assert (buf.array[200:, 200:] == (1, 2, 3)).all()
        assert (buf.array[:200, :] == BACKGROUND_COLOR).all()

    def test_draw_outside_is_noop(self):
        buf = CompositeBuffer(64)
        buf.clear_dirty()
        solid = Image.new('RGB', (256, 256), (1, 2, 3))
        buf.draw_tile_image(solid, 100, 100, 32, (0, 0, 256, 256))
        assert not buf.is_dirty()
        assert (buf.array == BACKGROUND_COLOR).all()

    def test_later_draw_overwrites(self):
        buf = CompositeBuffer(256)
        buf.draw_tile_image(Image.new('RGB', (256, 256), (1, 1, 1)), 0, 0, 256, (0, 0, 256, 256))
        buf.draw_tile_image(Image.new('RGB', (256, 256), (9, 9, 9)), 0, 0, 128, (0, 0, 256, 256))
        assert (buf.array[:128, :128] == (9, 9, 9)).all()
        assert (buf.array[128:, :] == (1, 1, 1)).all()

    def test_initialize_resets(self):
        buf = CompositeBuffer(32)
        buf.draw_tile_image(Image.new('RGB', (32, 32), (1, 1, 1)), 0, 0, 32, (0, 0, 32, 32))
        buf.clear_dirty()
        buf.initialize()
        assert buf.is_dirty()
        assert (buf.array == BACKGROUND_COLOR).all()

    def test_to_image_is_a_copy(self):
        buf = CompositeBuffer(16, background=(4, 5, 6))
        img = buf.to_image()
        assert img.mode == 'RGB'
        assert img.size == (16, 16)
        assert img.getpixel((3, 3)) == (4, 5, 6)
        buf.draw_tile_image(Image.new('RGB', (16, 16), (0, 0, 0)), 0, 0, 16, (0, 0, 16, 16))
        assert img.getpixel((3, 3)) == (4, 5, 6)

    def test_keep_rects_are_preserved(self):
        buf = CompositeBuffer(64, resample=Resample.NEAREST)
        buf.draw_tile_image(Image.new('RGB', (16, 16), (9, 9, 9)), 32, 0, 32, (0, 0, 16, 16))
        buf.draw_tile_image(
            Image.new('RGB', (64, 64), (1, 1, 1)),
            0,
            0,
            64,
            (0, 0, 64, 64),
            keep=[(32, 0, 64, 32)],
        )
        assert (buf.array[0:32, 32:64] == (9, 9, 9)).all()
        assert (buf.array[32:, :] == (1, 1, 1)).all()
        assert (buf.array[:32, :32] == (1, 1, 1)).all()
