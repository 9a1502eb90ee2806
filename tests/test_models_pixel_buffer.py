"""Tests for PixelBuffer, CaptureBounds and test case id validation."""

import pytest
from pydantic import ValidationError

from framecheck.errors import InvalidTestCaseId
from framecheck.models.pixel_buffer import CaptureBounds, PixelBuffer, validate_test_case_id


class TestPixelBuffer:

    def test_valid_buffer(self):
        buf = PixelBuffer(width=2, height=1, data=bytes(8))
        assert buf.size == (2, 1)
        assert buf.pixel_count == 2

    def test_length_must_match_dimensions(self):
        with pytest.raises(ValidationError):
            PixelBuffer(width=2, height=2, data=bytes(15))

    @pytest.mark.parametrize("width,height", [(0, 1), (1, 0), (-1, 1)])
    def test_dimensions_must_be_positive(self, width, height):
        with pytest.raises(ValidationError):
            PixelBuffer(width=width, height=height, data=b"")

    def test_buffer_is_immutable(self, black_2x2):
        with pytest.raises(ValidationError):
            black_2x2.width = 3

    def test_pixel_row_major(self, rgbw_2x2):
        assert rgbw_2x2.pixel(0, 0) == (255, 0, 0, 255)
        assert rgbw_2x2.pixel(1, 0) == (0, 255, 0, 255)
        assert rgbw_2x2.pixel(0, 1) == (0, 0, 255, 255)
        assert rgbw_2x2.pixel(1, 1) == (255, 255, 255, 255)

    def test_pixel_out_of_range(self, black_2x2):
        with pytest.raises(IndexError):
            black_2x2.pixel(2, 0)

    def test_filled(self):
        buf = PixelBuffer.filled(3, 2, (1, 2, 3, 4))
        assert buf.data == bytes([1, 2, 3, 4]) * 6

    def test_crop(self, rgbw_2x2):
        cropped = rgbw_2x2.crop(CaptureBounds(x=1, y=0, width=1, height=2))
        assert cropped.size == (1, 2)
        assert cropped.pixel(0, 0) == (0, 255, 0, 255)
        assert cropped.pixel(0, 1) == (255, 255, 255, 255)

    def test_crop_outside_buffer(self, rgbw_2x2):
        with pytest.raises(ValueError):
            rgbw_2x2.crop(CaptureBounds(x=1, y=1, width=2, height=1))


class TestCaptureBounds:

    def test_defaults_to_origin(self):
        bounds = CaptureBounds(width=10, height=5)
        assert (bounds.x, bounds.y) == (0, 0)

    def test_rejects_empty_region(self):
        with pytest.raises(ValidationError):
            CaptureBounds(width=0, height=5)


class TestValidateTestCaseId:

    @pytest.mark.parametrize("test_id", ["foo", "basic_rendering/initial_map", "a/b/c-1.v2"])
    def test_accepts_relative_ids(self, test_id):
        assert validate_test_case_id(test_id) == test_id

    @pytest.mark.parametrize(
        "test_id",
        ["", "/abs/path", "../escape", "a/../b", "a//b", "./a", "a/", "win\\style"],
    )
    def test_rejects_unsafe_ids(self, test_id):
        with pytest.raises(InvalidTestCaseId):
            validate_test_case_id(test_id)

    def test_invalid_id_is_value_error(self):
        with pytest.raises(ValueError):
            validate_test_case_id("..")
