"""Pixel buffer data structures shared by the capture, codec and comparison layers."""

from __future__ import annotations

from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field, model_validator

from framecheck.errors import InvalidTestCaseId

CHANNELS = 4  # RGBA, one unsigned byte each


class CaptureBounds(BaseModel):
    """Sub-rectangle of a larger framebuffer, in pixels."""

    model_config = ConfigDict(frozen=True)

    x: int = Field(default=0, ge=0)
    y: int = Field(default=0, ge=0)
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class PixelBuffer(BaseModel):
    """Immutable row-major RGBA image."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    data: bytes = Field(repr=False)

    @model_validator(mode="after")
    def check_length(self) -> "PixelBuffer":
        expected = self.width * self.height * CHANNELS
        if len(self.data) != expected:
            raise ValueError(
                f"Buffer of {self.width}x{self.height} needs {expected} bytes, got {len(self.data)}"
            )
        return self

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the RGBA value at column x, row y."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} buffer")
        offset = (y * self.width + x) * CHANNELS
        r, g, b, a = self.data[offset:offset + CHANNELS]
        return (r, g, b, a)

    def crop(self, bounds: CaptureBounds) -> "PixelBuffer":
        """Copy out the rectangle described by bounds."""
        if bounds.x + bounds.width > self.width or bounds.y + bounds.height > self.height:
            raise ValueError(
                f"Bounds {bounds.width}x{bounds.height}+{bounds.x}+{bounds.y} "
                f"exceed {self.width}x{self.height} buffer"
            )
        stride = self.width * CHANNELS
        rows = []
        for row in range(bounds.y, bounds.y + bounds.height):
            start = row * stride + bounds.x * CHANNELS
            rows.append(self.data[start:start + bounds.width * CHANNELS])
        return PixelBuffer(width=bounds.width, height=bounds.height, data=b"".join(rows))

    @classmethod
    def filled(cls, width: int, height: int, rgba: tuple[int, int, int, int]) -> "PixelBuffer":
        return cls(width=width, height=height, data=bytes(rgba) * (width * height))

    @classmethod
    def from_pixels(
        cls, width: int, height: int, pixels: list[tuple[int, int, int, int]]
    ) -> "PixelBuffer":
        """Build a buffer from a flat row-major list of RGBA tuples."""
        data = bytearray()
        for pixel in pixels:
            data.extend(pixel)
        return cls(width=width, height=height, data=bytes(data))


def validate_test_case_id(test_id: str) -> str:
    """Check that test_id is a safe relative path fragment and return it."""
    if not test_id:
        raise InvalidTestCaseId(test_id, "must not be empty")
    if "\\" in test_id:
        raise InvalidTestCaseId(test_id, "use '/' to separate segments")
    if PurePosixPath(test_id).is_absolute():
        raise InvalidTestCaseId(test_id, "must be a relative path")
    for segment in test_id.split("/"):
        if segment in ("", ".", ".."):
            raise InvalidTestCaseId(test_id, f"segment {segment!r} is not allowed")
    return test_id
