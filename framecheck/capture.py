"""Capture seam — how a rendered frame reaches the orchestrator."""

from __future__ import annotations

from typing import Protocol

from framecheck.errors import CaptureError
from framecheck.models.pixel_buffer import CaptureBounds, PixelBuffer


class ScreenshotCaptor(Protocol):
    def capture(self, bounds: CaptureBounds) -> PixelBuffer:
        """Return the pixels inside bounds, raising CaptureError if they cannot be read."""
        ...


class FramebufferCaptor:
    """Captures regions out of a framebuffer that has already been read back."""

    def __init__(self, framebuffer: PixelBuffer):
        self.framebuffer = framebuffer

    def capture(self, bounds: CaptureBounds) -> PixelBuffer:
        try:
            return self.framebuffer.crop(bounds)
        except ValueError as e:
            raise CaptureError(str(e)) from e
