"""Pixel comparator — decides equality of two frames and renders a diff mask.

The diff image does not encode the magnitude of a difference. Every pixel is
either ``NEUTRAL`` (fully transparent, the pixel matched within tolerance) or
``MARKER`` (opaque magenta, at least one channel differed by more than the
tolerance), so mismatched regions stand out when the diff is laid over either
source image.
"""

from __future__ import annotations

import logging
import operator

from framecheck.errors import DimensionMismatch
from framecheck.models.pixel_buffer import CHANNELS, PixelBuffer
from framecheck.models.verdict import DiffResult

logger = logging.getLogger(__name__)

NEUTRAL = (0, 0, 0, 0)
MARKER = (255, 0, 255, 255)

MAX_TOLERANCE = 255


def check_tolerance(tolerance: int) -> int:
    if isinstance(tolerance, bool):
        raise ValueError(f"Tolerance must be an integer, got {tolerance!r}")
    try:
        tolerance = operator.index(tolerance)
    except TypeError as e:
        raise ValueError(f"Tolerance must be an integer, got {tolerance!r}") from e
    if not 0 <= tolerance <= MAX_TOLERANCE:
        raise ValueError(f"Tolerance must be between 0 and {MAX_TOLERANCE}, got {tolerance}")
    return tolerance


def compare(reference: PixelBuffer, actual: PixelBuffer, tolerance: int = 0) -> DiffResult:
    """Compare two equally sized buffers pixel by pixel.

    A pixel differs when any RGBA channel's absolute difference exceeds
    ``tolerance``. Raises DimensionMismatch before looking at any pixel
    when the buffers do not share the same width and height.
    """
    tolerance = check_tolerance(tolerance)
    if reference.size != actual.size:
        raise DimensionMismatch(expected=reference.size, got=actual.size)

    ref = reference.data
    act = actual.data

    if ref == act:
        logger.debug("Buffers are byte-identical (%dx%d)", reference.width, reference.height)
        return DiffResult(
            matches=True,
            differing_pixel_count=0,
            diff_buffer=PixelBuffer.filled(reference.width, reference.height, NEUTRAL),
            tolerance=tolerance,
        )

    marker = bytes(MARKER)
    diff = bytearray(len(ref))  # zero-filled == NEUTRAL
    diff_count = 0
    for offset in range(0, len(ref), CHANNELS):
        for channel in range(offset, offset + CHANNELS):
            if abs(ref[channel] - act[channel]) > tolerance:
                diff[offset:offset + CHANNELS] = marker
                diff_count += 1
                break

    logger.debug(
        "Compared %dx%d buffers: %d differing pixels (tolerance %d)",
        reference.width, reference.height, diff_count, tolerance,
    )
    return DiffResult(
        matches=diff_count == 0,
        differing_pixel_count=diff_count,
        diff_buffer=PixelBuffer(width=reference.width, height=reference.height, data=bytes(diff)),
        tolerance=tolerance,
    )
