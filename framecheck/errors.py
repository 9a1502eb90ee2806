"""Errors raised while capturing, loading, comparing or writing screenshots."""

from __future__ import annotations


class FramecheckError(Exception):
    """Base class for every error raised by framecheck."""


class InvalidTestCaseId(FramecheckError, ValueError):
    def __init__(self, test_id: str, reason: str):
        self.test_id = test_id
        self.reason = reason
        super().__init__(f"Invalid test case id {test_id!r}: {reason}")


class DimensionMismatch(FramecheckError):
    """Reference and actual images do not share the same geometry."""

    def __init__(self, expected: tuple[int, int], got: tuple[int, int]):
        self.expected = expected
        self.got = got
        super().__init__(
            f"Dimension mismatch: expected {expected[0]}x{expected[1]}, got {got[0]}x{got[1]}"
        )


class MissingBaseline(FramecheckError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"No reference screenshot found at {path}")


class CorruptBaseline(FramecheckError):
    """The reference file exists but cannot be turned into a pixel buffer."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Reference image {path} could not be loaded or parsed: {reason}")


class ArtifactWriteFailed(FramecheckError):
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not write screenshot {path}: {reason}")


class CaptureError(FramecheckError):
    pass


class UnsupportedFormat(FramecheckError):
    pass


class CorruptData(FramecheckError):
    pass


class ScreenshotAssertionError(AssertionError):
    """Raised by the assert helpers when a verdict is not a pass."""

    def __init__(self, message: str, verdict=None):
        self.verdict = verdict
        super().__init__(message)
