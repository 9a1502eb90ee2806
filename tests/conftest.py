"""Pytest configuration and shared fixtures."""

import struct
import zlib
from pathlib import Path

import pytest

from framecheck.errors import ArtifactWriteFailed, MissingBaseline
from framecheck.models.config import ScreenshotConfig
from framecheck.models.pixel_buffer import PixelBuffer
from framecheck.store.artifact_store import ArtifactStore

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)
RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)


class InMemoryArtifactStore(ArtifactStore):
    """Keeps references and written artifacts in dictionaries."""

    def __init__(self, references: dict[str, PixelBuffer] | None = None):
        self.references = dict(references or {})
        self.actual: dict[str, PixelBuffer] = {}
        self.diff: dict[str, PixelBuffer] = {}
        self.expected: dict[str, PixelBuffer] = {}

    def reference_exists(self, test_id: str) -> bool:
        return test_id in self.references

    def load_reference(self, test_id: str) -> PixelBuffer:
        if test_id not in self.references:
            raise MissingBaseline(f"memory://references/{test_id}")
        return self.references[test_id]

    def save_actual(self, test_id: str, buffer: PixelBuffer) -> str:
        self.actual[test_id] = buffer
        return f"memory://{test_id}/actual.png"

    def save_diff(self, test_id: str, buffer: PixelBuffer) -> str:
        self.diff[test_id] = buffer
        return f"memory://{test_id}/diff.png"

    def save_expected(self, test_id: str, buffer: PixelBuffer) -> str:
        self.expected[test_id] = buffer
        return f"memory://{test_id}/expected.png"

    def discard_diff(self, test_id: str) -> None:
        self.diff.pop(test_id, None)

    def discard_expected(self, test_id: str) -> None:
        self.expected.pop(test_id, None)


class ReadOnlyArtifactStore(InMemoryArtifactStore):
    """Every write fails, as on a read-only CI filesystem."""

    def save_actual(self, test_id: str, buffer: PixelBuffer) -> str:
        raise ArtifactWriteFailed(f"/ro/{test_id}/actual.png", "Read-only file system")

    def save_diff(self, test_id: str, buffer: PixelBuffer) -> str:
        raise ArtifactWriteFailed(f"/ro/{test_id}/diff.png", "Read-only file system")

    def save_expected(self, test_id: str, buffer: PixelBuffer) -> str:
        raise ArtifactWriteFailed(f"/ro/{test_id}/expected.png", "Read-only file system")


# ============================================================================
# Buffer Fixtures
# ============================================================================


@pytest.fixture
def black_2x2() -> PixelBuffer:
    return PixelBuffer.filled(2, 2, BLACK)


@pytest.fixture
def one_white_pixel_2x2() -> PixelBuffer:
    """Black 2x2 buffer whose bottom-left pixel (0, 1) is white."""
    return PixelBuffer.from_pixels(2, 2, [BLACK, BLACK, WHITE, BLACK])


@pytest.fixture
def rgbw_2x2() -> PixelBuffer:
    return PixelBuffer.from_pixels(2, 2, [RED, GREEN, BLUE, WHITE])


@pytest.fixture
def rbgw_2x2() -> PixelBuffer:
    return PixelBuffer.from_pixels(2, 2, [RED, BLUE, GREEN, WHITE])


# ============================================================================
# Store / Config Fixtures
# ============================================================================


@pytest.fixture
def screenshot_config(tmp_path: Path) -> ScreenshotConfig:
    """Config whose references and output roots live under tmp_path."""
    return ScreenshotConfig(
        references_dir=str(tmp_path / "references"),
        output_dir=str(tmp_path / "test_output"),
    )


@pytest.fixture
def memory_store() -> InMemoryArtifactStore:
    return InMemoryArtifactStore()


@pytest.fixture
def read_only_store() -> ReadOnlyArtifactStore:
    return ReadOnlyArtifactStore()


# ============================================================================
# Encoded Image Fixtures
# ============================================================================


def _png_chunk(kind: bytes, payload: bytes) -> bytes:
    return struct.pack(">I", len(payload)) + kind + payload + struct.pack(">I", zlib.crc32(kind + payload))


@pytest.fixture
def oversized_png() -> bytes:
    """Well-formed PNG header claiming 30000x30000 RGBA pixels, with no image data."""
    header = struct.pack(">IIBBBBB", 30000, 30000, 8, 6, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + _png_chunk(b"IHDR", header) + _png_chunk(b"IEND", b"")
