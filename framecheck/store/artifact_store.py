"""Artifact store — resolves and manages reference, actual and diff images for a test case."""

from __future__ import annotations

import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

from framecheck.codec import png
from framecheck.errors import (
    ArtifactWriteFailed,
    CorruptBaseline,
    CorruptData,
    MissingBaseline,
    UnsupportedFormat,
)
from framecheck.models.pixel_buffer import PixelBuffer, validate_test_case_id

logger = logging.getLogger(__name__)

ACTUAL_NAME = "actual.png"
DIFF_NAME = "diff.png"
EXPECTED_NAME = "expected.png"


class ArtifactStore(ABC):
    """Reads reference images and writes the images produced by a test run.

    Write methods raise ArtifactWriteFailed and return the location written;
    discard methods raise ArtifactWriteFailed when a stale file cannot be removed.
    Implementations must never write to the reference location on their own.
    """

    @abstractmethod
    def reference_exists(self, test_id: str) -> bool:
        ...

    @abstractmethod
    def load_reference(self, test_id: str) -> PixelBuffer:
        ...

    @abstractmethod
    def save_actual(self, test_id: str, buffer: PixelBuffer) -> str:
        ...

    @abstractmethod
    def save_diff(self, test_id: str, buffer: PixelBuffer) -> str:
        ...

    @abstractmethod
    def save_expected(self, test_id: str, buffer: PixelBuffer) -> str:
        ...

    @abstractmethod
    def discard_diff(self, test_id: str) -> None:
        """Remove a diff image left over from an earlier run, if any."""

    @abstractmethod
    def discard_expected(self, test_id: str) -> None:
        ...

    def save_as_new_reference_candidate(self, test_id: str, buffer: PixelBuffer) -> str:
        """Store a first-run capture for review. Promotion to a reference is left to a human."""
        return self.save_actual(test_id, buffer)


class FsArtifactStore(ArtifactStore):
    """Filesystem layout::

        <references_dir>/<test_id>.png
        <output_dir>/<test_id>/actual.png
        <output_dir>/<test_id>/diff.png
        <output_dir>/<test_id>/expected.png

    Test ids may contain slashes to use subdirectories.
    """

    def __init__(self, references_dir: Path, output_dir: Path):
        self.references_dir = Path(references_dir)
        self.output_dir = Path(output_dir)

    def reference_path(self, test_id: str) -> Path:
        validate_test_case_id(test_id)
        return self.references_dir / f"{test_id}.png"

    def output_dir_for(self, test_id: str) -> Path:
        validate_test_case_id(test_id)
        return self.output_dir / test_id

    def actual_path(self, test_id: str) -> Path:
        return self.output_dir_for(test_id) / ACTUAL_NAME

    def diff_path(self, test_id: str) -> Path:
        return self.output_dir_for(test_id) / DIFF_NAME

    def expected_path(self, test_id: str) -> Path:
        return self.output_dir_for(test_id) / EXPECTED_NAME

    def reference_exists(self, test_id: str) -> bool:
        return self.reference_path(test_id).is_file()

    def load_reference(self, test_id: str) -> PixelBuffer:
        path = self.reference_path(test_id)
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise MissingBaseline(str(path)) from e
        except OSError as e:
            raise CorruptBaseline(str(path), str(e)) from e

        try:
            buffer = png.decode(data)
        except (UnsupportedFormat, CorruptData) as e:
            raise CorruptBaseline(str(path), str(e)) from e
        logger.debug("Loaded reference %s (%dx%d)", path, buffer.width, buffer.height)
        return buffer

    def save_actual(self, test_id: str, buffer: PixelBuffer) -> str:
        return self._write_image(self.actual_path(test_id), buffer)

    def save_diff(self, test_id: str, buffer: PixelBuffer) -> str:
        return self._write_image(self.diff_path(test_id), buffer)

    def save_expected(self, test_id: str, buffer: PixelBuffer) -> str:
        return self._write_image(self.expected_path(test_id), buffer)

    def discard_diff(self, test_id: str) -> None:
        self._remove_image(self.diff_path(test_id))

    def discard_expected(self, test_id: str) -> None:
        self._remove_image(self.expected_path(test_id))

    def promote_actual(self, test_id: str) -> Path:
        """Copy the last captured actual image over the reference.

        Only ever invoked by an explicit human action (``framecheck accept``).
        """
        source = self.actual_path(test_id)
        if not source.is_file():
            raise FileNotFoundError(f"No actual screenshot for {test_id}: {source}")
        dest = self.reference_path(test_id)
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, dest)
        logger.info("Promoted %s to reference %s", source, dest)
        return dest

    def list_test_ids(self) -> list[str]:
        """Return every test id that has an output directory, sorted."""
        if not self.output_dir.is_dir():
            return []
        ids = set()
        for image in self.output_dir.rglob("*.png"):
            if image.name in (ACTUAL_NAME, DIFF_NAME, EXPECTED_NAME):
                ids.add(image.parent.relative_to(self.output_dir).as_posix())
        return sorted(ids)

    def _write_image(self, path: Path, buffer: PixelBuffer) -> str:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArtifactWriteFailed(str(path.parent), f"Output location unavailable: {e}") from e
        try:
            data = png.encode(buffer)
            path.write_bytes(data)
        except (OSError, ValueError) as e:
            raise ArtifactWriteFailed(str(path), str(e)) from e
        logger.debug("Wrote %s (%dx%d)", path, buffer.width, buffer.height)
        return str(path)

    def _remove_image(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise ArtifactWriteFailed(str(path), f"Could not remove stale artifact: {e}") from e
        logger.debug("Cleared stale %s", path)
