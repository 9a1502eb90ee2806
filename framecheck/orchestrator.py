"""Screenshot test orchestrator — coordinates baseline lookup, comparison and artifact writing."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from framecheck.capture import ScreenshotCaptor
from framecheck.comparator.comparator import check_tolerance, compare
from framecheck.errors import (
    ArtifactWriteFailed,
    CaptureError,
    CorruptBaseline,
    DimensionMismatch,
    FramecheckError,
    MissingBaseline,
    ScreenshotAssertionError,
)
from framecheck.models.config import ScreenshotConfig
from framecheck.models.pixel_buffer import CaptureBounds, PixelBuffer, validate_test_case_id
from framecheck.models.verdict import ArtifactWriteFailure, DiffResult, Outcome, Verdict
from framecheck.store.artifact_store import ArtifactStore, FsArtifactStore

logger = logging.getLogger(__name__)


class ScreenshotTester:
    """Runs screenshot tests against one artifact store with one configuration."""

    def __init__(self, config: ScreenshotConfig | None = None, store: ArtifactStore | None = None):
        self.config = config or ScreenshotConfig()
        self.store = store or FsArtifactStore(
            references_dir=Path(self.config.references_dir),
            output_dir=Path(self.config.output_dir),
        )

    def run(self, test_id: str, buffer: PixelBuffer, tolerance: int | None = None) -> Verdict:
        """Compare buffer against the reference for test_id and write artifacts.

        Returns a Verdict for matched, mismatched and missing-baseline outcomes.
        Raises DimensionMismatch and CorruptBaseline, which no verdict can describe.
        Failed artifact writes never change the outcome; they are listed in
        ``Verdict.artifact_errors``.
        """
        validate_test_case_id(test_id)
        tolerance = check_tolerance(self.config.default_tolerance if tolerance is None else tolerance)
        start = time.time()
        errors: list[ArtifactWriteFailure] = []

        if not self.store.reference_exists(test_id):
            return self._no_baseline(test_id, buffer, errors)

        try:
            reference = self.store.load_reference(test_id)
        except MissingBaseline:
            logger.debug("Reference for %s vanished after existence check", test_id)
            return self._no_baseline(test_id, buffer, errors)
        except CorruptBaseline:
            logger.error("Reference for %s is corrupt; it is not a rendering regression", test_id)
            self._discard_stale(test_id, errors)
            self._write(self.store.save_actual, test_id, buffer, errors)
            raise

        try:
            diff = compare(reference, buffer, tolerance)
        except DimensionMismatch as e:
            logger.error("%s: %s", test_id, e)
            self._discard_stale(test_id, errors)
            self._write(self.store.save_actual, test_id, buffer, errors)
            raise

        verdict = Verdict(
            test_id=test_id,
            outcome=Outcome.MATCHED if diff.matches else Outcome.MISMATCHED,
            diff=diff,
            artifact_errors=errors,
        )
        self._write_comparison_artifacts(verdict, reference, buffer, diff)

        log = logger.info if verdict.passed else logger.warning
        log("%s (%.2fs)", verdict.summary(), time.time() - start)
        return verdict

    def capture_and_run(
        self,
        test_id: str,
        captor: ScreenshotCaptor,
        bounds: CaptureBounds,
        tolerance: int | None = None,
    ) -> Verdict:
        """Capture bounds through captor, then run the screenshot test on the result."""
        try:
            buffer = captor.capture(bounds)
        except CaptureError:
            raise
        except (FramecheckError, OSError, ValueError) as e:
            raise CaptureError(f"Could not take screenshot: {e}") from e
        return self.run(test_id, buffer, tolerance)

    def assert_matches(self, test_id: str, buffer: PixelBuffer, tolerance: int | None = None) -> Verdict:
        """Like run(), but raises ScreenshotAssertionError unless the screenshot matched."""
        verdict = self.run(test_id, buffer, tolerance)
        if verdict.passed:
            return verdict
        message = verdict.summary()
        if verdict.artifact_errors:
            message += "\nArtifacts not written:\n" + "\n".join(
                f"  {e.path}: {e.reason}" for e in verdict.artifact_errors
            )
        raise ScreenshotAssertionError(message, verdict=verdict)

    def _no_baseline(
        self, test_id: str, buffer: PixelBuffer, errors: list[ArtifactWriteFailure]
    ) -> Verdict:
        self._discard_stale(test_id, errors)
        actual_path = self._write(self.store.save_as_new_reference_candidate, test_id, buffer, errors)
        verdict = Verdict(
            test_id=test_id,
            outcome=Outcome.NO_BASELINE,
            actual_path=actual_path,
            artifact_errors=errors,
        )
        logger.warning("%s", verdict.summary())
        return verdict

    def _write_comparison_artifacts(
        self, verdict: Verdict, reference: PixelBuffer, actual: PixelBuffer, diff: DiffResult
    ) -> None:
        errors = verdict.artifact_errors
        if diff.matches and not self.config.write_artifacts_on_match:
            logger.debug("Skipping artifacts for matching screenshot %s", verdict.test_id)
            self._discard_stale(verdict.test_id, errors)
            return
        verdict.actual_path = self._write(self.store.save_actual, verdict.test_id, actual, errors)
        verdict.diff_path = self._write(self.store.save_diff, verdict.test_id, diff.diff_buffer, errors)
        if not diff.matches and self.config.write_expected_on_mismatch:
            verdict.expected_path = self._write(self.store.save_expected, verdict.test_id, reference, errors)
        else:
            self._discard_stale(verdict.test_id, errors, diff=False)

    def _discard_stale(
        self, test_id: str, errors: list[ArtifactWriteFailure], diff: bool = True
    ) -> None:
        """Remove diff/expected images from an earlier run so they cannot be mistaken for this one."""
        discards = [self.store.discard_diff, self.store.discard_expected] if diff else [self.store.discard_expected]
        for discard in discards:
            try:
                discard(test_id)
            except ArtifactWriteFailed as e:
                logger.warning("%s: %s", test_id, e)
                errors.append(ArtifactWriteFailure(path=e.path, reason=e.reason))

    def _write(
        self,
        save: Callable[[str, PixelBuffer], str],
        test_id: str,
        buffer: PixelBuffer,
        errors: list[ArtifactWriteFailure],
    ) -> Optional[str]:
        try:
            return save(test_id, buffer)
        except ArtifactWriteFailed as e:
            logger.warning("%s: %s", test_id, e)
            errors.append(ArtifactWriteFailure(path=e.path, reason=e.reason))
            return None


def run_screenshot_test(
    test_id: str,
    buffer: PixelBuffer,
    tolerance: int | None = None,
    config: ScreenshotConfig | None = None,
) -> Verdict:
    """Run one screenshot test with a tester built from config (or the defaults)."""
    return ScreenshotTester(config).run(test_id, buffer, tolerance)


def assert_screenshot_test(
    test_id: str,
    buffer: PixelBuffer,
    tolerance: int | None = None,
    config: ScreenshotConfig | None = None,
) -> Verdict:
    """Run one screenshot test and raise ScreenshotAssertionError unless it matched."""
    return ScreenshotTester(config).assert_matches(test_id, buffer, tolerance)
