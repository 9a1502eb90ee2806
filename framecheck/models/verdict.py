"""Comparison results and per-test verdicts."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from framecheck.models.pixel_buffer import PixelBuffer


class DiffResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    matches: bool
    differing_pixel_count: int = Field(ge=0)
    diff_buffer: PixelBuffer
    tolerance: int = 0

    @property
    def total_pixels(self) -> int:
        return self.diff_buffer.pixel_count

    @property
    def diff_ratio(self) -> float:
        return self.differing_pixel_count / self.total_pixels


class Outcome(str, Enum):
    MATCHED = "matched"
    MISMATCHED = "mismatched"
    NO_BASELINE = "no_baseline"


class ArtifactWriteFailure(BaseModel):
    path: str
    reason: str


class Verdict(BaseModel):
    """Outcome of one screenshot test invocation."""

    test_id: str
    outcome: Outcome
    diff: Optional[DiffResult] = None  # set whenever a comparison ran
    actual_path: Optional[str] = None
    diff_path: Optional[str] = None
    expected_path: Optional[str] = None
    artifact_errors: list[ArtifactWriteFailure] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.outcome == Outcome.MATCHED

    def summary(self) -> str:
        """Human-readable one-line description of the verdict."""
        if self.outcome == Outcome.NO_BASELINE:
            msg = f"{self.test_id}: no reference screenshot found"
            if self.actual_path:
                msg += f"; captured frame written to {self.actual_path}"
            return msg
        if self.outcome == Outcome.MATCHED:
            return f"{self.test_id}: screenshot matches reference"
        msg = f"{self.test_id}: actual screenshot did not match expected screenshot"
        if self.diff is not None:
            msg += (
                f" ({self.diff.differing_pixel_count}/{self.diff.total_pixels} pixels differ, "
                f"{self.diff.diff_ratio:.2%}, tolerance {self.diff.tolerance})"
            )
        if self.diff_path:
            msg += f"; diff written to {self.diff_path}"
        return msg
