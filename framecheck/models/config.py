"""Configuration model for screenshot tests."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field


class ScreenshotConfig(BaseModel):
    # Storage roots
    references_dir: str = "references"
    output_dir: str = "test_output"

    # Comparison; 0 means exact per-channel equality
    default_tolerance: int = Field(default=0, ge=0, le=255)

    # Artifact policy
    write_artifacts_on_match: bool = True
    write_expected_on_mismatch: bool = True

    @classmethod
    def load(cls, path: str | Path) -> "ScreenshotConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
