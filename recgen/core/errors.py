"""Exception types raised by the recording-to-artifact pipeline."""
from __future__ import annotations

from pathlib import Path


class GeneratorError(RuntimeError):
    """Base class for generation failures that abort a run."""


class RecordingInputError(GeneratorError):
    """Raised when the recording file cannot be used as input."""


class ArtifactValidationError(GeneratorError):
    """Raised when a rendered artifact fails its structural checks."""

    def __init__(self, artifact: str, message: str) -> None:
        self.artifact = artifact
        super().__init__(f"{artifact} validation failed: {message}")


class ArtifactWriteError(GeneratorError):
    """Raised when an artifact cannot be written to the framework tree."""

    def __init__(self, artifact: str, path: Path, reason: str = "") -> None:
        self.artifact = artifact
        self.path = path
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Failed to write {artifact} to {path}{detail}")
