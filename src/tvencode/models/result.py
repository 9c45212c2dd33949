"""Encode request and result models."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional

from tvencode.models.media import MediaFile

Status = Literal["success", "skipped", "failed", "error", "dry_run"]


@dataclass(frozen=True)
class EncodeRequest:
    """One ffmpeg invocation: input, ordered argument tokens, output."""

    input_path: Path
    output_path: Path
    arguments: tuple[str, ...]


@dataclass
class EncodeResult:
    """Result of encoding a single file."""

    status: Status
    media_file: Optional[MediaFile] = None
    returncode: Optional[int] = None
    reason: Optional[str] = None  # Reason for skip/failure
    error: Optional[str] = None  # Error message if failed
    command: Optional[list[str]] = None

    @property
    def ok(self) -> bool:
        return self.status in ("success", "skipped", "dry_run")

    def __str__(self) -> str:
        """Human-readable representation."""
        name = str(self.media_file) if self.media_file else "?"
        if self.status == "success":
            return f"DONE: {self.media_file.output}"
        elif self.status == "skipped":
            return f"SKIP ({self.reason}): {self.media_file.output}"
        elif self.status == "dry_run":
            return f"DRY RUN: {name}"
        else:
            return f"Failed: {name} ({self.error or self.reason})"


@dataclass
class BatchReport:
    """Aggregated results of one batch run."""

    output_dir: Path
    total: int
    results: list[EncodeResult] = field(default_factory=list)
    stopped_early: bool = False

    def count(self, status: Status) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def attempted(self) -> int:
        return len(self.results)

    @property
    def ok(self) -> bool:
        return not self.stopped_early and all(r.ok for r in self.results)
