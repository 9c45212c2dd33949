"""File scanner for discovering video files."""

from pathlib import Path
from typing import Iterable, List, Optional

from tvencode.models.media import MediaFile
from tvencode.utils.logger import get_logger

logger = get_logger(__name__)


class FileScanner:
    """Scan directory trees for video files."""

    SUPPORTED_EXTENSIONS = {".mkv", ".mp4", ".m2ts", ".mts", ".ts", ".avi", ".mov"}

    def __init__(self, extensions: Optional[Iterable[str]] = None):
        """Initialize the scanner.

        Args:
            extensions: File extensions to include (default: SUPPORTED_EXTENSIONS)
        """
        if extensions is None:
            extensions = self.SUPPORTED_EXTENSIONS

        # Ensure a leading dot and lowercase; matching is case-insensitive
        self.extensions = {
            ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions
        }

    def scan(self, path: Path, exclude: Optional[Path] = None) -> List[Path]:
        """Recursively scan a directory for video files.

        Args:
            path: Directory to scan
            exclude: Directory whose contents are ignored (e.g. a nested output root)

        Returns:
            List of video file paths, sorted by path

        Raises:
            FileNotFoundError: If path doesn't exist
            NotADirectoryError: If path is not a directory
        """
        if not path.exists():
            raise FileNotFoundError(f"Path not found: {path}")

        if not path.is_dir():
            raise NotADirectoryError(f"Not a directory: {path}")

        files = []
        for candidate in path.rglob("*"):
            if candidate.suffix.lower() not in self.extensions or not candidate.is_file():
                continue
            if exclude is not None and candidate.is_relative_to(exclude):
                continue
            files.append(candidate)

        files.sort()

        logger.info(
            "Directory scan complete",
            directory=str(path),
            excluded=str(exclude) if exclude else None,
            total_files=len(files),
        )
        return files

    def plan(self, input_root: Path, output_root: Path, container: str) -> List[MediaFile]:
        """Scan ``input_root`` and pair each file with its output path.

        The output tree mirrors the input tree under ``output_root``. When
        ``output_root`` is nested inside ``input_root`` its contents are not
        treated as input.

        Args:
            input_root: Directory to scan
            output_root: Root of the output tree
            container: Output extension including the dot

        Returns:
            List of MediaFile in enumeration order
        """
        input_root = input_root.resolve()
        output_root = output_root.resolve()

        exclude = output_root if output_root.is_relative_to(input_root) else None
        if exclude == input_root:
            # Output in place: keep scanning, existing outputs are skipped later
            exclude = None

        return [
            MediaFile.from_paths(source, input_root, output_root, container)
            for source in self.scan(input_root, exclude=exclude)
        ]
