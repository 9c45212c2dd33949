"""Media file, stream inventory and track selection models."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class StreamKind(Enum):
    """Elementary stream kinds, valued by their ffprobe/ffmpeg specifier."""

    AUDIO = "a"
    SUBTITLE = "s"

    @property
    def label(self) -> str:
        """Human-readable name used in log messages."""
        return "audio" if self is StreamKind.AUDIO else "subtitle"


@dataclass(frozen=True)
class MediaFile:
    """A discovered input file and where its encode goes."""

    source: Path  # Absolute input path
    relative: Path  # Path relative to the input root
    output: Path  # Output root / relative, with the container extension

    @classmethod
    def from_paths(
        cls, source: Path, input_root: Path, output_root: Path, container: str
    ) -> "MediaFile":
        """Build a MediaFile mirroring ``source`` under ``output_root``.

        Args:
            source: Input file path
            input_root: Root of the scanned tree
            output_root: Root of the output tree
            container: Output extension including the dot (e.g. ".mkv")
        """
        try:
            relative = source.relative_to(input_root)
        except ValueError:
            relative = Path(source.name)
        return cls(
            source=source,
            relative=relative,
            output=(output_root / relative).with_suffix(container),
        )

    def __str__(self) -> str:
        return str(self.relative)


@dataclass
class StreamInventory:
    """Audio/subtitle stream counts for one file."""

    audio_count: int = 0
    subtitle_count: int = 0
    channels: dict[int, int] = field(default_factory=dict)  # 0-based audio index -> channels

    DEFAULT_CHANNELS = 2

    def count(self, kind: StreamKind) -> int:
        """Return the stream count for ``kind``."""
        return self.audio_count if kind is StreamKind.AUDIO else self.subtitle_count

    def channels_for(self, index: int) -> int:
        """Return the channel count of an audio stream, defaulting to stereo."""
        return self.channels.get(index, self.DEFAULT_CHANNELS)


@dataclass(frozen=True)
class TrackSelection:
    """Ordered 0-based stream indices to keep, or "every stream of the kind".

    ``select_all`` maps all streams of the kind with an optional mapping, which
    matches nothing when the file has none. An empty selection with
    ``select_all`` unset emits no arguments for the kind.
    """

    indices: tuple[int, ...] = ()
    select_all: bool = False

    @classmethod
    def all(cls) -> "TrackSelection":
        return cls(select_all=True)

    @classmethod
    def none(cls) -> "TrackSelection":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.select_all and not self.indices

    def __str__(self) -> str:
        if self.select_all:
            return "all"
        if not self.indices:
            return "none"
        return ",".join(str(i + 1) for i in self.indices)
