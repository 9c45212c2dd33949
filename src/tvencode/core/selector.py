"""Track selection from user-supplied 1-based index lists."""

import re
from typing import Optional

from tvencode.models.media import StreamKind, TrackSelection
from tvencode.utils.logger import get_logger

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


def parse_selection(raw: Optional[str], total: int, kind: StreamKind) -> list[int]:
    """Convert a comma-separated list of 1-based indices to valid 0-based indices.

    Tokens that are not plain non-negative integers, are below 1, or point past
    the last stream are dropped with a warning. Order and repeats are kept.

    Args:
        raw: Selection string such as "5,1,3"
        total: Number of streams of ``kind`` in the file
        kind: Stream kind (used for log messages)

    Returns:
        List of 0-based stream indices, possibly empty
    """
    if not raw:
        return []

    indices = []
    for token in _WHITESPACE.sub("", raw).split(","):
        if not token:
            continue

        if not token.isdigit() or not token.isascii():
            logger.warning("Skipping invalid index", kind=kind.label, index=token)
            continue

        value = int(token)
        if value < 1:
            logger.warning("Skipping out-of-range index", kind=kind.label, index=token)
            continue

        if value - 1 >= total:
            logger.warning(
                "Skipping index past last stream",
                kind=kind.label,
                index=value,
                total=total,
            )
            continue

        indices.append(value - 1)

    return indices


class TrackSelector:
    """Resolve audio and subtitle selections for one file."""

    def select_audio(self, raw: Optional[str], total: int) -> TrackSelection:
        """Select audio streams.

        Selection logic:
        1. No audio streams -> empty selection
        2. No selection given -> first audio stream
        3. Valid indices given -> those, in the given order
        4. Only invalid indices given -> first audio stream

        Args:
            raw: Comma-separated 1-based audio indices (or None)
            total: Number of audio streams in the file

        Returns:
            TrackSelection of audio indices
        """
        if total <= 0:
            logger.info("No audio streams found")
            return TrackSelection.none()

        if not raw:
            return TrackSelection(indices=(0,))

        indices = parse_selection(raw, total, StreamKind.AUDIO)
        if not indices:
            logger.warning(
                "No valid audio indices in selection, falling back to first audio",
                selection=raw,
            )
            return TrackSelection(indices=(0,))

        return TrackSelection(indices=tuple(indices))

    def select_subtitles(self, raw: Optional[str], total: int) -> TrackSelection:
        """Select subtitle streams.

        With no selection every subtitle stream is kept through an optional
        mapping, even when the file has none. An explicit selection on a file
        without subtitles selects nothing; a selection whose indices are all
        invalid falls back to keeping every subtitle.

        Args:
            raw: Comma-separated 1-based subtitle indices (or None)
            total: Number of subtitle streams in the file

        Returns:
            TrackSelection of subtitle indices
        """
        if not raw:
            if total <= 0:
                logger.info("No subtitle streams found")
            return TrackSelection.all()

        if total <= 0:
            logger.info("No subtitle streams found", selection=raw)
            return TrackSelection.none()

        indices = parse_selection(raw, total, StreamKind.SUBTITLE)
        if not indices:
            logger.warning(
                "No valid subtitle indices in selection, falling back to all subtitles",
                selection=raw,
            )
            return TrackSelection.all()

        return TrackSelection(indices=tuple(indices))
