"""Stream inventory probing using ffprobe."""

import json
import subprocess
from pathlib import Path
from typing import Any, Iterable, Optional

from tvencode.config import ToolsConfig
from tvencode.models.media import StreamInventory, StreamKind
from tvencode.utils.logger import get_logger

logger = get_logger(__name__)


class StreamProbe:
    """Count audio/subtitle streams and read audio channel counts.

    Every call runs ffprobe once. Failures never raise: a file that cannot be
    probed reports zero streams and stereo audio.
    """

    def __init__(self, tools: Optional[ToolsConfig] = None):
        """Initialize the probe.

        Args:
            tools: External tool configuration (ffprobe binary and timeout)
        """
        tools = tools or ToolsConfig()
        self.ffprobe = tools.ffprobe
        self.timeout = tools.probe_timeout_seconds

    def _query(self, file_path: Path, selector: str, entry: str) -> Optional[list[dict[str, Any]]]:
        """Run ffprobe for one stream selector and return its ``streams`` list.

        Returns None if ffprobe fails or its output can't be parsed.
        """
        cmd = [
            self.ffprobe,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_entries",
            f"stream={entry}",
            "-select_streams",
            selector,
            str(file_path),
        ]

        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, check=True, timeout=self.timeout
            )
            data = json.loads(result.stdout or "{}")
            return data.get("streams", [])

        except subprocess.TimeoutExpired:
            logger.warning(
                "ffprobe timeout", file=str(file_path), selector=selector, timeout=self.timeout
            )
        except subprocess.CalledProcessError as e:
            logger.warning(
                "ffprobe failed",
                file=str(file_path),
                selector=selector,
                returncode=e.returncode,
                stderr=(e.stderr or "").strip()[:500],
            )
        except (json.JSONDecodeError, AttributeError) as e:
            logger.warning(
                "Failed to parse ffprobe output",
                file=str(file_path),
                selector=selector,
                error=str(e),
            )
        except OSError as e:
            logger.warning(
                "Could not run ffprobe", file=str(file_path), ffprobe=self.ffprobe, error=str(e)
            )
        return None

    def count_streams(self, file_path: Path, kind: StreamKind) -> int:
        """Return the number of streams of ``kind`` in a file (0 on failure)."""
        streams = self._query(file_path, kind.value, "index")
        if streams is None:
            return 0
        return len(streams)

    def channels_for_audio_stream(self, file_path: Path, index: int) -> int:
        """Return the channel count of the ``index``-th audio stream (0-based).

        Falls back to 2 when ffprobe fails or reports no usable value.
        """
        streams = self._query(file_path, f"a:{index}", "channels")
        if streams:
            try:
                channels = int(streams[0].get("channels"))
            except (TypeError, ValueError):
                channels = 0
            if channels > 0:
                return channels

        logger.warning(
            "Channel count unavailable, assuming stereo",
            file=str(file_path),
            audio_index=index,
        )
        return StreamInventory.DEFAULT_CHANNELS

    def inventory(self, file_path: Path, audio_indices: Iterable[int] = ()) -> StreamInventory:
        """Probe stream counts and the channel counts of ``audio_indices``.

        Args:
            file_path: Path to the media file
            audio_indices: 0-based audio indices whose channel count is needed

        Returns:
            StreamInventory for the file
        """
        inventory = StreamInventory(
            audio_count=self.count_streams(file_path, StreamKind.AUDIO),
            subtitle_count=self.count_streams(file_path, StreamKind.SUBTITLE),
        )
        self.add_channels(file_path, inventory, audio_indices)

        logger.debug(
            "Streams probed",
            file=str(file_path),
            audio_streams=inventory.audio_count,
            subtitle_streams=inventory.subtitle_count,
        )
        return inventory

    def add_channels(
        self, file_path: Path, inventory: StreamInventory, audio_indices: Iterable[int]
    ) -> None:
        """Look up channel counts for audio indices not yet in ``inventory``."""
        for index in audio_indices:
            if index not in inventory.channels:
                inventory.channels[index] = self.channels_for_audio_stream(file_path, index)
