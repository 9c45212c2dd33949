"""Executor running ffmpeg for a single encode request."""

import shutil
import subprocess
from pathlib import Path
from typing import Optional

from tvencode.config import ToolsConfig
from tvencode.models.result import EncodeRequest, EncodeResult
from tvencode.utils.logger import get_logger

logger = get_logger(__name__)


def missing_tools(tools: ToolsConfig) -> list[str]:
    """Return the configured external binaries that are not on PATH."""
    return [binary for binary in (tools.ffmpeg, tools.ffprobe) if not shutil.which(binary)]


class FFmpegExecutor:
    """Run ffmpeg synchronously for an EncodeRequest.

    ffmpeg's own output goes straight to the terminal. A non-zero exit status
    or a missing output file is a failure; any partial output is removed so
    that a later run does not skip the file.
    """

    def __init__(self, tools: Optional[ToolsConfig] = None):
        """Initialize the executor.

        Args:
            tools: External tool configuration (ffmpeg binary and timeout)
        """
        tools = tools or ToolsConfig()
        self.ffmpeg = tools.ffmpeg
        self.timeout = tools.encode_timeout_seconds

    def build_command(self, request: EncodeRequest) -> list[str]:
        """Build the full ffmpeg command line for a request."""
        return [
            self.ffmpeg,
            "-hide_banner",
            "-y",
            "-i",
            str(request.input_path),
            *request.arguments,
            str(request.output_path),
        ]

    def _cleanup(self, path: Path) -> None:
        try:
            if path.exists():
                path.unlink()
                logger.debug("Removed partial output", file=str(path))
        except OSError as e:
            logger.warning("Failed to remove partial output", file=str(path), error=str(e))

    def run(self, request: EncodeRequest) -> EncodeResult:
        """Run ffmpeg for ``request`` and report the outcome.

        Args:
            request: Encode request

        Returns:
            EncodeResult with status "success" or "failed"
        """
        cmd = self.build_command(request)
        output = request.output_path
        output.parent.mkdir(parents=True, exist_ok=True)

        logger.debug("Executing ffmpeg", file=str(request.input_path), command=cmd)

        try:
            completed = subprocess.run(cmd, timeout=self.timeout)

        except subprocess.TimeoutExpired:
            logger.error("ffmpeg timeout", file=str(request.input_path), timeout=self.timeout)
            self._cleanup(output)
            return EncodeResult(status="failed", reason="timeout", command=cmd)

        except OSError as e:
            logger.error("Could not run ffmpeg", ffmpeg=self.ffmpeg, error=str(e))
            return EncodeResult(status="failed", reason="ffmpeg_unavailable", error=str(e), command=cmd)

        except KeyboardInterrupt:
            self._cleanup(output)
            raise

        if completed.returncode != 0:
            logger.error(
                "ffmpeg failed",
                file=str(request.input_path),
                returncode=completed.returncode,
            )
            self._cleanup(output)
            return EncodeResult(
                status="failed",
                returncode=completed.returncode,
                reason="ffmpeg_exit_status",
                command=cmd,
            )

        if not output.exists():
            logger.error("ffmpeg did not create output file", file=str(request.input_path))
            return EncodeResult(
                status="failed", returncode=0, reason="missing_output", command=cmd
            )

        return EncodeResult(status="success", returncode=0, command=cmd)
