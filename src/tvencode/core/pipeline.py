"""Batch encoding pipeline orchestrator."""

import shlex
import time
from typing import Callable, Optional, Sequence

import structlog

from tvencode.config import Config, EncodeSettings
from tvencode.core.arguments import ArgumentSynthesizer
from tvencode.core.executor import FFmpegExecutor
from tvencode.core.probe import StreamProbe
from tvencode.core.selector import TrackSelector
from tvencode.models.encode import AudioMode
from tvencode.models.media import MediaFile
from tvencode.models.result import BatchReport, EncodeRequest, EncodeResult
from tvencode.utils.logger import get_logger

logger = get_logger(__name__)

ResultCallback = Callable[[int, int, MediaFile, EncodeResult], None]


class BatchEncoder:
    """Encode a list of media files one at a time."""

    def __init__(
        self,
        config: Config,
        settings: EncodeSettings,
        probe: Optional[StreamProbe] = None,
        executor: Optional[FFmpegExecutor] = None,
    ):
        """Initialize the encoder with configuration.

        Args:
            config: Application configuration
            settings: Per-run encode settings
            probe: Stream probe (defaults to ffprobe from config)
            executor: ffmpeg executor (defaults to ffmpeg from config)
        """
        self.config = config
        self.settings = settings
        self.probe = probe or StreamProbe(config.tools)
        self.executor = executor or FFmpegExecutor(config.tools)
        self.selector = TrackSelector()
        self.synthesizer = ArgumentSynthesizer(config, settings)

    def build_request(self, media_file: MediaFile) -> EncodeRequest:
        """Probe a file and build its encode request.

        Steps:
        1. Count audio and subtitle streams
        2. Resolve audio and subtitle selections
        3. Look up channel counts of selected audio (transcode mode only)
        4. Synthesize the argument list
        """
        source = media_file.source

        with structlog.contextvars.bound_contextvars(file=str(media_file.relative)):
            inventory = self.probe.inventory(source)

            audio = self.selector.select_audio(
                self.settings.audio_selection, inventory.audio_count
            )
            subtitles = self.selector.select_subtitles(
                self.settings.subtitle_selection, inventory.subtitle_count
            )

            if self.settings.audio_mode == AudioMode.TRANSCODE:
                self.probe.add_channels(source, inventory, audio.indices)

            logger.debug("Tracks selected", audio=str(audio), subtitles=str(subtitles))

        arguments = self.synthesizer.build(inventory, audio, subtitles)
        return EncodeRequest(
            input_path=source, output_path=media_file.output, arguments=arguments.tokens
        )

    def encode(self, media_file: MediaFile, position: int = 1, total: int = 1) -> EncodeResult:
        """Encode a single file unless its output already exists.

        Args:
            media_file: File to encode
            position: 1-based position in the batch (for progress logging)
            total: Batch size

        Returns:
            EncodeResult with status and details
        """
        if media_file.output.exists():
            logger.info(
                "SKIP (exists)",
                position=position,
                total=total,
                output=str(media_file.output),
            )
            return EncodeResult(status="skipped", media_file=media_file, reason="exists")

        start_time = time.time()

        try:
            request = self.build_request(media_file)

            logger.info(
                "Encoding",
                position=position,
                total=total,
                file=str(media_file.relative),
                output=str(media_file.output),
            )

            if self.settings.dry_run:
                cmd = self.executor.build_command(request)
                logger.info("DRY RUN: Would run", command=shlex.join(cmd))
                return EncodeResult(status="dry_run", media_file=media_file, command=cmd)

            result = self.executor.run(request)

        except Exception as e:
            logger.exception("Encode error", file=str(media_file.relative), error=str(e))
            return EncodeResult(status="error", media_file=media_file, error=str(e))

        result.media_file = media_file
        duration_s = round(time.time() - start_time, 1)

        if result.status == "success":
            logger.info("DONE", output=str(media_file.output), duration_s=duration_s)
        else:
            logger.error(
                "Failed",
                file=str(media_file.relative),
                reason=result.reason,
                returncode=result.returncode,
            )
        return result

    def run(
        self, files: Sequence[MediaFile], on_result: Optional[ResultCallback] = None
    ) -> BatchReport:
        """Encode every file in order and aggregate the results.

        Failed files are recorded and the batch moves on, unless
        ``stop_on_failure`` is set, in which case the remaining files are never
        attempted.

        Args:
            files: Files in enumeration order
            on_result: Optional callback invoked after each file

        Returns:
            BatchReport for the run
        """
        total = len(files)
        report = BatchReport(output_dir=self.settings.output_dir, total=total)

        for position, media_file in enumerate(files, 1):
            result = self.encode(media_file, position, total)
            report.results.append(result)

            if on_result is not None:
                on_result(position, total, media_file, result)

            if not result.ok and self.settings.stop_on_failure:
                report.stopped_early = position < total
                logger.error(
                    "Stopping batch after failure",
                    file=str(media_file.relative),
                    remaining=total - position,
                )
                break

        logger.info(
            "All done",
            output_dir=str(self.settings.output_dir),
            success=report.count("success"),
            skipped=report.count("skipped"),
            failed=report.count("failed") + report.count("error"),
        )
        return report
