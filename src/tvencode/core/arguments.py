"""ffmpeg argument synthesis for video, audio and subtitle streams.

Everything here is pure: stream counts and channel layouts come in through a
``StreamInventory`` and the result is a flat list of argument tokens.
"""

from typing import Iterator

from tvencode.config import AudioConfig, Config, EncodeSettings
from tvencode.models.encode import AudioMode, EncoderProfile
from tvencode.models.media import StreamInventory, StreamKind, TrackSelection


class ArgumentList:
    """Append-only sequence of command-line tokens."""

    def __init__(self):
        self._tokens: list[str] = []

    def add(self, *tokens: object) -> "ArgumentList":
        """Append tokens, converting each to ``str``."""
        self._tokens.extend(str(token) for token in tokens)
        return self

    def extend(self, other: "ArgumentList") -> "ArgumentList":
        self._tokens.extend(other)
        return self

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(self._tokens)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ArgumentList):
            return self._tokens == other._tokens
        if isinstance(other, (list, tuple)):
            return self._tokens == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"ArgumentList({self._tokens!r})"


def disposition_arguments(kind: StreamKind, count: int) -> ArgumentList:
    """Mark output stream 0 of ``kind`` as default and clear it on the rest."""
    args = ArgumentList()
    if count <= 0:
        return args
    args.add(f"-disposition:{kind.value}:0", "default")
    for position in range(1, count):
        args.add(f"-disposition:{kind.value}:{position}", "0")
    return args


def video_arguments(config: Config, encoder: EncoderProfile, tune_grain: bool = False) -> ArgumentList:
    """Build the video stream arguments for an encoder profile.

    Only the first video stream is mapped.

    Args:
        config: Application configuration holding the profile tables
        encoder: Encoder profile to use
        tune_grain: Add x265 tune=grain (cpu-x265 only)

    Returns:
        ArgumentList with mapping, codec and tuning tokens

    Raises:
        ValueError: If the encoder profile is unknown
    """
    args = ArgumentList().add("-map", "0:v:0")

    if encoder == EncoderProfile.CPU_X265:
        x265 = config.x265
        params = f"crf={x265.crf}"
        if x265.params:
            params += f":{x265.params}"
        if tune_grain or x265.tune:
            params += f":tune={x265.tune or 'grain'}"
        args.add(
            "-c:v", "libx265",
            "-preset", x265.preset,
            "-x265-params", params,
            "-pix_fmt", x265.pix_fmt,
        )
    elif encoder == EncoderProfile.HW_HEVC:
        vt = config.videotoolbox
        args.add(
            "-c:v", "hevc_videotoolbox",
            "-b:v", vt.bitrate,
            "-maxrate", vt.maxrate,
            "-bufsize", vt.bufsize,
            "-pix_fmt", vt.pix_fmt,
            "-vtag", vt.vtag,
        )
    elif encoder == EncoderProfile.AV1:
        av1 = config.av1
        args.add(
            "-c:v", "libsvtav1",
            "-crf", av1.crf,
            "-preset", av1.preset,
            "-pix_fmt", av1.pix_fmt,
        )
    else:
        raise ValueError(f"Unknown encoder: {encoder}")

    return args


def audio_arguments(
    selection: TrackSelection,
    mode: AudioMode,
    inventory: StreamInventory,
    audio: AudioConfig,
) -> ArgumentList:
    """Build mapping, codec and disposition arguments for selected audio.

    In transcode mode each output stream gets its own codec directive: sources
    with more than two channels use the surround bitrate capped at
    ``surround_channels``, everything else is encoded as stereo.
    """
    args = ArgumentList()
    if not selection.indices:
        return args

    for index in selection.indices:
        args.add("-map", f"0:a:{index}")

    if mode == AudioMode.COPY:
        args.add("-c:a", "copy")
    else:
        for position, index in enumerate(selection.indices):
            if inventory.channels_for(index) > 2:
                bitrate, channels = audio.surround_bitrate, audio.surround_channels
            else:
                bitrate, channels = audio.stereo_bitrate, 2
            args.add(
                f"-c:a:{position}", audio.codec,
                f"-b:a:{position}", bitrate,
                f"-ac:{position}", channels,
            )

    return args.extend(disposition_arguments(StreamKind.AUDIO, len(selection.indices)))


def subtitle_arguments(selection: TrackSelection) -> ArgumentList:
    """Build mapping, codec and disposition arguments for subtitles."""
    args = ArgumentList()

    if selection.select_all:
        return args.add("-map", "0:s?", "-c:s", "copy")

    if not selection.indices:
        return args

    for index in selection.indices:
        args.add("-map", f"0:s:{index}")
    args.add("-c:s", "copy")
    return args.extend(disposition_arguments(StreamKind.SUBTITLE, len(selection.indices)))


def container_arguments() -> ArgumentList:
    """Copy global metadata and move the moov atom to the front."""
    return ArgumentList().add("-map_metadata", "0", "-movflags", "+faststart")


class ArgumentSynthesizer:
    """Combine video, audio, subtitle and container arguments for one file."""

    def __init__(self, config: Config, settings: EncodeSettings):
        """Initialize the synthesizer.

        Args:
            config: Application configuration
            settings: Per-run encode settings
        """
        self.config = config
        self.settings = settings

    def build(
        self,
        inventory: StreamInventory,
        audio: TrackSelection,
        subtitles: TrackSelection,
    ) -> ArgumentList:
        """Build the ordered argument list placed between input and output."""
        return (
            ArgumentList()
            .extend(video_arguments(self.config, self.settings.encoder, self.settings.tune_grain))
            .extend(audio_arguments(audio, self.settings.audio_mode, inventory, self.config.audio))
            .extend(subtitle_arguments(subtitles))
            .extend(container_arguments())
        )
