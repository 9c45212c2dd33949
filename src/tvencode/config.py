"""Configuration management for TVEncode."""

import os
import re
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from tvencode.models.encode import AudioMode, EncoderProfile


class X265Config(BaseModel):
    """Parameter table for the cpu-x265 profile (libx265, 10-bit)."""

    crf: int = Field(default=23, description="Constant rate factor")
    preset: str = Field(default="slow", description="x265 speed/quality preset")
    params: str = Field(default="aq-mode=2:psy-rd=2", description="Extra x265-params")
    tune: Optional[str] = Field(default=None, description="x265 tune, e.g. 'grain'")
    pix_fmt: str = Field(default="yuv420p10le", description="Output pixel format")


class VideoToolboxConfig(BaseModel):
    """Parameter table for the hw-hevc profile (Apple VideoToolbox)."""

    bitrate: str = Field(default="3600k", description="Average video bitrate")
    maxrate: str = Field(default="7600k", description="Maximum video bitrate")
    bufsize: str = Field(default="15000k", description="Rate control buffer size")
    pix_fmt: str = Field(default="yuv420p", description="Output pixel format")
    vtag: str = Field(default="hvc1", description="Codec tag for player compatibility")


class AV1Config(BaseModel):
    """Parameter table for the av1 profile (SVT-AV1)."""

    crf: int = Field(default=30, description="Constant rate factor")
    preset: int = Field(default=7, description="SVT-AV1 preset")
    pix_fmt: str = Field(default="yuv420p", description="Output pixel format")


class AudioConfig(BaseModel):
    """Audio re-encode policy used in transcode mode."""

    codec: str = Field(default="aac", description="Audio codec for transcode mode")
    stereo_bitrate: str = Field(default="160k", description="Bitrate for <= 2 channels")
    surround_bitrate: str = Field(default="384k", description="Bitrate for > 2 channels")
    surround_channels: int = Field(default=6, description="Channel cap for surround")


class FilesConfig(BaseModel):
    """File discovery and output naming."""

    model_config = ConfigDict(validate_default=True)

    extensions: List[str] = Field(
        default=[".mkv", ".mp4", ".m2ts", ".mts", ".ts", ".avi", ".mov"],
        description="Input file extensions (case-insensitive)",
    )
    container: str = Field(default=".mkv", description="Output container extension")
    output_suffix: str = Field(
        default="_encoded", description="Suffix for the default output directory"
    )

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        """Normalize extensions to lowercase with a leading dot."""
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        if not normalized:
            raise ValueError("At least one input extension is required")
        return normalized

    @field_validator("container")
    @classmethod
    def normalize_container(cls, v: str) -> str:
        """Normalize the container extension to lowercase with a leading dot."""
        v = v.strip().lower()
        if not v:
            raise ValueError("Container extension must not be empty")
        return v if v.startswith(".") else f".{v}"


class ToolsConfig(BaseModel):
    """External tool locations and limits."""

    ffmpeg: str = Field(default="ffmpeg", description="ffmpeg binary")
    ffprobe: str = Field(default="ffprobe", description="ffprobe binary")
    probe_timeout_seconds: int = Field(default=30, description="ffprobe timeout")
    encode_timeout_seconds: Optional[int] = Field(
        default=None, description="ffmpeg timeout (None waits indefinitely)"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    format: str = Field(default="text", description="Log format (json or text)")
    level: str = Field(default="info", description="Log level")
    output: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        if v.lower() not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError("Invalid log level")
        return v.lower()


class Config(BaseModel):
    """Main configuration model."""

    encoder: EncoderProfile = Field(
        default=EncoderProfile.CPU_X265, description="Default encoder profile"
    )
    x265: X265Config = Field(default_factory=X265Config)
    videotoolbox: VideoToolboxConfig = Field(default_factory=VideoToolboxConfig)
    av1: AV1Config = Field(default_factory=AV1Config)
    audio: AudioConfig = Field(default_factory=AudioConfig)
    files: FilesConfig = Field(default_factory=FilesConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path) as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        raw_config = cls._substitute_env_vars(raw_config)

        return cls(**raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """Recursively replace ${VAR_NAME} with os.environ['VAR_NAME']."""
        if isinstance(obj, dict):
            return {key: Config._substitute_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [Config._substitute_env_vars(item) for item in obj]
        elif isinstance(obj, str):

            def replace_var(match):
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    raise ValueError(
                        f"Environment variable '{var_name}' not found "
                        f"(referenced in configuration)"
                    )
                return value

            return re.sub(r"\$\{([^}]+)\}", replace_var, obj)
        else:
            return obj


class EncodeSettings(BaseModel):
    """Immutable per-run settings built once from the command line."""

    model_config = ConfigDict(frozen=True)

    input_dir: Path = Field(..., description="Resolved input directory")
    output_dir: Path = Field(..., description="Output root directory")
    encoder: EncoderProfile = Field(default=EncoderProfile.CPU_X265)
    audio_selection: Optional[str] = Field(
        default=None, description="Comma-separated 1-based audio indices"
    )
    audio_mode: AudioMode = Field(default=AudioMode.TRANSCODE)
    subtitle_selection: Optional[str] = Field(
        default=None, description="Comma-separated 1-based subtitle indices"
    )
    tune_grain: bool = Field(default=False, description="Apply x265 tune=grain")
    stop_on_failure: bool = Field(
        default=False, description="Abort the batch after the first failed file"
    )
    dry_run: bool = Field(default=False, description="Log commands without running them")


def load_config(path: Optional[str | Path] = None) -> Config:
    """Load configuration from file or use defaults.

    Args:
        path: Optional path to configuration file. If None, uses defaults.

    Returns:
        Config instance
    """
    if path is None:
        return Config()

    return Config.from_yaml(path)
