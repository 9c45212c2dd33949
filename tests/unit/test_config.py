"""Unit tests for configuration and enum models."""

import pytest
from pydantic import ValidationError

from tvencode.config import Config, EncodeSettings, FilesConfig, LoggingConfig, load_config
from tvencode.models.media import MediaFile
from tvencode.models.encode import AudioMode, EncoderProfile


class TestConfig:
    """Test Config defaults and YAML loading."""

    def test_defaults(self):
        config = load_config()

        assert config.encoder == EncoderProfile.CPU_X265
        assert config.x265.crf == 23
        assert config.av1.preset == 7
        assert config.audio.surround_bitrate == "384k"
        assert config.files.container == ".mkv"
        assert ".m2ts" in config.files.extensions
        assert config.tools.encode_timeout_seconds is None
        assert config.logging.output is None

    def test_default_files_section_is_normalized(self):
        files = FilesConfig()

        assert files.container == ".mkv"
        assert all(ext.startswith(".") for ext in files.extensions)

    def test_default_container_builds_output_path(self, tmp_path):
        config = Config()

        media_file = MediaFile.from_paths(
            tmp_path / "in" / "E01.mp4", tmp_path / "in", tmp_path / "out", config.files.container
        )

        assert media_file.output == tmp_path / "out" / "E01.mkv"

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "tvencode.yaml"
        path.write_text(
            "encoder: av1\n"
            "av1:\n"
            "  crf: 28\n"
            "audio:\n"
            "  stereo_bitrate: 192k\n"
            "files:\n"
            "  extensions: [MKV, .Mp4]\n"
            "  container: MP4\n"
        )

        config = load_config(path)

        assert config.encoder == EncoderProfile.AV1
        assert config.av1.crf == 28
        assert config.av1.preset == 7
        assert config.audio.stereo_bitrate == "192k"
        assert config.files.extensions == [".mkv", ".mp4"]
        assert config.files.container == ".mp4"

    def test_empty_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(path) == Config()

    def test_env_var_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TVENCODE_FFMPEG", "/opt/ffmpeg/bin/ffmpeg")
        path = tmp_path / "tvencode.yaml"
        path.write_text("tools:\n  ffmpeg: ${TVENCODE_FFMPEG}\n")

        assert load_config(path).tools.ffmpeg == "/opt/ffmpeg/bin/ffmpeg"

    def test_missing_env_var(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TVENCODE_MISSING", raising=False)
        path = tmp_path / "tvencode.yaml"
        path.write_text("tools:\n  ffmpeg: ${TVENCODE_MISSING}\n")

        with pytest.raises(ValueError, match="TVENCODE_MISSING"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_unknown_encoder_rejected(self):
        with pytest.raises(ValidationError):
            Config(encoder="x264")

    def test_empty_extensions_rejected(self):
        with pytest.raises(ValidationError):
            FilesConfig(extensions=[""])

    @pytest.mark.parametrize("field,value", [("format", "xml"), ("level", "loud")])
    def test_invalid_logging(self, field, value):
        with pytest.raises(ValidationError):
            LoggingConfig(**{field: value})


class TestEncodeSettings:
    """Test the immutable run settings."""

    def test_frozen(self, settings_factory):
        settings = settings_factory()

        with pytest.raises(ValidationError):
            settings.tune_grain = True

    def test_defaults(self, tmp_path):
        settings = EncodeSettings(input_dir=tmp_path, output_dir=tmp_path / "out")

        assert settings.audio_mode == AudioMode.TRANSCODE
        assert settings.audio_selection is None
        assert settings.subtitle_selection is None
        assert not settings.stop_on_failure


class TestAudioMode:
    """Test audio mode parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("copy", AudioMode.COPY),
            ("COPY", AudioMode.COPY),
            ("transcode", AudioMode.TRANSCODE),
            ("aac", AudioMode.TRANSCODE),
        ],
    )
    def test_values(self, value, expected):
        assert AudioMode(value) is expected

    def test_unknown(self):
        with pytest.raises(ValueError):
            AudioMode("flac")
