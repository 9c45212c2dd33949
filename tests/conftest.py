"""Shared pytest fixtures for TVEncode tests."""

import json
from pathlib import Path
from unittest.mock import Mock

import pytest

from tvencode.config import Config, EncodeSettings
from tvencode.models.encode import AudioMode, EncoderProfile
from tvencode.models.media import MediaFile, StreamInventory


@pytest.fixture
def default_config():
    """Create a default configuration for testing."""
    return Config()


@pytest.fixture
def settings_factory(tmp_path):
    """Build EncodeSettings rooted in the test's temporary directory."""

    def _make(**overrides):
        values = {
            "input_dir": tmp_path / "Season 1",
            "output_dir": tmp_path / "Season 1_encoded",
            "encoder": EncoderProfile.CPU_X265,
            "audio_mode": AudioMode.TRANSCODE,
        }
        values.update(overrides)
        return EncodeSettings(**values)

    return _make


@pytest.fixture
def sample_inventory():
    """Four audio streams (stereo, 5.1, stereo, mono) and two subtitles."""
    return StreamInventory(
        audio_count=4,
        subtitle_count=2,
        channels={0: 2, 1: 6, 2: 2, 3: 1},
    )


@pytest.fixture
def media_tree(tmp_path):
    """Create an input tree with a few episodes and a non-video file."""
    root = tmp_path / "Season 1"
    (root / "Extras").mkdir(parents=True)
    for name in ("E01.mkv", "E02.MP4", "Extras/Making Of.m2ts"):
        (root / name).write_bytes(b"\x00" * 16)
    (root / "notes.txt").write_text("not a video")
    return root


@pytest.fixture
def media_file(tmp_path):
    """A single MediaFile mirrored into an output tree."""
    input_root = tmp_path / "Season 1"
    input_root.mkdir(exist_ok=True)
    source = input_root / "E01.mkv"
    source.write_bytes(b"\x00" * 16)
    return MediaFile.from_paths(source, input_root, tmp_path / "Season 1_encoded", ".mkv")


def ffprobe_output(*streams):
    """Build a completed-process mock carrying ffprobe JSON for ``streams``."""
    return Mock(returncode=0, stdout=json.dumps({"streams": list(streams)}), stderr="")


class FakeMediaTools:
    """Stand-in for ffprobe/ffmpeg used through a patched ``subprocess.run``.

    ``audio`` lists the channel count of each audio stream; ``subtitles`` is
    the subtitle stream count. ffmpeg writes the output file unless its input
    is listed in ``fail_on``.
    """

    def __init__(self, audio=(2,), subtitles=0, fail_on=()):
        self.audio = list(audio)
        self.subtitles = subtitles
        self.fail_on = set(fail_on)
        self.ffmpeg_calls = []
        self.ffprobe_calls = []

    def __call__(self, cmd, *args, **kwargs):
        if Path(cmd[0]).name.startswith("ffprobe"):
            self.ffprobe_calls.append(cmd)
            return self._probe(cmd)
        self.ffmpeg_calls.append(cmd)
        return self._encode(cmd)

    def _probe(self, cmd):
        selector = cmd[cmd.index("-select_streams") + 1]
        if selector == "a":
            return ffprobe_output(*({"index": i} for i in range(len(self.audio))))
        if selector == "s":
            return ffprobe_output(*({"index": i} for i in range(self.subtitles)))
        index = int(selector.split(":")[1])
        return ffprobe_output({"channels": self.audio[index]})

    def _encode(self, cmd):
        source = Path(cmd[cmd.index("-i") + 1])
        if source.name in self.fail_on:
            return Mock(returncode=1)
        Path(cmd[-1]).write_bytes(b"encoded")
        return Mock(returncode=0)


@pytest.fixture
def fake_tools():
    """Factory for FakeMediaTools."""
    return FakeMediaTools


@pytest.fixture
def probe_output():
    """Factory for ffprobe completed-process mocks."""
    return ffprobe_output
