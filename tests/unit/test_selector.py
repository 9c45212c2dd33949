"""Unit tests for track selection."""

import pytest
from structlog.testing import capture_logs

from tvencode.core.selector import TrackSelector, parse_selection
from tvencode.models.media import StreamKind, TrackSelection


class TestParseSelection:
    """Test parsing of 1-based index lists."""

    def test_preserves_order(self):
        """Should keep indices in the order they were given."""
        assert parse_selection("3,1,2", 3, StreamKind.AUDIO) == [2, 0, 1]

    def test_keeps_repeated_indices(self):
        """Should keep an index the user repeats."""
        assert parse_selection("2,2,1", 2, StreamKind.AUDIO) == [1, 1, 0]

    def test_drops_out_of_range(self):
        """Should drop 5 when only 4 streams exist (5 - 1 = 4 >= 4)."""
        assert parse_selection("5,1,3", 4, StreamKind.AUDIO) == [0, 2]

    def test_drops_zero(self):
        """Should drop 0 since indices are 1-based."""
        assert parse_selection("0,1", 2, StreamKind.SUBTITLE) == [0]

    @pytest.mark.parametrize("raw", ["x", "-1", "1.5", "+2", "²"])
    def test_drops_non_numeric(self, raw):
        """Should drop tokens that are not plain non-negative integers."""
        assert parse_selection(f"{raw},2", 3, StreamKind.AUDIO) == [1]

    def test_ignores_whitespace_and_empty_tokens(self):
        """Should strip whitespace and skip empty tokens."""
        assert parse_selection(" 2 , ,1,, ", 2, StreamKind.AUDIO) == [1, 0]

    @pytest.mark.parametrize("raw", [None, ""])
    def test_empty_input(self, raw):
        """Should return no indices for an unset selection."""
        assert parse_selection(raw, 3, StreamKind.AUDIO) == []

    @pytest.mark.parametrize("total", [1, 2, 5])
    def test_all_indices_in_range(self, total):
        """Should never return an index >= total."""
        indices = parse_selection("1,2,3,4,5,6,7,8,9,10", total, StreamKind.AUDIO)
        assert indices == list(range(total))
        assert all(i < total for i in indices)


class TestAudioSelection:
    """Test audio track selection and fallbacks."""

    def test_default_is_first_audio(self):
        """Should select [0] when no selection is given."""
        assert TrackSelector().select_audio(None, 3) == TrackSelection(indices=(0,))

    def test_explicit_selection(self):
        """Should select valid indices in order."""
        assert TrackSelector().select_audio("5,1,3", 4).indices == (0, 2)

    def test_all_invalid_falls_back_to_first(self):
        """Should fall back to [0] when every token is invalid."""
        assert TrackSelector().select_audio("9,abc,0", 2).indices == (0,)

    @pytest.mark.parametrize("raw", [None, "1,2"])
    def test_no_audio_streams(self, raw):
        """Should select nothing when the file has no audio."""
        selection = TrackSelector().select_audio(raw, 0)

        assert selection.is_empty
        assert not selection.select_all


class TestSubtitleSelection:
    """Test subtitle track selection and fallbacks."""

    @pytest.mark.parametrize("total", [0, 3])
    def test_default_is_all(self, total):
        """Should map every subtitle when no selection is given, even with none present."""
        assert TrackSelector().select_subtitles(None, total).select_all

    def test_explicit_selection(self):
        """Should select valid indices in order."""
        selection = TrackSelector().select_subtitles("3,1", 3)

        assert selection.indices == (2, 0)
        assert not selection.select_all

    def test_all_invalid_falls_back_to_all(self):
        """Should fall back to all subtitles when every token is invalid."""
        assert TrackSelector().select_subtitles("4,x", 3).select_all

    def test_explicit_selection_without_subtitles(self):
        """Should select nothing when an explicit list meets a file with no subtitles."""
        selection = TrackSelector().select_subtitles("1,2", 0)

        assert selection.is_empty

    def test_is_truthy_for_select_all(self):
        """A select-all selection has no indices but is not empty."""
        selection = TrackSelection.all()

        assert selection
        assert not selection.is_empty


class TestSelectionLogging:
    """Test the events emitted while resolving selections."""

    def test_no_subtitle_streams_logged_when_unset(self):
        with capture_logs() as logs:
            TrackSelector().select_subtitles(None, 0)

        assert logs == [{"event": "No subtitle streams found", "log_level": "info"}]

    def test_invalid_audio_selection_warns_on_fallback(self):
        with capture_logs() as logs:
            TrackSelector().select_audio("9,x", 2)

        events = [entry["event"] for entry in logs]
        assert "No valid audio indices in selection, falling back to first audio" in events
        fallback = next(entry for entry in logs if entry["event"].startswith("No valid"))
        assert fallback["log_level"] == "warning"
        assert fallback["selection"] == "9,x"

    def test_unset_audio_selection_is_silent(self):
        with capture_logs() as logs:
            TrackSelector().select_audio(None, 2)

        assert logs == []

    def test_invalid_subtitle_selection_warns_on_fallback(self):
        with capture_logs() as logs:
            TrackSelector().select_subtitles("4", 3)

        assert logs[-1]["event"] == "No valid subtitle indices in selection, falling back to all subtitles"
        assert logs[-1]["log_level"] == "warning"

    def test_skipped_tokens_use_fixed_events(self):
        with capture_logs() as logs:
            parse_selection("x,0,5", 4, StreamKind.AUDIO)

        assert [(entry["event"], entry["kind"], entry["index"]) for entry in logs] == [
            ("Skipping invalid index", "audio", "x"),
            ("Skipping out-of-range index", "audio", "0"),
            ("Skipping index past last stream", "audio", 5),
        ]
        assert logs[2]["total"] == 4
