"""
Tests for caption track -> transcript conversion.
Covers the rolling-window merge, the residual duplicate pass and line classification.
"""
import pytest
from content_archive.normalization.transcript_normalizer import (
    TranscriptNormalizer,
    clean_cue,
    is_structural,
)
from tests.fixtures.pages import load_fixture


def _track(*cues: str) -> str:
    """Build a minimal VTT track with one cue per argument."""
    blocks = ["WEBVTT", ""]
    for i, text in enumerate(cues):
        blocks.append(f"00:00:{i:02d}.000 --> 00:00:{i + 1:02d}.000")
        blocks.extend(text.split("\n"))
        blocks.append("")
    return "\n".join(blocks)


class TestTranscriptNormalizer:
    """Test the single-pass cue folding."""

    def setup_method(self):
        self.normalizer = TranscriptNormalizer()

    def test_growing_window_merges_into_one_line(self):
        """'hello wor' -> 'hello world' -> 'hello world' yields one line."""
        result = self.normalizer.normalize(_track("hello wor", "hello world", "hello world"))
        assert result == "hello world"

    def test_unrelated_cues_stay_separate(self):
        result = self.normalizer.normalize(_track("first sentence.", "second sentence."))
        assert result == "first sentence.\n\nsecond sentence."

    def test_shrinking_window_keeps_longer_line(self):
        result = self.normalizer.normalize(_track("the quick brown fox", "the quick"))
        assert result == "the quick brown fox"

    def test_merge_compares_against_last_appended_line(self):
        """
        After a merge the remembered line is still the one originally appended,
        so a later cue sharing only that prefix replaces the merged text.
        """
        result = self.normalizer.normalize(_track("a b", "a b c d", "a b x"))
        assert result == "a b x"

    def test_exact_duplicate_is_discarded(self):
        result = self.normalizer.normalize(_track("same line", "same line", "other line"))
        assert result == "same line\n\nother line"

    def test_multiline_cue_is_space_joined(self):
        result = self.normalizer.normalize(_track("first half\nsecond half"))
        assert result == "first half second half"

    def test_inline_timestamps_and_tags_removed(self):
        result = self.normalizer.normalize(
            _track("<00:00:01.000><c> word</c><00:00:01.500><c.colorE5E5E5> two</c>")
        )
        assert result == "word two"

    def test_fixture_track(self):
        result = self.normalizer.normalize(load_fixture("rolling_captions.vtt"))
        assert result.split("\n\n") == ["hello world", "second sentence here"]

    def test_last_cue_without_trailing_blank_is_flushed(self):
        track = "WEBVTT\n\n00:00:00.000 --> 00:00:01.000\nfirst\n\n00:00:01.000 --> 00:00:02.000\nlast words"
        assert self.normalizer.normalize(track) == "first\n\nlast words"

    def test_crlf_and_bom_handled(self):
        track = "\ufeffWEBVTT\r\n\r\n1\r\n00:00:00.000 --> 00:00:01.000\r\nline one\r\n\r\n2\r\n00:00:01.000 --> 00:00:02.000\r\nline two\r\n"
        assert self.normalizer.normalize(track) == "line one\n\nline two"

    def test_empty_track(self):
        assert self.normalizer.normalize("") == ""
        assert self.normalizer.normalize("WEBVTT\n\n") == ""

    def test_whitespace_only_cue_ignored(self):
        result = self.normalizer.normalize(_track("<00:00:01.000>", "real text"))
        assert result == "real text"

    def test_unicode_text(self):
        result = self.normalizer.normalize(_track("안녕하세", "안녕하세요 여러분"))
        assert result == "안녕하세요 여러분"

    def test_control_characters_removed(self):
        result = self.normalizer.normalize(_track("bell\x07 and\x1b escape\x00", "form\x0cfeed"))
        assert result == "bell and escape\n\nformfeed"

    def test_non_ascii_digit_line_is_text(self):
        result = self.normalizer.normalize(_track("\u0661\u0662\u0663", "\uff11\uff12"))
        assert result == "\u0661\u0662\u0663\n\n\uff11\uff12"


class TestLineClassification:

    @pytest.mark.parametrize("line", [
        "",
        "WEBVTT",
        "00:00:01.000 --> 00:00:02.000 align:start position:0%",
        "42",
        "Kind: captions",
        "Language: en",
    ])
    def test_structural_lines(self, line):
        assert is_structural(line)

    @pytest.mark.parametrize("line", ["hello", "42 apples", "Kindness matters"])
    def test_text_lines(self, line):
        assert not is_structural(line)

    @pytest.mark.parametrize("line", ["\u0661\u0662\u0663", "\uff14\uff12"])
    def test_non_ascii_digits_are_not_cue_indexes(self, line):
        assert not is_structural(line)

    def test_clean_cue_collapses_whitespace(self):
        assert clean_cue("  a   b \t c  ") == "a b c"

    def test_clean_cue_unescapes_entities(self):
        assert clean_cue("fish &amp; chips") == "fish & chips"

    def test_clean_cue_strips_control_characters(self):
        assert clean_cue("a\x00b\x07c &#27;d") == "abc d"
