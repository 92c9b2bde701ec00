"""
WebVTT caption track -> plain-text transcript.

Auto-generated caption tracks emit rolling cue windows: each cue repeats the
tail of the previous one and adds a few words. A naive dump repeats every
sentence several times. The normalizer folds a cue into the previous output
line whenever one is a prefix of the other and keeps the longer version.
"""
import html
import re
from dataclasses import dataclass, field
from typing import List

from .text import strip_control_chars

# <00:00:01.234> word-level timing inside a cue
INLINE_TIMESTAMP = re.compile(r"<\d{2}:\d{2}:\d{2}\.\d{3}>")
# <c>, <c.colorE5E5E5>, </c>, <i>, <v Speaker>, ... cue styling spans
INLINE_TAG = re.compile(r"</?(?:c|i|b|u|v|lang|ruby|rt)(?:[.\s][^>]*)?>")
WHITESPACE = re.compile(r"\s+")
INDEX_LINE = re.compile(r"^[0-9]+$")


@dataclass
class _CueState:
    buffer: List[str] = field(default_factory=list)
    previous: str = ""
    lines: List[str] = field(default_factory=list)


def is_structural(line: str) -> bool:
    """Header, blank, timing, cue index or Kind:/Language: metadata line."""
    return (
        line == ""
        or line == "WEBVTT"
        or line.startswith(("WEBVTT ", "WEBVTT\t"))
        or "-->" in line
        or bool(INDEX_LINE.match(line))
        or line.startswith("Kind:")
        or line.startswith("Language:")
    )


def clean_cue(text: str) -> str:
    text = INLINE_TIMESTAMP.sub("", text)
    text = INLINE_TAG.sub("", text)
    text = strip_control_chars(html.unescape(text))
    return WHITESPACE.sub(" ", text).strip()


class TranscriptNormalizer:
    """Collapses a caption track into deduplicated transcript paragraphs."""

    def normalize(self, raw_track: str) -> str:
        state = _CueState()

        for raw_line in raw_track.lstrip("\ufeff").split("\n"):
            line = raw_line.strip()
            if is_structural(line):
                self._flush(state)
                continue
            state.buffer.append(line)

        self._flush(state)

        # Exact repeats can survive the prefix merge; drop them in a separate pass.
        deduped = [
            line for i, line in enumerate(state.lines)
            if i == 0 or line != state.lines[i - 1]
        ]
        return "\n\n".join(deduped)

    def _flush(self, state: _CueState) -> None:
        if not state.buffer:
            return

        candidate = clean_cue(" ".join(state.buffer))
        state.buffer.clear()

        if not candidate or candidate == state.previous:
            return

        previous = state.previous
        if previous and (candidate.startswith(previous) or previous.startswith(candidate)):
            # Rolling window over the same sentence: keep the longer version.
            # `previous` stays the line that was originally appended.
            state.lines[-1] = candidate if len(candidate) > len(previous) else previous
        else:
            state.lines.append(candidate)
            state.previous = candidate
