"""Minimal shell parser for anonymous pipelines.

Only literal pipe chaining is understood: words, single and double quotes,
backslash escapes and ``|``. Everything else is passed through to the
programs as plain text.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .command import Command
from .exceptions import EmptyCommand, EmptyPipeSegment, ParseError, UnmatchedQuote
from .pipeline import Pipeline

_QUOTES = ("'", '"')


@dataclass
class _Segment:
    start: int
    end: int = 0
    words: list[str] = field(default_factory=list)


def _scan(command_line: str) -> list[_Segment]:
    """Split ``command_line`` into words and pipe segments in one pass."""

    segments = [_Segment(start=0)]
    word: list[str] = []
    in_word = False
    quote: str | None = None
    quote_start = 0

    def flush() -> None:
        nonlocal in_word
        if in_word:
            segments[-1].words.append("".join(word))
            word.clear()
            in_word = False

    idx = 0
    length = len(command_line)
    while idx < length:
        char = command_line[idx]
        if char == "\\" and quote != "'":
            in_word = True
            if idx + 1 < length:
                word.append(command_line[idx + 1])
                idx += 2
            else:
                # Nothing left to escape: keep the backslash itself.
                word.append(char)
                idx += 1
            continue
        if quote is not None:
            if char == quote:
                quote = None
            else:
                word.append(char)
        elif char in _QUOTES:
            quote = char
            quote_start = idx
            in_word = True
        elif char.isspace():
            flush()
        elif char == "|":
            flush()
            segments[-1].end = idx
            segments.append(_Segment(start=idx + 1))
        else:
            word.append(char)
            in_word = True
        idx += 1

    if quote is not None:
        raise UnmatchedQuote(
            f"Unmatched {quote} quote",
            segment=len(segments) - 1,
            position=quote_start,
        )
    flush()
    segments[-1].end = length
    return segments


def split_segments(command_line: str) -> list[str]:
    """Return the raw text between unquoted, unescaped pipes."""

    return [command_line[seg.start : seg.end] for seg in _scan(command_line)]


def tokenize(segment: str) -> list[str]:
    """Split a single pipe-free command into words."""

    segments = _scan(segment)
    if len(segments) > 1:
        raise ParseError(
            "Unexpected '|' in a single command",
            segment=0,
            position=segments[0].end,
        )
    words = segments[0].words
    _ensure_program(words, 0)
    return words


def _ensure_program(words: list[str], index: int) -> None:
    if not words:
        raise EmptyCommand("Missing command", segment=index)
    if not words[0]:
        raise EmptyCommand("Empty program name", segment=index)


def parse_pipeline(command_line: str) -> Pipeline:
    segments = _scan(command_line)
    if len(segments) == 1 and not segments[0].words:
        raise EmptyCommand("Missing command", segment=0)

    pipeline = Pipeline()
    for index, segment in enumerate(segments):
        if not segment.words:
            # Point at the pipe that has nothing on this side of it.
            position = segment.start - 1 if index > 0 else segment.end
            raise EmptyPipeSegment(
                "Missing command before pipe or end of line",
                segment=index,
                position=position,
            )
        _ensure_program(segment.words, index)
        program, *args = segment.words
        pipeline.add(Command(program, args))
    return pipeline


__all__ = ["parse_pipeline", "split_segments", "tokenize"]
