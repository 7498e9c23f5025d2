"""
Word-wrap of styled text fragments into lines.

A run may mix styles (e.g. a bold label followed by a regular value);
breaks only happen at whitespace, so a word spanning two styles stays
on one line. Words wider than the line are split by characters.
"""

import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .operations import Fragment
from .styles import Alignment, ResolvedStyle


_TOKEN = re.compile(r"\n|[^\S\n]+|\S+")


@dataclass(frozen=True)
class WrappedLine:
    """A line of fragments produced by wrap_fragments"""
    fragments: Tuple[Fragment, ...]
    width: float
    fallback: ResolvedStyle
    hard_break: bool  # last line of a paragraph

    @property
    def text(self) -> str:
        return "".join(fragment.text for fragment in self.fragments)

    @property
    def space_count(self) -> int:
        return self.text.count(" ")

    @property
    def line_height(self) -> float:
        if not self.fragments:
            return self.fallback.line_height
        return max(fragment.style.line_height for fragment in self.fragments)

    @property
    def ascent(self) -> float:
        if not self.fragments:
            return self.fallback.ascent
        return max(fragment.style.ascent for fragment in self.fragments)


def _merge(pieces: Sequence[Fragment]) -> Tuple[Fragment, ...]:
    """Join adjacent pieces that share a style"""
    merged: List[Fragment] = []
    for piece in pieces:
        if not piece.text:
            continue
        if merged and merged[-1].style == piece.style:
            merged[-1] = Fragment(merged[-1].text + piece.text, piece.style)
        else:
            merged.append(piece)
    return tuple(merged)


def _tokenize(fragments: Sequence[Fragment]) -> List[object]:
    """Split into newline markers, space pieces and words (lists of pieces)"""
    items: List[object] = []
    word: List[Fragment] = []
    for fragment in fragments:
        for token in _TOKEN.findall(fragment.text):
            if token == "\n" or token.isspace():
                if word:
                    items.append(word)
                    word = []
                items.append("\n" if token == "\n" else Fragment(token, fragment.style))
            else:
                word.append(Fragment(token, fragment.style))
    if word:
        items.append(word)
    return items


def _split_word(word: List[Fragment], max_width: float) -> List[List[Fragment]]:
    """Split an over-long word into chunks that each fit max_width"""
    chunks: List[List[Fragment]] = []
    chunk: List[Fragment] = []
    width = 0.0
    for piece in word:
        for char in piece.text:
            char_width = piece.style.width_of(char)
            if chunk and width + char_width > max_width:
                chunks.append(chunk)
                chunk, width = [], 0.0
            chunk.append(Fragment(char, piece.style))
            width += char_width
    if chunk:
        chunks.append(chunk)
    return chunks


def wrap_fragments(fragments: Sequence[Fragment], max_width: float) -> List[WrappedLine]:
    """
    Greedy word-wrap.

    Args:
        fragments: Styled runs in reading order (must not be empty)
        max_width: Available line width in points

    Returns:
        At least one WrappedLine
    """
    if not fragments:
        raise ValueError("wrap_fragments needs at least one fragment")

    fallback = fragments[0].style
    lines: List[WrappedLine] = []
    current: List[Fragment] = []
    pending: List[Fragment] = []
    width = 0.0
    paragraph_start = True

    def flush(hard: bool):
        merged = _merge(current)
        lines.append(WrappedLine(
            fragments=merged,
            width=sum(piece.width for piece in merged),
            fallback=current[-1].style if current else fallback,
            hard_break=hard,
        ))

    for item in _tokenize(fragments):
        if item == "\n":
            flush(hard=True)
            current, pending, width = [], [], 0.0
            paragraph_start = True
            continue

        if isinstance(item, Fragment):
            # Leading spaces are kept only at the start of a paragraph
            if current or paragraph_start:
                pending.append(item)
            continue

        word_width = sum(piece.width for piece in item)
        space_width = sum(piece.width for piece in pending)

        if current and width + space_width + word_width > max_width:
            flush(hard=False)
            current, pending, width = [], [], 0.0
            space_width = 0.0

        if not current and space_width + word_width > max_width:
            chunks = _split_word(item, max_width)
            for chunk in chunks[:-1]:
                current = pending + chunk
                flush(hard=False)
                pending = []
            current = list(chunks[-1])
            width = sum(piece.width for piece in current)
            pending = []
            paragraph_start = False
            continue

        current.extend(pending)
        current.extend(item)
        width += space_width + word_width
        pending = []
        paragraph_start = False

    if current or not lines or pending:
        flush(hard=True)
    elif not lines[-1].hard_break:
        last = lines[-1]
        lines[-1] = WrappedLine(last.fragments, last.width, last.fallback, True)

    return lines


def align_line(line: WrappedLine, x: float, width: float, alignment: Alignment) -> Tuple[float, float]:
    """
    Horizontal placement of a wrapped line.

    Returns:
        (start x, extra word spacing)
    """
    slack = max(width - line.width, 0.0)
    if alignment == Alignment.CENTER:
        return x + slack / 2, 0.0
    if alignment == Alignment.RIGHT:
        return x + slack, 0.0
    if alignment == Alignment.JUSTIFY and not line.hard_break and line.space_count:
        return x, slack / line.space_count
    return x, 0.0
