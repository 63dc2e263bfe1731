"""
Line normalization for OCR text.

Every extractor works on the same tuple of Line objects. The index is the
line's position after blank lines are dropped and is used as a recency
signal when scoring.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple, Union


@dataclass(frozen=True)
class Line:
    """A trimmed, non-empty line of receipt text."""
    index: int
    text: str


def normalize_lines(text: str) -> Tuple[Line, ...]:
    """
    Split raw OCR text into trimmed, non-empty, 0-indexed lines.

    Args:
        text: Raw text as produced by the OCR step

    Returns:
        Tuple of Line in reading order

    Examples:
        >>> normalize_lines("  Shop \\n\\n Total 5.00")
        (Line(index=0, text='Shop'), Line(index=1, text='Total 5.00'))
    """
    stripped = (raw.strip() for raw in text.splitlines())
    return tuple(
        Line(index=i, text=line)
        for i, line in enumerate(line for line in stripped if line)
    )


def as_lines(lines: Iterable[Union[Line, str]]) -> Tuple[Line, ...]:
    """
    Accept either normalized lines or plain strings.

    Plain strings are trimmed, blanks dropped and re-indexed, exactly as
    normalize_lines would do for the joined text.
    """
    lines = tuple(lines)
    if all(isinstance(line, Line) for line in lines):
        return lines
    return normalize_lines("\n".join(
        line.text if isinstance(line, Line) else line for line in lines
    ))
