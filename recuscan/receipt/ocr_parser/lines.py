"""Turn raw OCR text into normalized receipt lines."""

import re
from collections.abc import Sequence

from recuscan.domain.receipt import NormalizedLine, NoTextRecognized

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_lines(
    text: str,
    line_confidences: Sequence[float | None] | None = None,
) -> list[NormalizedLine]:
    """
    Split OCR text into trimmed, whitespace-collapsed lines.

    Lines that are empty after trimming are dropped; the remaining lines keep
    their raw index, so index gaps mark where blank lines were.

    Args:
        text: Full OCR text for one receipt
        line_confidences: Optional OCR confidence per raw line

    Raises:
        NoTextRecognized: if no line survives normalization
    """
    lines: list[NormalizedLine] = []
    for index, raw_line in enumerate(_LINE_BREAK_RE.split(text or "")):
        collapsed = _WHITESPACE_RE.sub(" ", raw_line).strip()
        if not collapsed:
            continue
        confidence = None
        if line_confidences is not None and index < len(line_confidences):
            confidence = line_confidences[index]
        lines.append(NormalizedLine(index=index, text=collapsed, ocr_confidence=confidence))

    if not lines:
        raise NoTextRecognized()
    return lines
