"""Delimiter detection and tokenization for inbound X12 documents.

The ISA segment is fixed width (106 characters) in conformant files, but
the tokenizer does not rely on column positions: the element separator is
ISA's fourth character and everything else is read by splitting on it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .errors import DelimiterError
from .segments import Delimiters

logger = logging.getLogger(__name__)

ISA_LENGTH = 106
ISA_ELEMENT_COUNT = 16

_LINE_BREAKS = ("\n", "\r")


@dataclass
class X12Segment:
    """One parsed segment.

    ``elements`` holds the data elements after the segment id, so
    ``get(1)`` is the X12 element numbered 01.
    """

    id: str
    elements: list[str] = field(default_factory=list)
    position: int = 0

    @classmethod
    def parse(cls, text: str, element_sep: str = "*", position: int = 0) -> "X12Segment":
        """Parse segment text (terminator already removed)."""
        parts = text.split(element_sep)
        return cls(id=parts[0].strip(), elements=parts[1:], position=position)

    def get(self, index: int, default: str = "") -> str:
        """Get X12 element ``index`` (1-based); 0 returns the segment id."""
        if index == 0:
            return self.id
        if 1 <= index <= len(self.elements):
            return self.elements[index - 1]
        return default

    def __len__(self) -> int:
        return len(self.elements) + 1


@dataclass
class TokenizedDocument:
    """Segments of a document plus the delimiters they were split with."""

    segments: list[X12Segment]
    delimiters: Delimiters

    def find(self, segment_id: str) -> X12Segment | None:
        """Return the first segment with ``segment_id``, if any."""
        for segment in self.segments:
            if segment.id == segment_id:
                return segment
        return None

    def has(self, segment_id: str) -> bool:
        return self.find(segment_id) is not None


def envelope_pairs(
    segments: list[X12Segment], header_id: str, trailer_id: str
) -> tuple[list[tuple[int, int]], list[int]]:
    """Pair each header segment with the next trailer.

    A header reached again before its trailer leaves the earlier one
    unpaired.

    Returns:
        (pairs, unpaired): index pairs ``(header, trailer)`` and the indexes
        of headers with no trailer.
    """
    pairs: list[tuple[int, int]] = []
    unpaired: list[int] = []
    open_header: int | None = None
    for i, segment in enumerate(segments):
        if segment.id == header_id:
            if open_header is not None:
                unpaired.append(open_header)
            open_header = i
        elif segment.id == trailer_id and open_header is not None:
            pairs.append((open_header, i))
            open_header = None
    if open_header is not None:
        unpaired.append(open_header)
    return pairs, unpaired


def _prepare(raw: str) -> str:
    return raw.lstrip("\ufeff").strip()


def detect_delimiters(raw: str) -> Delimiters:
    """Detect the delimiter set from the interchange header.

    Args:
        raw: Document text starting with ``ISA``

    Returns:
        The detected delimiters. A line-terminated file reports ``"\\n"``
        as its segment terminator.

    Raises:
        DelimiterError: If the text does not begin with ISA, is shorter than
            the ISA header, or the header lacks its 16 elements.
    """
    text = _prepare(raw)
    if not text.startswith("ISA"):
        raise DelimiterError("Content does not begin with an ISA segment")
    if len(text) < ISA_LENGTH:
        raise DelimiterError(
            f"Content is shorter than the {ISA_LENGTH}-character ISA header"
        )

    element = text[3]
    parts = text.split(element)
    if len(parts) <= ISA_ELEMENT_COUNT or not parts[ISA_ELEMENT_COUNT]:
        raise DelimiterError("ISA header does not contain 16 elements")

    isa16 = parts[ISA_ELEMENT_COUNT]
    component = isa16[0]
    trailing = isa16[1:].lstrip(" ")
    if not trailing:
        raise DelimiterError("No segment terminator follows the ISA header")
    segment = trailing[0]
    if segment in _LINE_BREAKS:
        segment = "\n"

    # ISA11 is the repetition separator from 00501 on
    isa11 = parts[11] if len(parts) > 11 else ""
    repetition = isa11 if len(isa11) == 1 and not isa11.isalnum() else "^"

    if len({element, component, segment}) < 3:
        raise DelimiterError(
            f"Delimiters are not distinct: element={element!r} "
            f"component={component!r} segment={segment!r}"
        )

    delimiters = Delimiters(
        element=element, component=component, segment=segment, repetition=repetition
    )
    logger.debug(f"Detected delimiters: {delimiters}")
    return delimiters


def tokenize(raw: str) -> TokenizedDocument:
    """Split a document into segments.

    Line breaks are normalized first. When the terminator is a printable
    character any remaining line breaks are treated as 80-column wrapping
    and removed; a line-terminated file is split on the line breaks.

    Raises:
        DelimiterError: If the delimiters cannot be detected.
    """
    text = _prepare(raw)
    delimiters = detect_delimiters(text)
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    segments: list[X12Segment] = []
    for chunk in text.split(delimiters.segment):
        chunk = chunk.strip()
        if delimiters.segment != "\n":
            chunk = chunk.replace("\n", "")
        if not chunk:
            continue
        segments.append(
            X12Segment.parse(chunk, delimiters.element, position=len(segments))
        )

    return TokenizedDocument(segments=segments, delimiters=delimiters)
