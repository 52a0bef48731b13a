"""Document parser -- raw model reply to MinutesDocument.

Two-pass scanner over the delimiter protocol:

1. Header pass: locate the header block (from the header marker to the first
   item/extra marker after it), read its ``key: value`` lines, and splice the
   block out of the text. Text after the block's terminating marker is kept.
2. Body pass: walk item/extra markers in order. The first extra marker opens
   the extra region; later extra markers are literal content of the extra,
   marker line included, even when an item opened in between. Item markers
   open items (and close the extra region). Text before the first marker is
   discarded.

A reply without at least one non-empty item violates the format contract and
raises ParseContractViolation.
"""

from __future__ import annotations

import unicodedata

import structlog

from src.studio.errors import ParseContractViolation
from src.studio.minutes.protocol import Marker, first_marker, scan_markers
from src.studio.minutes.schemas import MeetingHeader, MinutesDocument

logger = structlog.get_logger(__name__)

# Normalized header key -> MeetingHeader field
HEADER_KEYS: dict[str, str] = {
    "num_ata": "record_number",
    "dia_reuniao": "day",
    "mes_reuniao_por_extenso": "month_name",
    "ano_reuniao": "year",
}

PREVIEW_CHARS = 200


def parse_document(raw: str) -> MinutesDocument:
    """Parse a model reply into a MinutesDocument.

    Args:
        raw: Raw text returned by the generation step.

    Returns:
        MinutesDocument with header (if a header block was present), the
        ordered items, and the extra section (if present and non-empty).

    Raises:
        ParseContractViolation: If no item survives parsing.
    """
    header, body = split_header(raw or "")
    items, extra = split_body(body)

    if not items:
        logger.warning(
            "minutes.parse_no_items",
            response_chars=len(raw or ""),
            has_header=header is not None,
            has_extra=extra is not None,
        )
        raise ParseContractViolation(
            "Model reply contains no sections in the expected format",
            response_preview=(raw or "")[:PREVIEW_CHARS],
        )

    return MinutesDocument(header=header, items=tuple(items), extra=extra)


def split_header(text: str) -> tuple[MeetingHeader | None, str]:
    """Extract the header block and return it with the remaining text.

    Returns:
        Tuple of (header, text_without_header_block). Header is None when no
        header marker is present.
    """
    hit = first_marker(text, Marker.HEADER)
    if hit is None:
        return None, text

    terminator = first_marker(text, Marker.ITEM, Marker.EXTRA, start=hit.end)
    block_end = terminator.start if terminator else len(text)
    header = parse_header_block(text[hit.end:block_end])

    remaining = text[: hit.start]
    if terminator is not None:
        remaining += text[terminator.start:]
    return header, remaining


def parse_header_block(block: str) -> MeetingHeader:
    """Read the recognized ``key: value`` lines of a header block.

    Keys are matched case-insensitively with accents and inner spaces
    normalized; unknown keys and lines without a colon are ignored.
    """
    values: dict[str, str] = {}
    for line in block.splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        field = HEADER_KEYS.get(_normalize_key(key))
        if field is not None:
            values[field] = value.strip()
    return MeetingHeader(**values)


def split_body(text: str) -> tuple[list[str], str | None]:
    """Split header-free text into ordered items and the optional extra.

    Returns:
        Tuple of (items, extra). Items are trimmed and non-empty; extra is
        None when absent or empty after trimming.
    """
    items: list[str] = []
    extra_parts: list[str] = []
    extra_seen = False

    current: Marker | None = None
    segment_start = 0

    def close(end: int) -> None:
        piece = text[segment_start:end].strip()
        if current is Marker.ITEM:
            if piece:
                items.append(piece)
        elif current is Marker.EXTRA:
            extra_parts.append(piece)
        elif piece:
            logger.debug("minutes.parse_leading_text_discarded", chars=len(piece))

    for hit in scan_markers(text, Marker.ITEM, Marker.EXTRA):
        if hit.marker is Marker.EXTRA and extra_seen:
            # Later extra markers are literal extra content, never item text.
            if current is Marker.ITEM:
                close(hit.start)
                current = Marker.EXTRA
                segment_start = hit.start
            continue
        close(hit.start)
        if hit.marker is Marker.EXTRA:
            extra_seen = True
        current = hit.marker
        segment_start = hit.end
    close(len(text))

    extra = "\n".join(part for part in extra_parts if part)
    return items, extra or None


def _normalize_key(key: str) -> str:
    decomposed = unicodedata.normalize("NFKD", key.strip().lower())
    ascii_key = "".join(c for c in decomposed if not unicodedata.combining(c))
    return "_".join(ascii_key.split())
