"""Delimiter protocol for the minutes text format.

The model is asked to answer with three kinds of blocks, each opened by a
marker that sits alone on its own line:

    <<<CABECALHO>>>    header metadata (``key: value`` lines)
    <<<ITEM>>>         one agenda item
    <<<EXTRA_PAUTA>>>  discussions outside the agenda (optional, at most one)

Markers are recognized only as whole-line tokens; surrounding spaces or tabs
on the marker line are tolerated. Block text must never contain a marker
literal.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class Marker(str, Enum):
    HEADER = "<<<CABECALHO>>>"
    ITEM = "<<<ITEM>>>"
    EXTRA = "<<<EXTRA_PAUTA>>>"


_MARKER_LINE = re.compile(
    r"^[ \t]*(" + "|".join(re.escape(m.value) for m in Marker) + r")[ \t]*\r?$",
    re.MULTILINE,
)


@dataclass(frozen=True)
class MarkerHit:
    """A marker occurrence: ``start``/``end`` delimit the marker line."""

    marker: Marker
    start: int
    end: int


def scan_markers(text: str, *markers: Marker, start: int = 0) -> Iterator[MarkerHit]:
    """Yield whole-line marker occurrences in text order.

    Args:
        text: Text to scan.
        *markers: Markers to report. All markers when omitted.
        start: Offset to start scanning from.
    """
    wanted = set(markers) if markers else set(Marker)
    for match in _MARKER_LINE.finditer(text, start):
        marker = Marker(match.group(1))
        if marker in wanted:
            yield MarkerHit(marker=marker, start=match.start(), end=match.end())


def first_marker(text: str, *markers: Marker, start: int = 0) -> MarkerHit | None:
    """Return the first occurrence of any of ``markers`` at or after ``start``."""
    return next(scan_markers(text, *markers, start=start), None)


def contains_marker(text: str) -> bool:
    """Whether ``text`` holds a marker line (which would break the format)."""
    return first_marker(text) is not None


def encode_block(marker: Marker, body: str) -> str:
    """Render one block: the marker line followed by its body."""
    return f"{marker.value}\n{body}"
