"""Document serializer -- MinutesDocument back to delimited context text.

The output is what follow-up prompts embed as "current sections". The header
metadata is not part of the conversational state and is omitted; the
synthesized header section (item 0 after start) is an ordinary item and is
included.
"""

from __future__ import annotations

from src.studio.minutes.protocol import Marker, encode_block
from src.studio.minutes.schemas import MinutesDocument

BLOCK_SEPARATOR = "\n\n"


def serialize_context(document: MinutesDocument) -> str:
    """Render items and extra as delimited text, inverse of the body parse."""
    text = BLOCK_SEPARATOR.join(encode_block(Marker.ITEM, item) for item in document.items)
    if document.extra:
        text += BLOCK_SEPARATOR + encode_block(Marker.EXTRA, document.extra)
    return text
