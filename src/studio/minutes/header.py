"""Header section synthesis from the configurable template."""

from __future__ import annotations

from src.studio.minutes.schemas import MeetingHeader


def render_header_section(template: str, header: MeetingHeader | None) -> str:
    """Substitute header values into ``template``.

    Each placeholder token (``<num_ata>``, ``<dia_reunião>``,
    ``<mês_reunião_por_extenso>``, ``<ano_reunião>``) is replaced by the
    extracted value; unresolved fields, or a missing header, leave the token
    in place.
    """
    text = template
    for token, value in (header or MeetingHeader()).placeholder_values().items():
        text = text.replace(token, value)
    return text
