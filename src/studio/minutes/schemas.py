"""Pydantic v2 schemas for the minutes document.

A MinutesDocument is an immutable snapshot: parsing a model reply creates one,
every successful adjust replaces it wholesale, and accept writes it out.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ── Placeholders ─────────────────────────────────────────────────────────────

RECORD_NUMBER_PLACEHOLDER = "<num_ata>"
DAY_PLACEHOLDER = "<dia_reunião>"
MONTH_NAME_PLACEHOLDER = "<mês_reunião_por_extenso>"
YEAR_PLACEHOLDER = "<ano_reunião>"


class SessionStatus(str, Enum):
    """Derived lifecycle state of a minutes session."""

    EMPTY = "empty"
    READY = "ready"


# ── Document Models ──────────────────────────────────────────────────────────


class MeetingHeader(BaseModel):
    """Meeting-level metadata extracted from the model reply.

    Unresolved fields keep their placeholder token; empty strings are never
    stored.
    """

    model_config = ConfigDict(frozen=True)

    record_number: str = RECORD_NUMBER_PLACEHOLDER
    day: str = DAY_PLACEHOLDER
    month_name: str = MONTH_NAME_PLACEHOLDER
    year: str = YEAR_PLACEHOLDER

    @field_validator("record_number", "day", "month_name", "year", mode="before")
    @classmethod
    def _blank_to_placeholder(cls, value, info):
        if value is None or not str(value).strip():
            return PLACEHOLDERS[info.field_name]
        return str(value).strip()

    def placeholder_values(self) -> dict[str, str]:
        """Map each template placeholder token to this header's value."""
        return {
            RECORD_NUMBER_PLACEHOLDER: self.record_number,
            DAY_PLACEHOLDER: self.day,
            MONTH_NAME_PLACEHOLDER: self.month_name,
            YEAR_PLACEHOLDER: self.year,
        }

    @property
    def is_resolved(self) -> bool:
        return all(
            value != PLACEHOLDERS[name]
            for name, value in self.model_dump().items()
        )


PLACEHOLDERS: dict[str, str] = {
    "record_number": RECORD_NUMBER_PLACEHOLDER,
    "day": DAY_PLACEHOLDER,
    "month_name": MONTH_NAME_PLACEHOLDER,
    "year": YEAR_PLACEHOLDER,
}


class MinutesDocument(BaseModel):
    """Structured minutes: optional header, ordered items, optional extra.

    Items are opaque Markdown blocks, one per agenda topic, kept in the order
    the model produced them. ``extra`` holds discussions outside the agenda.
    """

    model_config = ConfigDict(frozen=True)

    header: MeetingHeader | None = None
    items: tuple[str, ...] = Field(default_factory=tuple)
    extra: str | None = None

    @field_validator("extra", mode="before")
    @classmethod
    def _normalize_extra(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    def with_items(self, items: list[str] | tuple[str, ...]) -> MinutesDocument:
        """Return a new snapshot with ``items`` replaced."""
        return self.model_copy(update={"items": tuple(items)})
