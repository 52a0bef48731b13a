"""Unit tests for the delimiter protocol, parser, serializer and header synthesis.

Covers marker recognition, header extraction and splicing, the extra-section
first-occurrence rule, zero-item detection, whitespace tolerance, and the
serialize/parse round-trip.
"""

from __future__ import annotations

import pytest

from src.studio.errors import GenerationFailure, ParseContractViolation
from src.studio.minutes.header import render_header_section
from src.studio.minutes.parser import (
    parse_document,
    parse_header_block,
    split_body,
    split_header,
)
from src.studio.minutes.protocol import Marker, contains_marker, first_marker, scan_markers
from src.studio.minutes.schemas import (
    DAY_PLACEHOLDER,
    MONTH_NAME_PLACEHOLDER,
    RECORD_NUMBER_PLACEHOLDER,
    YEAR_PLACEHOLDER,
    MeetingHeader,
    MinutesDocument,
)
from src.studio.minutes.serializer import serialize_context


# ── Protocol ─────────────────────────────────────────────────────────────────


class TestProtocol:
    def test_markers_found_in_order(self):
        text = "<<<ITEM>>>\nA\n<<<EXTRA_PAUTA>>>\nB\n<<<ITEM>>>\nC"
        hits = list(scan_markers(text))
        assert [h.marker for h in hits] == [Marker.ITEM, Marker.EXTRA, Marker.ITEM]

    def test_marker_inside_a_line_is_not_a_marker(self):
        text = "see <<<ITEM>>> inline\nand **<<<EXTRA_PAUTA>>>**"
        assert first_marker(text) is None
        assert not contains_marker(text)

    def test_marker_line_tolerates_surrounding_spaces(self):
        text = "intro\n   <<<ITEM>>>\t\nbody"
        hit = first_marker(text, Marker.ITEM)
        assert hit is not None
        assert text[hit.end:].strip() == "body"

    def test_marker_line_with_crlf(self):
        text = "<<<ITEM>>>\r\nAlpha\r\n"
        hit = first_marker(text, Marker.ITEM)
        assert hit is not None

    def test_scan_filters_markers(self):
        text = "<<<CABECALHO>>>\nx\n<<<ITEM>>>\ny"
        hits = list(scan_markers(text, Marker.HEADER))
        assert len(hits) == 1
        assert hits[0].marker is Marker.HEADER


# ── Parser Scenarios ─────────────────────────────────────────────────────────


class TestParseDocument:
    def test_items_and_extra(self):
        raw = "<<<ITEM>>>\nAlpha\n\n<<<ITEM>>>\nBeta\n\n<<<EXTRA_PAUTA>>>\nGamma"
        document = parse_document(raw)
        assert document.items == ("Alpha", "Beta")
        assert document.extra == "Gamma"
        assert document.header is None

    def test_header_extraction(self):
        raw = "<<<CABECALHO>>>\nnum_ata: 7\n<<<ITEM>>>\nFoo"
        document = parse_document(raw)
        assert document.items == ("Foo",)
        assert document.header == MeetingHeader(
            record_number="7",
            day=DAY_PLACEHOLDER,
            month_name=MONTH_NAME_PLACEHOLDER,
            year=YEAR_PLACEHOLDER,
        )

    def test_no_item_marker_is_contract_violation(self):
        with pytest.raises(ParseContractViolation) as exc_info:
            parse_document("Sorry, I cannot process this video.")
        assert "Sorry" in exc_info.value.response_preview

    def test_contract_violation_is_generation_failure(self):
        with pytest.raises(GenerationFailure):
            parse_document("")

    @pytest.mark.parametrize(
        "raw",
        [
            "<<<ITEM>>>\n\n<<<ITEM>>>\n   \n",
            "<<<ITEM>>>",
            "<<<CABECALHO>>>\nnum_ata: 1\n",
            "<<<EXTRA_PAUTA>>>\nonly extra",
            "<<<CABECALHO>>>\nnum_ata: 1\n<<<EXTRA_PAUTA>>>\nonly extra",
        ],
    )
    def test_only_empty_or_missing_items_is_contract_violation(self, raw):
        with pytest.raises(ParseContractViolation):
            parse_document(raw)

    def test_no_extra_marker_means_no_extra(self):
        raw = "<<<CABECALHO>>>\nnum_ata: 3\n\n<<<ITEM>>>\nOne\n<<<ITEM>>>\nTwo"
        document = parse_document(raw)
        assert document.items == ("One", "Two")
        assert document.extra is None
        assert document.header.record_number == "3"

    def test_empty_extra_counts_as_absent(self):
        document = parse_document("<<<ITEM>>>\nOne\n<<<EXTRA_PAUTA>>>\n   \n")
        assert document.extra is None

    def test_leading_text_before_first_item_is_discarded(self):
        document = parse_document("Aqui está a ata:\n<<<ITEM>>>\nOne")
        assert document.items == ("One",)

    def test_extra_marker_first_occurrence_only(self):
        raw = (
            "<<<ITEM>>>\nOne\n"
            "<<<EXTRA_PAUTA>>>\nFirst extra\n"
            "<<<EXTRA_PAUTA>>>\nSecond extra"
        )
        document = parse_document(raw)
        assert document.items == ("One",)
        assert document.extra == "First extra\n<<<EXTRA_PAUTA>>>\nSecond extra"

    def test_extra_before_items_is_recovered(self):
        raw = "<<<EXTRA_PAUTA>>>\nSide topic\n<<<ITEM>>>\nOne\n<<<ITEM>>>\nTwo"
        document = parse_document(raw)
        assert document.extra == "Side topic"
        assert document.items == ("One", "Two")

    def test_second_extra_after_item_stays_in_extra(self):
        raw = "<<<ITEM>>>\nA\n<<<EXTRA_PAUTA>>>\nX\n<<<ITEM>>>\nB\n<<<EXTRA_PAUTA>>>\nY"
        document = parse_document(raw)

        assert document.items == ("A", "B")
        assert document.extra == "X\n<<<EXTRA_PAUTA>>>\nY"
        assert not any(contains_marker(item) for item in document.items)

        reparsed = parse_document(serialize_context(document))
        assert reparsed.items == document.items
        assert reparsed.extra == document.extra

    def test_items_after_second_extra_are_kept(self):
        raw = (
            "<<<EXTRA_PAUTA>>>\nX\n<<<ITEM>>>\nA\n"
            "<<<EXTRA_PAUTA>>>\nY\n<<<ITEM>>>\nB"
        )
        document = parse_document(raw)

        assert document.items == ("A", "B")
        assert document.extra == "X\n<<<EXTRA_PAUTA>>>\nY"
        assert parse_document(serialize_context(document)) == document

    def test_item_order_preserved_and_not_deduplicated(self):
        raw = "<<<ITEM>>>\nSame\n<<<ITEM>>>\nOther\n<<<ITEM>>>\nSame"
        assert parse_document(raw).items == ("Same", "Other", "Same")

    def test_item_text_keeps_inner_markdown(self):
        body = "**Nome:** Item\n**Status:** abordado\n\n**Resumo:** linha 1\nlinha 2"
        document = parse_document(f"<<<ITEM>>>\n{body}\n")
        assert document.items == (body,)

    def test_whitespace_around_markers_does_not_change_items(self):
        compact = "<<<ITEM>>>\nAlpha\n<<<ITEM>>>\nBeta\n<<<EXTRA_PAUTA>>>\nGamma"
        padded = (
            "\n\n   <<<ITEM>>>   \n\n  Alpha  \n\n\n"
            "\t<<<ITEM>>>\n\nBeta\n\n"
            "  <<<EXTRA_PAUTA>>>\n\n Gamma \n\n"
        )
        a = parse_document(compact)
        b = parse_document(padded)
        assert a.items == b.items
        assert a.extra == b.extra


# ── Header Block ─────────────────────────────────────────────────────────────


class TestHeader:
    def test_all_fields(self):
        header = parse_header_block(
            "num_ata: 42\ndia_reuniao: 19\nmes_reuniao_por_extenso: fevereiro\nano_reuniao: 2026"
        )
        assert header == MeetingHeader(
            record_number="42", day="19", month_name="fevereiro", year="2026"
        )
        assert header.is_resolved

    def test_keys_case_and_accent_insensitive(self):
        header = parse_header_block("NUM_ATA: 5\nDia_Reunião:  3 \nMês_Reunião_Por_Extenso: março")
        assert header.record_number == "5"
        assert header.day == "3"
        assert header.month_name == "março"
        assert header.year == YEAR_PLACEHOLDER

    def test_unknown_keys_and_colonless_lines_ignored(self):
        header = parse_header_block("local: Brasília\nsem dois pontos\nano_reuniao: 2025")
        assert header.year == "2025"
        assert header.record_number == RECORD_NUMBER_PLACEHOLDER

    def test_empty_value_keeps_placeholder(self):
        header = parse_header_block("num_ata:\ndia_reuniao:   ")
        assert header.record_number == RECORD_NUMBER_PLACEHOLDER
        assert header.day == DAY_PLACEHOLDER
        assert not header.is_resolved

    def test_value_may_contain_colon(self):
        assert parse_header_block("num_ata: 12: extraordinária").record_number == "12: extraordinária"

    def test_header_block_is_spliced_not_truncated(self):
        text = "<<<CABECALHO>>>\nnum_ata: 9\n<<<ITEM>>>\nOne\n<<<EXTRA_PAUTA>>>\nX"
        header, remaining = split_header(text)
        assert header.record_number == "9"
        assert remaining == "<<<ITEM>>>\nOne\n<<<EXTRA_PAUTA>>>\nX"

    def test_header_after_items_is_spliced(self):
        text = "<<<ITEM>>>\nOne\n<<<CABECALHO>>>\nnum_ata: 9\n<<<ITEM>>>\nTwo"
        document = parse_document(text)
        assert document.header.record_number == "9"
        assert document.items == ("One", "Two")

    def test_no_header_marker(self):
        header, remaining = split_header("<<<ITEM>>>\nOne")
        assert header is None
        assert remaining == "<<<ITEM>>>\nOne"

    def test_render_header_section_substitutes_values(self):
        template = "ATA <num_ata> - <dia_reunião>/<mês_reunião_por_extenso>/<ano_reunião>"
        header = MeetingHeader(record_number="7", day="2", month_name="maio", year="2025")
        assert render_header_section(template, header) == "ATA 7 - 2/maio/2025"

    def test_render_header_section_keeps_placeholders_without_header(self):
        template = "ATA <num_ata> de <ano_reunião>"
        assert render_header_section(template, None) == template

    def test_render_header_section_replaces_every_occurrence(self):
        template = "<num_ata> e <num_ata>"
        header = MeetingHeader(record_number="3")
        assert render_header_section(template, header) == "3 e 3"


# ── Serializer ───────────────────────────────────────────────────────────────


class TestSerializer:
    def test_canonical_format(self):
        document = MinutesDocument(items=("Alpha", "Beta"), extra="Gamma")
        assert serialize_context(document) == (
            "<<<ITEM>>>\nAlpha\n\n<<<ITEM>>>\nBeta\n\n<<<EXTRA_PAUTA>>>\nGamma"
        )

    def test_header_is_omitted(self):
        document = MinutesDocument(
            header=MeetingHeader(record_number="1"), items=("Alpha",)
        )
        text = serialize_context(document)
        assert Marker.HEADER.value not in text
        assert text == "<<<ITEM>>>\nAlpha"

    @pytest.mark.parametrize(
        "items, extra",
        [
            (("Alpha",), None),
            (("Alpha", "Beta", "Gamma"), "Fora da pauta"),
            (("# Título\n\nParágrafo com: dois pontos", "**Nome:** X\n\n- a\n- b"), None),
            (("Only",), "linha 1\n\nlinha 2"),
        ],
    )
    def test_round_trip(self, items, extra):
        document = MinutesDocument(items=items, extra=extra)
        parsed = parse_document(serialize_context(document))
        assert parsed.items == document.items
        assert parsed.extra == document.extra

    def test_split_body_inverse_of_serializer(self):
        document = MinutesDocument(items=("A", "B"), extra="C")
        items, extra = split_body(serialize_context(document))
        assert items == ["A", "B"]
        assert extra == "C"


# ── Schema Invariants ────────────────────────────────────────────────────────


class TestSchemas:
    def test_document_is_immutable(self):
        document = MinutesDocument(items=("A",))
        with pytest.raises(Exception):
            document.items = ("B",)

    def test_extra_is_trimmed_or_none(self):
        assert MinutesDocument(items=("A",), extra="  x  ").extra == "x"
        assert MinutesDocument(items=("A",), extra="   ").extra is None

    def test_with_items_returns_new_snapshot(self):
        original = MinutesDocument(items=("A",), extra="E")
        updated = original.with_items(["H", "A"])
        assert original.items == ("A",)
        assert updated.items == ("H", "A")
        assert updated.extra == "E"

    def test_header_blank_fields_become_placeholders(self):
        header = MeetingHeader(record_number="", day=None)
        assert header.record_number == RECORD_NUMBER_PLACEHOLDER
        assert header.day == DAY_PLACEHOLDER
