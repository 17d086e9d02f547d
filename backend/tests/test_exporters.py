"""
Tests for the export pipeline: encoders, export operation, delivery sinks.

Run with:
    cd backend && python -m pytest tests/test_exporters.py -v

Groups:
    A) CSV      — escaping rule, fixed 19-column rows, nested JSON cells
    B) Markdown — per-variant bodies, premium markers, separators
    C) JSON     — stable pretty-printing, camelCase keys
    D) Export   — subset scope, empty guards, naming, sinks
"""

import csv
import io
import json
import os
import sys
from datetime import timezone
from typing import List, Tuple

import pytest

# ── Ensure backend is importable ──
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from delivery import DirectorySink, DownloadSink
from exporters import (
    CSV_HEADERS,
    FORMATS,
    ExportFormat,
    artifact_name,
    decode_json,
    encode_csv,
    encode_json,
    encode_markdown,
    escape_csv_cell,
    record_to_markdown,
)
from exporters.markdown_encoder import RECORD_SEPARATOR, format_timestamp
from exporters.service import export, export_subset
from knowledge import (
    SEED_RECORDS,
    AnalysisResult,
    BusinessArea,
    GroundedAnswer,
    ProblemAnalysis,
    SelectionTracker,
    Solution,
    SolutionRecord,
    SolutionStep,
    Source,
)
from knowledge.storage import InMemoryStorage, SolutionStore


# ============================================================================
# Fixtures — Shared records and helpers
# ============================================================================


def analysis_record(record_id: str = "sol-a") -> SolutionRecord:
    return SolutionRecord(
        id=record_id,
        timestamp="2024-05-20T10:00:00.000Z",
        company_type="Bakery chain",
        niche="Artisan bread",
        problem_description='Weekend sales are flat, "really" flat',
        business_area=BusinessArea.SALES,
        result=AnalysisResult(
            problem_analysis=ProblemAnalysis(
                identified_problem="No weekend promotion",
                impact="Lost revenue",
            ),
            short_term_solution=Solution(
                title="Weekend bundles",
                summary="Bundle bread with coffee",
                steps=[
                    SolutionStep(title="Price it", description="Set a bundle price"),
                    SolutionStep(title="Announce it", description="Post in store and online"),
                ],
            ),
            long_term_solution=Solution(
                title="Loyalty app",
                summary="Reward repeat visits",
                steps=[SolutionStep(title="Pick a vendor", description="Compare three platforms")],
                is_premium=True,
            ),
        ),
    )


def grounded_record(record_id: str = "sol-g", sources=None) -> SolutionRecord:
    return SolutionRecord(
        id=record_id,
        timestamp="2024-05-21T08:30:00.000Z",
        company_type="Courier startup",
        niche="Same-day delivery",
        problem_description="Drivers miss delivery windows\nespecially on Fridays",
        business_area=BusinessArea.LOGISTICS,
        result=GroundedAnswer(
            answer="Use route optimization.",
            sources=[Source(title="Foo", uri="http://x")] if sources is None else sources,
        ),
    )


def parse_csv(text: str) -> List[List[str]]:
    return list(csv.reader(io.StringIO(text)))


class RecordingSink:
    """Sink that remembers what it was handed."""

    def __init__(self):
        self.delivered: List[Tuple[str, str, str]] = []

    def deliver(self, content: str, file_name: str, mime_type: str) -> None:
        self.delivered.append((content, file_name, mime_type))


# ============================================================================
# Group A: CSV
# ============================================================================


class TestCsvEscaping:

    def test_comma_is_quoted(self):
        assert escape_csv_cell("a,b") == '"a,b"'

    def test_quotes_are_doubled(self):
        assert escape_csv_cell('He said "hi"') == '"He said ""hi"""'

    def test_newline_is_quoted(self):
        assert escape_csv_cell("line1\nline2") == '"line1\nline2"'

    def test_plain_value_is_unquoted(self):
        assert escape_csv_cell("plain text") == "plain text"

    def test_carriage_return_alone_is_not_quoted(self):
        assert escape_csv_cell("a\rb") == "a\rb"

    def test_none_is_empty(self):
        assert escape_csv_cell(None) == ""

    def test_booleans(self):
        assert escape_csv_cell(True) == "true"
        assert escape_csv_cell(False) == "false"


class TestCsvEncoder:

    def test_header_row(self):
        text = encode_csv([])
        assert text == ",".join(CSV_HEADERS)
        assert len(CSV_HEADERS) == 19

    def test_every_row_has_19_fields(self):
        text = encode_csv([analysis_record(), grounded_record()])
        rows = parse_csv(text)
        assert len(rows) == 3
        assert all(len(row) == 19 for row in rows)

    def test_no_trailing_newline(self):
        assert not encode_csv([analysis_record()]).endswith("\n")

    def test_analysis_row(self):
        row = dict(zip(CSV_HEADERS, parse_csv(encode_csv([analysis_record()]))[1]))
        assert row["resultType"] == "AnalysisResult"
        assert row["businessArea"] == "sales"
        assert row["problemDescription"] == 'Weekend sales are flat, "really" flat'
        assert row["pa_identifiedProblem"] == "No weekend promotion"
        assert row["st_isPremium"] == "false"
        assert row["lt_isPremium"] == "true"
        assert json.loads(row["st_steps"]) == [
            {"title": "Price it", "description": "Set a bundle price"},
            {"title": "Announce it", "description": "Post in store and online"},
        ]
        assert row["groundedAnswer"] == ""
        assert row["groundedSources"] == ""

    def test_grounded_row(self):
        record = grounded_record(sources=[Source(title="Foo", uri="http://x"), Source(uri="http://y")])
        row = dict(zip(CSV_HEADERS, parse_csv(encode_csv([record]))[1]))
        assert row["resultType"] == "GroundedAnswer"
        assert row["groundedAnswer"] == "Use route optimization."
        assert row["groundedSources"] == '[{"title":"Foo","uri":"http://x"},{"uri":"http://y"}]'
        for header in ("pa_identifiedProblem", "st_title", "st_steps", "st_isPremium", "lt_isPremium"):
            assert row[header] == ""

    def test_raw_line_escaping(self):
        line = encode_csv([analysis_record()]).split("\n")[1]
        assert '"Weekend sales are flat, ""really"" flat"' in line
        assert "sol-a,2024-05-20T10:00:00.000Z,Bakery chain,Artisan bread,sales," in line

    def test_deterministic(self):
        records = [analysis_record(), grounded_record()]
        assert encode_csv(records) == encode_csv(records)


# ============================================================================
# Group B: Markdown
# ============================================================================


class TestMarkdownEncoder:

    def test_analysis_record(self):
        text = record_to_markdown(analysis_record(), tz=timezone.utc)
        lines = text.split("\n")

        assert lines[0] == "# Solution for: Bakery chain - Artisan bread"
        assert "**Date:** 2024-05-20 10:00:00" in lines
        assert "**Area:** sales" in lines
        assert '> Weekend sales are flat, "really" flat' in lines
        assert "**Identified Problem:** No weekend promotion" in lines
        assert "**Business Impact:** Lost revenue" in lines
        assert "### Short-Term Solution: Weekend bundles" in lines
        assert "### Long-Term Solution: Loyalty app **(Premium)**" in lines
        assert "1. **Price it**: Set a bundle price" in lines
        assert "2. **Announce it**: Post in store and online" in lines

    def test_premium_only_when_flagged(self):
        text = record_to_markdown(analysis_record(), tz=timezone.utc)
        assert text.count("(Premium)") == 1

    def test_grounded_record_with_sources(self):
        record = grounded_record(sources=[Source(title="Foo", uri="http://x"), Source(uri="http://y")])
        lines = record_to_markdown(record, tz=timezone.utc).split("\n")
        assert "Use route optimization." in lines
        assert "### Sources" in lines
        assert "- [Foo](http://x)" in lines
        assert "- [Untitled source](http://y)" in lines

    def test_grounded_record_without_sources(self):
        text = record_to_markdown(grounded_record(sources=[]), tz=timezone.utc)
        assert "### Sources" not in text
        assert text.endswith("Use route optimization.")

    def test_multiline_problem_is_fully_quoted(self):
        text = record_to_markdown(grounded_record(), tz=timezone.utc)
        assert "> Drivers miss delivery windows\n> especially on Fridays" in text

    def test_records_joined_in_order(self):
        a, g = analysis_record(), grounded_record()
        text = encode_markdown([g, a], tz=timezone.utc)
        assert text == (
            record_to_markdown(g, tz=timezone.utc)
            + RECORD_SEPARATOR
            + record_to_markdown(a, tz=timezone.utc)
        )
        assert text.index("Courier startup") < text.index("Bakery chain")

    def test_empty_selection_encodes_nothing(self):
        assert encode_markdown([]) == ""

    def test_unparsable_timestamp_is_kept(self):
        assert format_timestamp("yesterday") == "yesterday"

    def test_deterministic(self):
        records = [analysis_record(), grounded_record()]
        assert encode_markdown(records, tz=timezone.utc) == encode_markdown(records, tz=timezone.utc)


# ============================================================================
# Group C: JSON
# ============================================================================


class TestJsonEncoder:

    def test_two_space_indent_and_camel_case(self):
        text = encode_json([grounded_record()])
        assert text.startswith('[\n  {\n    "id": "sol-g",')
        assert '"companyType": "Courier startup"' in text
        assert '"problemDescription"' in text

    def test_all_fields_kept(self):
        data = json.loads(encode_json([analysis_record()]))[0]
        assert list(data) == [
            "id", "timestamp", "companyType", "niche", "problemDescription", "businessArea", "result",
        ]
        assert data["result"]["kind"] == "analysis"
        assert data["result"]["longTermSolution"]["isPremium"] is True

    def test_unset_optional_fields_are_omitted(self):
        record = grounded_record(sources=[Source(title="Foo", uri="http://x"), Source(uri="http://y")])
        analysis, grounded = json.loads(encode_json([analysis_record(), record]))

        assert "isPremium" not in analysis["result"]["shortTermSolution"]
        assert grounded["result"]["sources"] == [
            {"title": "Foo", "uri": "http://x"},
            {"uri": "http://y"},
        ]
        assert "null" not in encode_json(SEED_RECORDS)

    def test_omitted_fields_reload_as_unset(self):
        records = [analysis_record(), grounded_record(sources=[Source(uri="http://y")])]
        parsed = decode_json(encode_json(records))
        assert parsed == records
        assert parsed[0].result.short_term_solution.is_premium is None
        assert parsed[1].result.sources[0].title is None

    def test_non_ascii_preserved(self):
        record = grounded_record().model_copy(update={"niche": "Logística"})
        assert "Logística" in encode_json([record])

    def test_round_trip(self):
        records = [analysis_record(), grounded_record()]
        parsed = [SolutionRecord.model_validate(item) for item in json.loads(encode_json(records))]
        assert parsed == records


# ============================================================================
# Group D: Export operation and sinks
# ============================================================================


@pytest.fixture
def store() -> SolutionStore:
    return SolutionStore(InMemoryStorage(), seed=[grounded_record(), analysis_record()])


class TestExport:

    def test_markdown_exports_selection_only(self, store):
        selection = SelectionTracker()
        selection.toggle("sol-a")
        sink = RecordingSink()

        name = export(ExportFormat.MARKDOWN, store, selection, sink, now=1716199200.0)

        assert name == "exported_solutions_1716199200000.md"
        content, file_name, mime = sink.delivered[0]
        assert file_name == name
        assert mime == "text/markdown;charset=utf-8"
        assert "Bakery chain" in content
        assert "Courier startup" not in content

    def test_markdown_with_empty_selection_is_refused(self, store):
        sink = RecordingSink()
        assert export(ExportFormat.MARKDOWN, store, SelectionTracker(), sink) is None
        assert sink.delivered == []

    def test_stale_selection_counts_as_empty(self, store):
        selection = SelectionTracker()
        selection.toggle("gone")
        sink = RecordingSink()
        assert export(ExportFormat.MARKDOWN, store, selection, sink) is None
        assert sink.delivered == []

    def test_csv_and_json_ignore_selection(self, store):
        selection = SelectionTracker()
        selection.toggle("sol-a")
        assert len(export_subset(ExportFormat.CSV, store, selection)) == 2
        assert len(export_subset(ExportFormat.JSON, store, selection)) == 2

    def test_csv_export(self, store):
        sink = RecordingSink()
        name = export(ExportFormat.CSV, store, SelectionTracker(), sink, now=1.5)
        assert name == "knowledge_base_1500.csv"
        content, _, mime = sink.delivered[0]
        assert mime == "text/csv;charset=utf-8"
        assert content == encode_csv(store.records)

    def test_json_export(self, store):
        sink = RecordingSink()
        export(ExportFormat.JSON, store, SelectionTracker(), sink)
        content, file_name, mime = sink.delivered[0]
        assert mime == "application/json"
        assert file_name.startswith("knowledge_base_") and file_name.endswith(".json")
        assert content == encode_json(store.records)

    def test_empty_collection_exports_nothing(self):
        empty = SolutionStore(InMemoryStorage(), seed=[])
        sink = RecordingSink()
        for fmt in (ExportFormat.CSV, ExportFormat.JSON):
            assert export(fmt, empty, SelectionTracker(), sink) is None
        assert sink.delivered == []

    def test_artifact_names(self):
        assert artifact_name(ExportFormat.JSON, now=2.0) == "knowledge_base_2000.json"
        assert artifact_name(ExportFormat.MARKDOWN, now=2.0) == "exported_solutions_2000.md"

    def test_every_format_is_registered(self):
        assert set(FORMATS) == set(ExportFormat)


class TestSinks:

    def test_directory_sink_writes_file(self, tmp_path):
        sink = DirectorySink(tmp_path / "out")
        sink.deliver("a,b\n1,2", "kb.csv", "text/csv;charset=utf-8")
        assert (tmp_path / "out" / "kb.csv").read_text(encoding="utf-8") == "a,b\n1,2"

    def test_download_sink_builds_attachment(self):
        sink = DownloadSink()
        sink.deliver("# Título", "export.md", "text/markdown;charset=utf-8")
        response = sink.response
        assert response.headers["content-disposition"] == 'attachment; filename="export.md"'
        assert response.headers["content-type"] == "text/markdown;charset=utf-8"
        assert response.body == "# Título".encode("utf-8")
