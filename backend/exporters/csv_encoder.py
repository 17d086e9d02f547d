"""
CSV encoder for the knowledge base.

One row per record under a fixed 19-column header. Columns that don't apply
to a record's result variant are left empty so every row has full width.
Nested values (sources, steps) are embedded as compact JSON.
"""

import json
from typing import Any, Dict, List, Sequence

from knowledge.models import AnalysisResult, GroundedAnswer, SolutionRecord, result_type_name


CSV_HEADERS: List[str] = [
    "id",
    "timestamp",
    "companyType",
    "niche",
    "businessArea",
    "problemDescription",
    "resultType",
    "groundedAnswer",
    "groundedSources",
    "pa_identifiedProblem",
    "pa_impact",
    "st_title",
    "st_summary",
    "st_steps",
    "st_isPremium",
    "lt_title",
    "lt_summary",
    "lt_steps",
    "lt_isPremium",
]


def escape_csv_cell(value: Any) -> str:
    """
    Render one cell.

    The value is quoted, with inner quotes doubled, only when it contains a
    comma, a double quote or a newline.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    if "," in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _record_row(record: SolutionRecord) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "id": record.id,
        "timestamp": record.timestamp,
        "companyType": record.company_type,
        "niche": record.niche,
        "businessArea": record.business_area.value,
        "problemDescription": record.problem_description,
        "resultType": result_type_name(record.result),
    }

    result = record.result
    if isinstance(result, GroundedAnswer):
        row["groundedAnswer"] = result.answer
        row["groundedSources"] = _compact_json(
            [source.model_dump(by_alias=True, exclude_none=True) for source in result.sources]
        )
    elif isinstance(result, AnalysisResult):
        row["pa_identifiedProblem"] = result.problem_analysis.identified_problem
        row["pa_impact"] = result.problem_analysis.impact
        for prefix, solution in (("st", result.short_term_solution), ("lt", result.long_term_solution)):
            row[f"{prefix}_title"] = solution.title
            row[f"{prefix}_summary"] = solution.summary
            row[f"{prefix}_steps"] = _compact_json(
                [step.model_dump(by_alias=True) for step in solution.steps]
            )
            row[f"{prefix}_isPremium"] = bool(solution.is_premium)
    return row


def encode_csv(records: Sequence[SolutionRecord]) -> str:
    """Encode records as CSV text: header line plus one line per record, no trailing newline."""
    lines = [",".join(CSV_HEADERS)]
    for record in records:
        row = _record_row(record)
        lines.append(",".join(escape_csv_cell(row.get(header)) for header in CSV_HEADERS))
    return "\n".join(lines)
