"""
Markdown encoder for selected knowledge-base records.

Each record becomes a self-contained document: header block with company,
date and area, the quoted problem, then the analysis body for its result
variant. Records are separated by a horizontal rule.
"""

from datetime import datetime, tzinfo
from typing import List, Optional, Sequence

from knowledge.models import AnalysisResult, GroundedAnswer, Solution, SolutionRecord


RECORD_SEPARATOR = "\n\n---\n\n"
UNTITLED_SOURCE = "Untitled source"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(timestamp: str, tz: Optional[tzinfo] = None) -> str:
    """
    Render an ISO-8601 timestamp as local date/time.

    Args:
        timestamp: ISO-8601 string as stored on the record
        tz: Target timezone; None means the host's local timezone

    Returns:
        Formatted date/time, or the raw string when it can't be parsed.
    """
    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return timestamp
    # Naive timestamps are taken as already local.
    if moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    return moment.strftime(DATE_FORMAT)


def _blockquote(text: str) -> str:
    return "\n".join(f"> {line}" for line in text.splitlines() or [""])


def _format_steps(solution: Solution) -> str:
    return "\n".join(
        f"{number}. **{step.title}**: {step.description}"
        for number, step in enumerate(solution.steps, start=1)
    )


def _format_solution(heading: str, solution: Solution) -> List[str]:
    title = f"### {heading}: {solution.title}"
    if solution.is_premium:
        title += " **(Premium)**"
    return [
        title,
        f"**Summary:** {solution.summary}",
        "**Steps:**",
        _format_steps(solution),
        "",
    ]


def _grounded_body(result: GroundedAnswer) -> List[str]:
    lines = [result.answer, ""]
    if result.sources:
        lines.append("### Sources")
        for source in result.sources:
            lines.append(f"- [{source.title or UNTITLED_SOURCE}]({source.uri})")
    return lines


def _analysis_body(result: AnalysisResult) -> List[str]:
    lines = [
        "### Problem Diagnosis",
        f"**Identified Problem:** {result.problem_analysis.identified_problem}",
        f"**Business Impact:** {result.problem_analysis.impact}",
        "",
    ]
    lines += _format_solution("Short-Term Solution", result.short_term_solution)
    lines += _format_solution("Long-Term Solution", result.long_term_solution)
    return lines


def record_to_markdown(record: SolutionRecord, tz: Optional[tzinfo] = None) -> str:
    """Render a single record."""
    lines = [
        f"# Solution for: {record.company_type} - {record.niche}",
        "",
        f"**Date:** {format_timestamp(record.timestamp, tz)}",
        f"**Area:** {record.business_area.value}",
        "",
        "## Problem Description",
        _blockquote(record.problem_description),
        "",
        "---",
        "",
        "## Analysis and Solution",
        "",
    ]
    if isinstance(record.result, GroundedAnswer):
        lines += _grounded_body(record.result)
    else:
        lines += _analysis_body(record.result)
    return "\n".join(lines).rstrip("\n")


def encode_markdown(records: Sequence[SolutionRecord], tz: Optional[tzinfo] = None) -> str:
    """Render records in order, separated by horizontal rules. Empty input gives ""."""
    return RECORD_SEPARATOR.join(record_to_markdown(record, tz) for record in records)
