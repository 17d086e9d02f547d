"""
Knowledge base exporters.

Three pure encoders turn records into text:
- Markdown: the user's selection, one readable document per record
- CSV: the whole collection, one fixed-width row per record
- JSON: the whole collection, same document the store persists

Naming an artifact is kept apart from encoding it because names embed the
current time while encoded content must be deterministic.
"""

import time
from enum import Enum
from typing import Callable, Dict, NamedTuple, Optional, Sequence

from knowledge.models import SolutionRecord

from .csv_encoder import CSV_HEADERS, encode_csv, escape_csv_cell
from .json_encoder import decode_json, encode_json
from .markdown_encoder import encode_markdown, record_to_markdown


class ExportFormat(str, Enum):
    """Supported export formats."""
    MARKDOWN = "markdown"
    CSV = "csv"
    JSON = "json"


class ExportScope(Enum):
    SELECTION = "selection"
    COLLECTION = "collection"


class FormatSpec(NamedTuple):
    encoder: Callable[[Sequence[SolutionRecord]], str]
    mime_type: str
    extension: str
    prefix: str
    scope: ExportScope


FORMATS: Dict[ExportFormat, FormatSpec] = {
    ExportFormat.MARKDOWN: FormatSpec(
        encoder=encode_markdown,
        mime_type="text/markdown;charset=utf-8",
        extension="md",
        prefix="exported_solutions",
        scope=ExportScope.SELECTION,
    ),
    ExportFormat.CSV: FormatSpec(
        encoder=encode_csv,
        mime_type="text/csv;charset=utf-8",
        extension="csv",
        prefix="knowledge_base",
        scope=ExportScope.COLLECTION,
    ),
    ExportFormat.JSON: FormatSpec(
        encoder=encode_json,
        mime_type="application/json",
        extension="json",
        prefix="knowledge_base",
        scope=ExportScope.COLLECTION,
    ),
}


def artifact_name(fmt: ExportFormat, now: Optional[float] = None) -> str:
    """
    File name for an export, e.g. knowledge_base_1716199200000.csv.

    Args:
        fmt: Export format
        now: Epoch seconds to name the file after (default: current time)
    """
    format_spec = FORMATS[fmt]
    millis = int((time.time() if now is None else now) * 1000)
    return f"{format_spec.prefix}_{millis}.{format_spec.extension}"


__all__ = [
    "CSV_HEADERS",
    "ExportFormat",
    "ExportScope",
    "FORMATS",
    "FormatSpec",
    "artifact_name",
    "decode_json",
    "encode_csv",
    "encode_json",
    "encode_markdown",
    "escape_csv_cell",
    "record_to_markdown",
]
