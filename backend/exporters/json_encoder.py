"""
JSON encoder for the knowledge base.

The export format and the persisted format are the same document: a
2-space indented array of records in collection order, camelCase keys.
Optional fields that are unset are left out rather than written as null.
"""

import json
import logging
from typing import Any, List, Sequence

from pydantic import ValidationError

from knowledge.models import SolutionRecord

logger = logging.getLogger(__name__)


def encode_json(records: Sequence[SolutionRecord]) -> str:
    """Encode records as a pretty-printed JSON array."""
    payload = [record.model_dump(mode="json", by_alias=True, exclude_none=True) for record in records]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def decode_json(text: str, skip_invalid: bool = False) -> List[SolutionRecord]:
    """
    Parse a document produced by encode_json.

    Args:
        text: JSON document
        skip_invalid: Drop elements that aren't valid records (logged) instead
            of rejecting the whole document

    Raises:
        ValueError: If the text is not JSON or not an array, or, unless
            skip_invalid is set, any element is not a valid record
            (pydantic's ValidationError is a ValueError).
    """
    data: Any = json.loads(text)
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array of records, got {type(data).__name__}")
    if not skip_invalid:
        return [SolutionRecord.model_validate(item) for item in data]

    records: List[SolutionRecord] = []
    for index, item in enumerate(data):
        try:
            records.append(SolutionRecord.model_validate(item))
        except ValidationError as e:
            record_id = item.get("id") if isinstance(item, dict) else None
            logger.warning("Skipping invalid record #%d (id=%r): %s", index, record_id, e)
    return records
