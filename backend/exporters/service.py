"""Export operations: pick the subset, encode, name and deliver."""

import logging
from typing import List, Optional

from delivery import DeliverySink
from knowledge.models import SolutionRecord
from knowledge.selection import SelectionTracker
from knowledge.storage import SolutionStore

from . import FORMATS, ExportFormat, ExportScope, artifact_name

logger = logging.getLogger(__name__)


def export_subset(
    fmt: ExportFormat,
    store: SolutionStore,
    selection: SelectionTracker,
) -> List[SolutionRecord]:
    """Records an export of this format covers: the selection for Markdown, everything otherwise."""
    if FORMATS[fmt].scope is ExportScope.SELECTION:
        return selection.pick(store.records)
    return list(store.records)


def export(
    fmt: ExportFormat,
    store: SolutionStore,
    selection: SelectionTracker,
    sink: DeliverySink,
    now: Optional[float] = None,
) -> Optional[str]:
    """
    Export records and hand the result to a delivery sink.

    Args:
        fmt: Export format
        store: Knowledge base to export from
        selection: Current selection (used by selection-scoped formats)
        sink: Where the encoded artifact goes
        now: Epoch seconds for the artifact name (default: current time)

    Returns:
        The delivered file name, or None when there was nothing to export.
    """
    records = export_subset(fmt, store, selection)
    if not records:
        logger.info("Skipping %s export: nothing to export", fmt.value)
        return None

    format_spec = FORMATS[fmt]
    content = format_spec.encoder(records)
    file_name = artifact_name(fmt, now)
    sink.deliver(content, file_name, format_spec.mime_type)
    logger.info("Exported %d records as %s", len(records), file_name)
    return file_name
