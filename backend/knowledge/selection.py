"""Selection of records chosen for partial export."""

from typing import FrozenSet, Iterable, List, Set

from .models import SolutionRecord


class SelectionTracker:
    """
    Set of selected record ids.

    Holds ids only, never records. Ids whose record is gone are harmless:
    they are skipped when the selection is resolved against a collection.
    """

    def __init__(self) -> None:
        self._ids: Set[str] = set()

    def select_all(self, ids: Iterable[str]) -> None:
        """Replace the selection with exactly the given (live) id set."""
        self._ids = set(ids)

    def clear(self) -> None:
        self._ids = set()

    def toggle(self, record_id: str) -> None:
        if record_id in self._ids:
            self._ids.discard(record_id)
        else:
            self._ids.add(record_id)

    def is_selected(self, record_id: str) -> bool:
        return record_id in self._ids

    def all_selected(self, ids: Iterable[str]) -> bool:
        """True when the collection is non-empty and every id in it is selected."""
        live = set(ids)
        return bool(live) and live <= self._ids

    @property
    def selected_ids(self) -> FrozenSet[str]:
        return frozenset(self._ids)

    def pick(self, records: Iterable[SolutionRecord]) -> List[SolutionRecord]:
        """Selected records, in the order of the given collection."""
        return [record for record in records if record.id in self._ids]

    def __len__(self) -> int:
        return len(self._ids)
