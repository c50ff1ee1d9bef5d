from typing import Optional

from models.event import Action
from models.snapshot import BookSnapshot


class ChangeFilter:
    """
    Suppresses snapshots whose visible levels match the last emitted one.

    Holds the last emitted snapshot and the next emission index. Prices are
    compared with exact Decimal equality, sizes and counts as integers, and
    an absent slot never equals a present one.
    """

    def __init__(self):
        self._last_emitted: Optional[BookSnapshot] = None
        self._next_index = 0

    @property
    def last_emitted(self) -> Optional[BookSnapshot]:
        return self._last_emitted

    @property
    def emitted_count(self) -> int:
        return self._next_index

    def should_emit(self, snapshot: BookSnapshot) -> bool:
        if self._last_emitted is None:
            return True
        return not snapshot.same_levels(self._last_emitted)

    def decide(self, snapshot: BookSnapshot) -> Optional[BookSnapshot]:
        """Return the indexed snapshot to emit, or None to suppress it."""
        if not self.should_emit(snapshot):
            return None
        return self._emit(snapshot)

    def emit_baseline(self, snapshot: BookSnapshot) -> BookSnapshot:
        """Emit a leading Reset unconditionally as the empty-book baseline."""
        if self._next_index != 0 or snapshot.action != Action.RESET:
            raise ValueError("baseline must be a Reset emitted before any other snapshot")
        return self._emit(snapshot)

    def _emit(self, snapshot: BookSnapshot) -> BookSnapshot:
        emitted = snapshot.with_index(self._next_index)
        self._next_index += 1
        self._last_emitted = emitted
        return emitted

    def reset(self) -> None:
        self._last_emitted = None
        self._next_index = 0
