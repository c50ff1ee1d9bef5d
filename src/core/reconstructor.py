"""
Event-to-snapshot pipeline for one instrument stream.

Each event is applied to the book, a snapshot is built from the resulting
state, and the change filter decides whether it is emitted. Events are
handled strictly one at a time in arrival order; depth and aggregates are
only correct under that ordering.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

import structlog

from models.event import Action, BookEvent
from models.policy import CancelDepthPolicy, ReaddPolicy
from models.snapshot import BookSnapshot, DEFAULT_BOOK_LEVELS

from .change_filter import ChangeFilter
from .engine import ReconstructionEngine
from .snapshot_builder import SnapshotBuilder


@dataclass
class ReconstructionStats:
    """Counters accumulated over a reconstruction run."""
    events_processed: int = 0
    snapshots_emitted: int = 0
    snapshots_suppressed: int = 0
    actions: Counter = field(default_factory=Counter)
    noops: Counter = field(default_factory=Counter)

    def as_dict(self) -> dict:
        return {
            "events_processed": self.events_processed,
            "snapshots_emitted": self.snapshots_emitted,
            "snapshots_suppressed": self.snapshots_suppressed,
            "actions": dict(self.actions),
            "noops": dict(self.noops),
        }


class BookReconstructor:
    """
    Turns a market-by-order event stream into market-by-price snapshots.

    All state (book, last emitted snapshot, emission index) lives on the
    instance, so independent reconstructors can run side by side, e.g. one
    per symbol.

    Example:
        reconstructor = BookReconstructor()
        for snapshot in reconstructor.run(events):
            writer.write(snapshot)
    """

    def __init__(
        self,
        levels: int = DEFAULT_BOOK_LEVELS,
        readd_policy: ReaddPolicy = ReaddPolicy.OVERWRITE,
        cancel_depth_policy: CancelDepthPolicy = CancelDepthPolicy.AFTER_REMOVAL,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.logger = logger or structlog.get_logger(__name__)
        self.engine = ReconstructionEngine(readd_policy=readd_policy, logger=self.logger)
        self.builder = SnapshotBuilder(
            self.engine, levels=levels, cancel_depth_policy=cancel_depth_policy
        )
        self.change_filter = ChangeFilter()
        self.stats = ReconstructionStats()

    @classmethod
    def from_config(cls, config, logger=None) -> "BookReconstructor":
        return cls(
            levels=config.book_levels,
            readd_policy=config.readd_policy,
            cancel_depth_policy=config.cancel_depth_policy,
            logger=logger,
        )

    def process(self, event: BookEvent) -> Optional[BookSnapshot]:
        """Apply one event; return the emitted snapshot or None if suppressed."""
        self.stats.events_processed += 1
        self.stats.actions[event.action.value] += 1

        applied = self.engine.apply(event)
        if applied.noop is not None:
            self.stats.noops[applied.noop.value] += 1

        snapshot = self.builder.build(event, applied)

        if event.action == Action.RESET and self.change_filter.emitted_count == 0:
            # A leading Reset is the empty-book baseline at index 0.
            emitted = self.change_filter.emit_baseline(snapshot)
        else:
            emitted = self.change_filter.decide(snapshot)

        if emitted is None:
            self.stats.snapshots_suppressed += 1
        else:
            self.stats.snapshots_emitted += 1
        return emitted

    def run(self, events: Iterable[BookEvent]) -> Iterator[BookSnapshot]:
        """Process a finite stream lazily, yielding emitted snapshots in order."""
        for event in events:
            emitted = self.process(event)
            if emitted is not None:
                yield emitted
        self.logger.info("reconstruction_completed", **self.stats.as_dict())
