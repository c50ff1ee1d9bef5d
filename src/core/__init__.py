from .interfaces import IEventSource, ISnapshotSink
from .errors import BookInvariantError, MalformedEventError
from .book_side import BookSide, PriceLevel
from .order_store import OrderStore
from .engine import AppliedEvent, NoopReason, ReconstructionEngine
from .snapshot_builder import SnapshotBuilder
from .change_filter import ChangeFilter
from .reconstructor import BookReconstructor, ReconstructionStats

__all__ = [
    "IEventSource",
    "ISnapshotSink",
    "BookInvariantError",
    "MalformedEventError",
    "BookSide",
    "PriceLevel",
    "OrderStore",
    "AppliedEvent",
    "NoopReason",
    "ReconstructionEngine",
    "SnapshotBuilder",
    "ChangeFilter",
    "BookReconstructor",
    "ReconstructionStats",
]
