from abc import ABC, abstractmethod
from typing import Iterator

from models import BookEvent, BookSnapshot


class IEventSource(ABC):
    @abstractmethod
    def events(self) -> Iterator[BookEvent]:
        pass


class ISnapshotSink(ABC):
    @abstractmethod
    def write(self, snapshot: BookSnapshot) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass
