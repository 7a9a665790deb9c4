"""
NetSnmp - Result Sink.

Destination for discovered records. The engine hands every successful
record to the sink exactly once, as soon as its task completes. How the
records are persisted (flat cache files, database, JSON) is the sink's
concern.
"""

import threading
from typing import Callable, List, Optional, Protocol

from .models import HostRecord, NeighborRecord


class ResultSink(Protocol):
    """Append-only, concurrency-safe record destination."""

    def add_host(self, record: HostRecord) -> None:
        ...

    def add_neighbor(self, record: NeighborRecord) -> None:
        ...


class CollectingSink:
    """
    In-memory sink.

    Appends are guarded by a lock so the sink can also be fed from
    executor threads.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._hosts: List[HostRecord] = []
        self._neighbors: List[NeighborRecord] = []

    def add_host(self, record: HostRecord) -> None:
        with self._lock:
            self._hosts.append(record)

    def add_neighbor(self, record: NeighborRecord) -> None:
        with self._lock:
            self._neighbors.append(record)

    @property
    def hosts(self) -> List[HostRecord]:
        with self._lock:
            return list(self._hosts)

    @property
    def neighbors(self) -> List[NeighborRecord]:
        with self._lock:
            return list(self._neighbors)

    def clear(self) -> None:
        with self._lock:
            self._hosts.clear()
            self._neighbors.clear()


class CallbackSink:
    """Forwards records to plain callables (e.g. a cache writer)."""

    def __init__(
        self,
        on_host: Optional[Callable[[HostRecord], None]] = None,
        on_neighbor: Optional[Callable[[NeighborRecord], None]] = None,
    ):
        self.on_host = on_host
        self.on_neighbor = on_neighbor

    def add_host(self, record: HostRecord) -> None:
        if self.on_host:
            self.on_host(record)

    def add_neighbor(self, record: NeighborRecord) -> None:
        if self.on_neighbor:
            self.on_neighbor(record)
