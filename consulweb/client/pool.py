"""Bounded registry of in-flight requests."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .descriptor import RequestDescriptor
from .transport import ReadyState

logger = logging.getLogger(__name__)


class Disposer:
    """Cleans up a descriptor as it leaves the pool. The base class does nothing."""

    def dispose(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        return descriptor


class StreamingDisposer(Disposer):
    """Abort streaming connections that have not started receiving yet.

    Unsent and opened connections are aborted. Once headers are in or the
    body is loading the connection is left to finish so partially delivered
    messages are not lost.
    """

    def dispose(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        if descriptor.is_streaming:
            connection = descriptor.connection
            if connection.ready_state in (ReadyState.UNSENT, ReadyState.OPENED):
                logger.debug("Aborting streaming request %s", descriptor.key)
                connection.abort()
        return descriptor


class ConnectionPool:
    """Registry of live request descriptors keyed by id.

    Entries are kept in acquisition order. When ``max_connections`` is set,
    acquiring into a full pool evicts the oldest entry first.

    Parameters
    ----------
    disposer : Disposer, optional
        Strategy run on every descriptor leaving the pool
    max_connections : int, optional
        Capacity of the pool; unbounded when omitted
    """

    def __init__(self, disposer: Optional[Disposer] = None, max_connections: Optional[int] = None):
        if max_connections is not None and (
            isinstance(max_connections, bool) or not isinstance(max_connections, int) or max_connections < 1
        ):
            raise ValueError(f"max_connections must be a positive integer, got {max_connections!r}")
        self.disposer = disposer or Disposer()
        self.max_connections = max_connections
        self._entries: Dict[str, RequestDescriptor] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, id: object) -> bool:
        return id in self._entries

    def ids(self) -> List[str]:
        return list(self._entries)

    def get(self, id: str) -> Optional[RequestDescriptor]:
        return self._entries.get(id)

    def acquire(self, descriptor: RequestDescriptor) -> str:
        """Register ``descriptor`` and return its id."""
        existing = self._entries.pop(descriptor.id, None)
        if existing is not None and existing is not descriptor:
            self._dispose(existing)

        if self.max_connections is not None:
            while len(self._entries) >= self.max_connections:
                oldest_id = next(iter(self._entries))
                oldest = self._entries.pop(oldest_id)
                logger.debug("Pool full (%d), evicting %s", self.max_connections, oldest.key)
                self._dispose(oldest)

        self._entries[descriptor.id] = descriptor
        return descriptor.id

    def release(self, id: str) -> None:
        """Remove and dispose the entry for ``id``; unknown ids are ignored."""
        descriptor = self._entries.pop(id, None)
        if descriptor is not None:
            self._dispose(descriptor)

    def purge(self) -> List[RequestDescriptor]:
        """Dispose and remove every entry, oldest first."""
        purged = []
        while self._entries:
            oldest_id = next(iter(self._entries))
            purged.append(self._dispose(self._entries.pop(oldest_id)))
        if purged:
            logger.debug("Purged %d connection(s)", len(purged))
        return purged

    def _dispose(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        try:
            self.disposer.dispose(descriptor)
        except Exception:
            logger.warning("Failed to dispose of %s", descriptor.key, exc_info=True)
        return descriptor
