"""
In-process cache of the most recent normalized contact list
"""

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from core.config import settings
from schemas.contact import Contact
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemorySnapshot:
    contacts: List[Contact]
    fetched_at: float

    def age(self, now: float) -> float:
        return now - self.fetched_at


class ContactSnapshotCache:
    """
    Holds one MemorySnapshot with a time-to-live.

    The snapshot is replaced as a whole, so readers see either the old
    or the new one, never a mix. Writes are last-write-wins.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.CACHE_TIMEOUT
        self.clock = clock
        self._snapshot: Optional[MemorySnapshot] = None

    @property
    def snapshot(self) -> Optional[MemorySnapshot]:
        return self._snapshot

    def is_fresh(self) -> bool:
        snapshot = self._snapshot
        return snapshot is not None and snapshot.age(self.clock()) < self.ttl_seconds

    def get(self, allow_stale: bool = False) -> Optional[List[Contact]]:
        """Cached contacts if fresh (or any age when `allow_stale`), else None"""
        snapshot = self._snapshot
        if snapshot is None:
            return None
        if allow_stale or snapshot.age(self.clock()) < self.ttl_seconds:
            return snapshot.contacts
        return None

    def set(self, contacts: List[Contact]) -> MemorySnapshot:
        snapshot = MemorySnapshot(contacts=contacts, fetched_at=self.clock())
        self._snapshot = snapshot
        return snapshot

    def invalidate(self):
        self._snapshot = None
        logger.info("Contacts cache cleared")
