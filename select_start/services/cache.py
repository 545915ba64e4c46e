"""
Freshness-bounded report cache with write-through disk snapshots.

Each report type has one slot and one lock. A slot is EMPTY (no payload),
FRESH (younger than its threshold) or STALE. Reads of a stale slot are
misses; the stale payload stays in place until the next put overwrites it.
"""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Optional

from select_start.db.snapshots import SnapshotStore
from select_start.services.errors import PersistenceWarning
from select_start.utils.helpers import parse_datetime, utcnow

# Set up logging
logger = logging.getLogger(__name__)


class ReportType(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NOMINATIONS = "nominations"


SNAPSHOT_NAMES = {
    ReportType.MONTHLY: "monthly-leaderboard",
    ReportType.YEARLY: "yearly-leaderboard",
    ReportType.NOMINATIONS: "nominations",
}

DEFAULT_THRESHOLDS = {
    ReportType.MONTHLY: timedelta(minutes=15),
    ReportType.YEARLY: timedelta(minutes=30),
    ReportType.NOMINATIONS: timedelta(minutes=10),
}


@dataclass
class CacheEntry:
    threshold: timedelta
    payload: Optional[Dict[str, Any]] = None
    last_computed: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return self.payload is None or self.last_computed is None

    def is_fresh(self, now: datetime) -> bool:
        return not self.is_empty and (now - self.last_computed) < self.threshold

    def clear(self):
        self.payload = None
        self.last_computed = None


class ReportCache:
    """
    Per-report-type cache.

    get/put/invalidate on the same type are serialized by that type's lock;
    different types never contend.
    """

    def __init__(
        self,
        snapshots: Optional[SnapshotStore] = None,
        thresholds: Optional[Dict[ReportType, timedelta]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.snapshots = snapshots
        self.clock = clock
        merged = dict(DEFAULT_THRESHOLDS)
        merged.update(thresholds or {})
        self._entries = {t: CacheEntry(threshold=merged[t]) for t in ReportType}
        self._locks = {t: threading.Lock() for t in ReportType}
        self._write_locks = {t: threading.Lock() for t in ReportType}

    def get(self, report_type: ReportType, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        """Cached payload if the slot is fresh, otherwise None."""
        report_type = ReportType(report_type)
        now = now or self.clock()
        with self._locks[report_type]:
            entry = self._entries[report_type]
            if entry.is_fresh(now):
                return entry.payload
            return None

    def put(self, report_type: ReportType, payload: Dict[str, Any], now: Optional[datetime] = None) -> None:
        """
        Store a freshly computed payload and write it through to disk (best effort).

        The disk write happens after the slot lock is released, so readers
        never wait on file I/O.
        """
        report_type = ReportType(report_type)
        now = now or self.clock()
        with self._locks[report_type]:
            entry = self._entries[report_type]
            entry.payload = payload
            entry.last_computed = now
        self._persist(report_type)

    def invalidate(self, report_type: ReportType) -> None:
        report_type = ReportType(report_type)
        with self._locks[report_type]:
            self._entries[report_type].clear()
        logger.info(f"Cache cleared for {report_type.value}")

    def last_computed(self, report_type: ReportType) -> Optional[datetime]:
        report_type = ReportType(report_type)
        with self._locks[report_type]:
            return self._entries[report_type].last_computed

    def state(self, report_type: ReportType, now: Optional[datetime] = None) -> str:
        """'empty', 'fresh' or 'stale'."""
        report_type = ReportType(report_type)
        now = now or self.clock()
        with self._locks[report_type]:
            entry = self._entries[report_type]
            if entry.is_empty:
                return "empty"
            return "fresh" if entry.is_fresh(now) else "stale"

    def rehydrate(self) -> Dict[ReportType, bool]:
        """
        Load every slot from its disk snapshot

        Missing or unreadable snapshots leave the slot empty.

        Returns:
            Whether each report type was restored
        """
        restored = {}
        for report_type in ReportType:
            restored[report_type] = self._restore(report_type)
        return restored

    def _restore(self, report_type: ReportType) -> bool:
        if self.snapshots is None:
            return False
        name = SNAPSHOT_NAMES[report_type]
        try:
            payload = self.snapshots.load(name)
            if payload is None:
                return False
            last_updated = parse_datetime(payload.get("lastUpdated"))
            if last_updated is None:
                raise PersistenceWarning(f"Snapshot {name} has no lastUpdated")
            if last_updated > self.clock():
                raise PersistenceWarning(f"Snapshot {name} lastUpdated {payload['lastUpdated']} is in the future")
        except (PersistenceWarning, ValueError) as e:
            logger.warning(f"Ignoring {report_type.value} snapshot: {e}")
            return False

        with self._locks[report_type]:
            entry = self._entries[report_type]
            entry.payload = payload
            entry.last_computed = last_updated
        logger.info(f"Loaded {report_type.value} report from disk (lastUpdated {payload['lastUpdated']})")
        return True

    def _persist(self, report_type: ReportType) -> None:
        if self.snapshots is None:
            return
        # Writers for one type queue up; each writes whatever the slot holds now
        with self._write_locks[report_type]:
            with self._locks[report_type]:
                payload = self._entries[report_type].payload
            if payload is None:
                return
            self._save(report_type, payload)

    def _save(self, report_type: ReportType, payload: Dict[str, Any]) -> None:
        try:
            path = self.snapshots.save(SNAPSHOT_NAMES[report_type], payload)
            logger.info(f"Saved {report_type.value} report to {path}")
        except PersistenceWarning as e:
            logger.warning(f"Continuing without disk snapshot: {e}")
