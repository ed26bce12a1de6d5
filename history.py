"""
Client-side attendance history.

The server only keeps each student's current status, so the dashboard's trend
chart and calendar run on a simulated trail: a fixed window of days where
entry 0 is today and mirrors the last known status, and every earlier day is
random. The trail is generated once per student, kept in the local store, and
afterwards only entry 0 is ever rewritten. It is not attendance data and must
not be treated as such.
"""
import random
import threading
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Callable, List, Optional

from local_store import HISTORY_KEY, LocalStore

DEFAULT_DAYS = 31


@dataclass(frozen=True)
class HistoryEntry:
    date: date
    status: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HistoryCache:
    """Mapping of student id -> simulated history, bounded by LRU and optional TTL."""

    def __init__(self, store: LocalStore, *, days: int = DEFAULT_DAYS, max_entries: int = 1024,
                 ttl: Optional[timedelta] = None, rng: Optional[random.Random] = None,
                 clock: Callable[[], datetime] = _utcnow):
        self.store = store
        self.days = days
        self.max_entries = max_entries
        self.ttl = ttl
        self.rng = rng or random.Random()
        self.clock = clock
        self._lock = threading.RLock()
        # Recency ticks live in memory and reach the store only with the next write.
        self._used = {}
        self._tick = max((e.get("used", 0) for e in self._load().values()), default=0)

    def _load(self) -> dict:
        return self.store.get(HISTORY_KEY, {}) or {}

    def _touch(self, student_id: str) -> None:
        self._tick += 1
        self._used[student_id] = self._tick

    def _save(self, entries: dict) -> None:
        for key, entry in entries.items():
            entry["used"] = self._used.get(key, entry.get("used", 0))
        while len(entries) > self.max_entries:
            oldest = min(entries, key=lambda k: entries[k]["used"])
            del entries[oldest]
            self._used.pop(oldest, None)
        self.store.set(HISTORY_KEY, entries)

    def _expired(self, entry: dict) -> bool:
        if self.ttl is None:
            return False
        saved_at = datetime.fromisoformat(entry["saved_at"])
        return self.clock() - saved_at > self.ttl

    def _generate(self, fallback_status: str) -> list:
        today = self.clock().date()
        records = []
        for i in range(self.days):
            if i == 0:
                status = fallback_status
            else:
                status = "absent" if self.rng.random() > 0.7 else "present"
            records.append({"date": (today - timedelta(days=i)).isoformat(), "status": status})
        return records

    def ensure(self, student_id: str, fallback_status: str = "present") -> List[HistoryEntry]:
        """Return the student's window, generating and persisting it only when missing or expired."""
        with self._lock:
            entries = self._load()
            self._touch(student_id)
            entry = entries.get(student_id)
            if entry is None or self._expired(entry):
                entry = {"saved_at": self.clock().isoformat(), "records": self._generate(fallback_status)}
                entries[student_id] = entry
                self._save(entries)
            return _entries(entry["records"])

    def mark_today(self, student_id: str, status: str) -> List[HistoryEntry]:
        """Rewrite entry 0 to ``status``; the older days stay as generated."""
        with self._lock:
            self.ensure(student_id)
            entries = self._load()
            records = entries[student_id]["records"]
            records[0]["status"] = status
            self._save(entries)
            return _entries(records)

    def clear(self, student_id: Optional[str] = None) -> None:
        with self._lock:
            if student_id is None:
                self._used.clear()
                self.store.delete(HISTORY_KEY)
                return
            self._used.pop(student_id, None)
            entries = self._load()
            if entries.pop(student_id, None) is not None:
                self.store.set(HISTORY_KEY, entries)

    def __contains__(self, student_id: str) -> bool:
        return student_id in self._load()


def _entries(records: list) -> List[HistoryEntry]:
    return [HistoryEntry(date=date.fromisoformat(r["date"]), status=r["status"]) for r in records]


def stats(history: List[HistoryEntry]) -> dict:
    total = len(history)
    present = sum(1 for h in history if h.status == "present")
    rate = f"{present / total * 100:.2f}" if total else "0.00"
    return {"total": total, "present": present, "absent": total - present, "rate": rate}
