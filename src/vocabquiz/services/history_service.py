"""Service for managing quiz history."""
import dataclasses
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from vocabquiz import monitoring
from vocabquiz.models.quiz_models import HistoryEntry, QuizResults, StreakStatus
from vocabquiz.services.streak_service import calculate_streak_status
from vocabquiz.services.write_queue import WriteBehindQueue
from vocabquiz.timestamps import resolve_now

logger = logging.getLogger(__name__)


class HistoryService:
    """In-memory quiz history with optional write-behind persistence."""

    def __init__(self, queue: Optional[WriteBehindQueue] = None):
        """Initialize the service with an optional write-behind queue."""
        self.queue = queue
        self._entries: Dict[str, HistoryEntry] = {}

    def load(self, entries: Iterable[HistoryEntry]) -> None:
        """Replace the in-memory history, e.g. with the durable copy at startup."""
        self._entries = {entry.id: entry for entry in entries}
        logger.info(f"Loaded {len(self._entries)} history entries")

    def _persist(self, kind: str, payload: Any = None) -> None:
        if self.queue is not None:
            self.queue.enqueue(kind, payload)

    def get_entry(self, entry_id: str) -> Optional[HistoryEntry]:
        return self._entries.get(entry_id)

    def list_history(self) -> List[HistoryEntry]:
        """All entries, newest first."""
        return sorted(self._entries.values(), key=lambda e: e.date, reverse=True)

    def add_history_entry(self, results: QuizResults, date: Optional[datetime] = None) -> HistoryEntry:
        """Record a completed quiz, optionally with an explicit date."""
        entry = HistoryEntry.from_results(results, resolve_now(date))
        self._entries[entry.id] = entry
        self._persist("upsert_history", dataclasses.replace(entry))
        monitoring.history_entries.inc()
        return entry

    def delete_history_entry(self, entry_id: str) -> bool:
        if self._entries.pop(entry_id, None) is None:
            return False
        self._persist("delete_history", entry_id)
        return True

    def clear_history(self) -> int:
        """Delete every entry. Returns how many were removed."""
        count = len(self._entries)
        self._entries = {}
        self._persist("clear_history")
        logger.info(f"Cleared {count} history entries")
        return count

    def import_history(self, records: Iterable[Mapping[str, Any]]) -> List[HistoryEntry]:
        """Import history from backup records.

        Entries are deduplicated by id; records without an id get one.
        Records missing required fields are skipped.
        """
        imported = []
        skipped = 0
        for record in records:
            try:
                entry = HistoryEntry.from_dict(record)
            except (ValueError, TypeError, KeyError) as e:
                skipped += 1
                logger.debug(f"Skipping history record: {e}")
                continue
            self._entries[entry.id] = entry
            self._persist("upsert_history", dataclasses.replace(entry))
            imported.append(entry)

        if skipped:
            logger.warning(f"Skipped {skipped} malformed history records during import")
        logger.info(f"Imported {len(imported)} history entries")
        return imported

    def get_streak_status(self, now: Optional[datetime] = None) -> StreakStatus:
        """Current daily streak derived from entry dates."""
        return calculate_streak_status((entry.date for entry in self._entries.values()), resolve_now(now))
