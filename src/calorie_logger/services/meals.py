"""In-process meal log."""

import logging
import threading
from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from calorie_logger.domain.meals import MealLogEntry, MealResult

_logger = logging.getLogger(__name__)


@dataclass
class MealLog:
    """Append-ordered log of finalized meals.

    All reads and writes go through one lock, so lookups by id never see a
    half-applied append or delete. Contents live for the life of the process.
    """

    _entries: list[MealLogEntry] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def append(self, description: str, result: MealResult) -> MealLogEntry:
        """Store a completed meal and return the new entry."""
        entry = MealLogEntry.from_result(description, result)
        with self._lock:
            self._entries.append(entry)
        _logger.info("Logged meal %s (%s kcal)", entry.id, entry.total_calories)
        return entry

    def replace(
        self, entry_id: UUID, description: str, result: MealResult
    ) -> MealLogEntry | None:
        """Swap the meal stored under an id, keeping its position."""
        with self._lock:
            for index, current in enumerate(self._entries):
                if current.id == entry_id:
                    updated = current.replaced_by(description, result)
                    self._entries[index] = updated
                    break
            else:
                return None
        _logger.info("Edited meal %s (%s kcal)", entry_id, updated.total_calories)
        return updated

    def delete(self, entry_id: UUID) -> bool:
        """Remove an entry; unknown ids are ignored."""
        with self._lock:
            remaining = [entry for entry in self._entries if entry.id != entry_id]
            deleted = len(remaining) != len(self._entries)
            self._entries = remaining
        if deleted:
            _logger.info("Deleted meal %s", entry_id)
        return deleted

    def get(self, entry_id: UUID) -> MealLogEntry | None:
        """Return the entry with the given id, if present."""
        with self._lock:
            for entry in self._entries:
                if entry.id == entry_id:
                    return entry
        return None

    def entries(self) -> list[MealLogEntry]:
        """Return a snapshot of all entries in append order."""
        with self._lock:
            return list(self._entries)

    def list_for_date(self, day: date) -> list[MealLogEntry]:
        """Return entries whose UTC timestamp falls on the given day."""
        return [entry for entry in self.entries() if entry.timestamp.date() == day]

    def reset(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
