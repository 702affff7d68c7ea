"""Caffeine entry logging service."""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Protocol
from uuid import UUID

from caffeine_tracker.domain.entries import DoseEntry, EntryDraft, PersistedEntry
from caffeine_tracker.domain.residual import ResidualReading
from caffeine_tracker.services.decay import (
    HALF_LIFE_HOURS,
    evaluate,
    parse_clock_time,
    resolve_entry_timestamp,
)


class EntryRepository(Protocol):
    """Persistence interface for caffeine entries."""

    def list_entries(self, user_id: UUID) -> list[PersistedEntry]:
        """Return all entries for a user, oldest first."""

    def create_entry(
        self, user_id: UUID, entry_date: date, entry_time: time, amount_mg: float
    ) -> PersistedEntry:
        """Create an entry row and return it."""

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> bool:
        """Delete an entry owned by the user. Return True if a row was removed."""


class InvalidEntryError(ValueError):
    """Raised when a draft cannot be turned into a stored entry."""


@dataclass
class EntryService:
    """Service that stores entries and evaluates residual caffeine."""

    repository: EntryRepository
    half_life_hours: float = HALF_LIFE_HOURS

    def list_entries(self, user_id: UUID) -> list[PersistedEntry]:
        """Return the user's entries."""
        return self.repository.list_entries(user_id)

    def load_doses(self, user_id: UUID) -> list[DoseEntry]:
        """Return the user's entries as estimator inputs."""
        return [entry.to_dose() for entry in self.repository.list_entries(user_id)]

    def add_entry(
        self, user_id: UUID, draft: EntryDraft, now: datetime
    ) -> PersistedEntry:
        """Persist a new entry, resolving its year relative to ``now``."""
        dose = DoseEntry(date=draft.date, time=draft.time, amount_mg=draft.amount_mg)
        taken_at = resolve_entry_timestamp(dose, now)
        entry_time = parse_clock_time(draft.time)
        if taken_at is None or entry_time is None:
            raise InvalidEntryError(f"Invalid date or time: {draft.date} {draft.time}")
        return self.repository.create_entry(
            user_id,
            entry_date=taken_at.date(),
            entry_time=entry_time,
            amount_mg=draft.amount_mg,
        )

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> bool:
        """Delete one of the user's entries."""
        return self.repository.delete_entry(user_id, entry_id)

    def recent_entries(self, user_id: UUID, limit: int = 3) -> list[PersistedEntry]:
        """Return the most recently logged entries, newest first."""
        entries = self.repository.list_entries(user_id)
        if limit <= 0:
            return []
        return list(reversed(entries[-limit:]))

    def residual_for(self, user_id: UUID, now: datetime) -> ResidualReading:
        """Load the user's entries and evaluate residual caffeine at ``now``."""
        return evaluate(self.load_doses(user_id), now, self.half_life_hours)
