"""Domain models for caffeine entries."""

from dataclasses import dataclass
from datetime import date, datetime, time
from uuid import UUID


@dataclass(frozen=True)
class DoseEntry:
    """One logged intake as seen by the decay model.

    ``date`` is ``MM/DD`` with no year and ``time`` is a wall-clock string in
    24-hour or AM/PM form.
    """

    date: str
    time: str
    amount_mg: float


@dataclass(frozen=True)
class EntryDraft:
    """Validated form input for a new entry."""

    date: str
    time: str
    amount_mg: float


@dataclass(frozen=True)
class PersistedEntry:
    """Caffeine entry row with identifiers."""

    id: UUID
    user_id: UUID
    entry_date: date
    entry_time: time
    amount_mg: float
    created_at: datetime | None = None

    def to_dose(self) -> DoseEntry:
        """Return the month/day view used by the estimator."""
        time_format = "%H:%M:%S" if self.entry_time.second else "%H:%M"
        return DoseEntry(
            date=self.entry_date.strftime("%m/%d"),
            time=self.entry_time.strftime(time_format),
            amount_mg=self.amount_mg,
        )
