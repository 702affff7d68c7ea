"""Supabase repository for caffeine entries."""

from dataclasses import dataclass
from datetime import date, datetime, time
from uuid import UUID

from supabase import Client

from caffeine_tracker.domain.entries import PersistedEntry
from caffeine_tracker.services.entries import EntryRepository

_COLUMNS = "id, user_id, entry_date, entry_time, amount_mg, created_at"


@dataclass
class SupabaseEntryRepository(EntryRepository):
    """Supabase implementation for caffeine entries."""

    client: Client

    def list_entries(self, user_id: UUID) -> list[PersistedEntry]:
        """Return entries for a user in creation order."""
        response = (
            self.client.table("caffeine_entries")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .order("created_at", desc=False)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def create_entry(
        self, user_id: UUID, entry_date: date, entry_time: time, amount_mg: float
    ) -> PersistedEntry:
        """Create an entry row and return it."""
        response = (
            self.client.table("caffeine_entries")
            .insert(
                {
                    "user_id": str(user_id),
                    "entry_date": entry_date.isoformat(),
                    "entry_time": entry_time.isoformat(),
                    "amount_mg": amount_mg,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create caffeine entry")
        return _parse_row(response.data[0])

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> bool:
        """Delete an entry if it belongs to the user."""
        response = (
            self.client.table("caffeine_entries")
            .delete()
            .eq("id", str(entry_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        return bool(response.data)


def _parse_row(row: dict[str, object]) -> PersistedEntry:
    created_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else None
    )
    return PersistedEntry(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        entry_date=date.fromisoformat(str(row["entry_date"])),
        entry_time=time.fromisoformat(str(row["entry_time"])),
        amount_mg=float(row.get("amount_mg", 0.0)),
        created_at=created_at,
    )
