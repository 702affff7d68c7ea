"""Tests for the caffeine entry service."""

from datetime import UTC, date, datetime, time
from uuid import uuid4

import pytest

from caffeine_tracker.domain.entries import DoseEntry, EntryDraft
from caffeine_tracker.domain.residual import CaffeineLevel
from caffeine_tracker.services.entries import EntryService, InvalidEntryError
from tests.conftest import TEST_USER_ID, InMemoryEntryRepository, make_entry

NOW = datetime(2024, 3, 10, 14, 0, tzinfo=UTC)


def test_add_entry_stores_current_year() -> None:
    repository = InMemoryEntryRepository()
    service = EntryService(repository)

    entry = service.add_entry(
        TEST_USER_ID, EntryDraft(date="03/10", time="08:00", amount_mg=95), NOW
    )

    assert entry.entry_date == date(2024, 3, 10)
    assert entry.entry_time == time(8, 0)
    assert entry.amount_mg == 95
    assert repository.entries == [entry]


def test_add_entry_rolls_future_date_into_last_year() -> None:
    service = EntryService(InMemoryEntryRepository())

    entry = service.add_entry(
        TEST_USER_ID, EntryDraft(date="12/31", time="23:00", amount_mg=60), NOW
    )

    assert entry.entry_date == date(2023, 12, 31)


def test_add_entry_accepts_am_pm_time() -> None:
    service = EntryService(InMemoryEntryRepository())

    entry = service.add_entry(
        TEST_USER_ID, EntryDraft(date="3/9", time="9:30 pm", amount_mg=40), NOW
    )

    assert entry.entry_date == date(2024, 3, 9)
    assert entry.entry_time == time(21, 30)


def test_add_entry_rejects_unparseable_time() -> None:
    repository = InMemoryEntryRepository()
    service = EntryService(repository)

    with pytest.raises(InvalidEntryError):
        service.add_entry(
            TEST_USER_ID, EntryDraft(date="03/10", time="later", amount_mg=50), NOW
        )

    assert repository.entries == []


def test_recent_entries_newest_first() -> None:
    repository = InMemoryEntryRepository()
    repository.entries = [
        make_entry(date(2024, 3, 10), time(hour, 0), amount)
        for hour, amount in [(7, 50), (9, 80), (11, 120), (13, 40)]
    ]
    service = EntryService(repository)

    recent = service.recent_entries(TEST_USER_ID, limit=3)

    assert [entry.amount_mg for entry in recent] == [40, 120, 80]
    assert service.recent_entries(TEST_USER_ID, limit=0) == []


def test_entries_are_scoped_to_user() -> None:
    repository = InMemoryEntryRepository()
    other_user = uuid4()
    repository.entries = [
        make_entry(date(2024, 3, 10), time(14, 0), 100),
        make_entry(date(2024, 3, 10), time(14, 0), 900, user_id=other_user),
    ]
    service = EntryService(repository)

    assert len(service.list_entries(TEST_USER_ID)) == 1
    assert service.residual_for(TEST_USER_ID, NOW).residual_mg == pytest.approx(100.0)


def test_residual_for_uses_persisted_entries() -> None:
    repository = InMemoryEntryRepository()
    repository.entries = [
        make_entry(date(2024, 3, 10), time(8, 0), 100),
        make_entry(date(2024, 3, 10), time(14, 0), 100),
    ]
    service = EntryService(repository)

    reading = service.residual_for(TEST_USER_ID, NOW)

    assert reading.residual_mg == pytest.approx(150.0)
    assert reading.level is CaffeineLevel.HIGH


def test_delete_entry_only_removes_own_rows() -> None:
    repository = InMemoryEntryRepository()
    mine = make_entry(date(2024, 3, 10), time(8, 0), 100)
    theirs = make_entry(date(2024, 3, 10), time(8, 0), 100, user_id=uuid4())
    repository.entries = [mine, theirs]
    service = EntryService(repository)

    assert service.delete_entry(TEST_USER_ID, theirs.id) is False
    assert service.delete_entry(TEST_USER_ID, mine.id) is True
    assert repository.entries == [theirs]


def test_persisted_entry_to_dose() -> None:
    entry = make_entry(date(2023, 12, 31), time(23, 5), 75)
    precise = make_entry(date(2024, 1, 2), time(6, 7, 8), 30)

    assert entry.to_dose() == DoseEntry(date="12/31", time="23:05", amount_mg=75)
    assert precise.to_dose() == DoseEntry(date="01/02", time="06:07:08", amount_mg=30)
