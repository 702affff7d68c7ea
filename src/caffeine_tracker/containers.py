"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from uuid import UUID

from supabase import create_client

from caffeine_tracker.adapters.supabase_auth_client import SupabaseAuthClient
from caffeine_tracker.adapters.supabase_entry_repository import (
    SupabaseEntryRepository,
)
from caffeine_tracker.config import Settings, parse_timezone
from caffeine_tracker.services.auth import AuthService
from caffeine_tracker.services.entries import EntryService
from caffeine_tracker.services.ticker import Clock, ResidualTicker, SystemClock


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    entry_service: EntryService
    clock: Clock
    close_resources: Callable[[], Awaitable[None]]
    active_tickers: dict[UUID, list[ResidualTicker]] = field(default_factory=dict)

    def register_ticker(self, user_id: UUID, ticker: ResidualTicker) -> None:
        """Track a live ticker so entry changes and shutdown can reach it."""
        self.active_tickers.setdefault(user_id, []).append(ticker)

    def release_ticker(self, user_id: UUID, ticker: ResidualTicker) -> None:
        """Forget a ticker once its stream has ended."""
        tickers = self.active_tickers.get(user_id, [])
        if ticker in tickers:
            tickers.remove(ticker)
        if not tickers:
            self.active_tickers.pop(user_id, None)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    # Signing in rewrites a client's auth headers, so the database client
    # never performs sign-ins and always queries with the service key.
    database_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    auth_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    auth_service = AuthService(SupabaseAuthClient(auth_client))
    entry_service = EntryService(
        repository=SupabaseEntryRepository(database_client),
        half_life_hours=resolved_settings.half_life_hours,
    )
    clock = SystemClock(parse_timezone(resolved_settings.timezone))

    active_tickers: dict[UUID, list[ResidualTicker]] = {}

    async def close_resources() -> None:
        for tickers in list(active_tickers.values()):
            for ticker in list(tickers):
                await ticker.stop()
        active_tickers.clear()

    return AppContainer(
        settings=resolved_settings,
        auth_service=auth_service,
        entry_service=entry_service,
        clock=clock,
        close_resources=close_resources,
        active_tickers=active_tickers,
    )
