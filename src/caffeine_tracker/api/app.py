"""FastAPI application factory."""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import UUID

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse

from caffeine_tracker.api.auth import current_user
from caffeine_tracker.api.auth import router as auth_router
from caffeine_tracker.api.pages import router as pages_router
from caffeine_tracker.api.schemas import EntryCreate, TimeMode
from caffeine_tracker.app_logging import configure_logging
from caffeine_tracker.containers import AppContainer
from caffeine_tracker.domain.entries import DoseEntry, EntryDraft, PersistedEntry
from caffeine_tracker.domain.models import UserRecord
from caffeine_tracker.domain.residual import ResidualReading
from caffeine_tracker.services.decay import level_badge
from caffeine_tracker.services.entries import InvalidEntryError
from caffeine_tracker.services.ticker import ReadingCallback, ResidualTicker


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(pages_router)
    app.include_router(auth_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/entries")
    async def list_entries(
        request: Request, user: UserRecord = Depends(current_user)
    ) -> dict[str, object]:
        """Return all of the user's entries."""
        state_container: AppContainer = request.app.state.container
        entries = _load_entries(state_container, user, logger)
        return {"entries": [_serialize_entry(entry) for entry in entries]}

    @app.get("/entries/recent")
    async def recent_entries(
        request: Request, user: UserRecord = Depends(current_user)
    ) -> dict[str, object]:
        """Return the latest entries, newest first."""
        state_container: AppContainer = request.app.state.container
        limit = state_container.settings.recent_entries_limit
        try:
            entries = state_container.entry_service.recent_entries(user.id, limit)
        except Exception as exc:
            logger.exception("Failed to load entries", extra={"user_id": user.id})
            raise _upstream_error(
                state_container, exc, "Couldn't load entries."
            ) from exc
        return {"entries": [_serialize_entry(entry) for entry in entries]}

    @app.post("/entries", status_code=status.HTTP_201_CREATED)
    async def create_entry(
        payload: EntryCreate,
        request: Request,
        user: UserRecord = Depends(current_user),
    ) -> dict[str, object]:
        """Log a caffeine entry."""
        state_container: AppContainer = request.app.state.container
        draft = EntryDraft(
            date=payload.date, time=payload.time, amount_mg=payload.amount
        )
        try:
            entry = state_container.entry_service.add_entry(
                user.id, draft, state_container.clock.now()
            )
        except InvalidEntryError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except Exception as exc:
            logger.exception("Failed to save entry", extra={"user_id": user.id})
            raise _upstream_error(
                state_container, exc, "Couldn't save entry."
            ) from exc
        logger.info(
            "Logged caffeine entry",
            extra={"user_id": user.id, "amount_mg": entry.amount_mg},
        )
        _refresh_tickers(state_container, user, logger)
        return {"entry": _serialize_entry(entry)}

    @app.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_entry(
        entry_id: UUID,
        request: Request,
        user: UserRecord = Depends(current_user),
    ) -> None:
        """Delete one of the user's entries."""
        state_container: AppContainer = request.app.state.container
        try:
            deleted = state_container.entry_service.delete_entry(user.id, entry_id)
        except Exception as exc:
            logger.exception("Failed to delete entry", extra={"entry_id": entry_id})
            raise _upstream_error(
                state_container, exc, "Couldn't delete entry."
            ) from exc
        if not deleted:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        _refresh_tickers(state_container, user, logger)

    @app.get("/residual")
    async def residual(
        request: Request,
        user: UserRecord = Depends(current_user),
        time_mode: TimeMode = "24h",
    ) -> dict[str, object]:
        """Return residual caffeine at the current instant."""
        state_container: AppContainer = request.app.state.container
        try:
            reading = state_container.entry_service.residual_for(
                user.id, state_container.clock.now()
            )
        except Exception as exc:
            logger.exception("Failed to load entries", extra={"user_id": user.id})
            raise _upstream_error(
                state_container, exc, "Couldn't load entries."
            ) from exc
        return _serialize_reading(reading, time_mode)

    @app.get("/residual/stream")
    async def residual_stream(
        request: Request,
        user: UserRecord = Depends(current_user),
        time_mode: TimeMode = "24h",
        count: int | None = Query(default=None, ge=1),
    ) -> StreamingResponse:
        """Stream one residual reading per tick as server-sent events."""
        state_container: AppContainer = request.app.state.container
        entries = _load_entries(state_container, user, logger)
        doses = [entry.to_dose() for entry in entries]
        readings: asyncio.Queue[ResidualReading] = asyncio.Queue(maxsize=1)
        ticker = _build_ticker(state_container, doses, callback=readings.put)

        async def events() -> AsyncIterator[str]:
            sent = 0
            state_container.register_ticker(user.id, ticker)
            try:
                async with ticker:
                    while count is None or sent < count:
                        if await request.is_disconnected():
                            break
                        reading = await readings.get()
                        payload = json.dumps(_serialize_reading(reading, time_mode))
                        yield f"data: {payload}\n\n"
                        sent += 1
            finally:
                state_container.release_ticker(user.id, ticker)

        return StreamingResponse(events(), media_type="text/event-stream")

    return app


def _load_entries(
    state_container: AppContainer, user: UserRecord, logger: logging.Logger
) -> list[PersistedEntry]:
    try:
        return state_container.entry_service.list_entries(user.id)
    except Exception as exc:
        logger.exception("Failed to load entries", extra={"user_id": user.id})
        raise _upstream_error(state_container, exc, "Couldn't load entries.") from exc


def _refresh_tickers(
    state_container: AppContainer, user: UserRecord, logger: logging.Logger
) -> None:
    """Push the user's current entries to their live residual streams."""
    tickers = state_container.active_tickers.get(user.id)
    if not tickers:
        return
    try:
        doses = state_container.entry_service.load_doses(user.id)
    except Exception:
        logger.exception(
            "Failed to refresh residual streams", extra={"user_id": user.id}
        )
        return
    for ticker in tickers:
        ticker.replace_entries(doses)


def _build_ticker(
    state_container: AppContainer,
    doses: list[DoseEntry],
    callback: ReadingCallback,
) -> ResidualTicker:
    return ResidualTicker(
        clock=state_container.clock,
        callback=callback,
        entries=tuple(doses),
        interval_seconds=state_container.settings.tick_interval_seconds,
        half_life_hours=state_container.entry_service.half_life_hours,
    )


def _upstream_error(
    state_container: AppContainer, exc: Exception, fallback: str
) -> HTTPException:
    """Build a user-facing persistence error with local debug info."""
    detail = fallback
    if state_container.settings.environment == "local":
        debug = f"{type(exc).__name__}: {exc}".strip()
        if debug:
            detail = f"{fallback} (debug: {debug})"
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


def _serialize_entry(entry: PersistedEntry) -> dict[str, object]:
    dose = entry.to_dose()
    return {
        "id": str(entry.id),
        "date": dose.date,
        "time": dose.time,
        "entry_date": entry.entry_date.isoformat(),
        "amount_mg": entry.amount_mg,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }


def _serialize_reading(
    reading: ResidualReading, time_mode: TimeMode
) -> dict[str, object]:
    return {
        "now": reading.now.isoformat(),
        "date": _format_date(reading.now),
        "time": _format_clock(reading.now, time_mode),
        "residual_mg": reading.residual_mg,
        "display": f"{reading.residual_mg:.1f} mg",
        "level": reading.level.value,
        "badge": level_badge(reading.level),
    }


def _format_clock(now: datetime, time_mode: TimeMode) -> str:
    """Format the clock as 24-hour HH:MM:SS or 12-hour H:MM:SS AM."""
    if time_mode == "ampm":
        hour = now.hour % 12 or 12
        suffix = "PM" if now.hour >= 12 else "AM"  # noqa: PLR2004
        return f"{hour}:{now.minute:02d}:{now.second:02d} {suffix}"
    return now.strftime("%H:%M:%S")


def _format_date(now: datetime) -> str:
    return now.strftime("%m/%d/%Y")
