"""ASGI entrypoint for the caffeine tracker API."""

from caffeine_tracker.api.app import create_app
from caffeine_tracker.containers import build_container

app = create_app(build_container())
