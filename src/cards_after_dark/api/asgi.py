"""ASGI entrypoint for the game API."""

from cards_after_dark.api.app import create_app
from cards_after_dark.containers import build_container

app = create_app(build_container())
