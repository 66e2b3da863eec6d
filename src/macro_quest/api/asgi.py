"""ASGI entrypoint for the Macro Quest API."""

from macro_quest.api.app import create_app
from macro_quest.containers import build_container

app = create_app(build_container())
