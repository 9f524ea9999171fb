"""ASGI entrypoint for the Dopamine API."""

from dopamine.api.app import create_app
from dopamine.containers import build_container

app = create_app(build_container())
