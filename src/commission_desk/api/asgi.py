"""ASGI entrypoint for the commission desk API."""

from commission_desk.api.app import create_app
from commission_desk.containers import build_container

app = create_app(build_container())
