"""ASGI entry point: ``uvicorn pondwatch.main:app``."""

from pondwatch import create_app

app = create_app()
