"""ASGI entry point: ``uvicorn feetracker.asgi:app``. Configuration comes from the environment."""

from feetracker.main import create_app

app = create_app()
