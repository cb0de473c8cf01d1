"""Middleware registration."""

from fastapi import FastAPI

from fincomm.config import Settings
from fincomm.middleware.cors import setup_cors
from fincomm.middleware.error_handler import setup_error_handlers
from fincomm.middleware.logging import setup_logging
from fincomm.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    Starlette executes middleware in reverse-add order (last added = outermost).
    CORS goes last so its headers also land on error responses.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
