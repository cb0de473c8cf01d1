"""Shared FastAPI helpers for read endpoints."""

import logging
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import Response

from fincomm.errors import UnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORE_STATUS_HEADER = "X-Store-Status"


async def soft_read(response: Response, read: Awaitable[T], fallback: T) -> T:
    """Await a read; if the store is unreachable, tag the response and return the fallback.

    The caller still answers 200, with `X-Store-Status: unavailable` set so a
    client can tell "nothing there" from "could not look".
    """
    try:
        return await read
    except UnavailableError as exc:
        logger.warning("serving fallback: %s", exc)
        response.headers[STORE_STATUS_HEADER] = "unavailable"
        return fallback
