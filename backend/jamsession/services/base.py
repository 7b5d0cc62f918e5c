"""
Jam Session Backend — Shared service helpers.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError

from jamsession.exceptions import DatabaseError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def translate_db_errors(operation: str) -> AsyncIterator[None]:
    """
    Re-raise SQLAlchemy failures as DatabaseError.

    Application exceptions raised inside the block pass through untouched;
    the driver error is only logged, never returned to the client.

    Example:
        async with translate_db_errors("list jams"):
            result = await db.execute(query)
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", operation, e, exc_info=True)
        raise DatabaseError(
            message=f"Could not {operation}. Please try again.",
            context={"operation": operation, "error_type": type(e).__name__},
        ) from e
