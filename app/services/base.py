"""
Shared plumbing for service classes.
"""

import logging
from collections.abc import Awaitable, Callable

from sqlalchemy import Insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class BaseService:
    """Base class holding the request-scoped database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _insert_unless_exists(
        self,
        statement: Insert,
        exists: Callable[[], Awaitable[bool]],
    ) -> bool:
        """
        Insert a row unless it is already present.

        The insert runs inside a SAVEPOINT so a uniqueness violation caused
        by a concurrent writer only rolls back this statement. The row is
        then re-checked; if it is still missing the error was something
        else and is re-raised.

        Args:
            statement: INSERT statement for the row
            exists: Coroutine factory reporting whether the row exists

        Returns:
            True if this call inserted the row, False if it was already there
        """
        if await exists():
            return False

        try:
            async with self.db.begin_nested():
                await self.db.execute(statement)
        except IntegrityError:
            if await exists():
                logger.debug(f"Concurrent insert detected for {statement.table.name}")
                return False
            raise

        return True
