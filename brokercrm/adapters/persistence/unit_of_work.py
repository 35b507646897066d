"""SQLAlchemy unit of work backed by SAVEPOINTs."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from brokercrm.application.ports.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class SqlUnitOfWork(UnitOfWork):
    def __init__(self, session: AsyncSession):
        self._s = session

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        nested = await self._s.begin_nested()
        try:
            yield
        except Exception:
            await nested.rollback()
            logger.debug("Savepoint rolled back")
            raise
        await nested.commit()
