"""SQLAlchemy Unit of Work implementation."""

from types import TracebackType
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.repositories.sqlalchemy_profile_repo import (
    SQLAlchemyProfileRepository,
    translate_db_errors,
)


class SQLAlchemyUnitOfWork:
    """One session and one transaction per ``async with`` block.

    Leaving the block without ``commit()`` discards the changes; leaving it
    with an exception rolls them back explicitly.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._profiles: Optional[SQLAlchemyProfileRepository] = None

    @property
    def profiles(self) -> SQLAlchemyProfileRepository:
        if self._profiles is None:
            raise RuntimeError("UnitOfWork not initialized. Use as context manager.")
        return self._profiles

    async def commit(self) -> None:
        if self._session:
            with translate_db_errors("save changes"):
                await self._session.commit()

    async def rollback(self) -> None:
        if self._session:
            await self._session.rollback()

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        self._session = self._session_factory()
        self._profiles = SQLAlchemyProfileRepository(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        if self._session is None:
            return
        try:
            if exc_type:
                await self.rollback()
        finally:
            await self._session.close()
            self._session = None
            self._profiles = None
