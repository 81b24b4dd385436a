# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Vendor adapters — translate persistence settings into SQLAlchemy terms.

An adapter holds the four portable settings (``show_sql``, ``database``,
``database_platform``, ``generate_ddl``) and knows how to drive one flavour
of SQLAlchemy: the classic ``Engine``/``Session`` pair or the asyncio
``AsyncEngine``/``AsyncSession`` pair.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from sqlalchemy import Connection, Engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import Session, sessionmaker

from ormboot.kernel.exceptions import ConfigurationException
from ormboot.orm.database import Database


class VendorAdapter(ABC):
    """Settings facade for one SQLAlchemy flavour."""

    data_source_type: type = object
    session_type: type = object

    def __init__(self) -> None:
        self.show_sql: bool = False
        self.database: Database = Database.DEFAULT
        self.database_platform: str | None = None
        self.generate_ddl: bool = False

    @property
    def dialect_name(self) -> str | None:
        """Dialect expected by the settings, ``None`` when left to the engine.

        An explicit ``database_platform`` (``postgresql+asyncpg``) wins over
        ``database``; only the part before ``+`` is the dialect.
        """
        if self.database_platform:
            return self.database_platform.split("+", 1)[0].strip().lower()
        return self.database.dialect

    def get_property_map(self) -> dict[str, Any]:
        """Native settings derived from the portable ones.

        Settings left at their defaults are omitted, so the engine defaults
        stay in force.
        """
        props: dict[str, Any] = {}
        if self.show_sql:
            props["echo"] = True
        if self.generate_ddl:
            props["generate_ddl"] = True
        dialect = self.dialect_name
        if dialect:
            props["dialect"] = dialect
        return props

    def check_data_source(self, data_source: Any) -> None:
        if not isinstance(data_source, self.data_source_type):
            raise ConfigurationException(
                f"{type(self).__name__} requires a {self.data_source_type.__name__} data source, "
                f"got {type(data_source).__name__}",
                code="ORM_DATA_SOURCE",
            )

    @abstractmethod
    def create_session_factory(self, data_source: Any, **options: Any) -> Callable[[], Any]:
        """Build the session factory bound to *data_source*."""

    @abstractmethod
    async def run_ddl(self, data_source: Any, operation: Callable[[Connection], Any]) -> None:
        """Run a schema operation (``metadata.create_all`` and the like) in a transaction."""

    @abstractmethod
    async def commit(self, session: Any) -> None: ...

    @abstractmethod
    async def rollback(self, session: Any) -> None: ...

    @abstractmethod
    async def close(self, session: Any) -> None: ...

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(show_sql={self.show_sql!r}, database={self.database.name}, "
            f"database_platform={self.database_platform!r}, generate_ddl={self.generate_ddl!r})"
        )


class SqlAlchemyVendorAdapter(VendorAdapter):
    """Classic SQLAlchemy: ``Engine`` data source, ``Session`` units of work."""

    data_source_type = Engine
    session_type = Session

    def create_session_factory(self, data_source: Engine, **options: Any) -> sessionmaker[Session]:
        return sessionmaker(bind=data_source, **options)

    async def run_ddl(self, data_source: Engine, operation: Callable[[Connection], Any]) -> None:
        with data_source.begin() as conn:
            operation(conn)

    async def commit(self, session: Session) -> None:
        session.commit()

    async def rollback(self, session: Session) -> None:
        session.rollback()

    async def close(self, session: Session) -> None:
        session.close()


class AsyncSqlAlchemyVendorAdapter(VendorAdapter):
    """SQLAlchemy asyncio: ``AsyncEngine`` data source, ``AsyncSession`` units of work."""

    data_source_type = AsyncEngine
    session_type = AsyncSession

    def create_session_factory(
        self, data_source: AsyncEngine, **options: Any
    ) -> async_sessionmaker[AsyncSession]:
        return async_sessionmaker(data_source, **options)

    async def run_ddl(self, data_source: AsyncEngine, operation: Callable[[Connection], Any]) -> None:
        async with data_source.begin() as conn:
            await conn.run_sync(operation)

    async def commit(self, session: AsyncSession) -> None:
        await session.commit()

    async def rollback(self, session: AsyncSession) -> None:
        await session.rollback()

    async def close(self, session: AsyncSession) -> None:
        await session.close()
