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
"""Tests for the SQLAlchemy vendor adapters."""

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ormboot.kernel.exceptions import ConfigurationException
from ormboot.orm.database import Database
from ormboot.orm.vendor import AsyncSqlAlchemyVendorAdapter, SqlAlchemyVendorAdapter


class TestPropertyMap:
    def test_defaults_produce_empty_map(self):
        assert SqlAlchemyVendorAdapter().get_property_map() == {}

    def test_show_sql_and_generate_ddl(self):
        adapter = SqlAlchemyVendorAdapter()
        adapter.show_sql = True
        adapter.generate_ddl = True
        assert adapter.get_property_map() == {"echo": True, "generate_ddl": True}

    def test_database_gives_dialect(self):
        adapter = AsyncSqlAlchemyVendorAdapter()
        adapter.database = Database.POSTGRESQL
        assert adapter.dialect_name == "postgresql"
        assert adapter.get_property_map() == {"dialect": "postgresql"}

    def test_platform_wins_over_database(self):
        adapter = AsyncSqlAlchemyVendorAdapter()
        adapter.database = Database.MYSQL
        adapter.database_platform = "sqlite+aiosqlite"
        assert adapter.dialect_name == "sqlite"


class TestSyncAdapter:
    def test_session_factory(self):
        engine = create_engine("sqlite://", poolclass=StaticPool)
        factory = SqlAlchemyVendorAdapter().create_session_factory(engine, expire_on_commit=False)
        assert isinstance(factory, sessionmaker)
        with factory() as session:
            assert isinstance(session, Session)
            assert session.expire_on_commit is False
        engine.dispose()

    def test_rejects_async_engine(self):
        engine = create_async_engine("sqlite+aiosqlite://")
        with pytest.raises(ConfigurationException) as exc_info:
            SqlAlchemyVendorAdapter().check_data_source(engine)
        assert exc_info.value.code == "ORM_DATA_SOURCE"

    @pytest.mark.asyncio
    async def test_run_ddl_and_session_operations(self):
        engine = create_engine("sqlite://", poolclass=StaticPool)
        adapter = SqlAlchemyVendorAdapter()

        await adapter.run_ddl(engine, lambda conn: conn.execute(text("CREATE TABLE t (x INTEGER)")))

        session = adapter.create_session_factory(engine)()
        session.execute(text("INSERT INTO t VALUES (1)"))
        await adapter.commit(session)
        session.execute(text("INSERT INTO t VALUES (2)"))
        await adapter.rollback(session)
        assert session.execute(text("SELECT count(*) FROM t")).scalar_one() == 1
        await adapter.close(session)
        engine.dispose()


class TestAsyncAdapter:
    @pytest.mark.asyncio
    async def test_session_factory_and_ddl(self):
        engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
        adapter = AsyncSqlAlchemyVendorAdapter()
        adapter.check_data_source(engine)

        await adapter.run_ddl(engine, lambda conn: conn.execute(text("CREATE TABLE t (x INTEGER)")))

        factory = adapter.create_session_factory(engine, expire_on_commit=False)
        assert isinstance(factory, async_sessionmaker)
        session = factory()
        assert isinstance(session, AsyncSession)
        await session.execute(text("INSERT INTO t VALUES (1)"))
        await adapter.commit(session)
        await session.execute(text("INSERT INTO t VALUES (2)"))
        await adapter.rollback(session)
        result = await session.execute(text("SELECT count(*) FROM t"))
        assert result.scalar_one() == 1
        await adapter.close(session)
        await engine.dispose()
