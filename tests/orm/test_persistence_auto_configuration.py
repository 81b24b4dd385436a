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
"""Tests for the conditional persistence wiring."""

from typing import Any

import pytest
from sqlalchemy import Engine, create_engine, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from ormboot.container.exceptions import BeanCreationException, NoSuchBeanError
from ormboot.context.application_context import ApplicationContext
from ormboot.context.packages import AutoConfigurationPackages
from ormboot.core.config import Config
from ormboot.orm.auto_configuration import (
    AsyncSqlAlchemyConfiguration,
    SqlAlchemyConfiguration,
    check_dialect,
)
from ormboot.orm.builder import EntityManagerFactoryBuilder
from ormboot.orm.database import Database
from ormboot.orm.factory import EntityManagerFactory, EntityManagerFactoryBean
from ormboot.orm.properties import PersistenceProperties
from ormboot.orm.support import OpenEntityManagerInViewFilter, OpenEntityManagerInViewInterceptor
from ormboot.orm.transaction import OrmTransactionManager, TransactionManager
from ormboot.orm.vendor import AsyncSqlAlchemyVendorAdapter, SqlAlchemyVendorAdapter, VendorAdapter
from ormboot.web.interceptors import InterceptorRegistry
from sample_entities.accounts.models import Account
from sample_entities.billing.models import Invoice

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _persistence(**settings: Any) -> dict[str, Any]:
    return {"ormboot": {"persistence": settings}}


def _async_engine() -> AsyncEngine:
    return create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)


def _context(
    config: dict[str, Any] | None = None,
    *,
    web_application: bool | None = None,
    data_source: Any = None,
    packages: tuple[str, ...] = (),
) -> ApplicationContext:
    ctx = ApplicationContext(Config(config or {}), web_application=web_application)
    engine = data_source if data_source is not None else _async_engine()
    ctx.register_instance(engine, role=AsyncEngine if isinstance(engine, AsyncEngine) else Engine)
    if packages:
        AutoConfigurationPackages.register(ctx.container, *packages)
    ctx.register_bean(AsyncSqlAlchemyConfiguration)
    ctx.register_bean(SqlAlchemyConfiguration)
    return ctx


class ExistingTransactionManager(TransactionManager):
    def transaction(self, *, read_only: bool = False) -> Any:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Vendor adapter
# ---------------------------------------------------------------------------


class TestVendorAdapterBean:
    @pytest.mark.asyncio
    async def test_copies_settings_verbatim(self):
        ctx = _context(
            _persistence(**{"show-sql": True, "database": "sqlite", "database-platform": "sqlite+aiosqlite"})
        )
        await ctx.start()

        adapter = ctx.get_bean(VendorAdapter)
        assert isinstance(adapter, AsyncSqlAlchemyVendorAdapter)
        assert adapter.show_sql is True
        assert adapter.database is Database.SQLITE
        assert adapter.database_platform == "sqlite+aiosqlite"
        assert adapter.generate_ddl is False
        await ctx.stop()

    @pytest.mark.asyncio
    async def test_absent_platform_stays_absent(self):
        ctx = _context()
        await ctx.start()

        adapter = ctx.get_bean(VendorAdapter)
        assert adapter.database_platform is None
        assert adapter.database is Database.DEFAULT
        assert adapter.show_sql is False
        await ctx.stop()

    @pytest.mark.asyncio
    async def test_user_adapter_is_used(self):
        ctx = _context()
        user_adapter = AsyncSqlAlchemyVendorAdapter()
        user_adapter.generate_ddl = True
        ctx.register_instance(user_adapter, role=VendorAdapter)
        await ctx.start()

        assert ctx.get_bean(VendorAdapter) is user_adapter
        assert ctx.get_bean(EntityManagerFactoryBuilder).vendor_adapter is user_adapter
        await ctx.stop()


# ---------------------------------------------------------------------------
# Transaction manager
# ---------------------------------------------------------------------------


class TestTransactionManagerBean:
    @pytest.mark.asyncio
    async def test_created_when_missing(self):
        ctx = _context()
        await ctx.start()

        tx = ctx.get_bean(TransactionManager)
        assert isinstance(tx, OrmTransactionManager)
        assert tx.entity_manager_factory is ctx.get_bean(EntityManagerFactory)
        await ctx.stop()

    @pytest.mark.asyncio
    async def test_pre_existing_transaction_manager_yields(self):
        ctx = _context()
        existing = ExistingTransactionManager()
        ctx.register_instance(existing, role=TransactionManager)
        await ctx.start()

        assert ctx.get_beans_of_type(TransactionManager) == [existing]
        assert not any(isinstance(b, OrmTransactionManager) for b in ctx.get_beans_of_type(TransactionManager))
        await ctx.stop()


# ---------------------------------------------------------------------------
# Packages to scan
# ---------------------------------------------------------------------------


class TestPackagesToScan:
    def _configuration(self, ctx: ApplicationContext) -> AsyncSqlAlchemyConfiguration:
        ctx.container.register_instance(PersistenceProperties, PersistenceProperties())
        return ctx.container.resolve(AsyncSqlAlchemyConfiguration)

    def test_empty_without_registry(self):
        ctx = _context()
        assert self._configuration(ctx).get_packages_to_scan() == []

    def test_registry_order_preserved(self):
        ctx = _context(packages=("com.acct", "com.billing"))
        assert self._configuration(ctx).get_packages_to_scan() == ["com.acct", "com.billing"]

    def test_empty_without_container(self):
        configuration = AsyncSqlAlchemyConfiguration(_async_engine(), PersistenceProperties())
        assert configuration.get_packages_to_scan() == []

    @pytest.mark.asyncio
    async def test_entities_from_registered_packages(self):
        ctx = _context(
            _persistence(**{"generate-ddl": True}),
            packages=("sample_entities.accounts", "sample_entities.billing"),
        )
        await ctx.start()

        emf = ctx.get_bean(EntityManagerFactory)
        assert emf.entity_classes == [Account, Invoice]
        await ctx.stop()


# ---------------------------------------------------------------------------
# Entity-manager factory
# ---------------------------------------------------------------------------


class TestEntityManagerFactoryBean:
    @pytest.mark.asyncio
    async def test_primary_factory_with_vendor_properties(self):
        ctx = _context(_persistence(properties={"autoflush": False}))
        await ctx.start()

        emf = ctx.get_bean(EntityManagerFactory)
        reg = next(r for r in ctx.container.registrations if r.role is EntityManagerFactory)
        assert reg.primary is True
        assert reg.name == "entity_manager_factory"
        assert emf.property_map == {"expire_on_commit": False, "autoflush": False, "dialect": "sqlite"}
        session = emf.create_entity_manager()
        assert isinstance(session, AsyncSession)
        await session.close()
        await ctx.stop()

    @pytest.mark.asyncio
    async def test_configure_hook_runs_before_initialize(self):
        seen: list[EntityManagerFactoryBean] = []

        class CustomConfiguration(AsyncSqlAlchemyConfiguration):
            def configure(self, factory_bean: EntityManagerFactoryBean) -> None:
                seen.append(factory_bean)
                factory_bean.add_property("expire_on_commit", True)

        ctx = _context()
        ctx.container.remove(AsyncSqlAlchemyConfiguration)
        ctx.register_bean(CustomConfiguration)
        await ctx.start()

        assert len(seen) == 1
        assert ctx.get_bean(EntityManagerFactory).property_map["expire_on_commit"] is True
        await ctx.stop()

    @pytest.mark.asyncio
    async def test_user_factory_wins(self):
        engine = _async_engine()
        user_emf = EntityManagerFactoryBean(engine, AsyncSqlAlchemyVendorAdapter()).initialize()
        ctx = _context(data_source=engine)
        ctx.register_instance(user_emf, role=EntityManagerFactory)
        await ctx.start()

        assert ctx.get_bean(EntityManagerFactory) is user_emf
        assert ctx.get_bean(TransactionManager).entity_manager_factory is user_emf
        await ctx.stop()

    @pytest.mark.asyncio
    async def test_generate_ddl_and_transactions_end_to_end(self):
        ctx = _context(_persistence(**{"generate-ddl": True}), packages=("sample_entities.accounts",))
        await ctx.start()

        tx = ctx.get_bean(TransactionManager)
        async with tx.transaction() as session:
            session.add(Account(owner="alice"))
        async with tx.transaction(read_only=True) as session:
            owners = (await session.execute(select(Account.owner))).scalars().all()
        assert owners == ["alice"]
        await ctx.stop()


# ---------------------------------------------------------------------------
# Vendor variants and dialect checks
# ---------------------------------------------------------------------------


class TestVendorVariants:
    @pytest.mark.asyncio
    async def test_sync_mode_uses_classic_sqlalchemy(self):
        engine = create_engine("sqlite://", poolclass=StaticPool)
        ctx = _context(_persistence(mode="sync", **{"generate-ddl": True}), data_source=engine,
                       packages=("sample_entities.accounts",))
        await ctx.start()

        assert isinstance(ctx.get_bean(VendorAdapter), SqlAlchemyVendorAdapter)
        assert not ctx.container.has_bean_of_type(AsyncSqlAlchemyConfiguration)
        async with ctx.get_bean(TransactionManager).transaction() as session:
            assert isinstance(session, Session)
            session.add(Account(owner="bob"))
        await ctx.stop()
        engine.dispose()

    @pytest.mark.asyncio
    async def test_missing_data_source_fails_startup(self):
        ctx = ApplicationContext(Config({}))
        ctx.register_bean(AsyncSqlAlchemyConfiguration)
        with pytest.raises(NoSuchBeanError):
            await ctx.start()

    @pytest.mark.asyncio
    async def test_dialect_mismatch_fails_startup(self):
        ctx = _context(_persistence(database="postgresql"))
        with pytest.raises(BeanCreationException, match="postgresql"):
            await ctx.start()

    @pytest.mark.asyncio
    async def test_malformed_properties_fail_startup(self):
        ctx = _context(_persistence(database="informix"))
        with pytest.raises(BeanCreationException):
            await ctx.start()

    def test_check_dialect_records_actual_dialect(self):
        adapter = AsyncSqlAlchemyVendorAdapter()
        bean = EntityManagerFactoryBean(_async_engine(), adapter)
        check_dialect(bean)
        assert bean.property_map["dialect"] == "sqlite"


# ---------------------------------------------------------------------------
# Open entity manager in view
# ---------------------------------------------------------------------------


def _interceptors(ctx: ApplicationContext) -> list[Any]:
    if not ctx.container.has_bean_of_type(InterceptorRegistry):
        return []
    return [
        i for i in ctx.get_bean(InterceptorRegistry).interceptors
        if isinstance(i, OpenEntityManagerInViewInterceptor)
    ]


class TestOpenInView:
    @pytest.mark.asyncio
    async def test_web_application_gets_exactly_one_interceptor(self):
        ctx = _context(web_application=True)
        await ctx.start()

        interceptors = _interceptors(ctx)
        assert len(interceptors) == 1
        assert ctx.get_bean(OpenEntityManagerInViewInterceptor) is interceptors[0]
        assert interceptors[0].entity_manager_factory is ctx.get_bean(EntityManagerFactory)
        await ctx.stop()

    @pytest.mark.asyncio
    async def test_default_open_in_view_logs_warning(self, caplog: pytest.LogCaptureFixture):
        ctx = _context(web_application=True)
        with caplog.at_level("WARNING", logger="ormboot.orm.base_configuration"):
            await ctx.start()
        assert "open-in-view is enabled by default" in caplog.text
        await ctx.stop()

    @pytest.mark.asyncio
    async def test_explicit_open_in_view_skips_warning(self, caplog: pytest.LogCaptureFixture):
        ctx = _context(_persistence(**{"open-in-view": True}), web_application=True)
        with caplog.at_level("WARNING", logger="ormboot.orm.base_configuration"):
            await ctx.start()
        assert len(_interceptors(ctx)) == 1
        assert "enabled by default" not in caplog.text
        await ctx.stop()

    @pytest.mark.asyncio
    async def test_non_web_application_gets_none(self):
        ctx = _context()
        await ctx.start()
        assert _interceptors(ctx) == []
        assert not ctx.container.has_bean_of_type(OpenEntityManagerInViewInterceptor)
        await ctx.stop()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["open-in-view", "open_in_view"])
    async def test_disabled_by_either_key(self, key: str):
        ctx = _context(_persistence(**{key: False}), web_application=True)
        await ctx.start()
        assert _interceptors(ctx) == []
        await ctx.stop()

    @pytest.mark.asyncio
    async def test_kebab_key_wins_over_legacy(self):
        ctx = _context(_persistence(**{"open-in-view": True, "open_in_view": False}), web_application=True)
        await ctx.start()
        assert len(_interceptors(ctx)) == 1
        await ctx.stop()

    @pytest.mark.asyncio
    async def test_pre_existing_filter_suppresses_interceptor(self):
        engine = _async_engine()
        ctx = _context(web_application=True, data_source=engine)
        emf = EntityManagerFactoryBean(engine, AsyncSqlAlchemyVendorAdapter()).initialize()
        ctx.register_instance(OpenEntityManagerInViewFilter(emf))
        await ctx.start()

        assert _interceptors(ctx) == []
        await ctx.stop()

    @pytest.mark.asyncio
    async def test_pre_existing_interceptor_is_not_duplicated(self):
        engine = _async_engine()
        ctx = _context(web_application=True, data_source=engine)
        emf = EntityManagerFactoryBean(engine, AsyncSqlAlchemyVendorAdapter()).initialize()
        existing = OpenEntityManagerInViewInterceptor(emf)
        ctx.register_instance(existing)
        await ctx.start()

        assert ctx.get_beans_of_type(OpenEntityManagerInViewInterceptor) == [existing]
        assert _interceptors(ctx) == []
        await ctx.stop()


# ---------------------------------------------------------------------------
# End-to-end scenario
# ---------------------------------------------------------------------------


class TestPostgresWebScenario:
    @pytest.mark.asyncio
    async def test_full_wiring_for_a_web_application(self, caplog: pytest.LogCaptureFixture):
        built: list[EntityManagerFactoryBean] = []

        class RecordingConfiguration(AsyncSqlAlchemyConfiguration):
            def configure(self, factory_bean: EntityManagerFactoryBean) -> None:
                built.append(factory_bean)

        # Never connects: schema generation is off.
        engine = create_async_engine("postgresql+asyncpg://ledger@localhost/ledger")
        ctx = _context(
            _persistence(**{"show-sql": True, "database": "POSTGRESQL", "generate-ddl": False}),
            web_application=True,
            data_source=engine,
            packages=("com.acct", "com.billing"),
        )
        ctx.container.remove(AsyncSqlAlchemyConfiguration)
        ctx.register_bean(RecordingConfiguration)
        with caplog.at_level("WARNING", logger="ormboot.orm.base_configuration"):
            await ctx.start()

        adapter = ctx.get_bean(VendorAdapter)
        assert (adapter.show_sql, adapter.database, adapter.database_platform, adapter.generate_ddl) == (
            True,
            Database.POSTGRESQL,
            None,
            False,
        )

        assert len(built) == 1
        assert built[0].packages_to_scan == ["com.acct", "com.billing"]
        assert built[0].data_source is engine

        emf = ctx.get_bean(EntityManagerFactory)
        assert emf.property_map["dialect"] == "postgresql"
        assert emf.property_map["echo"] is True
        assert emf.entity_classes == []
        assert engine.echo is True

        assert isinstance(ctx.get_bean(TransactionManager), OrmTransactionManager)
        assert len(_interceptors(ctx)) == 1
        assert "open-in-view is enabled by default" in caplog.text

        await ctx.stop()
        await engine.dispose()
