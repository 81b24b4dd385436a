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
"""Tests for OrmBootApplication bootstrap and shutdown."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from ormboot.container.exceptions import BeanCreationException
from ormboot.context.packages import AutoConfigurationPackages
from ormboot.core.application import OrmBootApplication, ormboot_application
from ormboot.core.config import Config
from ormboot.orm.factory import EntityManagerFactory
from ormboot.orm.transaction import TransactionManager
from sample_entities.accounts.models import Account


@ormboot_application(name="ledger", version="1.2.0", scan_packages=["sample_entities.accounts"])
class LedgerApp:
    pass


class PlainApp:
    pass


def _engine() -> AsyncEngine:
    return create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)


class TestApplicationDecorator:
    def test_metadata_attached(self):
        assert LedgerApp.__ormboot_app_name__ == "ledger"
        assert LedgerApp.__ormboot_app_version__ == "1.2.0"
        assert LedgerApp.__ormboot_scan_packages__ == ["sample_entities.accounts"]

    def test_undecorated_class_gets_defaults(self):
        app = OrmBootApplication(PlainApp, Config({}))
        assert app.name == "ormboot-app"
        assert not AutoConfigurationPackages.has(app.context.container)


class TestBootstrap:
    @pytest.mark.asyncio
    async def test_startup_wires_persistence(self):
        config = Config({"ormboot": {"persistence": {"generate-ddl": True}}})
        app = OrmBootApplication(LedgerApp, config)
        app.context.register_instance(_engine(), role=AsyncEngine)

        await app.startup()
        assert app.context.is_running
        assert app.startup_time_seconds > 0
        assert AutoConfigurationPackages.get(app.context.container) == ["sample_entities.accounts"]
        assert app.context.get_bean(EntityManagerFactory).entity_classes == [Account]

        async with app.context.get_bean(TransactionManager).transaction() as session:
            session.add(Account(owner="carol"))
        async with app.context.get_bean(TransactionManager).transaction(read_only=True) as session:
            assert (await session.execute(select(Account.owner))).scalars().all() == ["carol"]

        await app.shutdown()
        assert not app.context.is_running
        assert not app.context.get_bean(EntityManagerFactory).is_open

    @pytest.mark.asyncio
    async def test_startup_failure_propagates(self):
        app = OrmBootApplication(LedgerApp, Config({}))
        with pytest.raises(BeanCreationException):
            await app.startup()

    def test_config_file_with_profile(self, tmp_path, monkeypatch):
        (tmp_path / "ormboot.yaml").write_text("ormboot:\n  persistence:\n    show-sql: false\n")
        (tmp_path / "ormboot-dev.yaml").write_text("ormboot:\n  persistence:\n    show-sql: true\n")
        monkeypatch.setenv("ORMBOOT_PROFILES_ACTIVE", "dev")

        app = OrmBootApplication(LedgerApp, config_path=tmp_path / "ormboot.yaml")
        assert app.config.get("ormboot.persistence.show-sql") is True
        assert len(app.config.loaded_sources) == 2

    def test_web_application_flag(self):
        app = OrmBootApplication(LedgerApp, Config({}), web_application=True)
        assert app.context.environment.is_web_application
