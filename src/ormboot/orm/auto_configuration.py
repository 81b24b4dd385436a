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
"""SQLAlchemy persistence auto-configuration (asyncio and classic flavours)."""

# NOTE: No `from __future__ import annotations`: typing.get_type_hints()
# must resolve constructor parameter types at runtime for injection.

import logging
from typing import Any

from sqlalchemy import Engine
from sqlalchemy.ext.asyncio import AsyncEngine

from ormboot.container.container import Container
from ormboot.context.conditions import (
    auto_configuration,
    conditional_on_class,
    conditional_on_property,
)
from ormboot.kernel.exceptions import ConfigurationException
from ormboot.orm.base_configuration import OrmBaseConfiguration
from ormboot.orm.builder import VendorCallback
from ormboot.orm.factory import EntityManagerFactoryBean
from ormboot.orm.properties import PersistenceProperties
from ormboot.orm.unit_manager import PersistenceUnitManager
from ormboot.orm.vendor import AsyncSqlAlchemyVendorAdapter, SqlAlchemyVendorAdapter, VendorAdapter

_logger = logging.getLogger(__name__)

MODE_KEY = "ormboot.persistence.mode"


def check_dialect(factory_bean: EntityManagerFactoryBean) -> None:
    """Record the dialect of the data source; reject one that contradicts the settings."""
    adapter = factory_bean.vendor_adapter
    adapter.check_data_source(factory_bean.data_source)
    actual = factory_bean.data_source.dialect.name
    expected = adapter.dialect_name
    if expected and expected != actual:
        raise ConfigurationException(
            f"Persistence settings expect dialect '{expected}' but the data source uses '{actual}'",
            code="ORM_DIALECT_MISMATCH",
            context={"expected": expected, "actual": actual},
        )
    factory_bean.add_property("dialect", actual)
    _logger.debug("Entity-manager factory bound to %s dialect", actual)


@auto_configuration
@conditional_on_class("sqlalchemy.ext.asyncio")
@conditional_on_property(MODE_KEY, having_value="async", match_if_missing=True)
class AsyncSqlAlchemyConfiguration(OrmBaseConfiguration):
    """Persistence over an ``AsyncEngine`` with ``AsyncSession`` units of work."""

    def __init__(
        self,
        data_source: AsyncEngine,
        properties: PersistenceProperties,
        persistence_unit_manager: PersistenceUnitManager | None = None,
        container: Container | None = None,
    ) -> None:
        super().__init__(data_source, properties, persistence_unit_manager, container)

    def create_vendor_adapter(self) -> VendorAdapter:
        return AsyncSqlAlchemyVendorAdapter()

    def get_vendor_properties(self) -> dict[str, Any]:
        # Attribute refresh after commit would need implicit IO, which AsyncSession forbids.
        return {"expire_on_commit": False, "autoflush": True, **self.properties.properties}

    def get_vendor_callback(self) -> VendorCallback | None:
        return check_dialect


@auto_configuration
@conditional_on_class("sqlalchemy.orm")
@conditional_on_property(MODE_KEY, having_value="sync")
class SqlAlchemyConfiguration(OrmBaseConfiguration):
    """Persistence over a classic ``Engine`` with ``Session`` units of work."""

    def __init__(
        self,
        data_source: Engine,
        properties: PersistenceProperties,
        persistence_unit_manager: PersistenceUnitManager | None = None,
        container: Container | None = None,
    ) -> None:
        super().__init__(data_source, properties, persistence_unit_manager, container)

    def create_vendor_adapter(self) -> VendorAdapter:
        return SqlAlchemyVendorAdapter()

    def get_vendor_properties(self) -> dict[str, Any]:
        return {"expire_on_commit": True, "autoflush": True, **self.properties.properties}

    def get_vendor_callback(self) -> VendorCallback | None:
        return check_dialect


DEFAULT_AUTO_CONFIGURATIONS: tuple[type, ...] = (AsyncSqlAlchemyConfiguration, SqlAlchemyConfiguration)
