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
"""Entity-manager factory — the long-lived persistence handle and its definition."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy import MetaData
from sqlalchemy import inspect as sa_inspect

from ormboot.kernel.exceptions import ConfigurationException, IllegalStateException
from ormboot.orm.scanning import scan_entities
from ormboot.orm.unit_manager import (
    DEFAULT_PERSISTENCE_UNIT_NAME,
    PersistenceUnitInfo,
    PersistenceUnitManager,
)
from ormboot.orm.vendor import VendorAdapter

_logger = logging.getLogger(__name__)

# Property-map keys forwarded to the session factory.
SESSION_OPTIONS = ("expire_on_commit", "autoflush", "autobegin")

_DDL_MODES = frozenset({"none", "create", "create-drop"})


class EntityManagerFactoryBean:
    """Definition of an entity-manager factory, open to adjustment until initialized.

    Property maps merge in this order, later wins: vendor adapter map,
    persistence unit properties, then this bean's own map.
    """

    def __init__(
        self,
        data_source: Any,
        vendor_adapter: VendorAdapter,
        *,
        packages_to_scan: list[str] | None = None,
        persistence_unit_name: str | None = None,
        persistence_unit_manager: PersistenceUnitManager | None = None,
    ) -> None:
        self.data_source = data_source
        self.vendor_adapter = vendor_adapter
        self.packages_to_scan: list[str] = list(packages_to_scan or [])
        self.persistence_unit_name = persistence_unit_name
        self.persistence_unit_manager = persistence_unit_manager
        self._property_map: dict[str, Any] = {}

    @property
    def property_map(self) -> dict[str, Any]:
        return dict(self._property_map)

    def set_property_map(self, properties: dict[str, Any]) -> None:
        self._property_map = dict(properties)

    def add_property(self, key: str, value: Any) -> None:
        self._property_map[key] = value

    def initialize(self) -> EntityManagerFactory:
        """Scan entities, apply native settings and build the factory."""
        self.vendor_adapter.check_data_source(self.data_source)

        unit = self._resolve_persistence_unit()
        packages = list(self.packages_to_scan)
        packages.extend(p for p in unit.managed_packages if p not in packages)

        merged = self.vendor_adapter.get_property_map()
        merged.update(unit.properties)
        merged.update(self._property_map)

        entity_classes = scan_entities(packages)
        metadatas = _collect_metadata(entity_classes)

        if merged.get("echo"):
            self.data_source.echo = True

        session_options = {key: merged[key] for key in SESSION_OPTIONS if key in merged}
        session_factory = self.vendor_adapter.create_session_factory(self.data_source, **session_options)

        _logger.info(
            "Initialized entity-manager factory '%s' (%d entities from %d package(s))",
            unit.name,
            len(entity_classes),
            len(packages),
        )
        return EntityManagerFactory(
            name=unit.name,
            data_source=self.data_source,
            vendor_adapter=self.vendor_adapter,
            session_factory=session_factory,
            entity_classes=entity_classes,
            metadatas=metadatas,
            property_map=merged,
        )

    def _resolve_persistence_unit(self) -> PersistenceUnitInfo:
        manager = self.persistence_unit_manager
        if manager is None:
            return PersistenceUnitInfo(name=self.persistence_unit_name or DEFAULT_PERSISTENCE_UNIT_NAME)
        if self.persistence_unit_name:
            return manager.obtain_persistence_unit_info(self.persistence_unit_name)
        return manager.obtain_default_persistence_unit_info()


class EntityManagerFactory:
    """Creates entity managers (SQLAlchemy sessions) for one persistence unit.

    Implements ``start()``/``stop()`` so the application context runs schema
    generation on startup. ``ddl_auto`` in the property map selects the
    strategy:

    * ``create`` — create missing tables (the default when ``generate_ddl`` is set)
    * ``create-drop`` — create on start, drop on stop
    * ``none`` — leave the schema alone
    """

    def __init__(
        self,
        *,
        name: str,
        data_source: Any,
        vendor_adapter: VendorAdapter,
        session_factory: Callable[[], Any],
        entity_classes: list[type],
        metadatas: list[MetaData],
        property_map: dict[str, Any],
    ) -> None:
        self._name = name
        self._data_source = data_source
        self._vendor_adapter = vendor_adapter
        self._session_factory = session_factory
        self._entity_classes = list(entity_classes)
        self._metadatas = list(metadatas)
        self._property_map = dict(property_map)
        self._ddl_auto = self._resolve_ddl_auto()
        self._open = True

    @property
    def name(self) -> str:
        return self._name

    @property
    def data_source(self) -> Any:
        return self._data_source

    @property
    def vendor_adapter(self) -> VendorAdapter:
        return self._vendor_adapter

    @property
    def session_factory(self) -> Callable[[], Any]:
        return self._session_factory

    @property
    def entity_classes(self) -> list[type]:
        return list(self._entity_classes)

    @property
    def property_map(self) -> dict[str, Any]:
        return dict(self._property_map)

    @property
    def is_open(self) -> bool:
        return self._open

    def create_entity_manager(self) -> Any:
        """Open a new session. The caller owns it and must close it."""
        if not self._open:
            raise IllegalStateException(f"Entity-manager factory '{self._name}' is closed")
        return self._session_factory()

    async def close_entity_manager(self, session: Any) -> None:
        await self._vendor_adapter.close(session)

    async def start(self) -> None:
        if self._ddl_auto == "none":
            return
        _logger.info("Initializing database schema (ddl-auto=%s)", self._ddl_auto)
        for metadata in self._metadatas:
            await self._vendor_adapter.run_ddl(self._data_source, metadata.create_all)
        _logger.info(
            "Database schema initialized (%d tables)", sum(len(m.tables) for m in self._metadatas)
        )

    async def stop(self) -> None:
        if self._open and self._ddl_auto == "create-drop":
            _logger.info("Dropping database schema (ddl-auto=create-drop)")
            for metadata in reversed(self._metadatas):
                await self._vendor_adapter.run_ddl(self._data_source, metadata.drop_all)
        self._open = False

    def _resolve_ddl_auto(self) -> str:
        default = "create" if self._property_map.get("generate_ddl") else "none"
        mode = str(self._property_map.get("ddl_auto", default)).strip().lower()
        if mode not in _DDL_MODES:
            raise ConfigurationException(
                f"Invalid ddl_auto '{mode}' (expected one of: {', '.join(sorted(_DDL_MODES))})",
                code="ORM_DDL_AUTO",
            )
        return mode

    def __repr__(self) -> str:
        return f"EntityManagerFactory(name={self._name!r}, entities={len(self._entity_classes)}, open={self._open})"


def _collect_metadata(entity_classes: list[type]) -> list[MetaData]:
    found: dict[int, MetaData] = {}
    for cls in entity_classes:
        metadata = getattr(sa_inspect(cls).local_table, "metadata", None)
        if isinstance(metadata, MetaData):
            found.setdefault(id(metadata), metadata)
    return list(found.values())
