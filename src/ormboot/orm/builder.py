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
"""Fluent builder for entity-manager factory definitions.

Usage::

    factory_bean = (
        builder.data_source(engine)
        .packages("myapp.domain")
        .properties({"expire_on_commit": False})
        .build()
    )
    factory = factory_bean.initialize()
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ormboot.orm.factory import EntityManagerFactoryBean
from ormboot.orm.unit_manager import PersistenceUnitManager
from ormboot.orm.vendor import VendorAdapter

VendorCallback = Callable[[EntityManagerFactoryBean], None]


class EntityManagerFactoryBuilder:
    """Creates :class:`EntityManagerFactoryBean` instances sharing one vendor adapter.

    ``properties`` holds the native settings applied to every factory built
    here; ``callback`` runs on each built definition before it is returned.
    """

    def __init__(
        self,
        vendor_adapter: VendorAdapter,
        properties: dict[str, Any] | None = None,
        persistence_unit_manager: PersistenceUnitManager | None = None,
    ) -> None:
        self.vendor_adapter = vendor_adapter
        self.properties: dict[str, Any] = dict(properties or {})
        self.persistence_unit_manager = persistence_unit_manager
        self.callback: VendorCallback | None = None

    def data_source(self, data_source: Any) -> Builder:
        return Builder(self, data_source)


class Builder:
    """One factory definition in progress."""

    def __init__(self, owner: EntityManagerFactoryBuilder, data_source: Any) -> None:
        self._owner = owner
        self._data_source = data_source
        self._packages: list[str] = []
        self._properties: dict[str, Any] = {}
        self._persistence_unit: str | None = None

    def packages(self, *package_names: str) -> Builder:
        self._packages.extend(package_names)
        return self

    def properties(self, properties: dict[str, Any]) -> Builder:
        self._properties.update(properties)
        return self

    def persistence_unit(self, name: str) -> Builder:
        self._persistence_unit = name
        return self

    def build(self) -> EntityManagerFactoryBean:
        owner = self._owner
        bean = EntityManagerFactoryBean(
            self._data_source,
            owner.vendor_adapter,
            packages_to_scan=self._packages,
            persistence_unit_name=self._persistence_unit,
            persistence_unit_manager=owner.persistence_unit_manager,
        )
        property_map = dict(owner.properties)
        property_map.update(self._properties)
        bean.set_property_map(property_map)
        if owner.callback is not None:
            owner.callback(bean)
        return bean
