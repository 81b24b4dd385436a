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
"""Persistence units — named groups of entity packages and native settings.

Applications that manage several units register a
:class:`PersistenceUnitManager` bean; the entity-manager factory then pulls
its managed packages and extra settings from the unit it is built for.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ormboot.kernel.exceptions import ConfigurationException

DEFAULT_PERSISTENCE_UNIT_NAME = "default"


@dataclass(frozen=True)
class PersistenceUnitInfo:
    name: str
    managed_packages: tuple[str, ...] = ()
    properties: dict[str, Any] = field(default_factory=dict)


class PersistenceUnitManager(ABC):
    """Source of :class:`PersistenceUnitInfo` definitions."""

    @abstractmethod
    def obtain_default_persistence_unit_info(self) -> PersistenceUnitInfo: ...

    @abstractmethod
    def obtain_persistence_unit_info(self, name: str) -> PersistenceUnitInfo: ...


class DefaultPersistenceUnitManager(PersistenceUnitManager):
    """In-memory unit registry. The first unit added is the default."""

    def __init__(self, *units: PersistenceUnitInfo) -> None:
        self._units: dict[str, PersistenceUnitInfo] = {}
        for unit in units:
            self.add(unit)

    def add(self, unit: PersistenceUnitInfo) -> None:
        if unit.name in self._units:
            raise ConfigurationException(
                f"Duplicate persistence unit '{unit.name}'", code="ORM_PERSISTENCE_UNIT"
            )
        self._units[unit.name] = unit

    def obtain_default_persistence_unit_info(self) -> PersistenceUnitInfo:
        if not self._units:
            raise ConfigurationException("No persistence units defined", code="ORM_PERSISTENCE_UNIT")
        return next(iter(self._units.values()))

    def obtain_persistence_unit_info(self, name: str) -> PersistenceUnitInfo:
        try:
            return self._units[name]
        except KeyError:
            raise ConfigurationException(
                f"No persistence unit named '{name}' (known: {', '.join(self._units) or 'none'})",
                code="ORM_PERSISTENCE_UNIT",
            ) from None
