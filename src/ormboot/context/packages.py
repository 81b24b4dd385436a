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
"""Registry of base packages that auto-configuration scans (e.g. for ORM entities)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ormboot.kernel.exceptions import IllegalStateException

if TYPE_CHECKING:
    from ormboot.container.container import Container


class BasePackages:
    """Ordered package names, held as a bean in the container."""

    def __init__(self, *names: str) -> None:
        self._names: list[str] = list(names)

    @property
    def names(self) -> list[str]:
        return list(self._names)

    def add(self, *names: str) -> None:
        self._names.extend(names)

    def __repr__(self) -> str:
        return f"BasePackages({self._names!r})"


class AutoConfigurationPackages:
    """Static helpers to record and query the auto-configuration packages."""

    @staticmethod
    def register(container: Container, *package_names: str) -> None:
        """Append *package_names* to the registry, creating it on first use."""
        if container.has_bean_of_type(BasePackages):
            container.resolve(BasePackages).add(*package_names)
        else:
            container.register_instance(BasePackages, BasePackages(*package_names))

    @staticmethod
    def has(container: Container) -> bool:
        return container.has_bean_of_type(BasePackages)

    @staticmethod
    def get(container: Container) -> list[str]:
        if not container.has_bean_of_type(BasePackages):
            raise IllegalStateException(
                "Unable to retrieve auto-configuration packages; none have been registered"
            )
        return container.resolve(BasePackages).names
