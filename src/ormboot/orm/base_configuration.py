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
"""Base persistence auto-configuration shared by every SQLAlchemy flavour.

Produces, each only when the application has not registered one already:

* ``VendorAdapter`` from :class:`PersistenceProperties`
* ``EntityManagerFactoryBuilder`` around that adapter
* the primary ``EntityManagerFactory`` for the configured data source
* a ``TransactionManager`` over that factory
* in web applications, an ``OpenEntityManagerInViewInterceptor``
"""

# NOTE: No `from __future__ import annotations`: typing.get_type_hints()
# must resolve return types at runtime for @bean method registration.

import logging
from abc import ABC, abstractmethod
from typing import Any

from ormboot.container.bean import bean, primary
from ormboot.container.container import Container
from ormboot.container.stereotypes import configuration
from ormboot.context.conditions import (
    conditional_on_expression,
    conditional_on_missing_bean,
    conditional_on_web_application,
    enable_configuration_properties,
)
from ormboot.context.packages import AutoConfigurationPackages
from ormboot.orm.builder import EntityManagerFactoryBuilder, VendorCallback
from ormboot.orm.factory import EntityManagerFactory, EntityManagerFactoryBean
from ormboot.orm.properties import PersistenceProperties
from ormboot.orm.support import OpenEntityManagerInViewFilter, OpenEntityManagerInViewInterceptor
from ormboot.orm.transaction import OrmTransactionManager, TransactionManager
from ormboot.orm.unit_manager import PersistenceUnitManager
from ormboot.orm.vendor import VendorAdapter
from ormboot.web.interceptors import InterceptorRegistry, WebMvcConfigurer

_logger = logging.getLogger(__name__)

OPEN_IN_VIEW_KEY = "ormboot.persistence.open-in-view"
LEGACY_OPEN_IN_VIEW_KEY = "ormboot.persistence.open_in_view"
OPEN_IN_VIEW_EXPRESSION = f"${{{OPEN_IN_VIEW_KEY}:${{{LEGACY_OPEN_IN_VIEW_KEY}:true}}}}"


@enable_configuration_properties(PersistenceProperties)
class OrmBaseConfiguration(ABC):
    """Conditional wiring of the persistence layer.

    Subclasses pick the SQLAlchemy flavour: they declare the data-source type
    on their constructor and implement the three vendor hooks.
    """

    def __init__(
        self,
        data_source: Any,
        properties: PersistenceProperties,
        persistence_unit_manager: PersistenceUnitManager | None = None,
        container: Container | None = None,
    ) -> None:
        self.data_source = data_source
        self.properties = properties
        self.persistence_unit_manager = persistence_unit_manager
        self.container = container

    @bean
    @conditional_on_missing_bean(TransactionManager)
    def transaction_manager(self, entity_manager_factory: EntityManagerFactory) -> TransactionManager:
        return OrmTransactionManager(entity_manager_factory)

    @bean
    @conditional_on_missing_bean()
    def vendor_adapter(self) -> VendorAdapter:
        """Vendor adapter carrying the four portable settings, copied as configured."""
        adapter = self.create_vendor_adapter()
        adapter.show_sql = self.properties.show_sql
        adapter.database = self.properties.database
        adapter.database_platform = self.properties.database_platform
        adapter.generate_ddl = self.properties.generate_ddl
        return adapter

    @bean
    @conditional_on_missing_bean()
    def entity_manager_factory_builder(self, vendor_adapter: VendorAdapter) -> EntityManagerFactoryBuilder:
        builder = EntityManagerFactoryBuilder(
            vendor_adapter, dict(self.properties.properties), self.persistence_unit_manager
        )
        builder.callback = self.get_vendor_callback()
        return builder

    @bean
    @primary
    @conditional_on_missing_bean()
    def entity_manager_factory(
        self, entity_manager_factory_builder: EntityManagerFactoryBuilder
    ) -> EntityManagerFactory:
        factory_bean = (
            entity_manager_factory_builder.data_source(self.data_source)
            .packages(*self.get_packages_to_scan())
            .properties(self.get_vendor_properties())
            .build()
        )
        self.configure(factory_bean)
        return factory_bean.initialize()

    def get_packages_to_scan(self) -> list[str]:
        """Auto-configuration packages in registration order, empty when none are registered."""
        if self.container is None or not AutoConfigurationPackages.has(self.container):
            return []
        return AutoConfigurationPackages.get(self.container)

    def configure(self, factory_bean: EntityManagerFactoryBean) -> None:
        """Hook to adjust the factory definition before it is initialized."""

    @abstractmethod
    def create_vendor_adapter(self) -> VendorAdapter: ...

    @abstractmethod
    def get_vendor_properties(self) -> dict[str, Any]:
        """Native settings added to every factory built by this configuration."""

    @abstractmethod
    def get_vendor_callback(self) -> VendorCallback | None:
        """Completion step run on each factory definition the builder produces."""

    @configuration
    @conditional_on_web_application()
    @conditional_on_missing_bean(OpenEntityManagerInViewInterceptor, OpenEntityManagerInViewFilter)
    @conditional_on_expression(OPEN_IN_VIEW_EXPRESSION)
    class OrmWebConfiguration(WebMvcConfigurer):
        """Binds one entity manager per web request."""

        def __init__(
            self, entity_manager_factory: EntityManagerFactory, properties: PersistenceProperties
        ) -> None:
            self._entity_manager_factory = entity_manager_factory
            self._properties = properties
            self._interceptor: OpenEntityManagerInViewInterceptor | None = None

        @bean
        def open_entity_manager_in_view_interceptor(self) -> OpenEntityManagerInViewInterceptor:
            if self._interceptor is None:
                if not self._properties.open_in_view_explicit:
                    _logger.warning(
                        "%s is enabled by default. Database queries may be performed while "
                        "rendering responses. Set %s explicitly to disable this warning",
                        OPEN_IN_VIEW_KEY,
                        OPEN_IN_VIEW_KEY,
                    )
                self._interceptor = OpenEntityManagerInViewInterceptor(self._entity_manager_factory)
            return self._interceptor

        def add_interceptors(self, registry: InterceptorRegistry) -> None:
            registry.add_web_request_interceptor(self.open_entity_manager_in_view_interceptor())
