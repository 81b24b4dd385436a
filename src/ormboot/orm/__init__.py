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
"""ormboot ORM — SQLAlchemy persistence auto-configuration."""

from ormboot.orm.auto_configuration import AsyncSqlAlchemyConfiguration, SqlAlchemyConfiguration
from ormboot.orm.base_configuration import OrmBaseConfiguration
from ormboot.orm.builder import EntityManagerFactoryBuilder
from ormboot.orm.database import Database
from ormboot.orm.factory import EntityManagerFactory, EntityManagerFactoryBean
from ormboot.orm.properties import PersistenceProperties
from ormboot.orm.scanning import scan_entities
from ormboot.orm.support import (
    EntityManagerHolder,
    OpenEntityManagerInViewFilter,
    OpenEntityManagerInViewInterceptor,
)
from ormboot.orm.transaction import OrmTransactionManager, TransactionManager
from ormboot.orm.unit_manager import (
    DefaultPersistenceUnitManager,
    PersistenceUnitInfo,
    PersistenceUnitManager,
)
from ormboot.orm.vendor import AsyncSqlAlchemyVendorAdapter, SqlAlchemyVendorAdapter, VendorAdapter

__all__ = [
    "AsyncSqlAlchemyConfiguration",
    "AsyncSqlAlchemyVendorAdapter",
    "Database",
    "DefaultPersistenceUnitManager",
    "EntityManagerFactory",
    "EntityManagerFactoryBean",
    "EntityManagerFactoryBuilder",
    "EntityManagerHolder",
    "OpenEntityManagerInViewFilter",
    "OpenEntityManagerInViewInterceptor",
    "OrmBaseConfiguration",
    "OrmTransactionManager",
    "PersistenceProperties",
    "PersistenceUnitInfo",
    "PersistenceUnitManager",
    "SqlAlchemyConfiguration",
    "SqlAlchemyVendorAdapter",
    "TransactionManager",
    "VendorAdapter",
    "scan_entities",
]
