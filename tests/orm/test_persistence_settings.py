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
"""Tests for Database and PersistenceProperties binding."""

import pytest
from pydantic import ValidationError

from ormboot.core.config import Config
from ormboot.kernel.exceptions import ConfigurationException
from ormboot.orm.database import Database
from ormboot.orm.properties import PersistenceProperties


class TestDatabase:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("postgresql", Database.POSTGRESQL), ("SQL_SERVER", Database.SQL_SERVER), ("sql-server", Database.SQL_SERVER)],
    )
    def test_parses_case_insensitively(self, raw, expected):
        assert Database(raw) is expected

    def test_unknown_value_raises(self):
        with pytest.raises(ValueError):
            Database("db2")

    def test_dialect_names(self):
        assert Database.DEFAULT.dialect is None
        assert Database.SQL_SERVER.dialect == "mssql"
        assert Database.SQLITE.dialect == "sqlite"


class TestPersistenceProperties:
    def test_defaults(self):
        props = Config({}).bind(PersistenceProperties)
        assert props.show_sql is False
        assert props.database is Database.DEFAULT
        assert props.database_platform is None
        assert props.generate_ddl is False
        assert props.open_in_view is True
        assert props.open_in_view_explicit is False
        assert props.properties == {}
        assert props.mode == "async"

    def test_kebab_case_keys(self):
        config = Config(
            {
                "ormboot": {
                    "persistence": {
                        "show-sql": True,
                        "database": "postgresql",
                        "database-platform": "postgresql+asyncpg",
                        "generate-ddl": "true",
                        "properties": {"ddl_auto": "create-drop"},
                        "mode": "SYNC",
                    }
                }
            }
        )
        props = config.bind(PersistenceProperties)
        assert props.show_sql is True
        assert props.database is Database.POSTGRESQL
        assert props.database_platform == "postgresql+asyncpg"
        assert props.generate_ddl is True
        assert props.properties == {"ddl_auto": "create-drop"}
        assert props.mode == "sync"

    def test_kebab_case_wins_over_legacy_spelling(self):
        config = Config({"ormboot": {"persistence": {"open_in_view": True, "open-in-view": False}}})
        assert config.bind(PersistenceProperties).open_in_view is False

        config = Config({"ormboot": {"persistence": {"open-in-view": False, "open_in_view": True}}})
        assert config.bind(PersistenceProperties).open_in_view is False

    def test_legacy_spelling_alone(self):
        config = Config({"ormboot": {"persistence": {"open_in_view": False}}})
        assert config.bind(PersistenceProperties).open_in_view is False

    @pytest.mark.parametrize("key", ["open-in-view", "open_in_view"])
    def test_explicit_open_in_view_is_recorded(self, key):
        props = Config({"ormboot": {"persistence": {key: True}}}).bind(PersistenceProperties)
        assert props.open_in_view is True
        assert props.open_in_view_explicit is True

    def test_open_in_view_from_environment_is_explicit(self, monkeypatch):
        monkeypatch.setenv("ORMBOOT_PERSISTENCE_OPEN_IN_VIEW", "false")
        props = Config({}).bind(PersistenceProperties)
        assert props.open_in_view is False
        assert props.open_in_view_explicit is True

    def test_unknown_database_is_a_configuration_error(self):
        config = Config({"ormboot": {"persistence": {"database": "informix"}}})
        with pytest.raises(ConfigurationException):
            config.bind(PersistenceProperties)

    def test_unknown_mode_is_a_configuration_error(self):
        config = Config({"ormboot": {"persistence": {"mode": "reactive"}}})
        with pytest.raises(ConfigurationException):
            config.bind(PersistenceProperties)

    def test_immutable(self):
        props = PersistenceProperties()
        with pytest.raises(ValidationError):
            props.show_sql = True  # type: ignore[misc]
