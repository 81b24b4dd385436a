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
"""Tests for ${key:default} placeholder resolution, including nested defaults."""

import pytest

from ormboot.core.config import Config
from ormboot.kernel.exceptions import ConfigurationException

OPEN_IN_VIEW = "${ormboot.persistence.open-in-view:${ormboot.persistence.open_in_view:true}}"


class TestNestedDefaults:
    def test_both_keys_absent_uses_innermost_default(self):
        assert Config({}).resolve_placeholders(OPEN_IN_VIEW) == "true"

    def test_primary_key_wins(self):
        config = Config({"ormboot": {"persistence": {"open-in-view": False, "open_in_view": True}}})
        assert config.resolve_placeholders(OPEN_IN_VIEW).lower() == "false"

    def test_legacy_key_used_when_primary_absent(self):
        config = Config({"ormboot": {"persistence": {"open_in_view": False}}})
        assert config.resolve_placeholders(OPEN_IN_VIEW).lower() == "false"


class TestPlaceholders:
    def test_text_around_placeholders_is_kept(self):
        config = Config({"db": {"host": "localhost", "port": 5432}})
        assert config.resolve_placeholders("postgresql://${db.host}:${db.port}/app") == (
            "postgresql://localhost:5432/app"
        )

    def test_environment_variable(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("DB_HOST", "db.internal")
        assert Config({}).resolve_placeholders("${DB_HOST}") == "db.internal"

    def test_value_referencing_other_key_is_resolved_on_get(self):
        config = Config({"app": {"name": "ledger", "schema": "${app.name}_v1"}})
        assert config.get("app.schema") == "ledger_v1"

    def test_empty_default(self):
        assert Config({}).resolve_placeholders("[${missing.key:}]") == "[]"

    def test_unresolvable_placeholder_raises(self):
        with pytest.raises(ConfigurationException) as exc_info:
            Config({}).resolve_placeholders("${missing.key}")
        assert exc_info.value.code == "CONFIG_PLACEHOLDER"

    def test_unterminated_placeholder_raises(self):
        with pytest.raises(ConfigurationException):
            Config({}).resolve_placeholders("${missing.key")

    def test_circular_reference_raises(self):
        config = Config({"a": "${b}", "b": "${a}"})
        with pytest.raises(ConfigurationException, match="circular"):
            config.resolve_placeholders("${a}")
