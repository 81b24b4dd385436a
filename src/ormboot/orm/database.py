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
"""Supported database kinds and their SQLAlchemy dialect names."""

from __future__ import annotations

import enum

_DIALECTS: dict[str, str] = {
    "MYSQL": "mysql",
    "MARIADB": "mariadb",
    "ORACLE": "oracle",
    "POSTGRESQL": "postgresql",
    "SQL_SERVER": "mssql",
    "SQLITE": "sqlite",
}


class Database(enum.Enum):
    """Target database. ``DEFAULT`` leaves detection to the engine."""

    DEFAULT = "DEFAULT"
    MYSQL = "MYSQL"
    MARIADB = "MARIADB"
    ORACLE = "ORACLE"
    POSTGRESQL = "POSTGRESQL"
    SQL_SERVER = "SQL_SERVER"
    SQLITE = "SQLITE"

    @classmethod
    def _missing_(cls, value: object) -> Database | None:
        if isinstance(value, str):
            normalized = value.strip().upper().replace("-", "_")
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def dialect(self) -> str | None:
        """SQLAlchemy dialect name, ``None`` for ``DEFAULT``."""
        return _DIALECTS.get(self.value)
