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
"""Persistence settings bound from ``ormboot.persistence.*``."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ormboot.core.config import config_properties
from ormboot.orm.database import Database


@config_properties(prefix="ormboot.persistence")
class PersistenceProperties(BaseModel):
    """Immutable persistence settings.

    Keys may be written in kebab-case (``show-sql``) or snake_case
    (``show_sql``); when both spellings of a key are present the kebab-case
    one wins.

    ``open_in_view`` and ``mode`` are also read as raw keys by the class
    conditions that gate the web configuration and pick the SQLAlchemy
    variant, since those run before binding. Binding them here validates
    them at startup; ``open_in_view_explicit`` tells whether the setting
    was given at all.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    show_sql: bool = False
    database: Database = Database.DEFAULT
    database_platform: str | None = None
    generate_ddl: bool = False
    open_in_view: bool = True
    properties: dict[str, Any] = Field(default_factory=dict)
    mode: Literal["async", "sync"] = "async"

    @property
    def open_in_view_explicit(self) -> bool:
        return "open_in_view" in self.model_fields_set

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        normalized: dict[str, Any] = {}
        for key, value in data.items():
            snake = key.replace("-", "_")
            if snake in normalized and "-" not in key:
                continue
            normalized[snake] = value
        return normalized

    @field_validator("database", mode="before")
    @classmethod
    def _parse_database(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Database(value)
        return value

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value
