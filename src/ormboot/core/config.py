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
"""Configuration with YAML/TOML files, env var overrides, placeholders and binding."""

from __future__ import annotations

import dataclasses
import os
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, get_type_hints

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from ormboot.kernel.exceptions import ConfigurationException

T = TypeVar("T")

_CONFIG_PROPERTIES_ATTR = "__ormboot_config_prefix__"
_ENV_PREFIX = "ORMBOOT_"
_MAX_PLACEHOLDER_DEPTH = 10


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Mark a dataclass or pydantic model as bindable to a configuration prefix.

    Usage:
        @config_properties(prefix="ormboot.persistence")
        class PersistenceProperties(BaseModel):
            show_sql: bool = False
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _CONFIG_PROPERTIES_ATTR, prefix)
        return cls

    return decorator


class Config:
    """Hierarchical configuration with dot-notation access.

    Priority (highest wins):
    1. Environment variables (``ORMBOOT_SECTION_KEY`` format)
    2. Configuration dict / file values
    3. Defaults supplied by the caller or the bound class
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._loaded_sources: list[str] = []

    @property
    def loaded_sources(self) -> list[str]:
        """Config file paths that were loaded, in merge order."""
        return list(self._loaded_sources)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    @classmethod
    def from_file(cls, path: str | Path, active_profiles: list[str] | None = None) -> Config:
        """Load a YAML or TOML file plus ``<stem>-<profile>.<ext>`` overlays.

        A missing base file yields an empty configuration.
        """
        path = Path(path)
        data: dict[str, Any] = {}
        sources: list[str] = []

        if path.is_file():
            data = cls._load_config_data(path)
            sources.append(str(path))
            for profile in active_profiles or []:
                overlay = path.parent / f"{path.stem}-{profile}{path.suffix}"
                if overlay.is_file():
                    data = cls._deep_merge(data, cls._load_config_data(overlay))
                    sources.append(f"{overlay} (profile: {profile})")

        instance = cls(data)
        instance._loaded_sources = sources
        return instance

    @staticmethod
    def _load_config_data(path: Path) -> dict[str, Any]:
        if path.suffix == ".toml":
            with open(path, "rb") as f:
                return tomllib.load(f) or {}
        with open(path) as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        merged = dict(base)
        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = Config._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key, checking env vars first.

        String values containing ``${...}`` placeholders are resolved, see
        :meth:`resolve_placeholders`.
        """
        env_val = self._env_override(key)
        if env_val is not None:
            return env_val

        value = self._lookup(key)
        if value is None:
            return default
        if isinstance(value, str) and "${" in value:
            return self.resolve_placeholders(value)
        return value

    def contains(self, key: str) -> bool:
        """Return True if *key* is set in the environment or the config data."""
        return self._env_override(key) is not None or self._lookup(key) is not None

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Get the raw nested dict stored under *prefix*."""
        current: Any = self._data
        for part in prefix.split("."):
            if not isinstance(current, dict):
                return {}
            current = current.get(part, {})
        return current if isinstance(current, dict) else {}

    @staticmethod
    def _env_override(key: str) -> str | None:
        # ormboot.persistence.show-sql -> ORMBOOT_PERSISTENCE_SHOW_SQL
        env_base = key.removeprefix("ormboot.")
        env_key = _ENV_PREFIX + env_base.upper().replace(".", "_").replace("-", "_")
        return os.environ.get(env_key)

    def _lookup(self, key: str) -> Any:
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
            if current is None:
                return None
        return current

    # ------------------------------------------------------------------
    # Placeholders
    # ------------------------------------------------------------------

    def resolve_placeholders(self, text: str) -> str:
        """Resolve ``${...}`` placeholders in *text*.

        - ``${ENV_VAR}`` is resolved from environment variables
        - ``${config.key}`` is resolved from other config values
        - ``${key:default}`` falls back to *default*, which may itself
          contain placeholders (``${a:${b:true}}``)
        """
        return self._resolve_placeholders(text, 0)

    def _resolve_placeholders(self, text: str, depth: int) -> str:
        if depth > _MAX_PLACEHOLDER_DEPTH:
            raise ConfigurationException(
                f"Max recursion depth exceeded resolving placeholders in '{text}'. "
                "Check for circular references.",
                code="CONFIG_PLACEHOLDER",
            )

        parts: list[str] = []
        pos = 0
        while True:
            start = text.find("${", pos)
            if start < 0:
                parts.append(text[pos:])
                break
            end = _matching_brace(text, start)
            if end < 0:
                raise ConfigurationException(
                    f"Unterminated placeholder in '{text}'", code="CONFIG_PLACEHOLDER"
                )
            parts.append(text[pos:start])
            parts.append(self._resolve_placeholder(text[start + 2 : end], depth))
            pos = end + 1
        return "".join(parts)

    def _resolve_placeholder(self, inner: str, depth: int) -> str:
        key, default = _split_default(inner)

        env_val = os.environ.get(key)
        if env_val is None:
            env_val = self._env_override(key)
        if env_val is not None:
            return env_val

        value = self._lookup(key)
        if value is not None:
            resolved = str(value)
            if "${" in resolved:
                resolved = self._resolve_placeholders(resolved, depth + 1)
            return resolved

        if default is not None:
            return self._resolve_placeholders(default, depth + 1)

        raise ConfigurationException(
            f"Cannot resolve placeholder '${{{inner}}}': not found in environment or config",
            code="CONFIG_PLACEHOLDER",
        )

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def bind(self, config_cls: type[T]) -> T:
        """Bind the section under the class prefix to a ``@config_properties`` class.

        Pydantic models are validated with ``model_validate()`` and fail fast.
        Dataclass fields accept both ``snake_case`` and ``kebab-case`` keys;
        kebab-case wins when both are present.
        """
        prefix = getattr(config_cls, _CONFIG_PROPERTIES_ATTR, None)
        if prefix is None:
            raise ConfigurationException(
                f"{config_cls.__name__} is not decorated with @config_properties",
                code="CONFIG_BINDING",
            )

        section = self.get_section(prefix)

        if isinstance(config_cls, type) and issubclass(config_cls, BaseModel):
            section = dict(section)
            for name in config_cls.model_fields:
                env_val = self._env_override(f"{prefix}.{name}")
                if env_val is not None:
                    section[name.replace("_", "-")] = env_val
            try:
                return config_cls.model_validate(section)
            except ValidationError as exc:
                raise ConfigurationException(
                    f"Configuration validation failed for '{config_cls.__name__}' (prefix='{prefix}'):\n{exc}",
                    code="CONFIG_BINDING",
                    context={"prefix": prefix},
                ) from exc

        hints = get_type_hints(config_cls)
        kwargs: dict[str, Any] = {}
        for field in dataclasses.fields(config_cls):  # type: ignore[arg-type]
            kebab = field.name.replace("_", "-")
            if kebab in section:
                value = section[kebab]
            elif field.name in section:
                value = section[field.name]
            else:
                continue
            kwargs[field.name] = _coerce(value, hints.get(field.name))

        return config_cls(**kwargs)


def _matching_brace(text: str, start: int) -> int:
    """Index of the ``}`` closing the placeholder opened at *start*, or -1."""
    depth = 0
    i = start
    while i < len(text):
        if text.startswith("${", i):
            depth += 1
            i += 2
            continue
        if text[i] == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _split_default(inner: str) -> tuple[str, str | None]:
    """Split ``key:default`` at the first colon outside a nested placeholder."""
    depth = 0
    i = 0
    while i < len(inner):
        if inner.startswith("${", i):
            depth += 1
            i += 2
            continue
        char = inner[i]
        if char == "}":
            depth -= 1
        elif char == ":" and depth == 0:
            return inner[:i], inner[i + 1 :]
        i += 1
    return inner, None


def _coerce(value: Any, expected_type: Any) -> Any:
    if not isinstance(value, str):
        return value
    if expected_type is int:
        return int(value)
    if expected_type is float:
        return float(value)
    if expected_type is bool:
        return value.lower() in ("true", "1", "yes", "on")
    return value
