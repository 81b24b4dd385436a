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
"""Environment — property access plus the web-application signal."""

from __future__ import annotations

import enum
from typing import Any

from ormboot.core.config import Config
from ormboot.kernel.exceptions import ConfigurationException

WEB_APPLICATION_TYPE_KEY = "ormboot.main.web-application-type"


class WebApplicationType(enum.Enum):
    NONE = "none"
    ASGI = "asgi"


class Environment:
    """Read-only view over the configuration for condition evaluation.

    The web-application type is decided once, in priority order:
    1. the ``web_application`` constructor argument
    2. the ``ormboot.main.web-application-type`` property (``none`` | ``asgi``)
    3. ``NONE``
    """

    def __init__(self, config: Config, *, web_application: bool | None = None) -> None:
        self._config = config
        self._web_application_type = self._deduce_web_application_type(web_application)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def web_application_type(self) -> WebApplicationType:
        return self._web_application_type

    @property
    def is_web_application(self) -> bool:
        return self._web_application_type is not WebApplicationType.NONE

    def get_property(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def resolve_placeholders(self, text: str) -> str:
        return self._config.resolve_placeholders(text)

    def _deduce_web_application_type(self, web_application: bool | None) -> WebApplicationType:
        if web_application is not None:
            return WebApplicationType.ASGI if web_application else WebApplicationType.NONE

        raw = self._config.get(WEB_APPLICATION_TYPE_KEY)
        if raw is None:
            return WebApplicationType.NONE
        try:
            return WebApplicationType(str(raw).strip().lower())
        except ValueError:
            allowed = ", ".join(t.value for t in WebApplicationType)
            raise ConfigurationException(
                f"Invalid {WEB_APPLICATION_TYPE_KEY} '{raw}' (expected one of: {allowed})",
                code="CONFIG_WEB_APPLICATION_TYPE",
            ) from None
