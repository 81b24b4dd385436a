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
"""Application bootstrap — the entry point for ormboot applications."""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from ormboot.container.exceptions import BeanCreationException
from ormboot.core.config import Config
from ormboot.logging.structlog_adapter import StructlogAdapter

if TYPE_CHECKING:
    from ormboot.context.application_context import ApplicationContext

T = TypeVar("T")

_PROFILES_ENV = "ORMBOOT_PROFILES_ACTIVE"


def ormboot_application(
    name: str,
    version: str = "0.1.0",
    scan_packages: list[str] | None = None,
) -> Any:
    """Decorator marking a class as an ormboot application entry point.

    *scan_packages* become the auto-configuration packages scanned for
    entities.
    """

    def decorator(cls: type[T]) -> type[T]:
        cls.__ormboot_app_name__ = name  # type: ignore[attr-defined]
        cls.__ormboot_app_version__ = version  # type: ignore[attr-defined]
        cls.__ormboot_scan_packages__ = list(scan_packages or [])  # type: ignore[attr-defined]
        return cls

    return decorator


class OrmBootApplication:
    """Bootstraps logging, the application context and persistence auto-configuration.

    Startup sequence:
    1. Load configuration (explicit ``Config``, a config file, or empty)
    2. Configure logging from ``ormboot.logging``
    3. Register the application's scan packages as auto-configuration packages
    4. Register the default auto-configuration classes
    5. ``startup()`` starts the context; ``shutdown()`` stops it

    Beans the embedding environment supplies (the data source, most of all)
    are registered on :attr:`context` before ``startup()``.
    """

    def __init__(
        self,
        app_class: type,
        config: Config | None = None,
        *,
        config_path: str | Path | None = None,
        web_application: bool | None = None,
    ) -> None:
        self._app_class = app_class
        self._name: str = getattr(app_class, "__ormboot_app_name__", "ormboot-app")
        self._version: str = getattr(app_class, "__ormboot_app_version__", "0.1.0")
        self._scan_packages: list[str] = getattr(app_class, "__ormboot_scan_packages__", [])
        self._startup_time: float = 0.0

        if config is not None:
            self.config = config
        elif config_path is not None:
            profiles = [p.strip() for p in os.environ.get(_PROFILES_ENV, "").split(",") if p.strip()]
            self.config = Config.from_file(config_path, active_profiles=profiles)
        else:
            self.config = Config()

        self._logging = StructlogAdapter()
        self._logging.configure(self.config)
        self._logger = self._logging.get_logger("ormboot.core")

        # Deferred imports to avoid circular imports
        from ormboot.context.application_context import ApplicationContext
        from ormboot.context.packages import AutoConfigurationPackages
        from ormboot.orm.auto_configuration import DEFAULT_AUTO_CONFIGURATIONS

        self._context = ApplicationContext(self.config, web_application=web_application)
        if self._scan_packages:
            AutoConfigurationPackages.register(self._context.container, *self._scan_packages)
        for auto_config in DEFAULT_AUTO_CONFIGURATIONS:
            self._context.register_bean(auto_config)

    @property
    def name(self) -> str:
        return self._name

    @property
    def context(self) -> ApplicationContext:
        return self._context

    @property
    def startup_time_seconds(self) -> float:
        return self._startup_time

    async def startup(self) -> None:
        start = time.perf_counter()
        self._logger.info("starting_application", app=self._name, version=self._version, pid=os.getpid())
        for source in self.config.loaded_sources:
            self._logger.info("loaded_config", source=source)

        try:
            await self._context.start()
        except BeanCreationException as exc:
            self._logger.error(
                "application_failed",
                app=self._name,
                error=str(exc),
                subsystem=exc.subsystem,
                provider=exc.provider,
            )
            raise

        self._startup_time = time.perf_counter() - start
        self._logger.info(
            "application_started",
            app=self._name,
            startup_time_s=round(self._startup_time, 3),
            beans_initialized=self._context.bean_count,
        )

    async def shutdown(self) -> None:
        await self._context.stop()
        self._logger.info("application_stopped", app=self._name)
