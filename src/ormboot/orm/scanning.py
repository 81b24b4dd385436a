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
"""Entity scanner — discovers SQLAlchemy-mapped classes in packages."""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
import types
from collections.abc import Iterable

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper

_logger = logging.getLogger(__name__)


def scan_entities(package_names: Iterable[str]) -> list[type]:
    """Import each package (and its subpackages) and collect mapped classes.

    Packages that cannot be imported are logged and skipped. Order follows
    *package_names*, then module discovery order; duplicates are dropped.

    Args:
        package_names: Dotted package names (e.g. ``"myapp.domain"``).

    Returns:
        Mapped entity classes.
    """
    found: dict[type, None] = {}
    for package_name in package_names:
        try:
            module = importlib.import_module(package_name)
        except ImportError:
            _logger.warning("Entity package '%s' could not be imported; skipped", package_name)
            continue

        for cls in scan_module_entities(module):
            found[cls] = None

        if hasattr(module, "__path__"):
            for _importer, modname, _ispkg in pkgutil.walk_packages(module.__path__, prefix=module.__name__ + "."):
                try:
                    submodule = importlib.import_module(modname)
                except ImportError:
                    _logger.warning("Entity module '%s' could not be imported; skipped", modname)
                    continue
                for cls in scan_module_entities(submodule):
                    found[cls] = None

    return list(found)


def scan_module_entities(module: types.ModuleType) -> list[type]:
    """Mapped classes defined (not merely imported) in *module*."""
    return [
        obj
        for _name, obj in inspect.getmembers(module, inspect.isclass)
        if obj.__module__ == module.__name__ and is_entity(obj)
    ]


def is_entity(cls: type) -> bool:
    return isinstance(sa_inspect(cls, raiseerr=False), Mapper)
