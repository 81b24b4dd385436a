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
"""Conditional decorators — control when configuration classes and @bean methods apply.

Every decorator works on classes and on ``@bean`` methods alike. Conditions
accumulate in ``__ormboot_conditions__`` and are evaluated by
:class:`~ormboot.context.condition_evaluator.ConditionEvaluator`.
"""

from __future__ import annotations

import importlib
from typing import Any, TypeVar

T = TypeVar("T")

_CONDITIONS_ATTR = "__ormboot_conditions__"


def _add_condition(target: T, condition: dict[str, Any]) -> T:
    # Copy rather than append so a subclass never mutates its parent's list.
    conditions = list(getattr(target, _CONDITIONS_ATTR, []))
    conditions.append(condition)
    setattr(target, _CONDITIONS_ATTR, conditions)
    return target


def get_conditions(target: Any) -> list[dict[str, Any]]:
    return list(getattr(target, _CONDITIONS_ATTR, []))


def conditional_on_property(key: str, having_value: str = "", match_if_missing: bool = False) -> Any:
    """Apply only if the config property *key* matches.

    Without *having_value* any value other than ``false`` matches. A missing
    key matches only when *match_if_missing* is set.
    """

    def decorator(target: T) -> T:
        return _add_condition(target, {
            "type": "on_property",
            "key": key,
            "having_value": having_value,
            "match_if_missing": match_if_missing,
        })

    return decorator


def conditional_on_class(module_name: str) -> Any:
    """Apply only if *module_name* is importable."""

    def _check() -> bool:
        try:
            importlib.import_module(module_name)
            return True
        except ImportError:
            return False

    def decorator(target: T) -> T:
        return _add_condition(target, {"type": "on_class", "module_name": module_name, "check": _check})

    return decorator


def conditional_on_bean(bean_type: Any) -> Any:
    """Apply only if a bean satisfying *bean_type* is already registered."""

    def decorator(target: T) -> T:
        return _add_condition(target, {"type": "on_bean", "bean_type": bean_type})

    return decorator


def conditional_on_missing_bean(*bean_types: Any) -> Any:
    """Apply only if no bean satisfies any of *bean_types*.

    On a ``@bean`` method with no arguments, the method's return type is used.
    """

    def decorator(target: T) -> T:
        return _add_condition(target, {"type": "on_missing_bean", "bean_types": tuple(bean_types)})

    return decorator


def conditional_on_web_application() -> Any:
    """Apply only when the context serves web requests."""

    def decorator(target: T) -> T:
        return _add_condition(target, {"type": "on_web_application"})

    return decorator


def conditional_on_expression(expression: str) -> Any:
    """Apply only if *expression* resolves to a truthy string.

    The expression is run through config placeholder resolution, so nested
    fallbacks work: ``${a.key:${legacy.key:true}}``.
    """

    def decorator(target: T) -> T:
        return _add_condition(target, {"type": "on_expression", "expression": expression})

    return decorator


def enable_configuration_properties(*properties_classes: type) -> Any:
    """Bind each ``@config_properties`` class and register it before the configuration is built."""

    def decorator(cls: T) -> T:
        existing = tuple(getattr(cls, "__ormboot_enable_properties__", ()))
        cls.__ormboot_enable_properties__ = existing + properties_classes  # type: ignore[attr-defined]
        return cls

    return decorator


def auto_configuration(cls: T) -> T:
    """Mark a class as auto-configuration.

    Auto-configuration classes:
    - Are processed AFTER user @configuration classes
    - Get implicit @order(1000)
    - Yield to user beans through @conditional_on_missing_bean
    """
    cls.__ormboot_auto_configuration__ = True  # type: ignore[attr-defined]
    cls.__ormboot_injectable__ = True  # type: ignore[attr-defined]
    cls.__ormboot_stereotype__ = "configuration"  # type: ignore[attr-defined]
    if "__ormboot_order__" not in cls.__dict__:  # type: ignore[attr-defined]
        cls.__ormboot_order__ = 1000  # type: ignore[attr-defined]
    return cls
