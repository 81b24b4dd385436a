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
"""Condition evaluator — evaluates @conditional_on_* decorators during startup."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ormboot.context.conditions import get_conditions

if TYPE_CHECKING:
    from ormboot.container.container import Container
    from ormboot.context.environment import Environment


# Condition types that depend on the bean registry (evaluated in the bean pass).
_BEAN_DEPENDENT_TYPES = frozenset({"on_bean", "on_missing_bean"})

_TRUTHY = frozenset({"true", "1", "yes", "on"})


class ConditionEvaluator:
    """Evaluates conditions attached to configuration classes and @bean methods.

    Two passes:
    - **Registration pass:** conditions independent of the bean registry
      (``on_property``, ``on_class``, ``on_web_application``, ``on_expression``).
    - **Bean pass:** ``on_bean`` / ``on_missing_bean`` against what is
      registered at the moment of evaluation.
    """

    def __init__(self, environment: Environment, container: Container) -> None:
        self._environment = environment
        self._container = container

    def should_include(
        self,
        target: Any,
        *,
        bean_pass: bool = False,
        declaring: type | None = None,
        return_type: Any = None,
    ) -> bool:
        """Return True if every condition of the requested pass holds.

        Args:
            target: The class or @bean function carrying the conditions.
            bean_pass: Evaluate bean-dependent conditions instead of the others.
            declaring: Class whose own registration must not satisfy a
                missing-bean check (defaults to *target* when it is a class).
            return_type: Role used by ``conditional_on_missing_bean()`` with
                no explicit types.
        """
        if declaring is None and isinstance(target, type):
            declaring = target
        for cond in get_conditions(target):
            if (cond["type"] in _BEAN_DEPENDENT_TYPES) != bean_pass:
                continue
            if not self._evaluate(cond, declaring=declaring, return_type=return_type):
                return False
        return True

    def matches(self, target: Any, *, declaring: type | None = None, return_type: Any = None) -> bool:
        """Run both passes, for targets that are only examined once (bean methods, nested classes)."""
        return self.should_include(
            target, bean_pass=False, declaring=declaring, return_type=return_type
        ) and self.should_include(target, bean_pass=True, declaring=declaring, return_type=return_type)

    # ------------------------------------------------------------------
    # Individual condition evaluators
    # ------------------------------------------------------------------

    def _evaluate(self, cond: dict, *, declaring: type | None, return_type: Any) -> bool:
        cond_type = cond["type"]
        if cond_type == "on_property":
            return self._eval_on_property(cond)
        if cond_type == "on_class":
            return cond["check"]()
        if cond_type == "on_web_application":
            return self._environment.is_web_application
        if cond_type == "on_expression":
            return self._eval_on_expression(cond)
        if cond_type == "on_bean":
            return self._container.has_bean_of_type(cond["bean_type"], exclude=declaring)
        if cond_type == "on_missing_bean":
            return self._eval_on_missing_bean(cond, declaring, return_type)
        return True  # Unknown condition type

    def _eval_on_property(self, cond: dict) -> bool:
        value = self._environment.get_property(cond["key"])
        if value is None:
            return bool(cond["match_if_missing"])
        if cond["having_value"]:
            return str(value).lower() == cond["having_value"].lower()
        return str(value).lower() != "false"

    def _eval_on_expression(self, cond: dict) -> bool:
        resolved = self._environment.resolve_placeholders(cond["expression"])
        return resolved.strip().lower() in _TRUTHY

    def _eval_on_missing_bean(self, cond: dict, declaring: type | None, return_type: Any) -> bool:
        bean_types = cond["bean_types"] or ((return_type,) if return_type is not None else ())
        return not any(self._container.has_bean_of_type(t, exclude=declaring) for t in bean_types)
