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
"""Role-keyed singleton container with type-hint based constructor injection."""

from __future__ import annotations

import difflib
import inspect
import types
import typing
from typing import Any, TypeVar, Union, cast, get_args, get_origin

from ormboot.container.bean import is_primary
from ormboot.container.exceptions import (
    BeanCurrentlyInCreationError,
    NoSuchBeanError,
    NoUniqueBeanError,
)
from ormboot.container.registry import Registration

T = TypeVar("T")


class Container:
    """Holds at most one bean per role.

    A role is the type a bean is registered under. Lookups by role match the
    exact registration first, then any registration whose role or instance is
    assignable to the requested type; ``@primary`` breaks ties.
    """

    def __init__(self) -> None:
        self._registrations: dict[Any, Registration] = {}
        self._named: dict[str, Registration] = {}
        self._resolving: dict[Any, None] = {}  # insertion-ordered, O(1) lookup

    @property
    def registrations(self) -> list[Registration]:
        """Registrations in registration order."""
        return list(self._registrations.values())

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, cls: type, *, role: Any = None, name: str = "") -> Registration:
        """Register a class the container constructs on first resolution."""
        reg = Registration(
            role=role or cls,
            impl_type=cls,
            name=name or getattr(cls, "__ormboot_bean_name__", ""),
            primary=is_primary(cls),
        )
        self._add(reg)
        return reg

    def register_instance(
        self,
        role: Any,
        instance: Any,
        *,
        name: str = "",
        primary: bool = False,
        source: str = "",
    ) -> Registration:
        """Register an already-built bean under *role*."""
        reg = Registration(role=role, instance=instance, name=name, primary=primary, source=source)
        self._add(reg)
        return reg

    def remove(self, role: Any) -> None:
        reg = self._registrations.pop(role, None)
        if reg is not None and reg.name and self._named.get(reg.name) is reg:
            del self._named[reg.name]

    def _add(self, reg: Registration) -> None:
        self.remove(reg.role)
        self._registrations[reg.role] = reg
        if reg.name:
            self._named[reg.name] = reg

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def contains(self, name: str) -> bool:
        """Check if a named bean exists."""
        return name in self._named

    def has_bean_of_type(self, bean_type: Any, *, exclude: type | None = None) -> bool:
        """Return True if any registration satisfies *bean_type*.

        Registrations whose implementation class is *exclude* are ignored so a
        conditional class never counts itself.
        """
        return any(
            self._satisfies(reg, bean_type)
            for reg in self._registrations.values()
            if exclude is None or reg.impl_type is not exclude
        )

    @staticmethod
    def _satisfies(reg: Registration, bean_type: Any) -> bool:
        if reg.role == bean_type:
            return True
        if not isinstance(bean_type, type):
            return False
        if isinstance(reg.role, type) and issubclass(reg.role, bean_type):
            return True
        if reg.impl_type is not None and issubclass(reg.impl_type, bean_type):
            return True
        return reg.instance is not None and isinstance(reg.instance, bean_type)

    def _candidates(self, bean_type: Any) -> list[Registration]:
        exact = self._registrations.get(bean_type)
        if exact is not None:
            return [exact]
        return [reg for reg in self._registrations.values() if self._satisfies(reg, bean_type)]

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, bean_type: type[T]) -> T:
        """Resolve the single bean satisfying *bean_type*."""
        candidates = self._candidates(bean_type)
        if not candidates:
            raise NoSuchBeanError(
                bean_type=bean_type,
                suggestions=self._get_similar_type_names(getattr(bean_type, "__name__", "")),
            )
        if len(candidates) == 1:
            return cast(T, self._resolve_registration(candidates[0]))

        primaries = [reg for reg in candidates if reg.primary]
        if len(primaries) == 1:
            return cast(T, self._resolve_registration(primaries[0]))

        raise NoUniqueBeanError(bean_type=bean_type, candidates=[reg.role for reg in candidates])

    def resolve_by_name(self, name: str) -> Any:
        if name not in self._named:
            raise NoSuchBeanError(bean_name=name, suggestions=list(self._named))
        return self._resolve_registration(self._named[name])

    def resolve_all(self, bean_type: type[T]) -> list[T]:
        """Resolve every bean satisfying *bean_type*, in registration order."""
        return [
            self._resolve_registration(reg)
            for reg in self._registrations.values()
            if self._satisfies(reg, bean_type)
        ]

    def resolve_dependency(self, param_type: Any) -> Any:
        """Resolve one injection point.

        ``Optional[T]`` yields ``None`` when nothing matches; ``list[T]`` yields
        every matching bean.
        """
        if get_origin(param_type) is Union or isinstance(param_type, types.UnionType):
            non_none = [a for a in get_args(param_type) if a is not type(None)]
            if len(non_none) == 1:
                try:
                    return self.resolve(non_none[0])
                except (NoSuchBeanError, NoUniqueBeanError):
                    return None

        if get_origin(param_type) is list:
            args = get_args(param_type)
            if args:
                return self.resolve_all(args[0])

        return self.resolve(param_type)

    def _resolve_registration(self, reg: Registration) -> Any:
        if reg.instance is None:
            reg.instance = self._create_instance(reg)
        return reg.instance

    def _create_instance(self, reg: Registration) -> Any:
        impl = reg.impl_type
        if impl is None:
            raise NoSuchBeanError(bean_type=reg.role)
        if impl in self._resolving:
            raise BeanCurrentlyInCreationError(chain=list(self._resolving), current=impl)

        self._resolving[impl] = None
        try:
            init = impl.__init__  # type: ignore[misc]
            if init is object.__init__:
                return impl()

            hints = typing.get_type_hints(init)
            hints.pop("return", None)
            sig = inspect.signature(init)

            kwargs: dict[str, Any] = {}
            for param_name, param_type in hints.items():
                param = sig.parameters.get(param_name)
                has_default = param is not None and param.default is not inspect.Parameter.empty
                try:
                    kwargs[param_name] = self.resolve_dependency(param_type)
                except (NoSuchBeanError, NoUniqueBeanError):
                    if has_default:
                        continue
                    raise NoSuchBeanError(
                        bean_type=param_type,
                        required_by=f"{impl.__qualname__}.__init__()",
                        parameter=f"{param_name}: {getattr(param_type, '__name__', repr(param_type))}",
                        suggestions=self._get_similar_type_names(getattr(param_type, "__name__", "")),
                    ) from None
            return impl(**kwargs)
        finally:
            self._resolving.pop(impl, None)

    def _get_similar_type_names(self, name: str) -> list[str]:
        if not name:
            return []
        registered = [getattr(role, "__name__", repr(role)) for role in self._registrations]
        return difflib.get_close_matches(name, registered, n=5, cutoff=0.4)
