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
"""ApplicationContext — the bean registry and startup sequence."""

from __future__ import annotations

import inspect
import logging
import typing
from collections.abc import Callable
from typing import Any, TypeVar

from ormboot.container.bean import is_primary
from ormboot.container.container import Container
from ormboot.container.exceptions import BeanCreationException, BeanCurrentlyInCreationError
from ormboot.container.ordering import get_order
from ormboot.container.stereotypes import is_configuration
from ormboot.context.condition_evaluator import ConditionEvaluator
from ormboot.context.environment import Environment
from ormboot.core.config import Config
from ormboot.kernel.lifecycle import Lifecycle
from ormboot.web.interceptors import InterceptorRegistry, WebMvcConfigurer

T = TypeVar("T")

_logger = logging.getLogger(__name__)


class _BeanMethod:
    """A @bean function declared on a configuration class."""

    __slots__ = ("name", "func", "hints", "return_type")

    def __init__(self, name: str, func: Callable[..., Any]) -> None:
        self.name = name
        self.func = func
        self.hints = typing.get_type_hints(func)
        self.return_type = self.hints.pop("return", None)

    @property
    def bean_name(self) -> str:
        return getattr(self.func, "__ormboot_bean_name__", "") or self.name


class ApplicationContext:
    """Central bean registry and lifecycle manager.

    Wraps the :class:`Container` and adds configuration-class processing with
    conditional @bean methods, configuration-properties binding, web
    interceptor registration and :class:`Lifecycle` management.

    Beans registered before :meth:`start` (instances or classes) take
    precedence: auto-configuration guarded by ``@conditional_on_missing_bean``
    yields to them.
    """

    def __init__(self, config: Config, *, web_application: bool | None = None) -> None:
        self._config = config
        self._container = Container()
        self._environment = Environment(config, web_application=web_application)
        self._lifecycle_beans: list[Lifecycle] = []
        self._started = False

        self._container.register_instance(Container, self._container)
        self._container.register_instance(Config, config)
        self._container.register_instance(Environment, self._environment)

    # ------------------------------------------------------------------
    # Bean registration
    # ------------------------------------------------------------------

    def register_bean(self, cls: type, *, name: str = "", role: Any = None) -> None:
        """Register a class; the container builds it with constructor injection."""
        self._container.register(cls, role=role, name=name)

    def register_instance(
        self,
        instance: Any,
        *,
        role: Any = None,
        name: str = "",
        primary: bool = False,
    ) -> None:
        """Register a bean supplied by the embedding environment."""
        self._container.register_instance(
            role or type(instance), instance, name=name, primary=primary, source="external"
        )

    # ------------------------------------------------------------------
    # Bean access
    # ------------------------------------------------------------------

    def get_bean(self, bean_type: type[T]) -> T:
        return self._container.resolve(bean_type)

    def get_bean_by_name(self, name: str) -> Any:
        return self._container.resolve_by_name(name)

    def get_beans_of_type(self, bean_type: type[T]) -> list[T]:
        return self._container.resolve_all(bean_type)

    def contains_bean(self, name: str) -> bool:
        return self._container.contains(name)

    @property
    def container(self) -> Container:
        """Escape hatch: direct access to the underlying Container."""
        return self._container

    @property
    def config(self) -> Config:
        return self._config

    @property
    def environment(self) -> Environment:
        return self._environment

    @property
    def is_running(self) -> bool:
        return self._started

    @property
    def bean_count(self) -> int:
        return sum(1 for reg in self._container.registrations if reg.instance is not None)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Assemble every bean, register web interceptors, then start lifecycle beans."""
        try:
            await self._do_start()
        except BeanCreationException:
            raise
        except Exception as exc:
            raise BeanCreationException(
                subsystem="startup",
                provider=type(exc).__name__,
                reason=str(exc),
            ) from exc

    async def _do_start(self) -> None:
        # 1. Registration-pass conditions (property/class/web/expression)
        self._evaluate_conditions(bean_pass=False)

        # 2. User @configuration classes first so auto-configuration can yield to them
        self._process_configurations(auto=False)

        # 3. Bean-pass conditions, then @auto_configuration classes
        self._evaluate_conditions(bean_pass=True)
        self._process_configurations(auto=True)

        # 4. Eagerly build remaining class registrations
        for reg in self._container.registrations:
            if reg.instance is None and reg.impl_type is not None:
                self._container.resolve(reg.role)

        # 5. Web interceptors
        if self._environment.is_web_application:
            self._register_interceptors()

        # 6. Lifecycle beans, in registration order
        for reg in self._container.registrations:
            instance = reg.instance
            if instance is None or not isinstance(instance, Lifecycle):
                continue
            try:
                await instance.start()
            except Exception as exc:
                raise BeanCreationException(
                    subsystem="lifecycle",
                    provider=type(instance).__name__,
                    reason=str(exc),
                ) from exc
            self._lifecycle_beans.append(instance)

        self._started = True
        _logger.info("Application context started (%d beans)", self.bean_count)

    async def stop(self) -> None:
        """Stop lifecycle beans in reverse order. Failures are logged, not raised."""
        for instance in reversed(self._lifecycle_beans):
            try:
                await instance.stop()
            except Exception:
                _logger.warning("Failed to stop %s", type(instance).__name__, exc_info=True)
        self._lifecycle_beans.clear()
        self._started = False

    # ------------------------------------------------------------------
    # Conditions
    # ------------------------------------------------------------------

    def _evaluate_conditions(self, *, bean_pass: bool) -> None:
        evaluator = ConditionEvaluator(self._environment, self._container)
        for reg in self._container.registrations:
            cls = reg.impl_type
            if cls is None or reg.instance is not None:
                continue
            if not evaluator.should_include(cls, bean_pass=bean_pass):
                _logger.debug("Skipping %s: conditions did not match", cls.__qualname__)
                self._container.remove(reg.role)

    # ------------------------------------------------------------------
    # Configuration processing
    # ------------------------------------------------------------------

    def _process_configurations(self, *, auto: bool) -> None:
        classes = [
            reg.impl_type
            for reg in self._container.registrations
            if reg.impl_type is not None
            and is_configuration(reg.impl_type, inherited=True)
            and bool(getattr(reg.impl_type, "__ormboot_auto_configuration__", False)) == auto
        ]
        for cls in sorted(classes, key=get_order):
            self._process_configuration(cls)

    def _process_configuration(self, cls: type) -> None:
        self._bind_configuration_properties(cls)
        config_instance = self._container.resolve(cls)

        methods = self._collect_bean_methods(cls)
        done: set[str] = set()
        for name in methods:
            self._invoke_bean_method(config_instance, name, methods, done, [])

        evaluator = ConditionEvaluator(self._environment, self._container)
        for nested in self._nested_configurations(cls):
            if not evaluator.matches(nested):
                _logger.debug("Skipping %s: conditions did not match", nested.__qualname__)
                continue
            self._container.register(nested)
            self._process_configuration(nested)

    def _bind_configuration_properties(self, cls: type) -> None:
        for properties_cls in getattr(cls, "__ormboot_enable_properties__", ()):
            if not self._container.has_bean_of_type(properties_cls):
                self._container.register_instance(
                    properties_cls, self._config.bind(properties_cls), source=cls.__qualname__
                )

    @staticmethod
    def _collect_bean_methods(cls: type) -> dict[str, _BeanMethod]:
        """@bean functions in declaration order, base classes first; overrides replace in place."""
        methods: dict[str, _BeanMethod] = {}
        for klass in reversed(cls.__mro__):
            for name, attr in vars(klass).items():
                if getattr(attr, "__ormboot_bean__", False) and callable(attr):
                    methods[name] = _BeanMethod(name, attr)
                elif name in methods:
                    del methods[name]
        return methods

    @staticmethod
    def _nested_configurations(cls: type) -> list[type]:
        nested: dict[type, None] = {}
        for klass in reversed(cls.__mro__):
            for attr in vars(klass).values():
                if is_configuration(attr):
                    nested[attr] = None
        return list(nested)

    def _invoke_bean_method(
        self,
        config_instance: Any,
        name: str,
        methods: dict[str, _BeanMethod],
        done: set[str],
        creating: list[str],
    ) -> None:
        if name in done:
            return
        method = methods[name]
        config_cls = type(config_instance)

        if method.return_type is None:
            _logger.warning("@bean %s.%s has no return annotation; ignored", config_cls.__qualname__, name)
            done.add(name)
            return

        evaluator = ConditionEvaluator(self._environment, self._container)
        if not evaluator.matches(method.func, declaring=config_cls, return_type=method.return_type):
            _logger.debug("Skipping bean %s.%s: conditions did not match", config_cls.__qualname__, name)
            done.add(name)
            return

        if name in creating:
            raise BeanCurrentlyInCreationError(
                chain=[methods[n].return_type for n in creating], current=method.return_type
            )
        creating.append(name)
        try:
            sig = inspect.signature(method.func)
            kwargs: dict[str, Any] = {}
            for param_name, param_type in method.hints.items():
                self._produce_locally(config_instance, param_type, methods, done, creating)
                param = sig.parameters.get(param_name)
                has_default = param is not None and param.default is not inspect.Parameter.empty
                if has_default and not self._container.has_bean_of_type(param_type):
                    continue
                kwargs[param_name] = self._container.resolve_dependency(param_type)
            result = method.func(config_instance, **kwargs)
        finally:
            creating.remove(name)

        done.add(name)
        if result is None:
            return
        self._container.register_instance(
            method.return_type,
            result,
            name=method.bean_name,
            primary=is_primary(method.func),
            source=f"{config_cls.__qualname__}.{name}",
        )
        _logger.debug("Registered bean '%s' from %s", method.bean_name, config_cls.__qualname__)

    def _produce_locally(
        self,
        config_instance: Any,
        param_type: Any,
        methods: dict[str, _BeanMethod],
        done: set[str],
        creating: list[str],
    ) -> None:
        """Run a pending @bean method of the same configuration that yields *param_type*."""
        if self._container.has_bean_of_type(param_type):
            return
        wanted = _unwrap_optional(param_type)
        for name, method in methods.items():
            if name in done or method.return_type is None:
                continue
            produced = method.return_type
            if produced == wanted or (
                isinstance(produced, type) and isinstance(wanted, type) and issubclass(produced, wanted)
            ):
                self._invoke_bean_method(config_instance, name, methods, done, creating)
                return

    # ------------------------------------------------------------------
    # Web
    # ------------------------------------------------------------------

    def _register_interceptors(self) -> None:
        if self._container.has_bean_of_type(InterceptorRegistry):
            registry = self._container.resolve(InterceptorRegistry)
        else:
            registry = InterceptorRegistry()
            self._container.register_instance(InterceptorRegistry, registry)

        for configurer in self._container.resolve_all(WebMvcConfigurer):
            configurer.add_interceptors(registry)
        _logger.debug("Registered %d web request interceptor(s)", len(registry))


def _unwrap_optional(param_type: Any) -> Any:
    args = [a for a in typing.get_args(param_type) if a is not type(None)]
    if type(None) in typing.get_args(param_type) and len(args) == 1:
        return args[0]
    return param_type
