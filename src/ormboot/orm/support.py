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
"""Open-entity-manager-in-view: one session per web request.

Two interchangeable ways to bind it:

* :class:`OpenEntityManagerInViewInterceptor` — a ``WebRequestInterceptor``
  registered through ``WebMvcConfigurer.add_interceptors``.
* :class:`OpenEntityManagerInViewFilter` — a ``WebFilter`` bean.

Either binds the session with :class:`EntityManagerHolder` so code running
for the request (including ``OrmTransactionManager``) picks it up.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING, Any

from ormboot.web.filters import OncePerRequestFilter
from ormboot.web.ports.filter import CallNext

if TYPE_CHECKING:
    from ormboot.orm.factory import EntityManagerFactory

_logger = logging.getLogger(__name__)

_bound_sessions: ContextVar[dict[Any, Any] | None] = ContextVar("_bound_sessions", default=None)


class EntityManagerHolder:
    """Task-local binding of sessions to entity-manager factories."""

    @staticmethod
    def bind(emf: EntityManagerFactory, session: Any) -> Token[dict[Any, Any] | None]:
        current = dict(_bound_sessions.get() or {})
        current[emf] = session
        return _bound_sessions.set(current)

    @staticmethod
    def current(emf: EntityManagerFactory) -> Any | None:
        bound = _bound_sessions.get()
        return None if bound is None else bound.get(emf)

    @staticmethod
    def unbind(token: Token[dict[Any, Any] | None]) -> None:
        _bound_sessions.reset(token)


class OpenEntityManagerInViewInterceptor:
    """Binds a session in ``pre_handle`` and closes it in ``after_completion``.

    A session already bound for the request (by an outer filter or
    interceptor) is left alone and not closed here.
    """

    def __init__(self, entity_manager_factory: EntityManagerFactory) -> None:
        self._emf = entity_manager_factory
        self._state: ContextVar[tuple[Any, Token[Any]] | None] = ContextVar(
            f"ormboot_oemiv_{id(self)}", default=None
        )

    @property
    def entity_manager_factory(self) -> EntityManagerFactory:
        return self._emf

    async def pre_handle(self, request: Any) -> None:
        if EntityManagerHolder.current(self._emf) is not None:
            return
        _logger.debug("Opening entity manager in view")
        session = self._emf.create_entity_manager()
        token = EntityManagerHolder.bind(self._emf, session)
        self._state.set((session, token))

    async def after_completion(self, request: Any, exc: BaseException | None) -> None:
        state = self._state.get()
        if state is None:
            return
        session, token = state
        self._state.set(None)
        EntityManagerHolder.unbind(token)
        _logger.debug("Closing entity manager in view")
        await self._emf.close_entity_manager(session)


class OpenEntityManagerInViewFilter(OncePerRequestFilter):
    """Filter variant: the session spans the whole downstream chain."""

    def __init__(self, entity_manager_factory: EntityManagerFactory) -> None:
        self._emf = entity_manager_factory

    @property
    def entity_manager_factory(self) -> EntityManagerFactory:
        return self._emf

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        if EntityManagerHolder.current(self._emf) is not None:
            return await call_next(request)

        session = self._emf.create_entity_manager()
        token = EntityManagerHolder.bind(self._emf, session)
        try:
            return await call_next(request)
        finally:
            EntityManagerHolder.unbind(token)
            await self._emf.close_entity_manager(session)
