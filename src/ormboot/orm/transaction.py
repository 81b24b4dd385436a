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
"""Programmatic transaction boundaries over an entity-manager factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any

from ormboot.kernel.exceptions import IllegalStateException
from ormboot.orm.factory import EntityManagerFactory
from ormboot.orm.support import EntityManagerHolder


class TransactionManager(ABC):
    """Role for transaction boundaries.

    Usage::

        async with tx_manager.transaction() as session:
            session.add(Account(owner="alice"))
    """

    @abstractmethod
    def transaction(self, *, read_only: bool = False) -> Any:
        """Async context manager yielding the session of the active transaction."""


class OrmTransactionManager(TransactionManager):
    """Transaction manager bound to one :class:`EntityManagerFactory`.

    * An enclosing ``transaction()`` on the same task is joined, not nested.
    * A session bound to the current web request is reused and left open.
    * Otherwise a session is created for the transaction and closed after it.

    Commits on normal exit (rolls back when ``read_only``); rolls back and
    re-raises on error.
    """

    def __init__(self, entity_manager_factory: EntityManagerFactory | None = None) -> None:
        self._entity_manager_factory = entity_manager_factory
        self._active: ContextVar[Any | None] = ContextVar(f"ormboot_tx_{id(self)}", default=None)

    @property
    def entity_manager_factory(self) -> EntityManagerFactory | None:
        return self._entity_manager_factory

    def set_entity_manager_factory(self, entity_manager_factory: EntityManagerFactory) -> None:
        self._entity_manager_factory = entity_manager_factory

    @property
    def in_transaction(self) -> bool:
        return self._active.get() is not None

    @asynccontextmanager
    async def transaction(self, *, read_only: bool = False) -> AsyncIterator[Any]:
        existing = self._active.get()
        if existing is not None:
            yield existing
            return

        emf = self._entity_manager_factory
        if emf is None:
            raise IllegalStateException("OrmTransactionManager has no entity-manager factory")
        adapter = emf.vendor_adapter

        session = EntityManagerHolder.current(emf)
        owned = session is None
        if owned:
            session = emf.create_entity_manager()

        token = self._active.set(session)
        try:
            yield session
        except BaseException:
            await adapter.rollback(session)
            raise
        else:
            if read_only:
                await adapter.rollback(session)
            else:
                await adapter.commit(session)
        finally:
            self._active.reset(token)
            if owned:
                await emf.close_entity_manager(session)
