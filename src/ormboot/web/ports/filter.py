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
"""Framework-agnostic web ports: filters wrap a request, interceptors observe it.

Request/response are typed ``Any`` so Starlette types stay in the adapter layer.
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any, Protocol, runtime_checkable

# Concrete type: Callable[[Request], Coroutine[Any, Any, Response]]
CallNext = Callable[..., Coroutine[Any, Any, Any]]


@runtime_checkable
class WebFilter(Protocol):
    """Wraps request handling; must ``await call_next(request)`` to proceed."""

    async def do_filter(self, request: Any, call_next: CallNext) -> Any: ...

    def should_not_filter(self, request: Any) -> bool:
        """Return ``True`` to skip this filter for the given request."""
        ...


@runtime_checkable
class WebRequestInterceptor(Protocol):
    """Callbacks around request handling, run inside the filter chain.

    ``after_completion`` runs for every interceptor whose ``pre_handle``
    returned, in reverse order, whether the handler succeeded or raised.
    """

    async def pre_handle(self, request: Any) -> None: ...

    async def after_completion(self, request: Any, exc: BaseException | None) -> None: ...
