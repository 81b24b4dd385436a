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
"""Pure ASGI middlewares running WebFilters and WebRequestInterceptors.

Both run the downstream app in the calling task, so ``ContextVar`` state set
by a filter or interceptor is visible to the route handler.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, cast

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send

from ormboot.web.ports.filter import CallNext, WebFilter, WebRequestInterceptor

_logger = logging.getLogger(__name__)


class WebFilterChainMiddleware:
    """Executes a chain of :class:`WebFilter` instances around the app.

    The downstream response is buffered into a Starlette ``Response`` so each
    filter can inspect or replace it.
    """

    def __init__(self, app: ASGIApp, filters: Sequence[WebFilter] = ()) -> None:
        self.app = app
        self._filters = list(filters)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self._filters:
            await self.app(scope, receive, send)
            return

        async def _call_app(_request: Any) -> Response:
            status_code = 200
            raw_headers: list[tuple[bytes, bytes]] = []
            body_parts: list[bytes] = []

            async def _capture(message: Any) -> None:
                nonlocal status_code, raw_headers
                if message["type"] == "http.response.start":
                    status_code = message["status"]
                    raw_headers = list(message.get("headers", []))
                elif message["type"] == "http.response.body" and message.get("body"):
                    body_parts.append(message["body"])

            await self.app(scope, receive, _capture)
            response = Response(content=b"".join(body_parts), status_code=status_code)
            response.raw_headers[:] = raw_headers
            return response

        chain: CallNext = _call_app
        for web_filter in reversed(self._filters):
            chain = _wrap(web_filter, chain)

        response = cast(Response, await chain(Request(scope, receive, send)))
        await response(scope, receive, send)


def _wrap(web_filter: WebFilter, next_call: CallNext) -> CallNext:
    async def _inner(request: Request) -> Response:
        if web_filter.should_not_filter(request):
            return cast(Response, await next_call(request))
        return cast(Response, await web_filter.do_filter(request, next_call))

    return _inner


class InterceptorChainMiddleware:
    """Runs ``pre_handle`` in order, the app, then ``after_completion`` in reverse.

    ``after_completion`` is guaranteed for every interceptor whose
    ``pre_handle`` returned, including when the app or a later interceptor
    raised. A failing ``after_completion`` is logged and does not prevent the
    remaining callbacks.
    """

    def __init__(self, app: ASGIApp, interceptors: Sequence[WebRequestInterceptor] = ()) -> None:
        self.app = app
        self._interceptors = list(interceptors)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self._interceptors:
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive, send)
        applied: list[WebRequestInterceptor] = []
        error: BaseException | None = None
        try:
            for interceptor in self._interceptors:
                await interceptor.pre_handle(request)
                applied.append(interceptor)
            await self.app(scope, receive, send)
        except BaseException as exc:
            error = exc
            raise
        finally:
            for interceptor in reversed(applied):
                try:
                    await interceptor.after_completion(request, error)
                except Exception:
                    _logger.exception(
                        "after_completion failed for interceptor %s", type(interceptor).__name__
                    )
