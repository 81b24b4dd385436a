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
"""Starlette application factory wired from a started ApplicationContext."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.routing import BaseRoute

from ormboot.container.ordering import get_order
from ormboot.web.adapters.starlette.filter_chain import (
    InterceptorChainMiddleware,
    WebFilterChainMiddleware,
)
from ormboot.web.interceptors import InterceptorRegistry
from ormboot.web.ports.filter import WebFilter

if TYPE_CHECKING:
    from ormboot.context.application_context import ApplicationContext


def create_app(
    context: ApplicationContext,
    routes: Sequence[BaseRoute] = (),
    **starlette_kwargs: Any,
) -> Starlette:
    """Build a Starlette app whose middleware comes from *context*.

    Filters (sorted by ``@order``) wrap the interceptor chain, which wraps the
    routes. The context must already be started.
    """
    filters = sorted(context.get_beans_of_type(WebFilter), key=get_order)
    interceptors = []
    if context.container.has_bean_of_type(InterceptorRegistry):
        interceptors = context.get_bean(InterceptorRegistry).interceptors

    middleware = [
        Middleware(WebFilterChainMiddleware, filters=filters),
        Middleware(InterceptorChainMiddleware, interceptors=interceptors),
    ]
    return Starlette(routes=list(routes), middleware=middleware, **starlette_kwargs)
