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
"""Interceptor registry and the configurer hook that populates it."""

from __future__ import annotations

from ormboot.web.ports.filter import WebRequestInterceptor


class InterceptorRegistry:
    """Ordered interceptor chain; each interceptor instance is registered once."""

    def __init__(self) -> None:
        self._interceptors: list[WebRequestInterceptor] = []

    def add_web_request_interceptor(self, interceptor: WebRequestInterceptor) -> None:
        if any(existing is interceptor for existing in self._interceptors):
            return
        self._interceptors.append(interceptor)

    @property
    def interceptors(self) -> list[WebRequestInterceptor]:
        return list(self._interceptors)

    def __len__(self) -> int:
        return len(self._interceptors)


class WebMvcConfigurer:
    """Beans of this type get a chance to register interceptors at startup."""

    def add_interceptors(self, registry: InterceptorRegistry) -> None:
        """Register interceptors with *registry*. Does nothing by default."""
