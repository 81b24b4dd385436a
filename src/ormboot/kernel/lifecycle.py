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
"""Lifecycle protocol for beans that own long-lived resources."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Lifecycle(Protocol):
    """Beans implementing ``start()``/``stop()`` are driven by the ApplicationContext.

    ``start()`` runs once every bean has been created, in registration order.
    ``stop()`` runs on shutdown in reverse order.
    """

    async def start(self) -> None:
        """Acquire resources. Raising here aborts startup."""
        ...

    async def stop(self) -> None:
        """Release resources. Failures are logged and do not stop other beans."""
        ...
