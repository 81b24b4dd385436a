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
"""Bean registration metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Registration:
    """One bean role in the container.

    ``impl_type`` is set for beans the container constructs itself; beans
    handed in fully built (or produced by ``@bean`` methods) only carry an
    ``instance``.
    """

    role: Any
    impl_type: type | None = None
    instance: Any = field(default=None, repr=False)
    name: str = ""
    primary: bool = False
    source: str = ""

    @property
    def display_name(self) -> str:
        return self.name or getattr(self.role, "__name__", repr(self.role))
