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
"""Unified exception hierarchy for ormboot.

All framework exceptions inherit from OrmBootException so callers can catch
every framework error in one place, or a specific subclass for targeted
handling.

Categories:
- ConfigurationException: malformed or contradictory configuration
- InfrastructureException: database, engine and resource failures
- IllegalStateException: an object was used outside its valid lifecycle
"""

from __future__ import annotations


class OrmBootException(Exception):
    """Base exception for all ormboot errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CONFIG_BINDING").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


class ConfigurationException(OrmBootException):
    """Configuration is missing, malformed, or contradicts the environment."""


class InfrastructureException(OrmBootException):
    """A persistence engine, data source, or other resource failed."""


class IllegalStateException(OrmBootException):
    """An object was used before it was ready or after it was closed."""
