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
"""Container exceptions — fatal errors during bean creation and startup."""

from __future__ import annotations

from typing import Any

from ormboot.kernel.exceptions import ConfigurationException


def _type_name(value: Any) -> str:
    return getattr(value, "__name__", None) or repr(value)


class BeanCreationException(ConfigurationException):
    """Fatal error while assembling beans — the application cannot start."""

    def __init__(self, subsystem: str, provider: str, reason: str) -> None:
        self.subsystem = subsystem
        self.provider = provider
        self.reason = reason
        super().__init__(
            message=f"Failed to configure {subsystem} with provider '{provider}': {reason}",
            code=f"BEAN_CREATION_{subsystem.upper()}",
        )

    def _set_report(self, headline: str, details: list[str]) -> None:
        self.args = ("\n".join([f"{type(self).__name__}: {headline}", *details]),)

    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class NoSuchBeanError(BeanCreationException):
    """No bean is registered for the requested role or name."""

    def __init__(
        self,
        *,
        bean_type: Any = None,
        bean_name: str | None = None,
        required_by: str | None = None,
        parameter: str | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        self.bean_type = bean_type
        self.bean_name = bean_name
        self.required_by = required_by
        self.parameter = parameter
        self.suggestions = suggestions or []

        if bean_type is not None:
            headline = f"No bean of type '{_type_name(bean_type)}' is registered"
        elif bean_name:
            headline = f"No bean named '{bean_name}' is registered"
        else:
            headline = "No matching bean is registered"

        super().__init__(subsystem="resolution", provider=required_by or "container", reason=headline)

        details = [""]
        if required_by:
            details.append(f"  Required by: {required_by}")
        if parameter:
            details.append(f"    Parameter: {parameter}")
        details.append("  Suggestions:")
        details.append("    - Register an instance with ApplicationContext.register_instance()")
        details.append("    - Add a @bean method or @component class producing this type")
        details.append("    - Check @conditional_on_* conditions and ormboot.yaml")
        if self.suggestions:
            details.append(f"  Similar registered types: {', '.join(self.suggestions)}")
        self._set_report(headline, details)


class NoUniqueBeanError(BeanCreationException):
    """Several beans satisfy the requested role and none is marked ``@primary``."""

    def __init__(self, *, bean_type: Any, candidates: list[Any], required_by: str | None = None) -> None:
        self.bean_type = bean_type
        self.candidates = candidates
        self.required_by = required_by

        headline = f"Multiple beans of type '{_type_name(bean_type)}' found but none is marked @primary"
        super().__init__(subsystem="resolution", provider=required_by or "container", reason=headline)
        self._set_report(
            headline,
            [
                "",
                f"  Candidates: {[_type_name(c) for c in candidates]}",
                "  Fix: mark one candidate with @primary",
            ],
        )


class BeanCurrentlyInCreationError(BeanCreationException):
    """Circular dependency detected; ``chain`` lists the resolution path in order."""

    def __init__(self, *, chain: list[Any], current: Any) -> None:
        self.chain = chain
        self.current = current

        chain_str = " -> ".join(_type_name(t) for t in [*chain, current])
        headline = f"Circular dependency: {chain_str}"
        super().__init__(subsystem="resolution", provider=_type_name(current), reason=headline)
        self._set_report(headline, ["", "  Suggestion: break the cycle with an Optional dependency"])
