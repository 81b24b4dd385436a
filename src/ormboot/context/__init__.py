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
"""ormboot context — ApplicationContext, environment, conditions and package registry."""

from ormboot.context.application_context import ApplicationContext
from ormboot.context.condition_evaluator import ConditionEvaluator
from ormboot.context.conditions import (
    auto_configuration,
    conditional_on_bean,
    conditional_on_class,
    conditional_on_expression,
    conditional_on_missing_bean,
    conditional_on_property,
    conditional_on_web_application,
    enable_configuration_properties,
)
from ormboot.context.environment import Environment, WebApplicationType
from ormboot.context.packages import AutoConfigurationPackages, BasePackages

__all__ = [
    "ApplicationContext",
    "AutoConfigurationPackages",
    "BasePackages",
    "ConditionEvaluator",
    "Environment",
    "WebApplicationType",
    "auto_configuration",
    "conditional_on_bean",
    "conditional_on_class",
    "conditional_on_expression",
    "conditional_on_missing_bean",
    "conditional_on_property",
    "conditional_on_web_application",
    "enable_configuration_properties",
]
