# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Declared variable names per reference scope."""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from ..constants import ParamType
from .spec import Inputs, Outputs, ParamSpec, TaskResource, TaskResources

PARAMS_SCOPE = "params"
RESOURCES_SCOPE = "resources"


@dataclass
class VariableNamespace:
    """Names a step may reference within one scope, and which of them are arrays."""

    scope: str
    names: Set[str] = field(default_factory=set)
    array_names: Set[str] = field(default_factory=set)

    def add_params(self, params: Iterable[ParamSpec]):
        for p in params:
            self.names.add(p.name)
            if p.type == ParamType.array.value:
                self.array_names.add(p.name)

    def add_resources(self, resources: Iterable[TaskResource]):
        self.names.update(r.name for r in resources)


def build_parameter_namespace(
    params: Iterable[ParamSpec], inputs: Optional[Inputs] = None
) -> VariableNamespace:
    """Union of new-style params and, when given, the deprecated ``inputs.params``."""
    namespace = VariableNamespace(PARAMS_SCOPE)
    namespace.add_params(params)
    if inputs is not None:
        namespace.add_params(inputs.params)
    return namespace


def build_resource_namespace(
    resources: Optional[TaskResources] = None,
    inputs: Optional[Inputs] = None,
    outputs: Optional[Outputs] = None,
) -> VariableNamespace:
    """Union of every declared input and output resource name."""
    namespace = VariableNamespace(RESOURCES_SCOPE)
    declared: List[TaskResource] = []
    if resources is not None:
        declared += resources.inputs + resources.outputs
    if inputs is not None:
        declared += inputs.resources
    if outputs is not None:
        declared += outputs.resources
    namespace.add_resources(declared)
    return namespace
