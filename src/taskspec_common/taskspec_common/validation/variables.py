# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Usage rules for parameter and resource references in steps."""

import logging
from dataclasses import dataclass
from typing import Collection, Iterator, List, Optional, Tuple

from .namespace import VariableNamespace, build_parameter_namespace, build_resource_namespace
from .spec import Inputs, Outputs, ParamSpec, Step, TaskResources
from .substitution import validate_variable, validate_variable_isolated, validate_variable_prohibited

LOGGER = logging.getLogger(__name__)

STEP_LOCATION = "step"
STEP_PATH = "taskspec.steps"

PARAMS_PREFIX = "params"
LEGACY_PARAMS_PREFIX = r"(?:inputs|outputs)\.params"
RESOURCES_PREFIX = r"resources\.(?:inputs|outputs)"
LEGACY_RESOURCES_PREFIX = r"(?:inputs|outputs)\.resources"


@dataclass(frozen=True)
class StepField:
    name: str
    value: str
    # Command and arg tokens may carry a whole array; other fields may not.
    isolated: bool = False


def iter_step_fields(step: Step) -> Iterator[StepField]:
    """Yield every string field of *step* that may hold references, in check order."""
    yield StepField("name", step.name)
    yield StepField("image", step.image)
    yield StepField("workingDir", step.working_dir)
    for i, cmd in enumerate(step.command):
        yield StepField(f"command[{i}]", cmd, isolated=True)
    for i, arg in enumerate(step.args):
        yield StepField(f"arg[{i}]", arg, isolated=True)
    for env in step.env:
        yield StepField(f"env[{env.name}]", env.value)
    for i, vm in enumerate(step.volume_mounts):
        yield StepField(f"volumeMount[{i}].Name", vm.name)
        yield StepField(f"volumeMount[{i}].MountPath", vm.mount_path)
        yield StepField(f"volumeMount[{i}].SubPath", vm.sub_path)


def validate_variables(steps: List[Step], prefix: str, names: Collection[str]):
    for step in steps:
        for f in iter_step_fields(step):
            validate_variable(f.name, f.value, prefix, STEP_LOCATION, STEP_PATH, names)


def validate_array_usage(steps: List[Step], prefix: str, array_names: Collection[str]):
    if not array_names:
        return
    for step in steps:
        for f in iter_step_fields(step):
            if f.isolated:
                validate_variable_isolated(f.name, f.value, prefix, STEP_LOCATION, STEP_PATH, array_names)
            else:
                validate_variable_prohibited(f.name, f.value, prefix, STEP_LOCATION, STEP_PATH, array_names)


def validate_namespace_usage(steps: List[Step], prefix: str, namespace: VariableNamespace):
    """Check every reference under *prefix* against *namespace*."""
    LOGGER.debug(
        "Checking %s references under '%s' against %d declared name(s)",
        namespace.scope,
        prefix,
        len(namespace.names),
    )
    validate_variables(steps, prefix, namespace.names)
    validate_array_usage(steps, prefix, namespace.array_names)


def reference_scopes(
    params: List[ParamSpec],
    inputs: Optional[Inputs],
    outputs: Optional[Outputs],
    resources: Optional[TaskResources],
) -> List[Tuple[str, VariableNamespace]]:
    """Build the namespace for every reference prefix, in the order they are checked."""
    scopes = [
        (PARAMS_PREFIX, build_parameter_namespace(params)),
        (LEGACY_PARAMS_PREFIX, build_parameter_namespace(params, inputs)),
    ]
    if resources is not None:
        scopes.append((RESOURCES_PREFIX, build_resource_namespace(resources)))
    scopes.append((LEGACY_RESOURCES_PREFIX, build_resource_namespace(resources, inputs, outputs)))
    return scopes


def validate_parameter_variables(steps: List[Step], params: List[ParamSpec]):
    """``$(params.x)`` references against the new-style params."""
    validate_namespace_usage(steps, PARAMS_PREFIX, build_parameter_namespace(params))


def validate_input_parameter_variables(
    steps: List[Step], inputs: Optional[Inputs], params: List[ParamSpec]
):
    """``$(inputs.params.x)`` references against new-style and deprecated params."""
    validate_namespace_usage(steps, LEGACY_PARAMS_PREFIX, build_parameter_namespace(params, inputs))


def validate_resources_variables(steps: List[Step], resources: Optional[TaskResources]):
    """``$(resources.inputs.x)`` references against the new-style resources."""
    if resources is None:
        return
    validate_namespace_usage(steps, RESOURCES_PREFIX, build_resource_namespace(resources))


def validate_resource_variables(
    steps: List[Step],
    inputs: Optional[Inputs],
    outputs: Optional[Outputs],
    resources: Optional[TaskResources],
):
    """``$(inputs.resources.x)`` references against every declared resource."""
    validate_namespace_usage(
        steps, LEGACY_RESOURCES_PREFIX, build_resource_namespace(resources, inputs, outputs)
    )
