# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Structural consistency checks for task specs.

Every check raises :class:`FieldError` on the first problem it finds and
returns ``None`` otherwise. Paths are relative to the field the caller
checks; the validator prefixes them with ``via_field`` where needed.
"""

import posixpath
import re
from typing import List, Optional, Set

from ..constants import (
    ALL_PARAM_TYPES,
    ALL_RESOURCE_TYPES,
    DNS1123_LABEL_MAX_LENGTH,
    DNS_LABEL_DETAILS,
    RESERVED_MOUNT_EXCEPTION,
    RESERVED_MOUNT_PREFIX,
    RESERVED_VOLUME_NAME_PREFIX,
)
from .errors import ErrorKind, FieldError, invalid_value, missing_field, multiple_one_of
from .spec import Inputs, ParamSpec, Step, TaskResource, TaskResources, TaskSpec, Volume, WorkspaceDeclaration

_DNS1123_LABEL_FMT = "[a-z0-9]([-a-z0-9]*[a-z0-9])?"
_DNS1123_LABEL_RE = re.compile(f"^{_DNS1123_LABEL_FMT}$")


def is_dns1123_label(value: str) -> List[str]:
    """Return the reasons *value* is not a DNS-1123 label (empty when it is one)."""
    errs = []
    if len(value) > DNS1123_LABEL_MAX_LENGTH:
        errs.append(f"must be no more than {DNS1123_LABEL_MAX_LENGTH} characters")
    if not _DNS1123_LABEL_RE.match(value):
        errs.append(
            "a DNS-1123 label must consist of lower case alphanumeric characters or '-', "
            "and must start and end with an alphanumeric character "
            f"(e.g. 'my-name', or '123-abc', regex used for validation is '{_DNS1123_LABEL_FMT}')"
        )
    return errs


def clean_path(path: str) -> str:
    """Lexically normalize a mount path (``""`` becomes ``"."``)."""
    cleaned = posixpath.normpath(path) if path else "."
    # POSIX keeps a leading "//"; mount paths treat it like "/".
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def validate_volumes(volumes: List[Volume]):
    names: Set[str] = set()
    for v in volumes:
        if v.name in names:
            raise FieldError(
                ErrorKind.duplicate_name,
                f'multiple volumes with same name "{v.name}"',
                ["name"],
            )
        names.add(v.name)


def validate_declared_workspaces(
    workspaces: List[WorkspaceDeclaration], steps: List[Step], step_template: Optional[Step]
):
    """Workspace names must be unique, and no workspace may reuse a mount path
    already taken by a step, the step template, or an earlier workspace."""
    mount_paths: Set[str] = set()
    for step in steps:
        for vm in step.volume_mounts:
            mount_paths.add(clean_path(vm.mount_path))
    if step_template is not None:
        for vm in step_template.volume_mounts:
            mount_paths.add(clean_path(vm.mount_path))

    names: Set[str] = set()
    for w in workspaces:
        if w.name in names:
            raise FieldError(
                ErrorKind.duplicate_name,
                f'workspace name "{w.name}" must be unique',
                ["workspaces.name"],
            )
        names.add(w.name)
        mount_path = clean_path(w.get_mount_path())
        if mount_path in mount_paths:
            raise FieldError(
                ErrorKind.path_conflict,
                f'workspace mount path "{mount_path}" must be unique',
                ["workspaces.mountpath"],
            )
        mount_paths.add(mount_path)


def validate_steps(steps: List[Step]):
    names: Set[str] = set()
    for idx, s in enumerate(steps):
        if not s.image:
            raise missing_field("Image")

        if s.script and s.command:
            raise FieldError(
                ErrorKind.multiple_one_of,
                f"step {idx} script cannot be used with command",
                ["script"],
            )

        if s.name:
            if s.name in names:
                raise invalid_value(s.name, "name", kind=ErrorKind.duplicate_name)
            names.add(s.name)

        for vm in s.volume_mounts:
            if vm.mount_path.startswith(RESERVED_MOUNT_PREFIX) and not vm.mount_path.startswith(
                RESERVED_MOUNT_EXCEPTION
            ):
                raise FieldError(
                    ErrorKind.invalid_value,
                    f"step {idx} volumeMount cannot be mounted under {RESERVED_MOUNT_PREFIX} "
                    f'(volumeMount "{vm.name}" mounted at "{vm.mount_path}")',
                    ["volumeMounts.mountPath"],
                )
            if vm.name.startswith(RESERVED_VOLUME_NAME_PREFIX):
                raise FieldError(
                    ErrorKind.invalid_value,
                    f'step {idx} volumeMount name "{vm.name}" cannot start with '
                    f'"{RESERVED_VOLUME_NAME_PREFIX}"',
                    ["volumeMounts.name"],
                )


def validate_declaration_groups(spec: TaskSpec):
    """Deprecated ``inputs``/``outputs`` and their replacements may not both be set."""
    if spec.inputs is not None:
        if spec.inputs.params and spec.params:
            raise multiple_one_of("inputs.params", "params")
        if spec.resources is not None and spec.resources.inputs and spec.inputs.resources:
            raise multiple_one_of("inputs.resources", "resources.inputs")
    if spec.outputs is not None:
        if spec.resources is not None and spec.resources.outputs and spec.outputs.resources:
            raise multiple_one_of("outputs.resources", "resources.outputs")


def validate_resource_type(resource: TaskResource, path: str):
    if resource.type not in ALL_RESOURCE_TYPES:
        raise invalid_value(resource.type, path, kind=ErrorKind.invalid_enum)


def check_for_duplicates(resources: List[TaskResource], path: str):
    """Resource names must be unique, ignoring case."""
    encountered: Set[str] = set()
    for r in resources:
        key = r.name.lower()
        if key in encountered:
            raise FieldError(ErrorKind.duplicate_name, "expected exactly one, got both", [path])
        encountered.add(key)


def _validate_resource_list(resources: List[TaskResource], direction: str):
    for resource in resources:
        validate_resource_type(resource, f"taskspec.resources.{direction}.{resource.name}.type")
    check_for_duplicates(resources, f"taskspec.resources.{direction}.name")


def validate_task_resources(resources: Optional[TaskResources]):
    if resources is None:
        return
    _validate_resource_list(resources.inputs, "inputs")
    _validate_resource_list(resources.outputs, "outputs")


def validate_param_type(param: ParamSpec, path: str):
    """The declared type must be known, and a default must carry the same type."""
    type_path = f"{path}.{param.name}.type"
    if param.type not in ALL_PARAM_TYPES:
        raise invalid_value(param.type, type_path, kind=ErrorKind.invalid_enum)
    if param.default is not None and param.default.type != param.type:
        raise FieldError(
            ErrorKind.type_mismatch,
            f'"{param.type}" type does not match default value\'s type: "{param.default.type}"',
            [type_path, f"{path}.{param.name}.default.type"],
        )


def validate_parameter_types(params: List[ParamSpec]):
    for p in params:
        validate_param_type(p, "taskspec.params")


def validate_input_parameter_types(inputs: Inputs):
    for p in inputs.params:
        validate_param_type(p, "taskspec.inputs.params")


def validate_step_names(steps: List[Step]):
    for step in steps:
        if step.name and is_dns1123_label(step.name):
            raise FieldError(
                ErrorKind.invalid_name,
                f'invalid value "{step.name}"',
                ["taskspec.steps.name"],
                details=DNS_LABEL_DETAILS,
            )
