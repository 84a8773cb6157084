# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Task spec validation package, shared by the CLI and any admission layer.

Public API
----------
TaskSpecParser          Build a TaskSpec from a decoded YAML document.
TaskSpec                Dataclass representing a parsed task spec.
TaskSpecValidator       Validate a TaskSpec (structure, then variable references).
validate_task_spec      Return the first FieldError in a TaskSpec, or None.
FieldError              Structured validation error (kind, message, paths, details).
ErrorKind               Error taxonomy.
find_references         Locate ``$(scope.name)`` references in a field value.
build_parameter_namespace / build_resource_namespace
                        Declared variable names per scope.
merge_steps_with_step_template
                        Apply the shared step template to every step.
extract_line_map        Map YAML key-paths to 1-based source line numbers.
line_for_field_path     Best-effort source line for a validator field path.
suggest                 Return edit-distance suggestions for a misspelled reference.
"""

from .errors import ErrorKind, FieldError
from .line_tracker import extract_line_map, line_for, line_for_field_path
from .namespace import VariableNamespace, build_parameter_namespace, build_resource_namespace
from .spec import (
    ArrayOrString,
    EnvVar,
    Inputs,
    Outputs,
    ParamSpec,
    Step,
    TaskResource,
    TaskResources,
    TaskSpec,
    TaskSpecParser,
    Volume,
    VolumeMount,
    WorkspaceDeclaration,
)
from .step_template import merge_steps_with_step_template
from .substitution import VariableReference, find_references
from .suggestions import suggest
from .task_validator import TaskSpecValidator, ValidationOutcome, ValidationStage, validate_task_spec

__all__ = [
    "TaskSpecParser",
    "TaskSpec",
    "Step",
    "EnvVar",
    "VolumeMount",
    "Volume",
    "WorkspaceDeclaration",
    "ParamSpec",
    "ArrayOrString",
    "TaskResource",
    "TaskResources",
    "Inputs",
    "Outputs",
    "TaskSpecValidator",
    "ValidationOutcome",
    "ValidationStage",
    "validate_task_spec",
    "FieldError",
    "ErrorKind",
    "VariableReference",
    "find_references",
    "VariableNamespace",
    "build_parameter_namespace",
    "build_resource_namespace",
    "merge_steps_with_step_template",
    "extract_line_map",
    "line_for",
    "line_for_field_path",
    "suggest",
]
