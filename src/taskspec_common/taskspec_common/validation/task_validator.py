# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Validate a parsed task spec and return the first problem found."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import FieldError, missing_field
from .spec import TaskSpec
from .step_template import merge_steps_with_step_template
from .structure import (
    check_for_duplicates,
    validate_declaration_groups,
    validate_declared_workspaces,
    validate_input_parameter_types,
    validate_parameter_types,
    validate_resource_type,
    validate_step_names,
    validate_steps,
    validate_task_resources,
    validate_volumes,
)
from .variables import reference_scopes, validate_namespace_usage

LOGGER = logging.getLogger(__name__)


class ValidationStage(str, Enum):
    start = "start"
    metadata_checked = "metadata_checked"
    structurally_checked = "structurally_checked"
    namespace_built = "namespace_built"
    variables_checked = "variables_checked"
    valid = "valid"
    invalid = "invalid"


@dataclass
class ValidationOutcome:
    """Terminal state of one validation pass."""

    stage: ValidationStage
    error: Optional[FieldError] = None
    # Last stage reached before the failure, for diagnostics.
    failed_after: Optional[ValidationStage] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TaskSpecValidator:
    """Runs structural checks first, then variable reference checks.

    Object metadata is validated by the caller before the task spec reaches this
    class, so the pass starts at ``metadata_checked``.
    """

    @classmethod
    def validate(cls, spec: TaskSpec):
        """Raise the first :class:`FieldError` found in *spec*."""
        cls._run(spec, _StageTracker())

    @classmethod
    def check(cls, spec: TaskSpec) -> ValidationOutcome:
        tracker = _StageTracker()
        try:
            cls._run(spec, tracker)
        except FieldError as err:
            LOGGER.info("Task spec rejected after stage %s: %s", tracker.stage.value, err.message)
            return ValidationOutcome(ValidationStage.invalid, err, failed_after=tracker.stage)
        return ValidationOutcome(ValidationStage.valid)

    @classmethod
    def _run(cls, spec: TaskSpec, tracker: "_StageTracker"):
        tracker.advance(ValidationStage.metadata_checked)
        cls._validate_structure(spec)
        tracker.advance(ValidationStage.structurally_checked)

        scopes = reference_scopes(spec.params, spec.inputs, spec.outputs, spec.resources)
        tracker.advance(ValidationStage.namespace_built)

        for prefix, namespace in scopes:
            validate_namespace_usage(spec.steps, prefix, namespace)
        tracker.advance(ValidationStage.variables_checked)
        tracker.advance(ValidationStage.valid)

    @staticmethod
    def _validate_structure(spec: TaskSpec):
        # An entirely empty spec is reported against "steps", its one required field.
        if spec.is_empty() or not spec.steps:
            raise missing_field("steps")

        try:
            validate_volumes(spec.volumes)
        except FieldError as err:
            raise err.via_field("volumes") from None
        validate_declared_workspaces(spec.workspaces, spec.steps, spec.step_template)

        merged_steps = merge_steps_with_step_template(spec.step_template, spec.steps)
        try:
            validate_steps(merged_steps)
        except FieldError as err:
            raise err.via_field("steps") from None

        validate_declaration_groups(spec)
        validate_task_resources(spec.resources)
        validate_parameter_types(spec.params)

        if spec.inputs is not None:
            for resource in spec.inputs.resources:
                validate_resource_type(resource, f"taskspec.Inputs.Resources.{resource.name}.Type")
            check_for_duplicates(spec.inputs.resources, "taskspec.Inputs.Resources.Name")
            validate_input_parameter_types(spec.inputs)
        if spec.outputs is not None:
            for resource in spec.outputs.resources:
                validate_resource_type(resource, f"taskspec.Outputs.Resources.{resource.name}.Type")
            check_for_duplicates(spec.outputs.resources, "taskspec.Outputs.Resources.Name")

        validate_step_names(spec.steps)


class _StageTracker:
    def __init__(self):
        self.stage = ValidationStage.start

    def advance(self, stage: ValidationStage):
        LOGGER.debug("Task spec validation: %s -> %s", self.stage.value, stage.value)
        self.stage = stage


def validate_task_spec(spec: TaskSpec) -> Optional[FieldError]:
    """Return the first problem in *spec*, or ``None`` when it is valid."""
    return TaskSpecValidator.check(spec).error
