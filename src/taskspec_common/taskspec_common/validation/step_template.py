# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Apply a shared step template to every step of a task."""

from typing import Callable, List, Optional, TypeVar

from .spec import Step

T = TypeVar("T")


def _merge_by_key(template_items: List[T], step_items: List[T], key: Callable[[T], str]) -> List[T]:
    """Template entries first (overridden by a step entry with the same key), then new step entries."""
    overrides = {key(item): item for item in step_items}
    merged = [overrides.pop(key(item), item) for item in template_items]
    seen = {key(item) for item in merged}
    merged += [item for item in step_items if key(item) not in seen]
    return merged


def merge_step_with_template(template: Step, step: Step) -> Step:
    return Step(
        name=step.name or template.name,
        image=step.image or template.image,
        command=list(step.command or template.command),
        args=list(step.args or template.args),
        script=step.script or template.script,
        working_dir=step.working_dir or template.working_dir,
        env=_merge_by_key(template.env, step.env, lambda e: e.name),
        volume_mounts=_merge_by_key(template.volume_mounts, step.volume_mounts, lambda vm: vm.mount_path),
    )


def merge_steps_with_step_template(template: Optional[Step], steps: List[Step]) -> List[Step]:
    """Return new steps with *template* values filled in where a step leaves them unset."""
    if template is None:
        return list(steps)
    return [merge_step_with_template(template, step) for step in steps]
