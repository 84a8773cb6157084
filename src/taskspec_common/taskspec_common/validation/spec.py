# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Task spec data model and the parser that builds it from YAML documents."""

import logging
import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import yaml

from ..constants import TASK_KINDS, WORKSPACE_DIR, ParamType

LOGGER = logging.getLogger(__name__)


@dataclass
class ArrayOrString:
    """A parameter value tagged with its own type."""

    type: str
    string_val: str = ""
    array_val: List[str] = field(default_factory=list)


@dataclass
class ParamSpec:
    name: str
    type: str = ParamType.string.value
    description: str = ""
    default: Optional[ArrayOrString] = None


@dataclass
class TaskResource:
    name: str
    type: str
    target_path: str = ""
    optional: bool = False


@dataclass
class TaskResources:
    inputs: List[TaskResource] = field(default_factory=list)
    outputs: List[TaskResource] = field(default_factory=list)


@dataclass
class Inputs:
    """Deprecated input declarations (``inputs.resources`` / ``inputs.params``)."""

    resources: List[TaskResource] = field(default_factory=list)
    params: List[ParamSpec] = field(default_factory=list)


@dataclass
class Outputs:
    """Deprecated output declarations (``outputs.resources``)."""

    resources: List[TaskResource] = field(default_factory=list)


@dataclass
class EnvVar:
    name: str
    value: str = ""


@dataclass
class VolumeMount:
    name: str
    mount_path: str
    sub_path: str = ""
    read_only: bool = False


@dataclass
class Step:
    name: str = ""
    image: str = ""
    command: List[str] = field(default_factory=list)
    args: List[str] = field(default_factory=list)
    script: str = ""
    working_dir: str = ""
    env: List[EnvVar] = field(default_factory=list)
    volume_mounts: List[VolumeMount] = field(default_factory=list)


@dataclass
class Volume:
    name: str
    source: Dict[str, Any] = field(default_factory=dict)


@dataclass
class WorkspaceDeclaration:
    name: str
    description: str = ""
    mount_path: str = ""
    read_only: bool = False

    def get_mount_path(self) -> str:
        """Return the declared mount path, or the default one under the workspace dir."""
        if self.mount_path:
            return self.mount_path
        return posixpath.join(WORKSPACE_DIR, self.name.lstrip("/"))


@dataclass
class TaskSpec:
    steps: List[Step] = field(default_factory=list)
    volumes: List[Volume] = field(default_factory=list)
    workspaces: List[WorkspaceDeclaration] = field(default_factory=list)
    params: List[ParamSpec] = field(default_factory=list)
    resources: Optional[TaskResources] = None
    inputs: Optional[Inputs] = None
    outputs: Optional[Outputs] = None
    step_template: Optional[Step] = None
    description: str = ""

    def is_empty(self) -> bool:
        return self == TaskSpec()


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


_SPEC_FIELDS = frozenset(
    (
        "steps",
        "volumes",
        "workspaces",
        "params",
        "resources",
        "inputs",
        "outputs",
        "stepTemplate",
        "description",
        "sidecars",
        "results",
    )
)


def _mapping(value: Any, key: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise TypeError(f"Field '{key}' must be a mapping, got {type(value).__name__}")
    return value


def _list(value: Any, key: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"Field '{key}' must be a list, got {type(value).__name__}")
    return value


def _string(value: Any, key: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise TypeError(f"Field '{key}' must be a string, got {type(value).__name__}")
    return str(value)


def _strings(value: Any, key: str) -> List[str]:
    return [_string(v, f"{key}[{i}]") for i, v in enumerate(_list(value, key))]


def _param_default(value: Any, key: str) -> Optional[ArrayOrString]:
    if value is None:
        return None
    if isinstance(value, list):
        return ArrayOrString(type=ParamType.array.value, array_val=_strings(value, key))
    return ArrayOrString(type=ParamType.string.value, string_val=_string(value, key))


class TaskSpecParser:
    """Build :class:`TaskSpec` objects from decoded YAML/JSON documents.

    Only container shapes are checked here (a list where a list is expected,
    and so on); semantic checks belong to the validator.
    """

    @staticmethod
    def is_task_document(data: Mapping[str, Any]) -> bool:
        """Return True for Task/ClusterTask documents and for bare specs."""
        if "kind" in data:
            return data.get("kind") in TASK_KINDS
        return "steps" in data

    @classmethod
    def parse(cls, path: str) -> TaskSpec:
        """Parse a single-document YAML file."""
        with open(path) as fh:
            data = yaml.safe_load(fh)
        if data is None:
            return TaskSpec()
        if not isinstance(data, Mapping):
            raise TypeError(f"Top-level structure of '{path}' must be a mapping")
        return cls.parse_dict(data)

    @classmethod
    def parse_dict(cls, data: Mapping[str, Any]) -> TaskSpec:
        """Parse either a full Task document or a bare spec mapping."""
        if "spec" in data and ("kind" in data or "apiVersion" in data):
            data = _mapping(data["spec"], "spec")

        unknown = sorted(str(k) for k in data.keys() if k not in _SPEC_FIELDS)
        if unknown:
            LOGGER.debug("Ignoring unknown task spec fields: %s", ", ".join(unknown))

        inputs = outputs = resources = None
        if data.get("inputs") is not None:
            inputs = cls._parse_inputs(_mapping(data["inputs"], "inputs"))
        if data.get("outputs") is not None:
            outputs = cls._parse_outputs(_mapping(data["outputs"], "outputs"))
        if data.get("resources") is not None:
            resources = cls._parse_task_resources(_mapping(data["resources"], "resources"))

        step_template = None
        if data.get("stepTemplate") is not None:
            step_template = cls._parse_step(_mapping(data["stepTemplate"], "stepTemplate"), "stepTemplate")

        return TaskSpec(
            steps=[
                cls._parse_step(_mapping(s, f"steps[{i}]"), f"steps[{i}]")
                for i, s in enumerate(_list(data.get("steps"), "steps"))
            ],
            volumes=[
                cls._parse_volume(_mapping(v, f"volumes[{i}]"))
                for i, v in enumerate(_list(data.get("volumes"), "volumes"))
            ],
            workspaces=[
                cls._parse_workspace(_mapping(w, f"workspaces[{i}]"), f"workspaces[{i}]")
                for i, w in enumerate(_list(data.get("workspaces"), "workspaces"))
            ],
            params=cls._parse_params(data.get("params"), "params"),
            resources=resources,
            inputs=inputs,
            outputs=outputs,
            step_template=step_template,
            description=_string(data.get("description"), "description"),
        )

    @classmethod
    def _parse_step(cls, data: Mapping[str, Any], key: str) -> Step:
        return Step(
            name=_string(data.get("name"), f"{key}.name"),
            image=_string(data.get("image"), f"{key}.image"),
            command=_strings(data.get("command"), f"{key}.command"),
            args=_strings(data.get("args"), f"{key}.args"),
            script=_string(data.get("script"), f"{key}.script"),
            working_dir=_string(data.get("workingDir"), f"{key}.workingDir"),
            env=cls._parse_env(data.get("env"), f"{key}.env"),
            volume_mounts=cls._parse_volume_mounts(data.get("volumeMounts"), f"{key}.volumeMounts"),
        )

    @staticmethod
    def _parse_env(value: Any, key: str) -> List[EnvVar]:
        env = []
        for i, e in enumerate(_list(value, key)):
            e = _mapping(e, f"{key}[{i}]")
            env.append(
                EnvVar(
                    name=_string(e.get("name"), f"{key}[{i}].name"),
                    value=_string(e.get("value"), f"{key}[{i}].value"),
                )
            )
        return env

    @staticmethod
    def _parse_volume_mounts(value: Any, key: str) -> List[VolumeMount]:
        mounts = []
        for i, vm in enumerate(_list(value, key)):
            vm = _mapping(vm, f"{key}[{i}]")
            mounts.append(
                VolumeMount(
                    name=_string(vm.get("name"), f"{key}[{i}].name"),
                    mount_path=_string(vm.get("mountPath"), f"{key}[{i}].mountPath"),
                    sub_path=_string(vm.get("subPath"), f"{key}[{i}].subPath"),
                    read_only=bool(vm.get("readOnly", False)),
                )
            )
        return mounts

    @staticmethod
    def _parse_volume(data: Mapping[str, Any]) -> Volume:
        source = {k: v for k, v in data.items() if k != "name"}
        return Volume(name=_string(data.get("name"), "volumes.name"), source=source)

    @staticmethod
    def _parse_workspace(data: Mapping[str, Any], key: str) -> WorkspaceDeclaration:
        return WorkspaceDeclaration(
            name=_string(data.get("name"), f"{key}.name"),
            description=_string(data.get("description"), f"{key}.description"),
            mount_path=_string(data.get("mountPath"), f"{key}.mountPath"),
            read_only=bool(data.get("readOnly", False)),
        )

    @staticmethod
    def _parse_params(value: Any, key: str) -> List[ParamSpec]:
        params = []
        for i, p in enumerate(_list(value, key)):
            p = _mapping(p, f"{key}[{i}]")
            params.append(
                ParamSpec(
                    name=_string(p.get("name"), f"{key}[{i}].name"),
                    type=_string(p.get("type"), f"{key}[{i}].type") or ParamType.string.value,
                    description=_string(p.get("description"), f"{key}[{i}].description"),
                    default=_param_default(p.get("default"), f"{key}[{i}].default"),
                )
            )
        return params

    @staticmethod
    def _parse_resources(value: Any, key: str) -> List[TaskResource]:
        resources = []
        for i, r in enumerate(_list(value, key)):
            r = _mapping(r, f"{key}[{i}]")
            resources.append(
                TaskResource(
                    name=_string(r.get("name"), f"{key}[{i}].name"),
                    type=_string(r.get("type"), f"{key}[{i}].type"),
                    target_path=_string(r.get("targetPath"), f"{key}[{i}].targetPath"),
                    optional=bool(r.get("optional", False)),
                )
            )
        return resources

    @classmethod
    def _parse_inputs(cls, data: Mapping[str, Any]) -> Inputs:
        return Inputs(
            resources=cls._parse_resources(data.get("resources"), "inputs.resources"),
            params=cls._parse_params(data.get("params"), "inputs.params"),
        )

    @classmethod
    def _parse_outputs(cls, data: Mapping[str, Any]) -> Outputs:
        return Outputs(resources=cls._parse_resources(data.get("resources"), "outputs.resources"))

    @classmethod
    def _parse_task_resources(cls, data: Mapping[str, Any]) -> TaskResources:
        return TaskResources(
            inputs=cls._parse_resources(data.get("inputs"), "resources.inputs"),
            outputs=cls._parse_resources(data.get("outputs"), "resources.outputs"),
        )
