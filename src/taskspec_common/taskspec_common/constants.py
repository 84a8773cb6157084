# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from enum import Enum
from typing import Final, FrozenSet


class ParamType(str, Enum):
    string = "string"
    array = "array"


class ResourceType(str, Enum):
    git = "git"
    storage = "storage"
    image = "image"
    cluster = "cluster"
    pull_request = "pullRequest"
    cloud_event = "cloudEvent"


ALL_PARAM_TYPES: Final[FrozenSet[str]] = frozenset(t.value for t in ParamType)
ALL_RESOURCE_TYPES: Final[FrozenSet[str]] = frozenset(t.value for t in ResourceType)

# Workspaces without an explicit mountPath are mounted under this directory.
WORKSPACE_DIR: Final[str] = "/workspace"

# Steps may not mount anything under the reserved prefix except the home dir.
RESERVED_MOUNT_PREFIX: Final[str] = "/tekton/"
RESERVED_MOUNT_EXCEPTION: Final[str] = "/tekton/home"
RESERVED_VOLUME_NAME_PREFIX: Final[str] = "tekton-internal-"

TASK_KINDS: Final[FrozenSet[str]] = frozenset(("Task", "ClusterTask"))

DNS1123_LABEL_MAX_LENGTH: Final[int] = 63
DNS_LABEL_DETAILS: Final[str] = (
    "Task step name must be a valid DNS Label, For more info refer to "
    "https://kubernetes.io/docs/concepts/overview/working-with-objects/names/#names"
)
