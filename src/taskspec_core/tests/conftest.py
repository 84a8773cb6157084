# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

import os
from pathlib import Path
from typing import Dict
from unittest.mock import patch

import pytest

VALID_TASK = """\
apiVersion: tekton.dev/v1beta1
kind: Task
metadata:
  name: build
spec:
  params:
    - name: flags
      type: array
    - name: tag
      default: latest
  workspaces:
    - name: source
  steps:
    - name: compile
      image: golang:1.21
      workingDir: $(workspaces.source.path)
      command: [go, build]
      args:
        - $(params.flags)
      env:
        - name: TAG
          value: v-$(params.tag)
"""

VALID_BARE_SPEC = """\
steps:
  - image: busybox
    script: |
      echo hello
"""

ARRAY_SPLICE_TASK = """\
apiVersion: tekton.dev/v1beta1
kind: Task
metadata:
  name: splice
spec:
  params:
    - name: arr
      type: array
  steps:
    - name: echo
      image: busybox
      command:
        - echo-$(params.arr)
"""

UNDECLARED_PARAM_TASK = """\
apiVersion: tekton.dev/v1beta1
kind: ClusterTask
metadata:
  name: undeclared
spec:
  steps:
    - image: busybox
      args: ["$(params.revison)"]
"""

NO_STEPS_TASK = """\
apiVersion: tekton.dev/v1beta1
kind: Task
metadata:
  name: empty
spec:
  description: nothing to do
"""

MULTI_DOC = """\
apiVersion: tekton.dev/v1beta1
kind: Task
metadata:
  name: first
spec:
  steps:
    - image: busybox
---
apiVersion: tekton.dev/v1beta1
kind: Pipeline
metadata:
  name: pipeline
spec:
  tasks: []
---
apiVersion: tekton.dev/v1beta1
kind: Task
metadata:
  name: third
spec:
  steps:
    - name: Bad_Name
      image: busybox
"""

INVALID_YAML = """\
kind: Task
spec:
  steps: [
"""


def _write(directory: Path, files: Dict[str, str]) -> Path:
    for name, content in files.items():
        path = directory / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return directory


@pytest.fixture
def valid_tasks_dir(tmp_path: Path) -> Path:
    return _write(
        tmp_path / "valid",
        {"build.yaml": VALID_TASK, "nested/bare.yml": VALID_BARE_SPEC, "README.md": "not yaml"},
    )


@pytest.fixture
def invalid_tasks_dir(tmp_path: Path) -> Path:
    return _write(
        tmp_path / "invalid",
        {
            "splice.yaml": ARRAY_SPLICE_TASK,
            "undeclared.yaml": UNDECLARED_PARAM_TASK,
            "nested/no_steps.yaml": NO_STEPS_TASK,
        },
    )


@pytest.fixture
def write_task(tmp_path: Path):
    """Write *content* to a YAML file under tmp_path and return its path as a string."""

    def _write_task(content: str, name: str = "task.yaml") -> str:
        path = tmp_path / name
        path.write_text(content)
        return str(path)

    return _write_task


@pytest.fixture
def clean_env():
    """Run with no TASKSPEC_* variables leaking in from the outer environment."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("TASKSPEC_")}
    with patch.dict(os.environ, env, clear=True):
        yield


@pytest.fixture
def task_samples() -> Dict[str, str]:
    return {
        "valid_task": VALID_TASK,
        "valid_bare_spec": VALID_BARE_SPEC,
        "array_splice": ARRAY_SPLICE_TASK,
        "undeclared_param": UNDECLARED_PARAM_TASK,
        "no_steps": NO_STEPS_TASK,
        "multi_doc": MULTI_DOC,
        "invalid_yaml": INVALID_YAML,
    }
