# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Tests for building TaskSpec objects from decoded YAML."""

import textwrap

import pytest
import yaml

from taskspec_common.validation.spec import (
    ArrayOrString,
    EnvVar,
    Step,
    TaskSpec,
    TaskSpecParser,
    VolumeMount,
    WorkspaceDeclaration,
)

_TASK_YAML = textwrap.dedent(
    """\
    apiVersion: tekton.dev/v1beta1
    kind: Task
    metadata:
      name: build
    spec:
      description: Build an image
      params:
        - name: flags
          type: array
          default: ["-v"]
        - name: tag
          default: latest
        - name: untyped
      resources:
        inputs:
          - name: source
            type: git
        outputs:
          - name: image
            type: image
            targetPath: /out
      workspaces:
        - name: cache
          mountPath: /cache
          readOnly: true
      volumes:
        - name: scratch
          emptyDir: {}
      stepTemplate:
        env:
          - name: HOME
            value: /tekton/home
      steps:
        - name: compile
          image: golang:1.21
          workingDir: $(resources.inputs.source.path)
          command: [go]
          args: [build, $(params.flags)]
          env:
            - name: TAG
              value: $(params.tag)
          volumeMounts:
            - name: scratch
              mountPath: /scratch
              subPath: tmp
        - image: busybox
          script: |
            echo done
    """
)


class TestTaskSpecParser:
    def test_full_document(self):
        spec = TaskSpecParser.parse_dict(yaml.safe_load(_TASK_YAML))

        assert spec.description == "Build an image"
        assert [p.name for p in spec.params] == ["flags", "tag", "untyped"]
        assert spec.params[0].type == "array"
        assert spec.params[0].default == ArrayOrString(type="array", array_val=["-v"])
        assert spec.params[1].default == ArrayOrString(type="string", string_val="latest")
        assert spec.params[2].type == "string"
        assert spec.params[2].default is None

        assert spec.resources is not None
        assert [r.name for r in spec.resources.inputs] == ["source"]
        assert spec.resources.outputs[0].target_path == "/out"
        assert spec.inputs is None and spec.outputs is None

        assert spec.workspaces == [WorkspaceDeclaration("cache", mount_path="/cache", read_only=True)]
        assert spec.volumes[0].name == "scratch"
        assert spec.volumes[0].source == {"emptyDir": {}}
        assert spec.step_template == Step(env=[EnvVar("HOME", "/tekton/home")])

        compile_step, script_step = spec.steps
        assert compile_step == Step(
            name="compile",
            image="golang:1.21",
            command=["go"],
            args=["build", "$(params.flags)"],
            working_dir="$(resources.inputs.source.path)",
            env=[EnvVar("TAG", "$(params.tag)")],
            volume_mounts=[VolumeMount("scratch", "/scratch", "tmp")],
        )
        assert script_step.script == "echo done\n"
        assert script_step.name == ""

    def test_bare_spec(self):
        spec = TaskSpecParser.parse_dict({"steps": [{"image": "busybox"}]})
        assert spec.steps == [Step(image="busybox")]

    def test_legacy_inputs_and_outputs(self):
        spec = TaskSpecParser.parse_dict(
            {
                "inputs": {
                    "params": [{"name": "p", "type": "string"}],
                    "resources": [{"name": "src", "type": "git"}],
                },
                "outputs": {"resources": [{"name": "img", "type": "image"}]},
                "steps": [{"image": "x"}],
            }
        )
        assert spec.resources is None
        assert [p.name for p in spec.inputs.params] == ["p"]
        assert [r.name for r in spec.inputs.resources] == ["src"]
        assert [r.name for r in spec.outputs.resources] == ["img"]

    def test_empty_mapping_is_empty_spec(self):
        assert TaskSpecParser.parse_dict({}).is_empty()

    def test_numbers_become_strings(self):
        spec = TaskSpecParser.parse_dict({"steps": [{"image": "x", "args": [1, 2.5]}]})
        assert spec.steps[0].args == ["1", "2.5"]

    @pytest.mark.parametrize(
        "data, match",
        [
            ({"steps": {"image": "x"}}, "'steps' must be a list"),
            ({"steps": ["x"]}, r"'steps\[0\]' must be a mapping"),
            ({"steps": [{"image": ["x"]}]}, r"'steps\[0\].image' must be a string"),
            ({"steps": [{"image": "x", "env": [{"name": "A", "value": True}]}]}, "must be a string"),
            ({"kind": "Task", "spec": ["x"]}, "'spec' must be a mapping"),
        ],
    )
    def test_shape_errors(self, data, match):
        with pytest.raises(TypeError, match=match):
            TaskSpecParser.parse_dict(data)

    @pytest.mark.parametrize(
        "data, expected",
        [
            ({"kind": "Task", "spec": {}}, True),
            ({"kind": "ClusterTask", "spec": {}}, True),
            ({"kind": "Pipeline", "spec": {}}, False),
            ({"steps": []}, True),
            ({"name": "x"}, False),
        ],
    )
    def test_is_task_document(self, data, expected):
        assert TaskSpecParser.is_task_document(data) is expected

    def test_parse_file(self, tmp_path):
        path = tmp_path / "task.yaml"
        path.write_text(_TASK_YAML)
        spec = TaskSpecParser.parse(str(path))
        assert len(spec.steps) == 2

    def test_parse_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert TaskSpecParser.parse(str(path)) == TaskSpec()

    def test_parse_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(TypeError, match="must be a mapping"):
            TaskSpecParser.parse(str(path))
