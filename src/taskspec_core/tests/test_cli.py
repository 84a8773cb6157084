# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Tests for the ``taskspec validate`` command."""

import json
import logging
import os
from unittest.mock import patch

import pytest

from taskspec_core.cli.errors import ERROR_HINTS, hint_for
from taskspec_core.cli.task import build_task_parser, main
from taskspec_core.logconfig import PACKAGE_LOGGERS
from taskspec_common.validation import ErrorKind


@pytest.fixture(autouse=True)
def reset_logging(clean_env):
    yield
    for name in PACKAGE_LOGGERS:
        logger = logging.getLogger(name)
        for handler in [h for h in logger.handlers if getattr(h, "_taskspec_handler", False)]:
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


class TestParser:
    def test_defaults(self):
        args = build_task_parser().parse_args(["validate"])
        assert args.task_action == "validate"
        assert args.path is None
        assert args.format is None
        assert args.log_level is None
        assert not args.warnings_as_errors
        assert not args.no_recursive
        assert not args.quiet

    def test_all_flags(self):
        args = build_task_parser().parse_args(
            ["validate", "tasks/", "--format", "json", "-W", "--no-recursive", "-q", "--log-level", "debug"]
        )
        assert args.path == "tasks/"
        assert args.format == "json"
        assert args.warnings_as_errors
        assert args.no_recursive
        assert args.quiet
        assert args.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "argv",
        [
            [],
            ["lint"],
            ["validate", "--format", "xml"],
            ["validate", "--log-level", "verbose"],
        ],
    )
    def test_usage_errors_exit_2(self, argv):
        with pytest.raises(SystemExit) as exc_info:
            main(argv)
        assert exc_info.value.code == 2


# ---------------------------------------------------------------------------
# Exit codes and output
# ---------------------------------------------------------------------------


def test_valid_directory_exits_0(valid_tasks_dir, capsys):
    assert main(["validate", str(valid_tasks_dir)]) == 0
    out = capsys.readouterr().out
    assert "Validating:" in out
    assert "All task files valid." in out


def test_quiet_valid_directory_prints_nothing(valid_tasks_dir, capsys):
    assert main(["validate", str(valid_tasks_dir), "-q"]) == 0
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_errors_exit_1_with_panels(write_task, task_samples, capsys):
    path = write_task(task_samples["array_splice"])
    assert main(["validate", path]) == 1
    captured = capsys.readouterr()
    assert "IllegalArraySplice" in captured.err
    assert "variable is not properly isolated" in captured.err
    assert "→ Fix:" in captured.err
    assert "Validation complete: 1 error" in captured.out


def test_table_format(invalid_tasks_dir, capsys):
    assert main(["validate", str(invalid_tasks_dir), "--format", "table"]) == 1
    out = capsys.readouterr().out
    assert "Validation Results" in out
    assert "Validation complete: 3 errors" in out


def test_json_format(invalid_tasks_dir, capsys):
    assert main(["validate", str(invalid_tasks_dir), "--format", "json"]) == 1
    data = json.loads(capsys.readouterr().out)
    assert data["files_checked"] == 3
    assert data["error_count"] == 3
    assert {i["kind"] for i in data["issues"]} == {
        "IllegalArraySplice",
        "MissingRequiredField",
        "UnresolvedVariableReference",
    }


def test_json_format_from_environment(valid_tasks_dir, capsys):
    with patch.dict(os.environ, {"TASKSPEC_OUTPUT_FORMAT": "json"}):
        assert main(["validate", str(valid_tasks_dir)]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data == {"files_checked": 2, "error_count": 0, "warning_count": 0, "issues": []}


def test_format_flag_overrides_environment(valid_tasks_dir, capsys):
    with patch.dict(os.environ, {"TASKSPEC_OUTPUT_FORMAT": "json"}):
        assert main(["validate", str(valid_tasks_dir), "--format", "text"]) == 0
    assert "All task files valid." in capsys.readouterr().out


def test_no_recursive_skips_nested(invalid_tasks_dir, capsys):
    assert main(["validate", str(invalid_tasks_dir), "--no-recursive", "--format", "json"]) == 1
    data = json.loads(capsys.readouterr().out)
    assert data["files_checked"] == 2


@pytest.mark.parametrize("flags, expected", [([], 0), (["-W"], 1), (["--warnings-as-errors"], 1)])
def test_warnings_as_errors(write_task, flags, expected, capsys):
    path = write_task("kind: Pipeline\nspec:\n  tasks: []\n")
    assert main(["validate", path] + flags) == expected
    assert "1 warning" in capsys.readouterr().out


def test_quiet_hides_warnings(write_task, capsys):
    path = write_task("kind: Pipeline\nspec:\n  tasks: []\n")
    assert main(["validate", path, "-q"]) == 0
    out = capsys.readouterr().out
    assert "Skipping" not in out
    assert "1 warning" in out


def test_missing_path_exits_1(tmp_path, capsys):
    assert main(["validate", str(tmp_path / "nope"), "--format", "json"]) == 1
    data = json.loads(capsys.readouterr().out)
    assert data["issues"][0]["message"].startswith("Path not found")


def test_invalid_configuration_exits_1(valid_tasks_dir, capsys):
    with patch.dict(os.environ, {"TASKSPEC_LOG_LEVEL": "TRACE"}):
        assert main(["validate", str(valid_tasks_dir)]) == 1
    assert "Invalid configuration" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def test_debug_logs_carry_file_context(write_task, task_samples, capsys):
    path = write_task(task_samples["valid_task"])
    assert main(["validate", path, "-q", "--log-level", "DEBUG"]) == 0
    err = capsys.readouterr().err
    assert "Task spec is valid" in err
    assert f"[{path}]" in err


def test_log_file_from_environment(write_task, task_samples, tmp_path, capsys):
    path = write_task(task_samples["valid_task"])
    log_file = tmp_path / "taskspec.log"
    with patch.dict(os.environ, {"TASKSPEC_LOG_FILE": str(log_file), "TASKSPEC_LOG_LEVEL": "INFO"}):
        assert main(["validate", path, "-q"]) == 0
    assert "Validated 1 file(s)" in log_file.read_text()
    assert capsys.readouterr().err == ""


def test_json_log_format(write_task, task_samples, capsys):
    path = write_task(task_samples["valid_task"])
    with patch.dict(os.environ, {"TASKSPEC_LOG_FORMAT": "json"}):
        assert main(["validate", path, "-q", "--log-level", "INFO"]) == 0
    lines = [line for line in capsys.readouterr().err.splitlines() if line]
    record = json.loads(lines[-1])
    assert record["level"] == "INFO"
    assert record["logger"] == "taskspec_core.task.validator"


# ---------------------------------------------------------------------------
# Remediation hints
# ---------------------------------------------------------------------------


def test_every_error_kind_has_a_hint():
    assert set(ERROR_HINTS) == set(ErrorKind)


@pytest.mark.parametrize("kind", [None, "NotAKind"])
def test_hint_for_unknown_kind(kind):
    assert hint_for(kind) is None


def test_hint_for_known_kind():
    assert hint_for("PathConflict") == ERROR_HINTS[ErrorKind.path_conflict]
