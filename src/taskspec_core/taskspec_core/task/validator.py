# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Standalone task spec validation for YAML files.

This module validates Task and ClusterTask manifests locally, without a
cluster, reporting each problem with the file, document and line it was
found at.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from taskspec_common.validation import (
    FieldError,
    TaskSpecParser,
    TaskSpecValidator,
    extract_line_map,
    line_for,
    line_for_field_path,
)

from ..logconfig import ValidationContext

LOGGER = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


class IssueSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class ValidationIssue:
    """A validation problem found in a task file."""

    file: str
    line: Optional[int]
    severity: IssueSeverity
    message: str
    document: Optional[int] = None  # 1-based index inside a multi-document file
    kind: Optional[str] = None
    paths: List[str] = field(default_factory=list)
    details: str = ""

    def __str__(self) -> str:
        loc = f"{self.file}"
        if self.line is not None:
            loc += f":{self.line}"
        prefix = "error" if self.severity == IssueSeverity.ERROR else "warning"
        msg = f"{loc}: {prefix}: {self.message}"
        if self.paths:
            msg += f": {', '.join(self.paths)}"
        if self.document is not None:
            msg += f" (in document {self.document})"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "line": self.line,
            "severity": self.severity.value,
            "message": self.message,
            "document": self.document,
            "kind": self.kind,
            "paths": list(self.paths),
            "details": self.details,
        }


@dataclass
class ValidationResult:
    """Result of validating one or more task files."""

    issues: List[ValidationIssue] = field(default_factory=list)
    files_checked: int = 0

    @property
    def has_errors(self) -> bool:
        return any(i.severity == IssueSeverity.ERROR for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.severity == IssueSeverity.WARNING for i in self.issues)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.WARNING]

    def add_error(
        self,
        file: str,
        message: str,
        line: Optional[int] = None,
        document: Optional[int] = None,
        error: Optional[FieldError] = None,
    ):
        self.issues.append(_issue(IssueSeverity.ERROR, file, message, line, document, error))

    def add_warning(
        self,
        file: str,
        message: str,
        line: Optional[int] = None,
        document: Optional[int] = None,
    ):
        self.issues.append(_issue(IssueSeverity.WARNING, file, message, line, document))

    def extend(self, other: "ValidationResult"):
        self.issues.extend(other.issues)
        self.files_checked += other.files_checked

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files_checked": self.files_checked,
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "issues": [i.to_dict() for i in self.issues],
        }


def _issue(
    severity: IssueSeverity,
    file: str,
    message: str,
    line: Optional[int],
    document: Optional[int],
    error: Optional[FieldError] = None,
) -> ValidationIssue:
    if error is None:
        return ValidationIssue(file, line, severity, message, document)
    return ValidationIssue(
        file=file,
        line=line,
        severity=severity,
        message=message,
        document=document,
        kind=error.kind.value,
        paths=list(error.paths),
        details=error.details,
    )


class TaskFileValidator:
    """Validates task YAML files."""

    def __init__(self, recursive: bool = True):
        """
        Initialize the validator.

        Args:
            recursive: Whether to descend into sub-directories when given a
                directory (default True)
        """
        self.recursive = recursive

    def validate_file(self, filepath: str) -> ValidationResult:
        """Validate every document in a single YAML file."""
        result = ValidationResult(files_checked=1)

        try:
            with open(filepath, encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            result.add_error(filepath, f"Cannot read file: {e}")
            return result

        try:
            documents = list(yaml.safe_load_all(content))
        except yaml.YAMLError as e:
            line = None
            mark = getattr(e, "problem_mark", None)
            if mark is not None:
                line = mark.line + 1
            result.add_error(filepath, f"Invalid YAML: {e}", line=line)
            return result

        line_maps = extract_line_map(content)
        multi = len(documents) > 1
        for index, data in enumerate(documents):
            if data is None:
                continue
            document = index + 1 if multi else None
            line_map = line_maps[index] if index < len(line_maps) else {}
            ValidationContext.set(filepath, document)
            try:
                self._validate_document(filepath, data, document, line_map, result)
            finally:
                ValidationContext.clear()
        return result

    def _validate_document(
        self,
        filepath: str,
        data: Any,
        document: Optional[int],
        line_map: Dict[str, int],
        result: ValidationResult,
    ):
        if not isinstance(data, dict):
            result.add_error(
                filepath,
                f"Top-level structure must be a mapping, got {type(data).__name__}",
                document=document,
            )
            return

        if not TaskSpecParser.is_task_document(data):
            kind = data.get("kind")
            message = (
                f"Skipping document of kind '{kind}'"
                if kind is not None
                else "Skipping document without 'kind' or 'steps'"
            )
            LOGGER.debug("%s", message)
            result.add_warning(filepath, message, document=document)
            return

        # Full manifests nest the spec under "spec"; bare specs start at the root.
        root = "spec" if "spec" in data and ("kind" in data or "apiVersion" in data) else ""
        try:
            spec = TaskSpecParser.parse_dict(data)
        except (TypeError, ValueError) as e:
            result.add_error(
                filepath,
                f"Malformed task spec: {e}",
                line=line_for(line_map, root or "steps"),
                document=document,
            )
            return

        outcome = TaskSpecValidator.check(spec)
        if outcome.ok:
            LOGGER.debug("Task spec is valid")
            return

        error = outcome.error
        line = None
        for path in error.paths:
            line = line_for_field_path(line_map, path, root=root)
            if line is not None:
                break
        if line is None and root:
            line = line_for(line_map, root)
        result.add_error(filepath, error.message, line=line, document=document, error=error)

    def _collect_files(self, directory: Path) -> List[Path]:
        pattern = "**/*" if self.recursive else "*"
        return sorted(
            p for p in directory.glob(pattern) if p.is_file() and p.suffix in YAML_SUFFIXES
        )

    def validate_all(self, path: Optional[str] = None) -> ValidationResult:
        """
        Validate task files.

        Args:
            path: Path to a task file or a directory of task files.
                  If None, the current working directory is validated.

        Returns:
            ValidationResult with all issues found.
        """
        result = ValidationResult()
        target = path if path is not None else os.getcwd()

        if os.path.isfile(target):
            result.extend(self.validate_file(target))

        elif os.path.isdir(target):
            yaml_files = self._collect_files(Path(target))
            if not yaml_files:
                result.add_warning(target, "No task files found in directory")
                return result

            for yaml_file in yaml_files:
                result.extend(self.validate_file(str(yaml_file)))

        else:
            result.add_error(target, f"Path not found: {target}")

        LOGGER.info(
            "Validated %d file(s): %d error(s), %d warning(s)",
            result.files_checked,
            len(result.errors),
            len(result.warnings),
        )
        return result
