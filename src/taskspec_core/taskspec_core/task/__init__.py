# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Task file validation utilities."""

from .validator import IssueSeverity, TaskFileValidator, ValidationIssue, ValidationResult

__all__ = ["IssueSeverity", "TaskFileValidator", "ValidationIssue", "ValidationResult"]
