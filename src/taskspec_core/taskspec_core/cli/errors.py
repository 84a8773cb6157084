# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Actionable error messages for task validation issues."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from taskspec_common.validation import ErrorKind

from ..task.validator import ValidationIssue

console = Console(stderr=True)

ERROR_HINTS = {
    ErrorKind.missing_field: "Add the missing field; every task needs at least one step with an image",
    ErrorKind.multiple_one_of: "Keep only one of the conflicting fields (e.g. `script` or `command`)",
    ErrorKind.duplicate_name: "Rename one of the entries so every name is unique",
    ErrorKind.path_conflict: "Give each workspace a distinct `mountPath`",
    ErrorKind.invalid_enum: "Use one of the supported types listed in the message",
    ErrorKind.type_mismatch: "Make the parameter `default` match its declared `type`",
    ErrorKind.unresolved_reference: "Declare the variable in `params`/`resources` or fix its spelling",
    ErrorKind.illegal_array_splice: (
        "Array parameters may only be used as a whole `command`/`args` item, e.g. \"$(params.name)\""
    ),
    ErrorKind.invalid_name: "Use lowercase letters, digits and '-', starting and ending alphanumeric",
    ErrorKind.invalid_value: "Avoid reserved names and mount paths (`tekton-internal-*`, `/tekton/`)",
}


def hint_for(kind: Optional[str]) -> Optional[str]:
    if kind is None:
        return None
    try:
        return ERROR_HINTS.get(ErrorKind(kind))
    except ValueError:
        return None


def show_issue(issue: ValidationIssue):
    """Display one validation error as a panel with a suggested fix."""
    location = issue.file if issue.line is None else f"{issue.file}:{issue.line}"
    if issue.document is not None:
        location += f" (document {issue.document})"

    error_text = Text()
    error_text.append(f"✗ {location}\n\n", style="bold red")
    error_text.append(issue.message, style="red")
    if issue.paths:
        error_text.append(f": {', '.join(issue.paths)}", style="red")
    error_text.append("\n")
    if issue.details:
        error_text.append(f"\n{issue.details}\n", style="dim")

    hint = hint_for(issue.kind)
    if hint:
        error_text.append("\n→ Fix: ", style="bold yellow")
        error_text.append(f"{hint}\n", style="yellow")
    console.print(Panel(error_text, title=issue.kind or "error", border_style="red", expand=False))
