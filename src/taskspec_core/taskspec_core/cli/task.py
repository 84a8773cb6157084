# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""CLI commands for task spec operations."""

import argparse
import json
import sys
from typing import List, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..logconfig import configure_logging
from ..task.validator import IssueSeverity, TaskFileValidator, ValidationResult
from .config import load_and_validate_config
from .errors import show_issue

console = Console()

OUTPUT_FORMATS = ["text", "table", "json"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_task_parser() -> argparse.ArgumentParser:
    """Build the argument parser for task commands."""
    parser = argparse.ArgumentParser(
        description="Task spec tools",
        prog="taskspec",
    )

    subparsers = parser.add_subparsers(
        dest="task_action",
        help="Task action to perform",
        required=True,
    )

    # validate subcommand
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate task YAML files",
        description=(
            "Validate Task and ClusterTask manifests for structural errors, "
            "undeclared variable references, misused array parameters and "
            "other issues. Runs locally without requiring a cluster."
        ),
    )
    validate_parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help=(
            "Path to a task file or directory to validate. "
            "If not specified, validates the current directory."
        ),
    )
    validate_parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: TASKSPEC_OUTPUT_FORMAT or text)",
    )
    validate_parser.add_argument(
        "--warnings-as-errors",
        "-W",
        action="store_true",
        help="Treat warnings as errors (affects exit code)",
    )
    validate_parser.add_argument(
        "--no-recursive",
        action="store_true",
        help="Don't descend into sub-directories (default: recursive)",
    )
    validate_parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only output errors and summary",
    )
    validate_parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Log level (default: TASKSPEC_LOG_LEVEL or WARNING)",
    )

    return parser


def print_result_text(result: ValidationResult, quiet: bool = False):
    """Print validation result in text format."""
    for issue in result.issues:
        if issue.severity == IssueSeverity.ERROR:
            show_issue(issue)
        elif not quiet:
            console.print(f"[yellow]{escape(str(issue))}[/yellow]")


def print_result_table(result: ValidationResult, quiet: bool = False):
    """Print validation result in table format."""
    if not result.issues:
        return

    table = Table(title="Validation Results")
    table.add_column("File", style="cyan")
    table.add_column("Line", style="magenta")
    table.add_column("Severity", style="bold")
    table.add_column("Kind")
    table.add_column("Message")
    table.add_column("Fields", style="green")

    for issue in result.issues:
        if quiet and issue.severity == IssueSeverity.WARNING:
            continue
        severity_style = "red" if issue.severity == IssueSeverity.ERROR else "yellow"
        table.add_row(
            escape(issue.file),
            str(issue.line) if issue.line else "-",
            f"[{severity_style}]{issue.severity.value}[/{severity_style}]",
            issue.kind or "-",
            escape(issue.message),
            escape(", ".join(issue.paths)) or "-",
        )

    console.print(table)


def print_result_json(result: ValidationResult):
    """Print validation result as a single JSON document on stdout."""
    sys.stdout.write(json.dumps(result.to_dict(), indent=2) + "\n")


def exit_code(result: ValidationResult, warnings_as_errors: bool = False) -> int:
    if result.has_errors:
        return 1
    if warnings_as_errors and result.has_warnings:
        return 1
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Execute the validate command."""
    try:
        config = load_and_validate_config()
    except ValidationError as e:
        console.print(f"[red]Error: Invalid configuration:[/red]\n{escape(str(e))}")
        return 1

    configure_logging(
        args.log_level or config.log_level,
        config.log_format,
        config.log_file,
        config.max_log_file_bytes,
        config.log_backup_count,
    )
    output_format = args.format or config.output_format
    # Keep stdout parseable in json mode.
    quiet = args.quiet or output_format == "json"

    validator = TaskFileValidator(recursive=not args.no_recursive)

    if not quiet:
        console.print(f"Validating: {escape(args.path or '.')}")

    result = validator.validate_all(args.path)

    if output_format == "json":
        print_result_json(result)
        return exit_code(result, args.warnings_as_errors)
    if output_format == "table":
        print_result_table(result, args.quiet)
    else:
        print_result_text(result, args.quiet)

    # Print summary
    error_count = len(result.errors)
    warning_count = len(result.warnings)

    if error_count == 0 and warning_count == 0:
        if not args.quiet:
            console.print("[green]All task files valid.[/green]")
        return 0

    summary_parts = []
    if error_count > 0:
        summary_parts.append(f"[red]{error_count} error{'s' if error_count != 1 else ''}[/red]")
    if warning_count > 0:
        summary_parts.append(
            f"[yellow]{warning_count} warning{'s' if warning_count != 1 else ''}[/yellow]"
        )

    console.print(f"\nValidation complete: {', '.join(summary_parts)}")
    return exit_code(result, args.warnings_as_errors)


def dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate task command handler."""
    if args.task_action == "validate":
        return cmd_validate(args)
    else:
        console.print(f"[red]Unknown task action: {args.task_action}[/red]")
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for task commands."""
    parser = build_task_parser()
    args = parser.parse_args(argv)
    return dispatch(args)


if __name__ == "__main__":
    sys.exit(main())
