# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Structured field errors returned by the task spec validator.

A :class:`FieldError` names *what* went wrong (``kind`` and ``message``) and
*where* (``paths``, dot/bracket-indexed after the task spec's own field names).
Validation stops at the first error, so callers only ever receive one.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List


class ErrorKind(str, Enum):
    missing_field = "MissingRequiredField"
    multiple_one_of = "MutuallyExclusiveFieldsSet"
    duplicate_name = "DuplicateName"
    path_conflict = "PathConflict"
    invalid_enum = "InvalidEnumValue"
    type_mismatch = "TypeMismatch"
    unresolved_reference = "UnresolvedVariableReference"
    illegal_array_splice = "IllegalArraySplice"
    invalid_name = "InvalidNameSyntax"
    invalid_value = "InvalidValue"


class FieldError(ValueError):
    """A validation failure located at one or more field paths."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        paths: Iterable[str] = (),
        details: str = "",
    ):
        self.kind = kind
        self.message = message
        self.paths: List[str] = list(paths)
        self.details = details
        super().__init__(str(self))

    def via_field(self, prefix: str) -> "FieldError":
        """Return a copy with *prefix* prepended to every path."""
        paths = [f"{prefix}.{p}" if p else prefix for p in self.paths] or [prefix]
        return FieldError(self.kind, self.message, paths, self.details)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "paths": list(self.paths),
            "details": self.details,
        }

    def __str__(self) -> str:
        text = f"{self.message}: {', '.join(self.paths)}"
        if self.details:
            text += f"\n{self.details}"
        return text

    def __repr__(self) -> str:
        return f"FieldError(kind={self.kind.value!r}, message={self.message!r}, paths={self.paths!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldError):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((self.kind, self.message, tuple(self.paths), self.details))


def missing_field(*fields: str) -> FieldError:
    return FieldError(ErrorKind.missing_field, "missing field(s)", fields)


def multiple_one_of(*fields: str) -> FieldError:
    return FieldError(ErrorKind.multiple_one_of, "expected exactly one, got both", fields)


def invalid_value(value: Any, field: str, kind: ErrorKind = ErrorKind.invalid_value) -> FieldError:
    return FieldError(kind, f"invalid value: {value}", [field])
