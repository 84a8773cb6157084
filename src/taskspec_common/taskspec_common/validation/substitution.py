# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Scanner for ``$(scope.name)`` variable references in step fields.

The scanner never substitutes anything. It finds well-formed references,
records where each one sits in the field value, and reports the first
reference that breaks a usage rule:

- every referenced name must be declared in its scope;
- array names may not be referenced at all in some fields;
- in the remaining fields an array reference must be the whole value.

Scopes are regular alternations such as ``(?:inputs|outputs)\\.params``.
Only the first dot-separated segment of a reference is the variable name,
so ``$(inputs.resources.git.path)`` refers to the resource ``git``.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Collection, List, Optional, Pattern

from .errors import ErrorKind, FieldError
from .suggestions import suggest

VARIABLE_NAME_PATTERN = r"[_a-zA-Z][_a-zA-Z0-9.-]*"
REFERENCE_PATTERN = r"\$\((?:{prefix})\.(?P<var>{name})\)"


@dataclass(frozen=True)
class VariableReference:
    """One placeholder found in a field value."""

    name: str
    expression: str
    start: int
    end: int
    whole_field: bool


@lru_cache(maxsize=None)
def _compile(prefix: str) -> Pattern:
    return re.compile(REFERENCE_PATTERN.format(prefix=prefix, name=VARIABLE_NAME_PATTERN))


def find_references(value: str, prefix: str) -> List[VariableReference]:
    """Return every reference under *prefix* in *value*, in order of appearance."""
    if "$(" not in value:
        return []
    refs = []
    for match in _compile(prefix).finditer(value):
        refs.append(
            VariableReference(
                name=match.group("var").split(".")[0],
                expression=match.group(0),
                start=match.start(),
                end=match.end(),
                whole_field=match.start() == 0 and match.end() == len(value),
            )
        )
    return refs


def find_undeclared(value: str, prefix: str, names: Collection[str]) -> Optional[VariableReference]:
    for ref in find_references(value, prefix):
        if ref.name not in names:
            return ref
    return None


def find_prohibited_array_use(
    value: str, prefix: str, array_names: Collection[str]
) -> Optional[VariableReference]:
    for ref in find_references(value, prefix):
        if ref.name in array_names:
            return ref
    return None


def find_non_isolated_array_use(
    value: str, prefix: str, array_names: Collection[str]
) -> Optional[VariableReference]:
    for ref in find_references(value, prefix):
        if ref.name in array_names and not ref.whole_field:
            return ref
    return None


def validate_variable(
    name: str,
    value: str,
    prefix: str,
    location_name: str,
    path: str,
    names: Collection[str],
):
    """Raise if *value* references a name that is not declared under *prefix*."""
    ref = find_undeclared(value, prefix, names)
    if ref is not None:
        hint = suggest(ref.name, names)
        raise FieldError(
            ErrorKind.unresolved_reference,
            f"non-existent variable in {_quote(value)} for {location_name} {name}",
            [f"{path}.{name}"],
            details=f"Did you mean {hint}?" if hint else "",
        )


def validate_variable_prohibited(
    name: str,
    value: str,
    prefix: str,
    location_name: str,
    path: str,
    array_names: Collection[str],
):
    """Raise if *value* references any of *array_names*."""
    if find_prohibited_array_use(value, prefix, array_names) is not None:
        raise FieldError(
            ErrorKind.illegal_array_splice,
            f"variable type invalid in {_quote(value)} for {location_name} {name}",
            [f"{path}.{name}"],
        )


def validate_variable_isolated(
    name: str,
    value: str,
    prefix: str,
    location_name: str,
    path: str,
    array_names: Collection[str],
):
    """Raise if an array reference in *value* shares the value with anything else."""
    if find_non_isolated_array_use(value, prefix, array_names) is not None:
        raise FieldError(
            ErrorKind.illegal_array_splice,
            f"variable is not properly isolated in {_quote(value)} for {location_name} {name}",
            [f"{path}.{name}"],
        )


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
