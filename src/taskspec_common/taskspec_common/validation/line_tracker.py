# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Map YAML key-paths to 1-based line numbers using PyYAML's AST."""

import re
from typing import Any, Dict, List, Optional

import yaml

_INDEX_RE = re.compile(r"\[[^\]]*\]")


def extract_line_map(content: str) -> List[Dict[str, int]]:
    """Parse every YAML document in *content* and map key-paths to line numbers.

    Returns one dict per document. Key-paths follow the pattern
    ``"parent.child"`` for mapping keys and ``"parent[0]"`` for sequence
    items. Line numbers are 1-based.

    Returns an empty list if the YAML cannot be parsed.
    """
    try:
        docs = list(yaml.compose_all(content))
    except yaml.YAMLError:
        return []

    maps: List[Dict[str, int]] = []
    for doc in docs:
        result: Dict[str, int] = {}

        def walk(node: Any, prefix: str) -> None:
            if node is None:
                return
            if isinstance(node, yaml.MappingNode):
                for kn, vn in node.value:
                    key = str(kn.value)
                    p = f"{prefix}.{key}" if prefix else key
                    result[p] = kn.start_mark.line + 1
                    walk(vn, p)
            elif isinstance(node, yaml.SequenceNode):
                for i, item in enumerate(node.value):
                    p = f"{prefix}[{i}]"
                    result[p] = item.start_mark.line + 1
                    walk(item, p)

        walk(doc, "")
        maps.append(result)
    return maps


def line_for(line_map: Dict[str, int], *keys: str) -> Optional[int]:
    """Return the first matching line number from *line_map*, or None."""
    for key in keys:
        if key in line_map:
            return line_map[key]
    return None


def line_for_field_path(line_map: Dict[str, int], field_path: str, root: str = "") -> Optional[int]:
    """Best-effort line for a validator field path such as ``taskspec.steps.name``.

    Validator paths name fields but not list positions, so the path is
    shortened from the right until a prefix matches a key in *line_map*.
    """
    parts = [p for p in _INDEX_RE.sub("", field_path).split(".") if p]
    if parts and parts[0] == "taskspec":
        parts = parts[1:]
    # Some validator paths use Go-style capitalized names ("Inputs.Resources").
    lowered = {k.lower(): v for k, v in line_map.items()}
    while parts:
        key = ".".join(parts).lower()
        candidates = [f"{root.lower()}.{key}", key] if root else [key]
        for candidate in candidates:
            if candidate in lowered:
                return lowered[candidate]
        parts.pop()
    return None
