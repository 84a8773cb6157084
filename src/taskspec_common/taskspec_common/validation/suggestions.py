# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Edit-distance suggestions for misspelled variable references."""

import difflib
from typing import Iterable, Optional


def suggest(ref: str, candidates: Iterable[str], n: int = 3, cutoff: float = 0.6) -> Optional[str]:
    """Return a human-readable suggestion string for *ref*, or None if no close match."""
    matches = difflib.get_close_matches(ref, sorted(set(candidates)), n=n, cutoff=cutoff)
    return ", ".join(f"'{m}'" for m in matches) if matches else None
