from __future__ import annotations

import json
from typing import Iterable


JSON_INDENT = 4


def canonical_json_text(obj: object) -> str:
    """Encode JSON deterministically for line-based diffing.

    - stable key ordering
    - one member per line, fixed indentation
    - non-ASCII text kept verbatim (the caller writes UTF-8)
    """

    return json.dumps(obj, sort_keys=True, indent=JSON_INDENT, ensure_ascii=False)


def sorted_mapping(items: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Build a dict whose iteration order is ascending by key.

    Raises ValueError if a key occurs more than once.
    """

    out: dict[str, str] = {}
    for key, value in items:
        if key in out:
            raise ValueError(f"duplicate key: {key}")
        out[key] = value
    return {k: out[k] for k in sorted(out)}
