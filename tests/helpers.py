"""Shared test helpers for tinder_stats tests.

Regular functions (not fixtures) that can be imported by any test module.
"""

from __future__ import annotations

import json
from pathlib import Path

from usage_export import SERIES_NAMES


def make_export(**series: dict[str, int]) -> dict:
    """Build a minimal export document.

    Any of the six Usage series not passed in is an empty object.

    Args:
        **series: Series name -> {date_key: count} mappings.

    Returns:
        A dict matching the Tinder data export structure.
    """
    usage = {name: {} for name in SERIES_NAMES}
    usage.update(series)
    return {"User": {"gender": "M"}, "Usage": usage}


def write_export(path: Path, document: object) -> str:
    """Write *document* as JSON and return the string path."""
    path.write_text(json.dumps(document), encoding="utf-8")
    return str(path)
