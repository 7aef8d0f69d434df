"""Loading and validation of the Tinder data export.

The export (``data.json``) is a single JSON object.  Only its ``Usage``
section is read: six series, each a mapping from a date string to a count.
Everything is validated here, at the load boundary, so the aggregation code
in ``analytics.py`` can work on typed records only.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

logger = logging.getLogger(__name__)

SERIES_NAMES = (
    "app_opens",
    "swipes_likes",
    "swipes_passes",
    "matches",
    "messages_sent",
    "messages_received",
)

_DATE_FORMATS = ("%Y-%m-%d", "%Y-%m", "%Y")

# Zero-padded "YYYY", "YYYY-MM" or "YYYY-MM-DD"; month grouping relies on key[:7].
_DATE_KEY_RE = re.compile(r"[0-9]{4}(-[0-9]{2}(-[0-9]{2})?)?")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class UsageExportError(Exception):
    """Base class for every failure to turn an export into a UsageHistory."""

    kind = "usage_export_error"


class DecodeError(UsageExportError):
    """The file is not UTF-8 JSON, or its top level is not an object."""

    kind = "decode_error"


class SchemaError(UsageExportError):
    """The ``Usage`` section is missing, or a series has the wrong shape."""

    kind = "schema_error"


class DateParseError(UsageExportError, ValueError):
    """A series key is not a calendar date."""

    kind = "date_parse_error"

    def __init__(self, key: object, series: str | None = None) -> None:
        self.key = key
        self.series = series
        where = f" in series '{series}'" if series else ""
        super().__init__(f"Invalid date key {key!r}{where}")


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UsageHistory:
    """The six usage series of one export, in source order.

    Each series maps a date key ("YYYY-MM-DD" or a prefix of it) to a
    non-negative count.  The mappings are read-only views.
    """

    app_opens: Mapping[str, int]
    swipes_likes: Mapping[str, int]
    swipes_passes: Mapping[str, int]
    matches: Mapping[str, int]
    messages_sent: Mapping[str, int]
    messages_received: Mapping[str, int]

    def series(self, name: str) -> Mapping[str, int]:
        """Return a series by its export field name."""
        if name not in SERIES_NAMES:
            raise KeyError(name)
        return getattr(self, name)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_date_key(key: str) -> date:
    """Parse a series key into a calendar date.

    Accepts zero-padded "YYYY-MM-DD", the prefixes "YYYY-MM" and "YYYY"
    (which resolve to the first day of the period), and longer ISO
    timestamps whose first ten characters are a date.  Unpadded parts or
    surrounding whitespace are rejected.

    Raises:
        DateParseError: If *key* is not a string or not a valid date.
    """
    if not isinstance(key, str):
        raise DateParseError(key)
    candidate = key
    if len(candidate) > 10 and candidate[10] in ("T", " "):
        candidate = candidate[:10]
    if not _DATE_KEY_RE.fullmatch(candidate):
        raise DateParseError(key)
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).date()
        except ValueError:
            continue
    raise DateParseError(key)


def _parse_count(value: Any, series: str, key: str) -> int:
    """Validate a single count value."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaError(
            f"Count for {key!r} in series '{series}' must be a number, "
            f"got {type(value).__name__}"
        )
    if isinstance(value, float):
        if not value.is_integer():
            raise SchemaError(f"Count for {key!r} in series '{series}' is not whole: {value}")
        value = int(value)
    if value < 0:
        raise SchemaError(f"Count for {key!r} in series '{series}' is negative: {value}")
    return value


def _parse_series(name: str, raw: Any) -> Mapping[str, int]:
    """Validate one series and return it as a read-only mapping."""
    if not isinstance(raw, dict):
        raise SchemaError(
            f"Usage.{name} must be an object, got {type(raw).__name__}"
        )
    parsed: dict[str, int] = {}
    for key, value in raw.items():
        try:
            parse_date_key(key)
        except DateParseError as exc:
            raise DateParseError(key, series=name) from exc
        parsed[key] = _parse_count(value, name, key)
    return MappingProxyType(parsed)


def parse_usage(document: Any) -> UsageHistory:
    """Validate a decoded export and extract its ``Usage`` series.

    Args:
        document: The decoded JSON document (from ``decode_export``).

    Returns:
        A UsageHistory holding all six series.

    Raises:
        SchemaError: If ``Usage`` or one of its series is missing or
            malformed, or a count is not a non-negative whole number.
        DateParseError: If a series key is not a calendar date.
    """
    if not isinstance(document, dict):
        raise SchemaError(
            f"Export must be a JSON object, got {type(document).__name__}"
        )
    usage = document.get("Usage")
    if usage is None:
        raise SchemaError("Export has no 'Usage' section")
    if not isinstance(usage, dict):
        raise SchemaError(f"'Usage' must be an object, got {type(usage).__name__}")

    missing = [name for name in SERIES_NAMES if name not in usage]
    if missing:
        raise SchemaError(f"'Usage' is missing series: {', '.join(missing)}")

    extra = sorted(set(usage) - set(SERIES_NAMES))
    if extra:
        logger.debug("Ignoring unrecognised Usage series: %s", ", ".join(extra))

    return UsageHistory(**{name: _parse_series(name, usage[name]) for name in SERIES_NAMES})


def decode_export(text: str | bytes) -> dict:
    """Decode export text into a JSON object.

    Raises:
        DecodeError: If *text* is not valid UTF-8 JSON or its top level is
            not an object.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"File is not UTF-8 text: {exc}") from exc
    else:
        text = text.lstrip("\ufeff")

    try:
        document = json.loads(text)
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError, oversized integer literals and excessive nesting
        raise DecodeError(f"File is not valid JSON: {exc}") from exc

    if not isinstance(document, dict):
        raise DecodeError(
            f"Expected a JSON object at the top level, got {type(document).__name__}"
        )
    return document


def load_usage_text(path: str | Path) -> str:
    """Read an export file as UTF-8 text.

    Raises:
        FileNotFoundError: If the file at *path* does not exist.
        DecodeError: If the file is not UTF-8.
    """
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"File is not UTF-8 text: {exc}") from exc


def load_usage_history(path: str | Path) -> UsageHistory:
    """One-call entry point: read, decode and validate an export file."""
    history = parse_usage(decode_export(load_usage_text(path)))
    logger.info("Loaded usage history from %s", path)
    return history
