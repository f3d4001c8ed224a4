"""Value-per-point normalization.

Canonicalizes value-per-point overrides into a deduplicated, sorted
list. The same function feeds approval diffs and Medusa sync payloads,
so identical input sets must give identical output regardless of order.
"""

import math
import re
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

# Plain decimal with optional exponent; no underscores, no inf/nan words
_NUMBER_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)


def _field(source: Any, name: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def coerce_number(value: Any) -> float | None:
    """Coerce a raw override value to a finite float.

    Accepts finite numbers and strings that trim to a plain decimal
    (optionally with an exponent).
    Anything else (including booleans) is treated as absent.

    Args:
        value: Raw value.

    Returns:
        Float value, or None if the value is not usable.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else None

    if isinstance(value, str):
        text = value.strip()
        if not _NUMBER_PATTERN.fullmatch(text):
            return None
        number = float(text)
        return number if math.isfinite(number) else None

    return None


def normalize_value_per_points(entries: Iterable[Any] | None) -> list[dict[str, Any]]:
    """Normalize value-per-point overrides.

    Entries are ``ValuePerPoint`` objects or mappings carrying
    ``currency``, ``sales_channel`` and ``vpp``. An entry is kept only
    with a non-empty currency code, a sales channel id and a usable
    value. For each (currency code, sales channel id) pair the last
    entry wins.

    Args:
        entries: Raw overrides in any order.

    Returns:
        Overrides sorted by currency code, then sales channel id.
    """
    if entries is None or isinstance(entries, (str, bytes, Mapping)):
        return []

    deduped: dict[tuple[str, str], dict[str, Any]] = {}

    for entry in entries:
        if entry is None:
            continue

        currency = _field(entry, "currency")
        sales_channel = _field(entry, "sales_channel")
        value = coerce_number(_field(entry, "vpp"))

        code = _field(currency, "code")
        currency_code = code.strip().upper() if isinstance(code, str) else ""
        sales_channel_id = _field(sales_channel, "id")

        if not currency_code or sales_channel_id is None or value is None:
            continue

        deduped[(currency_code, str(sales_channel_id))] = {
            "currency_id": _field(currency, "id"),
            "currency_code": currency_code,
            "currency_name": _field(currency, "name"),
            "currency_symbol": _field(currency, "symbol"),
            "sales_channel_id": sales_channel_id,
            "sales_channel_name": _field(sales_channel, "name"),
            "value": value,
        }

    return [deduped[key] for key in sorted(deduped)]
