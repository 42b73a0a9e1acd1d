"""
Conversion of raw store payloads into StatRecord objects.

The store may hold only a subset of counters for a player, and values arrive
as floats, numeric strings or bytes depending on the command used. Nothing
past this module sees the raw payload.
"""

import math
from typing import Any, Mapping, Optional

from ctfbot.constants import StatKeys, UNRANKED
from ctfbot.data_models.stats import StatRecord


def coerce_counter(value: Any) -> float:
    """Return a finite number for a raw counter value, 0 when absent or non-numeric."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (bytes, bytearray)):
        try:
            value = value.decode()
        except UnicodeDecodeError:
            return 0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if not isinstance(value, (int, float)):
        return 0
    if math.isnan(value) or math.isinf(value):
        return 0
    return value


def normalize_stats(raw_fields: Optional[Mapping[str, Any]], name: str) -> StatRecord:
    """
    Build a StatRecord from raw store fields.

    Every recognized counter is read and defaults to 0. Unknown keys are
    ignored. `place` is left UNRANKED; the aggregator assigns it after sorting.
    """
    raw_fields = raw_fields or {}
    counters = {key: coerce_counter(raw_fields.get(key)) for key in StatKeys.ALL}
    return StatRecord(name=name, place=UNRANKED, **counters)
