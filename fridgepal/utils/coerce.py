"""Total coercion helpers for model-generated fields.

Every helper returns a value of the requested type and never raises: a value
that cannot be interpreted falls back to the supplied default. Used by the
response normalizer for recipes and meal plans.
"""

import math
import re
from typing import Any, Callable, Optional

# Leading integer, the way a lenient parser reads "20 minutes" or "1.5"
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def coerce_int(value: Any, default: int, minimum: Optional[int] = None, maximum: Optional[int] = None) -> int:
    """Coerce a loosely typed value to int.

    Accepts ints, finite floats (truncated) and strings with a leading integer
    ("20 min" -> 20, "1.5" -> 1). Booleans, None, NaN, containers and anything
    else yield `default`. A result below `minimum` yields `default`; a result
    above `maximum` is clamped to `maximum`.

    Args:
        value: Raw value from parsed JSON.
        default: Value returned when `value` is not usable.
        minimum: Smallest accepted result (inclusive), or None.
        maximum: Largest result (inclusive), or None.

    Returns:
        An int; never NaN, never None.
    """
    result: Optional[int] = None

    if isinstance(value, bool):
        result = None
    elif isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if math.isfinite(value):
            result = int(value)
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            result = int(match.group(1))

    if result is None:
        return default
    if minimum is not None and result < minimum:
        return default
    if maximum is not None and result > maximum:
        return maximum
    return result


def coerce_str(value: Any, default: str = "") -> str:
    """Return a stripped string, or `default` for blank/non-scalar values.

    Numbers are rendered with str(); booleans, None and containers use the
    default.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else default
    return default


def coerce_list(value: Any, item: Optional[Callable[[Any], Optional[Any]]] = None) -> list:
    """Coerce a value to a list, mapping and filtering each element.

    A list or tuple is kept; a single non-blank string or a mapping is
    wrapped into a one-element list; anything else becomes []. When `item`
    is given it converts each element, and elements it maps to None are
    dropped.
    """
    if isinstance(value, (list, tuple)):
        elements = list(value)
    elif isinstance(value, str):
        elements = [value] if value.strip() else []
    elif isinstance(value, dict):
        elements = [value]
    else:
        elements = []

    if item is None:
        return elements

    converted = []
    for element in elements:
        result = item(element)
        if result is not None:
            converted.append(result)
    return converted


def coerce_str_or_none(value: Any) -> Optional[str]:
    """Element converter for coerce_list: a non-blank string or None."""
    text = coerce_str(value)
    return text or None


def coerce_name(value: Any) -> Optional[str]:
    """Element converter for name lists: strings, or mappings with a name."""
    if isinstance(value, dict):
        return coerce_str_or_none(value.get("name"))
    return coerce_str_or_none(value)
