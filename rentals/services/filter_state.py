"""Turn raw filter input (query strings, form widgets) into a ``FilterSpec``."""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from ..models.property import FilterSpec
from ..utils.coerce import to_bool, to_float, to_int
from ..utils.logging import get_logger, kv

LOGGER = get_logger("services.filter_state")

# UI placeholders that mean "no preference"
SENTINELS = {"any", "all types", "all"}

_ALIASES = {
    "city": "city",
    "location": "city",
    "type": "type",
    "minPrice": "min_price",
    "min_price": "min_price",
    "maxPrice": "max_price",
    "max_price": "max_price",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "availableOnly": "available_only",
    "available_only": "available_only",
}

_COERCERS = {
    "min_price": to_float,
    "max_price": to_float,
    "bedrooms": to_int,
    "bathrooms": to_float,
}


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def normalize_filters(raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop empty-string, ``None`` and NaN entries and trim string values.

    Applying it twice gives the same map as applying it once.
    """

    cleaned: Dict[str, Any] = {}
    for key, value in (raw or {}).items():
        if _is_empty(value):
            continue
        cleaned[key] = value.strip() if isinstance(value, str) else value
    return cleaned


def build_filter_spec(raw: Optional[Mapping[str, Any]]) -> FilterSpec:
    """Build a ``FilterSpec`` from a raw map, coercing numbers and flags.

    Unknown keys, UI sentinels such as "Any" and values that cannot be coerced
    are dropped instead of raising.
    """

    fields: Dict[str, Any] = {}
    for key, value in normalize_filters(raw).items():
        name = _ALIASES.get(key)
        if name is None:
            LOGGER.debug(kv("filter_ignored", key=key))
            continue
        if isinstance(value, str) and value.lower() in SENTINELS:
            continue
        if name == "available_only":
            fields[name] = to_bool(value)
            continue
        coerce = _COERCERS.get(name)
        if coerce is None:
            fields[name] = str(value)
            continue
        number = coerce(value)
        if number is None:
            LOGGER.debug(kv("filter_dropped", key=key, value=value))
            continue
        fields[name] = number
    return FilterSpec(**fields)


def filters_from_params(params: Mapping[str, Any]) -> FilterSpec:
    """Build a ``FilterSpec`` from query parameters, taking the first of repeated values."""

    flat: Dict[str, Any] = {}
    for key, value in params.items():
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        flat[key] = value
    return build_filter_spec(flat)


def spec_to_params(spec: FilterSpec) -> Dict[str, Any]:
    """Inverse of ``filters_from_params`` for building request URLs."""

    params = spec.model_dump(by_alias=True, exclude_none=True)
    if not params.get("availableOnly"):
        params.pop("availableOnly", None)
    return params


__all__ = ["SENTINELS", "normalize_filters", "build_filter_spec", "filters_from_params", "spec_to_params"]
