"""In-memory filtering and ordering of listing records.

Everything here is pure: inputs are never mutated and every call returns a new
list. Records are expected to have passed through ``PropertyRecord`` so missing
numbers are already zero and missing text already empty.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..models.property import FilterSpec, PropertyRecord, PropertyStatus, SortKey

IDENTITY = FilterSpec()

# sort key -> (key function, descending)
_ORDERINGS: Dict[SortKey, Tuple[Callable[[PropertyRecord], float], bool]] = {
    SortKey.NEWEST: (lambda r: r.created_ts, True),
    SortKey.PRICE_LOW: (lambda r: r.price, False),
    SortKey.PRICE_HIGH: (lambda r: r.price, True),
    SortKey.BEDROOMS: (lambda r: r.bedrooms, True),
    SortKey.AREA: (lambda r: r.area, True),
}


def matches(record: PropertyRecord, spec: FilterSpec) -> bool:
    """Return True when the record passes every constraint present in ``spec``."""

    if spec.city is not None and spec.city.lower() not in record.location.lower():
        return False
    if spec.type is not None and record.type.lower() != spec.type.lower():
        return False
    if spec.min_price is not None and record.price < spec.min_price:
        return False
    if spec.max_price is not None and record.price > spec.max_price:
        return False
    if spec.bedrooms is not None and record.bedrooms != spec.bedrooms:
        return False
    if spec.bathrooms is not None and record.bathrooms != spec.bathrooms:
        return False
    if spec.available_only and record.status != PropertyStatus.ACTIVE:
        return False
    return True


def sort_records(records: Iterable[PropertyRecord], sort: SortKey | str = SortKey.NEWEST) -> List[PropertyRecord]:
    """Stable sort; ties keep their input order in both directions."""

    key, descending = _ORDERINGS[SortKey.parse(sort)]
    return sorted(records, key=key, reverse=descending)


def query(
    records: Sequence[PropertyRecord],
    spec: Optional[FilterSpec] = None,
    sort: SortKey | str = SortKey.NEWEST,
) -> List[PropertyRecord]:
    """Filter ``records`` by ``spec`` then order the survivors by ``sort``.

    An inverted price range (min above max) is not rejected; it simply matches
    nothing.
    """

    spec = spec or IDENTITY
    if spec.is_identity:
        selected: Iterable[PropertyRecord] = records
    else:
        selected = (record for record in records if matches(record, spec))
    return sort_records(selected, sort)


__all__ = ["IDENTITY", "matches", "sort_records", "query"]
