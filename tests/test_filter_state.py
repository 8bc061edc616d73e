from rentals.models.property import FilterSpec
from rentals.services.filter_state import (
    build_filter_spec,
    filters_from_params,
    normalize_filters,
    spec_to_params,
)


def test_normalize_drops_empty_values():
    raw = {"city": "", "type": None, "minPrice": 1000, "bedrooms": "  ", "maxPrice": float("nan")}
    assert normalize_filters(raw) == {"minPrice": 1000}


def test_normalize_is_idempotent():
    raw = {"city": " Nairobi ", "type": "", "bedrooms": 2, "availableOnly": False}
    once = normalize_filters(raw)
    assert normalize_filters(once) == once
    assert once == {"city": "Nairobi", "bedrooms": 2, "availableOnly": False}


def test_normalize_handles_none():
    assert normalize_filters(None) == {}


def test_empty_map_builds_identity_spec():
    spec = build_filter_spec({"city": "", "type": None})
    assert spec == FilterSpec()
    assert spec.is_identity


def test_build_coerces_strings_and_aliases():
    spec = build_filter_spec(
        {"city": "nairobi", "minPrice": "20000", "max_price": "90000", "bedrooms": "2", "bathrooms": "1.5", "availableOnly": "true"}
    )
    assert spec.city == "nairobi"
    assert spec.min_price == 20000
    assert spec.max_price == 90000
    assert spec.bedrooms == 2
    assert spec.bathrooms == 1.5
    assert spec.available_only is True


def test_sentinels_and_bad_numbers_are_dropped():
    spec = build_filter_spec({"type": "All Types", "bedrooms": "Any", "minPrice": "cheap", "colour": "blue"})
    assert spec.is_identity


def test_inverted_range_is_kept_as_given():
    spec = build_filter_spec({"minPrice": 100000, "maxPrice": 50000})
    assert spec.min_price == 100000
    assert spec.max_price == 50000


def test_filters_from_params_takes_first_value():
    spec = filters_from_params({"type": ["House", "Condo"], "bedrooms": ["3"], "city": []})
    assert spec.type == "House"
    assert spec.bedrooms == 3
    assert spec.city is None


def test_spec_to_params_round_trips_through_query_strings():
    spec = FilterSpec(city="Karen", min_price=1000, available_only=False)
    params = spec_to_params(spec)
    assert params == {"city": "Karen", "minPrice": 1000.0}
    assert filters_from_params({k: str(v) for k, v in params.items()}) == spec
