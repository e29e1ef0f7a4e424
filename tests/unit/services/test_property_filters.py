from __future__ import annotations

from propdesk.services.property_filters import PropertyFilterState
from propdesk.services.query_builder import Sort


def test_from_query_parses_filters_sort_and_page():
    state = PropertyFilterState.from_query(
        {
            "search": "palermo",
            "type": "casa",
            "operation": "alquiler",
            "min_price": "100000",
            "bedrooms": "2",
            "sort": "price",
            "direction": "asc",
            "page": "3",
            "unknown": "ignored",
        }
    )

    assert state.filters.search == "palermo"
    assert state.filters.property_type == "casa"
    assert state.filters.min_price == 100000
    assert state.filters.bedrooms == 2
    assert state.sort == Sort("price", "asc")
    assert state.page == 3
    assert state.pagination.offset == 24


def test_query_omits_defaults():
    state = PropertyFilterState()
    assert state.to_query() == {}

    state.update_filters({"city": "Rosario", "max_price": 500000.0})
    state.update_sort("price", "asc")
    state.update_page(2)

    assert state.to_query() == {
        "city": "Rosario",
        "max_price": "500000",
        "sort": "price",
        "direction": "asc",
        "page": "2",
    }


def test_query_round_trip_restores_state():
    state = PropertyFilterState()
    state.update_filters({"operation_type": "venta", "bathrooms": 2})
    restored = PropertyFilterState.from_query(state.to_query())
    assert restored.filters == state.filters


def test_filter_changes_reset_to_first_page():
    state = PropertyFilterState()
    state.update_page(4)
    state.update_filter("city", "Córdoba")
    assert state.page == 1

    state.update_page(4)
    state.clear_filters()
    assert state.page == 1
    assert not state.has_active_filters


def test_sort_toggles_direction_on_same_field():
    state = PropertyFilterState()
    state.update_sort("created_at")
    assert state.sort == Sort("created_at", "asc")
    state.update_sort("created_at")
    assert state.sort == Sort("created_at", "desc")
    state.update_sort("price")
    assert state.sort == Sort("price", "desc")


def test_total_pages_rounds_up():
    state = PropertyFilterState(page_size=12)
    state.update_total(25)
    assert state.total_pages == 3
    state.update_total(0)
    assert state.total_pages == 0


def test_active_filter_count_treats_price_range_as_one():
    state = PropertyFilterState()
    state.update_filters({"min_price": 1000, "max_price": 2000, "city": "Rosario"})
    assert state.active_filters_count == 2
    assert state.has_active_filters


def test_description_reads_like_a_summary():
    state = PropertyFilterState()
    state.update_filters(
        {
            "operation_type": "alquiler",
            "property_type": "departamento",
            "bedrooms": 2,
            "city": "Rosario",
            "min_price": 100000,
            "max_price": 250000,
        }
    )
    assert state.description == "Alquiler • Departamento • 2+ dorm • Rosario • $100.000 - $250.000"

    state.clear_filters()
    state.update_filter("max_price", 90000)
    assert state.description == "Hasta $90.000"
    assert PropertyFilterState().description == ""
