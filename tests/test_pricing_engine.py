"""
Pricing engine tests: factor math, bounded history and the price freeze window.
"""
from datetime import timedelta

import pytest

from travel_engine.engine import PricingEngine, PriceablePoint, calculate_price, NotFound, InvalidArgument
from travel_engine.engine.models import to_epoch_ms


def test_calculate_price_applies_all_factors(flight):
    """300 × 1.5 × 1.3 × 1.2 = 702"""
    assert calculate_price(flight) == 702


def test_calculate_price_rounds_half_up():
    point = PriceablePoint(id="x", kind="hotel", base_price=100.5)
    assert calculate_price(point) == 101


def test_get_price_records_new_point(pricing, flight, clock):
    quote = pricing.get_price("flight", "1")

    assert quote.current_price == 702
    assert quote.frozen is False
    assert len(flight.price_history) == 3
    assert flight.price_history[-1].price == 702
    assert flight.price_history[-1].timestamp == clock.now
    assert quote.price_freeze_until is None


def test_get_price_is_deterministic(pricing):
    first = pricing.get_price("flight", "1").current_price
    second = pricing.get_price("flight", "1").current_price
    assert first == second == 702


def test_unknown_entity_raises_not_found(pricing):
    with pytest.raises(NotFound, match="Flight not found"):
        pricing.get_price("flight", "99")
    with pytest.raises(NotFound):
        pricing.freeze_price("flight", "99")


def test_unknown_catalog_raises_not_found(pricing):
    with pytest.raises(NotFound):
        pricing.get_price("train", "1")


def test_missing_id_is_invalid(pricing):
    with pytest.raises(InvalidArgument):
        pricing.get_price("flight", "")
    with pytest.raises(InvalidArgument):
        pricing.get_price("flight", None)


def test_history_is_bounded_and_evicts_oldest(pricing, flight, clock):
    for _ in range(35):
        clock.advance(minutes=1)
        pricing.get_price("flight", "1")

    assert len(flight.price_history) == 30
    # 2 seeded + 35 computed = 37; the 7 oldest are gone
    assert all(p.price == 702 for p in flight.price_history)
    assert flight.price_history[0].timestamp == clock.now - timedelta(minutes=29)
    timestamps = [p.timestamp for p in flight.price_history]
    assert timestamps == sorted(timestamps)


def test_freeze_does_not_touch_history(pricing, flight, clock):
    result = pricing.freeze_price("flight", "1")

    assert result == {"message": "Price frozen for 24 hours"}
    assert len(flight.price_history) == 2
    assert flight.price_freeze_until == clock.now + timedelta(hours=24)


def test_frozen_price_is_last_recorded_price(pricing, flight, clock):
    pricing.freeze_price("flight", "1")

    for _ in range(3):
        clock.advance(hours=2)
        quote = pricing.get_price("flight", "1")
        assert quote.current_price == 320
        assert quote.frozen is True

    assert len(flight.price_history) == 2
    assert flight.price_freeze_until is not None


def test_freeze_after_query_pins_computed_price(pricing, clock):
    pricing.get_price("flight", "1")
    pricing.freeze_price("flight", "1")
    clock.advance(hours=23)

    quote = pricing.get_price("flight", "1")
    assert quote.current_price == 702
    assert len(quote.price_history) == 3


def test_expired_freeze_recomputes_and_clears(pricing, flight, clock):
    pricing.freeze_price("flight", "1")
    clock.advance(hours=25)

    quote = pricing.get_price("flight", "1")

    assert quote.current_price == 702
    assert quote.frozen is False
    assert flight.price_freeze_until is None
    assert len(flight.price_history) == 3


def test_freeze_ends_exactly_at_window_edge(pricing, flight, clock):
    pricing.freeze_price("flight", "1")
    clock.advance(hours=24)

    quote = pricing.get_price("flight", "1")
    assert quote.current_price == 702
    assert flight.price_freeze_until is None


def test_refreeze_extends_from_now(pricing, flight, clock):
    pricing.freeze_price("flight", "1")
    clock.advance(hours=10)
    pricing.freeze_price("flight", "1")

    assert flight.price_freeze_until == clock.now + timedelta(hours=24)


def test_frozen_with_empty_history_does_not_record(settings, clock):
    point = PriceablePoint(id="7", kind="hotel", base_price=200, demand_factor=0.5)
    engine = PricingEngine([point], settings=settings, clock=clock)
    engine.freeze_price("hotel", "7")

    quote = engine.get_price("hotel", "7")
    assert quote.current_price == 300
    assert point.price_history == []


def test_quote_history_is_a_snapshot(pricing, flight):
    quote = pricing.get_price("flight", "1")
    pricing.get_price("flight", "1")

    assert len(quote.price_history) == 3
    assert len(flight.price_history) == 4


def test_quote_to_dict_wire_shape(pricing, clock):
    pricing.freeze_price("flight", "1")
    data = pricing.get_price("flight", "1").to_dict()

    assert set(data) == {"id", "currentPrice", "priceHistory", "priceFreezeUntil"}
    assert data["currentPrice"] == 320
    assert data["priceFreezeUntil"] == to_epoch_ms(clock.now + timedelta(hours=24))
    assert data["priceHistory"][-1] == {
        "timestamp": to_epoch_ms(clock.now - timedelta(hours=1)),
        "price": 320,
    }


def test_trace_records_resolution_steps(pricing):
    quote = pricing.get_price("flight", "1")
    text = quote.get_trace_text()

    assert "Catalog Lookup" in text
    assert "Price Calculation" in text


def test_add_point_rejects_unknown_kind(pricing):
    with pytest.raises(InvalidArgument):
        pricing.add_point(PriceablePoint(id="1", kind="train", base_price=10))


def test_list_points_does_not_record_prices(pricing, flight):
    points = pricing.list_points("flight")

    assert points == [flight]
    assert len(flight.price_history) == 2
