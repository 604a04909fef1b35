import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from travel_engine.config.settings import Settings
from travel_engine.engine import PricingEngine, LoyaltyEngine, BookingLedger, PriceablePoint, PricePoint


class FakeClock:
    """Controllable clock passed to the engines."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings():
    return Settings.load()


@pytest.fixture
def flight(clock):
    """Flight 1 from the seed data with its last two recorded prices."""
    return PriceablePoint(
        id="1",
        kind="flight",
        base_price=300,
        demand_factor=0.5,
        seasonal_factor=0.3,
        custom_rules_factor=0.2,
        price_history=[
            PricePoint(timestamp=clock.now - timedelta(days=1), price=310),
            PricePoint(timestamp=clock.now - timedelta(hours=1), price=320),
        ],
    )


@pytest.fixture
def pricing(flight, settings, clock):
    return PricingEngine([flight], settings=settings, clock=clock)


@pytest.fixture
def ledger():
    return BookingLedger()


@pytest.fixture
def loyalty(ledger, settings, clock):
    return LoyaltyEngine(ledger, settings=settings, clock=clock)
