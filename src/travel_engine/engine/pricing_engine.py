"""
Pricing Engine - dynamic flight and hotel pricing with price freezes.

Price = base × (1 + demand) × (1 + seasonal) × (1 + custom rules), rounded
half-up to a whole amount. Every unfrozen query records the computed price
in a bounded history; a freeze pins the last recorded price for a fixed
window.
"""
import logging
import math
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from ..config.settings import get_settings, Settings
from .errors import InvalidArgument, NotFound
from .models import PriceablePoint, PricePoint, PriceQuote

logger = logging.getLogger(__name__)

CATALOG_KINDS = ('flight', 'hotel')


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def calculate_price(point: PriceablePoint) -> int:
    """Apply the three multiplicative factors to the base price."""
    raw = (
        point.base_price
        * (1 + point.demand_factor)
        * (1 + point.seasonal_factor)
        * (1 + point.custom_rules_factor)
    )
    return int(math.floor(raw + 0.5))


class PricingEngine:
    """
    Holds the flight and hotel catalogs and resolves their current prices.

    Resolution order for a price query:
    1. Look up the entity in its catalog
    2. If frozen, return the last recorded price untouched
    3. Otherwise compute the price, append it to history (evicting the oldest
       point past the limit) and clear an expired freeze
    """

    def __init__(
        self,
        points: Iterable[PriceablePoint] = (),
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings or get_settings()
        self.clock = clock
        self.catalogs: dict[str, dict[str, PriceablePoint]] = {kind: {} for kind in CATALOG_KINDS}
        self._locks = {kind: threading.Lock() for kind in CATALOG_KINDS}

        for point in points:
            self.add_point(point)

    def add_point(self, point: PriceablePoint):
        """Register an externally configured entity in its catalog."""
        if point.kind not in self.catalogs:
            raise InvalidArgument(f"Unknown catalog kind '{point.kind}'")
        self.catalogs[point.kind][point.id] = point

    def _catalog(self, kind: str) -> dict[str, PriceablePoint]:
        if kind not in self.catalogs:
            raise NotFound(f"Unknown catalog '{kind}'")
        return self.catalogs[kind]

    def _lookup(self, kind: str, entity_id: Optional[str]) -> PriceablePoint:
        if not entity_id:
            raise InvalidArgument(f"Invalid or missing {kind} id")
        point = self._catalog(kind).get(str(entity_id).strip())
        if point is None:
            raise NotFound(f"{kind.capitalize()} not found")
        return point

    def get_price(self, kind: str, entity_id: str) -> PriceQuote:
        """
        Compute the current price of an entity.

        Args:
            kind: Catalog name ("flight" or "hotel")
            entity_id: Entity id within the catalog

        Returns:
            PriceQuote with a snapshot of the price history
        """
        point = self._lookup(kind, entity_id)

        with self._locks[kind]:
            now = self.clock()
            quote = PriceQuote(id=point.id, current_price=0, price_history=[])
            quote.add_trace("Catalog Lookup", f"Found {kind} in catalog", point.id)

            if point.is_frozen(now):
                last = point.last_price()
                if last is None:
                    # Frozen before any observation: report without recording
                    last = calculate_price(point)
                    quote.add_trace("Freeze Check", "Frozen with empty history, computed price not recorded", str(last))
                else:
                    quote.add_trace("Freeze Check", "Price frozen, using last recorded price", str(last))
                quote.current_price = last
                quote.frozen = True
            else:
                price = calculate_price(point)
                quote.add_trace(
                    "Price Calculation",
                    f"{point.base_price} × {1 + point.demand_factor:g} × "
                    f"{1 + point.seasonal_factor:g} × {1 + point.custom_rules_factor:g}",
                    str(price),
                )
                point.price_history.append(PricePoint(timestamp=now, price=price))
                limit = self.settings.price_history_limit
                if len(point.price_history) > limit:
                    evicted = len(point.price_history) - limit
                    del point.price_history[:evicted]
                    quote.add_trace("History", f"Evicted {evicted} oldest price point(s)")
                if point.price_freeze_until is not None:
                    point.price_freeze_until = None
                    quote.add_trace("Freeze Check", "Expired freeze cleared")
                quote.current_price = price

            quote.price_history = list(point.price_history)
            quote.price_freeze_until = point.price_freeze_until

        return quote

    def freeze_price(self, kind: str, entity_id: str) -> dict:
        """Freeze an entity's price for the configured window, starting now."""
        point = self._lookup(kind, entity_id)
        hours = self.settings.price_freeze_hours

        with self._locks[kind]:
            point.price_freeze_until = self.clock() + timedelta(hours=hours)

        logger.info("Froze %s %s until %s", kind, point.id, point.price_freeze_until.isoformat())
        return {"message": f"Price frozen for {hours} hours"}

    def list_points(self, kind: str) -> list[PriceablePoint]:
        """All entities of a catalog, without touching their history."""
        return list(self._catalog(kind).values())
