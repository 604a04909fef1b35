"""
Seed Loader - builds the in-memory catalogs and booking ledger from CSV.

Timestamps in the seed files are relative (days / months ago) and are
anchored to the time of loading, so a fresh process always starts with a
recent-looking history.
"""
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import get_settings, Settings
from ..engine.loyalty_engine import BookingLedger, LoyaltyEngine, add_months
from ..engine.models import Booking, PriceablePoint, PricePoint
from ..engine.pricing_engine import PricingEngine, utc_now

logger = logging.getLogger(__name__)

POINT_COLUMNS = ['kind', 'id', 'base_price', 'demand_factor', 'seasonal_factor', 'custom_rules_factor']
HISTORY_COLUMNS = ['kind', 'id', 'days_ago', 'price']
BOOKING_COLUMNS = ['id', 'user_id', 'amount_spent', 'months_ago']


def _read_csv(path: Path, required: list[str]) -> pd.DataFrame:
    """Read a seed CSV, keeping ids as strings, and check its columns."""
    df = pd.read_csv(path, dtype={'id': str, 'kind': str, 'user_id': str})
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"{path.name} is missing columns: {', '.join(missing)}")
    for col in ('kind', 'id', 'user_id'):
        if col in df.columns:
            df[col] = df[col].astype(str).str.strip()
    return df


def load_pricing_points(
    points_csv: Path,
    history_csv: Optional[Path] = None,
    now: Optional[datetime] = None,
) -> list[PriceablePoint]:
    """
    Load priceable entities and their recorded price history.

    Args:
        points_csv: Static factors per entity
        history_csv: Optional relative price history
        now: Anchor for relative timestamps

    Returns:
        List of PriceablePoint with history sorted oldest first
    """
    now = now or utc_now()
    df_points = _read_csv(points_csv, POINT_COLUMNS)

    points = {}
    for row in df_points.itertuples(index=False):
        point = PriceablePoint(
            id=row.id,
            kind=row.kind,
            base_price=float(row.base_price),
            demand_factor=float(row.demand_factor),
            seasonal_factor=float(row.seasonal_factor),
            custom_rules_factor=float(row.custom_rules_factor),
        )
        points[(point.kind, point.id)] = point

    if history_csv is not None and history_csv.exists():
        df_history = _read_csv(history_csv, HISTORY_COLUMNS)
        df_history = df_history.sort_values('days_ago', ascending=False, kind='stable')
        for row in df_history.itertuples(index=False):
            point = points.get((row.kind, row.id))
            if point is None:
                logger.warning("Price history for unknown %s %s skipped", row.kind, row.id)
                continue
            point.price_history.append(
                PricePoint(timestamp=now - timedelta(days=float(row.days_ago)), price=int(row.price))
            )

    return list(points.values())


def load_bookings(bookings_csv: Path, now: Optional[datetime] = None) -> list[Booking]:
    """Load booking records, anchoring ``months_ago`` to ``now``."""
    now = now or utc_now()
    df = _read_csv(bookings_csv, BOOKING_COLUMNS)
    return [
        Booking(
            id=row.id,
            user_id=row.user_id,
            amount_spent=float(row.amount_spent),
            booking_date=add_months(now, -int(row.months_ago)),
        )
        for row in df.itertuples(index=False)
    ]


def build_engines(settings: Optional[Settings] = None) -> tuple[PricingEngine, LoyaltyEngine]:
    """Create both engines populated from the configured seed files."""
    settings = settings or get_settings()
    now = utc_now()

    points = load_pricing_points(settings.pricing_points_csv, settings.price_history_csv, now=now)
    bookings = load_bookings(settings.bookings_csv, now=now) if settings.bookings_csv.exists() else []

    logger.info("Loaded %d priceable entities and %d bookings from %s", len(points), len(bookings), settings.data_dir)

    pricing = PricingEngine(points, settings=settings)
    loyalty = LoyaltyEngine(BookingLedger(bookings), settings=settings)
    return pricing, loyalty
