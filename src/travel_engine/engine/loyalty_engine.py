"""
Loyalty Engine - tiered loyalty points with earn / expire / redeem lifecycle.

Each booking earns ``floor(amount / spend_block) * points_per_block`` points
that expire a fixed number of months after the booking. A user's loyalty
state is rebuilt from their bookings on first access, cached for the life
of the process, and mutated in place by redemptions (oldest entries first).
"""
import copy
import logging
import math
import threading
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

import pandas as pd

from ..config.settings import get_settings, Settings
from .errors import InsufficientBalance, InvalidArgument
from .models import Booking, LoyaltyPointEntry, Tier, UserLoyalty
from .pricing_engine import utc_now

logger = logging.getLogger(__name__)

DEFAULT_TIERS = (
    Tier('Silver', 0, ('Basic support', '5% discount on bookings')),
    Tier('Gold', 500, ('Priority support', '10% discount on bookings')),
    Tier('Platinum', 1000, ('24/7 support', '15% discount on bookings', 'Free upgrades')),
)


def add_months(ts: datetime, months: int) -> datetime:
    """Calendar-month offset, clamped to the end of shorter months."""
    return (pd.Timestamp(ts) + pd.DateOffset(months=months)).to_pydatetime()


def resolve_tier(balance: int, tiers: tuple[Tier, ...] = DEFAULT_TIERS) -> Tier:
    """Highest tier whose threshold is at or below the balance."""
    current = tiers[0]
    for tier in tiers:
        if balance >= tier.threshold:
            current = tier
    return current


def next_tier(tier: Tier, tiers: tuple[Tier, ...] = DEFAULT_TIERS) -> Optional[Tier]:
    index = tiers.index(tier)
    if index == len(tiers) - 1:
        return None
    return tiers[index + 1]


def tier_progress(balance: int, tiers: tuple[Tier, ...] = DEFAULT_TIERS) -> float:
    """Percentage progress from the current tier towards the next one."""
    current = resolve_tier(balance, tiers)
    upcoming = next_tier(current, tiers)
    if upcoming is None:
        return 100
    span = upcoming.threshold - current.threshold
    progress = (balance - current.threshold) / span * 100
    return min(max(progress, 0), 100)


def validate_redeem_amount(points_to_redeem) -> int:
    """Accept a positive int, or a float holding a positive whole number."""
    if isinstance(points_to_redeem, bool):
        raise InvalidArgument("Invalid pointsToRedeem in request body")
    if isinstance(points_to_redeem, float) and points_to_redeem.is_integer():
        points_to_redeem = int(points_to_redeem)
    if not isinstance(points_to_redeem, int) or points_to_redeem <= 0:
        raise InvalidArgument("Invalid pointsToRedeem in request body")
    return points_to_redeem


class BookingLedger:
    """In-memory booking records supplied by the booking subsystem."""

    def __init__(self, bookings: Iterable[Booking] = ()):
        self._bookings: list[Booking] = list(bookings)

    def add(self, booking: Booking):
        self._bookings.append(booking)

    def for_user(self, user_id: str) -> list[Booking]:
        return [b for b in self._bookings if b.user_id == user_id]

    def __len__(self) -> int:
        return len(self._bookings)


class LoyaltyEngine:
    """
    Derives and mutates per-user loyalty state.

    State for a user is a full rebuild from their bookings: expired entries
    are dropped rather than kept as history. The cached result is then the
    single source of truth until the next explicit refresh.
    """

    def __init__(
        self,
        ledger: Optional[BookingLedger] = None,
        settings: Optional[Settings] = None,
        tiers: tuple[Tier, ...] = DEFAULT_TIERS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.ledger = ledger if ledger is not None else BookingLedger()
        self.settings = settings or get_settings()
        self.tiers = tiers
        self.clock = clock
        self._cache: dict[str, UserLoyalty] = {}
        self._lock = threading.Lock()

    def calculate_points(self, amount_spent: float) -> int:
        blocks = math.floor(amount_spent / self.settings.spend_block)
        return int(blocks) * self.settings.points_per_block

    def entry_for_booking(self, booking: Booking) -> LoyaltyPointEntry:
        return LoyaltyPointEntry(
            points=self.calculate_points(booking.amount_spent),
            earned_date=booking.booking_date,
            expiry_date=add_months(booking.booking_date, self.settings.points_expiry_months),
            booking_id=booking.id,
        )

    def expiry_reminder(self, history: list[LoyaltyPointEntry], now: datetime) -> str:
        window = timedelta(days=self.settings.expiry_reminder_days)
        expiring = [
            e for e in history
            if not e.redeemed and now < e.expiry_date <= now + window
        ]
        if not expiring:
            return ""
        return (
            f"You have {len(expiring)} point entries expiring within "
            f"{self.settings.expiry_reminder_days} days. Redeem soon!"
        )

    def _apply_derived(self, loyalty: UserLoyalty, now: datetime):
        """Recompute tier, progress and reminder from the current balance/history."""
        loyalty.current_tier = resolve_tier(loyalty.points_balance, self.tiers).level
        loyalty.tier_progress = tier_progress(loyalty.points_balance, self.tiers)
        loyalty.points_expiry_reminder = self.expiry_reminder(loyalty.points_history, now)

    def _rebuild(self, user_id: str) -> UserLoyalty:
        now = self.clock()
        entries = [self.entry_for_booking(b) for b in self.ledger.for_user(user_id)]
        active = [e for e in entries if e.is_active(now)]

        loyalty = UserLoyalty(
            user_id=user_id,
            points_balance=sum(e.points for e in active),
            points_history=active,
            current_tier='',
            tier_progress=0,
        )
        self._apply_derived(loyalty, now)
        self._cache[user_id] = loyalty

        logger.info(
            "Rebuilt loyalty for %s: %d active entries, balance %d (%s)",
            user_id, len(active), loyalty.points_balance, loyalty.current_tier,
        )
        return loyalty

    @staticmethod
    def _check_user(user_id: Optional[str]) -> str:
        if not user_id or not str(user_id).strip():
            raise InvalidArgument("Missing userId query parameter")
        return str(user_id).strip()

    def get_loyalty(self, user_id: str) -> UserLoyalty:
        """Cached loyalty state, derived from bookings on first access."""
        user_id = self._check_user(user_id)
        with self._lock:
            cached = self._cache.get(user_id)
            if cached is not None:
                return cached
            return self._rebuild(user_id)

    def refresh_loyalty(self, user_id: str) -> UserLoyalty:
        """Force a full rebuild from bookings, replacing the cached state."""
        user_id = self._check_user(user_id)
        with self._lock:
            return self._rebuild(user_id)

    def redeem_points(self, user_id: str, points_to_redeem) -> UserLoyalty:
        """
        Redeem points from the oldest unredeemed entries first.

        Raises:
            InvalidArgument: amount is not a positive integer
            InsufficientBalance: amount exceeds the active balance

        A rejected redemption leaves the cached state unchanged.
        """
        user_id = self._check_user(user_id)
        amount = validate_redeem_amount(points_to_redeem)

        with self._lock:
            loyalty = self._cache.get(user_id) or self._rebuild(user_id)

            if amount > loyalty.points_balance:
                logger.warning(
                    "Rejected redemption of %d points for %s (balance %d)",
                    amount, user_id, loyalty.points_balance,
                )
                raise InsufficientBalance("Insufficient points balance")

            remaining = amount
            for entry in loyalty.points_history:
                if entry.redeemed:
                    continue
                if remaining <= 0:
                    break
                if entry.points <= remaining:
                    remaining -= entry.points
                    entry.redeemed = True
                else:
                    entry.points -= remaining
                    remaining = 0

            loyalty.points_balance -= amount
            self._apply_derived(loyalty, self.clock())

            logger.info("Redeemed %d points for %s, balance now %d", amount, user_id, loyalty.points_balance)
            return loyalty

    def snapshot(self, user_id: str) -> Optional[UserLoyalty]:
        """Deep copy of the cached state, if any."""
        cached = self._cache.get(user_id)
        return copy.deepcopy(cached) if cached is not None else None

    def tier_table(self) -> list[Tier]:
        return list(self.tiers)
