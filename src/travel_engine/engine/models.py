"""
Data models for the pricing and loyalty engines.

Uses dataclasses for structured, type-safe data representation.
Internal timestamps are timezone-aware UTC datetimes; the ``to_dict``
methods produce the camelCase wire format.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


def to_epoch_ms(ts: datetime) -> int:
    """Convert a datetime to epoch milliseconds."""
    return int(round(ts.timestamp() * 1000))


@dataclass
class TraceStep:
    """A single step in the price resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class PricePoint:
    """One observed price."""
    timestamp: datetime
    price: int

    def to_dict(self) -> dict:
        return {"timestamp": to_epoch_ms(self.timestamp), "price": self.price}


@dataclass
class PriceablePoint:
    """A flight or hotel whose price is driven by static factors."""
    id: str
    kind: str  # "flight" or "hotel"
    base_price: float
    demand_factor: float = 0.0
    seasonal_factor: float = 0.0
    custom_rules_factor: float = 0.0
    price_history: list[PricePoint] = field(default_factory=list)
    price_freeze_until: Optional[datetime] = None

    def is_frozen(self, now: datetime) -> bool:
        return self.price_freeze_until is not None and self.price_freeze_until > now

    def last_price(self) -> Optional[int]:
        if not self.price_history:
            return None
        return self.price_history[-1].price


@dataclass
class PriceQuote:
    """Result of a price query."""
    id: str
    current_price: int
    price_history: list[PricePoint]
    price_freeze_until: Optional[datetime] = None
    frozen: bool = False
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this quote."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "currentPrice": self.current_price,
            "priceHistory": [p.to_dict() for p in self.price_history],
            "priceFreezeUntil": (
                to_epoch_ms(self.price_freeze_until) if self.price_freeze_until else None
            ),
        }


@dataclass
class Booking:
    """A booking record owned by the booking subsystem."""
    id: str
    user_id: str
    amount_spent: float
    booking_date: datetime


@dataclass
class LoyaltyPointEntry:
    """Points earned from a single booking."""
    points: int
    earned_date: datetime
    expiry_date: datetime
    booking_id: str
    redeemed: bool = False

    def is_active(self, now: datetime) -> bool:
        return not self.redeemed and self.expiry_date > now

    def to_dict(self) -> dict:
        return {
            "points": self.points,
            "earnedDate": self.earned_date.isoformat(),
            "expiryDate": self.expiry_date.isoformat(),
            "bookingId": self.booking_id,
            "redeemed": self.redeemed,
        }


@dataclass(frozen=True)
class Tier:
    """A loyalty tier and the points needed to reach it."""
    level: str
    threshold: int
    benefits: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "threshold": self.threshold,
            "benefits": list(self.benefits),
        }


@dataclass
class UserLoyalty:
    """Cached loyalty state for one user."""
    user_id: str
    points_balance: int
    points_history: list[LoyaltyPointEntry]
    current_tier: str
    tier_progress: float
    points_expiry_reminder: str = ""

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "pointsBalance": self.points_balance,
            "pointsHistory": [p.to_dict() for p in self.points_history],
            "currentTier": self.current_tier,
            "tierProgress": self.tier_progress,
            "pointsExpiryReminder": self.points_expiry_reminder,
        }
