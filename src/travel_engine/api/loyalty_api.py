"""
Loyalty API - FastAPI router for loyalty balances, tiers and redemption.
"""
from typing import Any, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from . import state

router = APIRouter(prefix="/api/loyalty", tags=["loyalty"])


class RedeemRequest(BaseModel):
    """Request body for redeeming points."""
    # Validated by the engine so malformed amounts map to a 400
    pointsToRedeem: Any = None


class LoyaltyPointResponse(BaseModel):
    points: int
    earnedDate: str
    expiryDate: str
    bookingId: str
    redeemed: bool


class LoyaltyResponse(BaseModel):
    """Response model for a user's loyalty state."""
    userId: str
    pointsBalance: int
    pointsHistory: list[LoyaltyPointResponse]
    currentTier: str
    tierProgress: float
    pointsExpiryReminder: str


class TierResponse(BaseModel):
    level: str
    threshold: int
    benefits: list[str]


@router.get("/tiers", response_model=list[TierResponse])
async def list_tiers():
    """Loyalty tier table, lowest tier first."""
    return [tier.to_dict() for tier in state.loyalty_engine.tier_table()]


@router.get("", response_model=LoyaltyResponse)
async def get_loyalty(userId: Optional[str] = None):
    """Get a user's loyalty state, deriving it from bookings on first access."""
    return state.loyalty_engine.get_loyalty(userId).to_dict()


@router.post("", response_model=LoyaltyResponse)
async def redeem_points(body: Optional[RedeemRequest] = None, userId: Optional[str] = None):
    """Redeem points, oldest entries first."""
    amount = body.pointsToRedeem if body else None
    return state.loyalty_engine.redeem_points(userId, amount).to_dict()


@router.post("/refresh", response_model=LoyaltyResponse)
async def refresh_loyalty(userId: Optional[str] = None):
    """Rebuild a user's loyalty state from their bookings."""
    return state.loyalty_engine.refresh_loyalty(userId).to_dict()
