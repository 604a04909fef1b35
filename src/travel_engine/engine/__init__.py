"""Engine subpackage - core pricing and loyalty logic."""
from .pricing_engine import PricingEngine, calculate_price
from .loyalty_engine import LoyaltyEngine, BookingLedger, DEFAULT_TIERS
from .models import PriceablePoint, PricePoint, PriceQuote, Booking, LoyaltyPointEntry, Tier, UserLoyalty
from .errors import EngineError, NotFound, InvalidArgument, InsufficientBalance

__all__ = [
    'PricingEngine', 'calculate_price', 'LoyaltyEngine', 'BookingLedger', 'DEFAULT_TIERS',
    'PriceablePoint', 'PricePoint', 'PriceQuote', 'Booking', 'LoyaltyPointEntry', 'Tier', 'UserLoyalty',
    'EngineError', 'NotFound', 'InvalidArgument', 'InsufficientBalance',
]
