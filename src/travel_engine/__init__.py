"""
Travel Engine Package

Dynamic pricing and loyalty-points engine for a travel booking service.
Resolves flight/hotel prices with demand, seasonal and custom-rule factors,
supports 24-hour price freezes, and tracks tiered loyalty points.
"""

__version__ = "1.0.0"
