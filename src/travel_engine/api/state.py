"""
Process-wide engine instances shared by the API routers.
"""
from ..data.seed import build_engines

pricing_engine, loyalty_engine = build_engines()
