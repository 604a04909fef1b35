#!/usr/bin/env python
"""
Print price resolution traces for the seeded catalogs.

Usage:
    python scripts/debug_pricing.py [flight|hotel] [id]
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from travel_engine.data.seed import build_engines


def debug(kind: str = None, entity_id: str = None):
    pricing, _ = build_engines()
    kinds = [kind] if kind else ['flight', 'hotel']

    for k in kinds:
        print(f"--- {k.upper()} CATALOG ---")
        for point in pricing.list_points(k):
            if entity_id and point.id != entity_id:
                continue
            quote = pricing.get_price(k, point.id)
            print(f"{k} {point.id}: current price {quote.current_price} ({len(quote.price_history)} history points)")
            print(quote.get_trace_text())

            # Freeze, then query again: price must not move
            print(pricing.freeze_price(k, point.id)["message"])
            frozen = pricing.get_price(k, point.id)
            print(f"After freeze: {frozen.current_price}, history still {len(frozen.price_history)}")
            print(frozen.get_trace_text())
            print()


if __name__ == "__main__":
    debug(*sys.argv[1:3])
