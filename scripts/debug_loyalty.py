#!/usr/bin/env python
"""
Show a user's loyalty state built from the seed bookings, then redeem points.

Usage:
    python scripts/debug_loyalty.py [user_id] [points_to_redeem]
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from travel_engine.data.seed import build_engines
from travel_engine.engine.errors import EngineError


def show(loyalty):
    print(f"User: {loyalty.user_id}")
    print(f"Balance: {loyalty.points_balance}  Tier: {loyalty.current_tier} ({loyalty.tier_progress:.1f}%)")
    for entry in loyalty.points_history:
        status = "redeemed" if entry.redeemed else "active"
        print(f"  {entry.booking_id}: {entry.points} pts, expires {entry.expiry_date:%Y-%m-%d} [{status}]")
    if loyalty.points_expiry_reminder:
        print(f"Reminder: {loyalty.points_expiry_reminder}")


def debug(user_id: str = "user1", points: str = None):
    _, loyalty_engine = build_engines()

    print("--- Loyalty state ---")
    show(loyalty_engine.get_loyalty(user_id))

    if points:
        print(f"\n--- Redeeming {points} points ---")
        try:
            show(loyalty_engine.redeem_points(user_id, int(points)))
        except EngineError as e:
            print(f"❌ {e}")


if __name__ == "__main__":
    debug(*sys.argv[1:3])
