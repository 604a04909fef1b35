"""
Centralized settings and path configuration for the travel engine.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


DATA_DIR_ENV = 'TRAVEL_ENGINE_DATA_DIR'


def get_package_data_dir() -> Path:
    """Directory holding the packaged seed CSVs."""
    return Path(__file__).resolve().parent.parent / 'data'


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    data_dir: Path

    # Seed files
    pricing_points_csv: Path
    price_history_csv: Path
    bookings_csv: Path

    # Pricing
    price_history_limit: int = 30
    price_freeze_hours: int = 24

    # Loyalty
    spend_block: int = 1000
    points_per_block: int = 100
    points_expiry_months: int = 6
    expiry_reminder_days: int = 30

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings, honouring the data directory override."""
        if data_dir is None:
            env_dir = os.environ.get(DATA_DIR_ENV)
            data_dir = Path(env_dir) if env_dir else get_package_data_dir()

        return cls(
            data_dir=data_dir,
            pricing_points_csv=data_dir / 'pricing_points.csv',
            price_history_csv=data_dir / 'price_history.csv',
            bookings_csv=data_dir / 'bookings.csv',
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
