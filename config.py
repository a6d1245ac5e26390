"""
Katabatic Dawn Patrol - Configuration
Central configuration for the valley/mountain site pair and default criteria.
"""

from dataclasses import dataclass
from typing import Dict
import os

# ============================================================================
# SITE CONFIGURATION
# ============================================================================

@dataclass
class SiteConfig:
    """Forecast location with metadata."""
    site_id: str
    name: str
    latitude: float
    longitude: float
    elevation_m: float
    timezone: str
    role: str  # "valley" or "mountain"


SITES: Dict[str, SiteConfig] = {
    "valley": SiteConfig(
        site_id="valley",
        name="Morrison, CO (Soda Lake)",
        latitude=39.6547,
        longitude=-105.1956,
        elevation_m=1750.0,
        timezone="America/Denver",
        role="valley",
    ),
    "mountain": SiteConfig(
        site_id="mountain",
        name="Nederland, CO",
        latitude=40.0142,
        longitude=-105.5108,
        elevation_m=2500.0,
        timezone="America/Denver",
        role="mountain",
    ),
}

# Local clock used to match forecast hours against the criteria windows
DEFAULT_TIMEZONE = os.environ.get("KATABATIC_TIMEZONE", SITES["valley"].timezone)

# ============================================================================
# DEFAULT KATABATIC CRITERIA
# ============================================================================

DEFAULT_MAX_PRECIPITATION_PROBABILITY = 20.0   # %
DEFAULT_MIN_CLOUD_COVER_CLEAR_PERIOD = 70.0    # % of clear-sky window that is clear
DEFAULT_MIN_PRESSURE_CHANGE = 2.0              # hPa over the trailing 12 samples
DEFAULT_MIN_TEMPERATURE_DIFFERENTIAL = 5.0     # °C valley minus mountain

DEFAULT_CLEAR_SKY_WINDOW = ("02:00", "05:00")
DEFAULT_PREDICTION_WINDOW = ("06:00", "08:00")

# Gate for a "maybe" recommendation (0-100)
DEFAULT_MINIMUM_CONFIDENCE = float(os.environ.get("KATABATIC_MIN_CONFIDENCE", "60"))

# Mountain-wave / stability factors join the composite score only when enabled
DEFAULT_INCLUDE_WAVE_FACTORS = False

# ============================================================================
# LOGGING
# ============================================================================

LOG_LEVEL = os.environ.get("KATABATIC_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
LOG_DATEFMT = "%H:%M:%S"


def get_site(role: str) -> SiteConfig:
    """Return the configured site for a role ("valley" or "mountain")."""
    try:
        return SITES[role]
    except KeyError:
        raise ValueError(f"Unknown site role: {role!r}") from None
