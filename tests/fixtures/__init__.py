"""Shared constants for tests: a fixed clock and sample coordinates."""

from datetime import datetime

# Monday 2025-06-16, 12:00 UTC
NOW = datetime(2025, 6, 16, 12, 0, 0)
TODAY = NOW.date()

# Six sightings a few kilometres apart just outside Denver
DENVER_POINTS = [
    (39.74, -104.99),
    (39.75, -104.99),
    (39.74, -105.00),
    (39.76, -105.00),
    (39.75, -105.01),
    (39.755, -104.995),
]

# Seven sightings around downtown Los Angeles
LA_POINTS = [
    (34.05, -118.25),
    (34.06, -118.25),
    (34.05, -118.26),
    (34.07, -118.24),
    (34.04, -118.27),
    (34.06, -118.23),
    (34.055, -118.255),
]
