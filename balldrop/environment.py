"""
Gravitational Environment
=========================
Magnitudes of gravitational acceleration for the places a drop can be run.

A run always uses one constant value; this module only helps choose it:
  - Named presets (measured local values and a few other bodies)
  - WGS-84 normal gravity as a function of latitude, with the
    free-air correction for height above the ellipsoid

All values are magnitudes in m/s². The tracker works with a signed
acceleration, so callers negate them (positive is away from the ground).

Reference: NIMA TR8350.2, "Department of Defense World Geodetic System 1984"
"""

import numpy as np

from .exceptions import InvalidArgumentError


# ── Gravity constants ─────────────────────────────────────────────────────
STANDARD_GRAVITY     = 9.80665     # m/s²  (CGPM 1901 conventional value)
HELSINKI_GRAVITY     = 9.825       # m/s²  (local value used for the demo drop)

# WGS-84 Somigliana parameters
EQUATORIAL_GRAVITY   = 9.7803253359    # m/s²
SOMIGLIANA_K         = 0.00193185265241
ECCENTRICITY_SQ      = 0.00669437999013
FREE_AIR_GRADIENT    = 3.086e-6        # (m/s²)/m

LOCAL_GRAVITY = {
    'standard': STANDARD_GRAVITY,
    'helsinki': HELSINKI_GRAVITY,
    'equator': 9.780,
    'north_pole': 9.832,
    'moon': 1.62,
    'mars': 3.721,
}


def normal_gravity(latitude_deg: float, altitude: float = 0.0) -> float:
    """
    WGS-84 normal gravity (m/s²) at a geodetic latitude and height (m).

    g(φ) = g_e (1 + k sin²φ) / sqrt(1 − e² sin²φ) − 3.086e-6 · h
    """
    if not -90.0 <= latitude_deg <= 90.0:
        raise InvalidArgumentError(
            f"latitude must be within [-90, 90] degrees, got {latitude_deg}"
        )
    sin_sq = np.sin(np.radians(latitude_deg)) ** 2
    g = EQUATORIAL_GRAVITY * (1 + SOMIGLIANA_K * sin_sq) / np.sqrt(1 - ECCENTRICITY_SQ * sin_sq)
    return float(g - FREE_AIR_GRADIENT * altitude)


def gravity_for(location: str) -> float:
    """Look up a named gravity preset (m/s²)."""
    if location not in LOCAL_GRAVITY:
        raise InvalidArgumentError(
            f"Unknown location '{location}'. "
            f"Available: {list(LOCAL_GRAVITY.keys())}"
        )
    return LOCAL_GRAVITY[location]


if __name__ == "__main__":
    print("WGS-84 Normal Gravity")
    print("=" * 30)
    print(f"{'Lat (°)':>10} {'g (m/s²)':>12}")
    print("-" * 30)
    for lat in [0, 15, 30, 45, 60, 75, 90]:
        print(f"{lat:>10.0f} {normal_gravity(lat):>12.5f}")
