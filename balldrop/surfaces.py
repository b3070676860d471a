"""
Restitution Presets
===================
Coefficients of restitution for common ball / floor pairings.

The coefficient is the fraction of impact speed the ball keeps after
bouncing, e = v_out / v_in, so a drop from h rebounds to e² · h.

Values are typical figures from regulation bounce tests:
- ITF tennis ball rule: 135–147 cm rebound from a 254 cm drop
- FIBA basketball rule: 1.2–1.4 m rebound from 1.8 m
- USGA-style golf ball drop tests on concrete

The 'demo' entry is the value used by the browser demo this simulator
reproduces.
"""

from .exceptions import InvalidArgumentError


# ══════════════════════════════════════════════════════════════════════════
#  Restitution table — e for a ball falling on a rigid floor
# ══════════════════════════════════════════════════════════════════════════

DEMO_DATA = {
    'name': 'Demo Ball',
    'color': '#00d4ff',
    'linestyle': '-',
    'restitution': 0.6,
}

TENNIS_DATA = {
    'name': 'Tennis Ball / Hard Court',
    'color': '#ffeb3b',
    'linestyle': '--',
    'restitution': 0.75,
}

BASKETBALL_DATA = {
    'name': 'Basketball / Hardwood',
    'color': '#ff6b35',
    'linestyle': '-.',
    'restitution': 0.83,
}

GOLF_DATA = {
    'name': 'Golf Ball / Concrete',
    'color': '#00e676',
    'linestyle': ':',
    'restitution': 0.88,
}

CLAY_DATA = {
    'name': 'Clay Ball / Concrete',
    'color': '#e040fb',
    'linestyle': '-',
    'restitution': 0.2,
}

ALL_SURFACES = {
    'demo': DEMO_DATA,
    'tennis': TENNIS_DATA,
    'basketball': BASKETBALL_DATA,
    'golf': GOLF_DATA,
    'clay': CLAY_DATA,
}


class Surface:
    """
    A ball / floor pairing with its restitution coefficient and plot style.
    """

    def __init__(self, surface_key: str = 'demo'):
        """
        Parameters
        ----------
        surface_key : str
            One of 'demo', 'tennis', 'basketball', 'golf', 'clay'
        """
        if surface_key not in ALL_SURFACES:
            raise InvalidArgumentError(
                f"Unknown surface '{surface_key}'. "
                f"Available: {list(ALL_SURFACES.keys())}"
            )

        data = ALL_SURFACES[surface_key]
        self.key = surface_key
        self.name = data['name']
        self.color = data['color']
        self.linestyle = data['linestyle']
        self.restitution = data['restitution']

    def rebound_height(self, drop_height: float) -> float:
        """Apex after one bounce when released from rest at drop_height (m)."""
        return self.restitution ** 2 * drop_height

    def __repr__(self):
        return f"Surface({self.key!r}, restitution={self.restitution})"
