"""
Motion Tracker & Ground Collisions
==================================
Owns the vertical state of a single ball and advances it through time:
  - Exact kinematics under constant gravitational acceleration
  - Ground crossings located analytically inside a time step
  - Inelastic bounces with a constant coefficient of restitution

Coordinate system:
  position = height above the ground (m), never negative
  velocity = positive away from the ground, negative towards it
"""

import numpy as np
from dataclasses import dataclass
from typing import List, Optional

from .environment import HELSINKI_GRAVITY
from .exceptions import InvalidArgumentError
from .logger import get_logger

logger = get_logger(__name__)


# ── Loop guards ───────────────────────────────────────────────────────────
MAX_BOUNCES_PER_STEP = 10_000
MIN_FLIGHT_TIME = 1e-9           # s  (shorter hops count as resting)


@dataclass
class BounceEvent:
    """One resolved ground contact."""
    time: float              # s since configure()
    impact_speed: float      # m/s, just before contact
    rebound_speed: float     # m/s, just after contact


@dataclass
class DropConditions:
    """
    Starting state and physics of one drop.
    """
    start_height: float = 8.0                 # m above ground
    start_velocity: float = 5.0               # m/s, + is upwards
    acceleration: float = -HELSINKI_GRAVITY   # m/s², must be negative
    restitution: float = 0.6                  # fraction of speed kept per bounce

    @property
    def gravity(self) -> float:
        """Magnitude of the gravitational acceleration (m/s²)."""
        return -self.acceleration

    def make_tracker(self, **kwargs) -> 'MotionTracker':
        """Build a tracker for these conditions, already configured."""
        tracker = MotionTracker(self.acceleration, self.restitution, **kwargs)
        tracker.configure(self.start_height, self.start_velocity)
        return tracker


def find_ground_hit_time(acceleration: float, velocity: float,
                         position: float) -> Optional[float]:
    """
    Time until the ball reaches the ground from the given state.

    Solves (a/2)·t² + v·t + x = 0 with the discriminant formula.

    Returns
    -------
    float or None
        The crossing time in seconds, or None when it cannot be determined:
        no real root, or two positive roots (ambiguous crossing).
    """
    a = acceleration / 2
    b = velocity
    c = position
    discriminant = b * b - 4 * a * c

    if discriminant < 0:
        return None
    if discriminant == 0:
        return float(-b / (2 * a))

    root = np.sqrt(discriminant)
    solution1 = float((-b + root) / (2 * a))
    solution2 = float((-b - root) / (2 * a))

    if solution1 > 0 and solution2 > 0:
        return None
    if solution1 > 0:
        return solution1
    if solution2 > 0:
        return solution2
    # Resting on the ground and moving down: contact is immediate
    if solution1 == 0 or solution2 == 0:
        return 0.0
    return None


class MotionTracker:
    """
    Falls vertically and bounces until it stops.

    Parameters
    ----------
    acceleration : float
        Constant gravitational acceleration (m/s², negative).
    restitution : float
        Fraction of the impact speed kept after a bounce, in (0, 1).
    max_bounces_per_step : int
        Upper bound on ground contacts resolved by one advance() call.
    min_flight_time : float
        A bounce whose next hop is shorter than this (s) puts the ball at rest.
    """

    def __init__(self, acceleration: float = -HELSINKI_GRAVITY,
                 restitution: float = 0.6,
                 max_bounces_per_step: int = MAX_BOUNCES_PER_STEP,
                 min_flight_time: float = MIN_FLIGHT_TIME):
        if not acceleration < 0:
            raise InvalidArgumentError(
                f"acceleration must point towards the ground (< 0), got {acceleration}"
            )
        if not 0 < restitution < 1:
            raise InvalidArgumentError(
                f"restitution must be within (0, 1), got {restitution}"
            )
        if max_bounces_per_step < 1:
            raise InvalidArgumentError("max_bounces_per_step must be at least 1")

        self.acceleration = float(acceleration)
        self.restitution = float(restitution)
        self.max_bounces_per_step = int(max_bounces_per_step)
        self.min_flight_time = float(min_flight_time)

        self.position = 0.0
        self.velocity = 0.0
        self.stopped = False
        self.time = 0.0
        self.bounces: List[BounceEvent] = []

    def configure(self, start_height: float, start_velocity: float) -> None:
        """Place the ball at start_height (m) moving at start_velocity (m/s)."""
        if start_height < 0:
            raise InvalidArgumentError("cannot put the object below the ground")

        self.position = float(start_height)
        self.velocity = float(start_velocity)
        self.stopped = False
        self.time = 0.0
        self.bounces = []
        logger.debug("Configured drop: x=%.3f m, v=%.3f m/s", self.position, self.velocity)

    def is_stopped(self) -> bool:
        return self.stopped

    def advance(self, delta_t: float) -> float:
        """
        Advance the state by delta_t seconds and return the new height (m).

        Every ground contact inside the interval is resolved: the ball is
        moved to the contact instant, bounced, and the remaining time is
        integrated from the rebound state.
        """
        if not delta_t >= 0:
            raise InvalidArgumentError(f"delta_t must not be negative, got {delta_t}")
        if self.stopped:
            return self.position

        remaining = float(delta_t)
        for _ in range(self.max_bounces_per_step):
            if remaining <= 0.0:
                return self.position

            # Trapezoidal update is exact for constant acceleration
            v_next = self.velocity + self.acceleration * remaining
            x_next = self.position + remaining * (self.velocity + v_next) / 2

            if x_next > 0:
                self.position = x_next
                self.velocity = v_next
                self.time += remaining
                return self.position

            if x_next == 0:
                self.time += remaining
                self._bounce(v_next)
                return self.position

            hit_time = find_ground_hit_time(self.acceleration, self.velocity, self.position)
            if hit_time is None:
                logger.warning(
                    "Cannot determine ground crossing from x=%.6g m, v=%.6g m/s; "
                    "freezing trajectory", self.position, self.velocity,
                )
                self.stopped = True
                return self.position

            hit_time = min(hit_time, remaining)
            self.time += hit_time
            self._bounce(self.velocity + self.acceleration * hit_time)
            if self.stopped:
                return self.position
            remaining -= hit_time

        logger.warning(
            "Resolved %d bounces in one step without finishing it; ball put at rest",
            self.max_bounces_per_step,
        )
        self._come_to_rest()
        return self.position

    def _bounce(self, impact_velocity: float) -> None:
        rebound_velocity = -impact_velocity * self.restitution
        self.position = 0.0

        flight_time = 2 * rebound_velocity / -self.acceleration
        if flight_time < self.min_flight_time:
            self._come_to_rest()
            return

        self.velocity = rebound_velocity
        self.bounces.append(BounceEvent(
            time=self.time,
            impact_speed=abs(impact_velocity),
            rebound_speed=abs(rebound_velocity),
        ))
        logger.debug("Bounce #%d at t=%.4f s: %.4f -> %.4f m/s", len(self.bounces),
                     self.time, abs(impact_velocity), rebound_velocity)

    def _come_to_rest(self) -> None:
        self.position = 0.0
        self.velocity = 0.0
        self.stopped = True
        logger.info("Ball came to rest at t=%.4f s after %d bounces",
                    self.time, len(self.bounces))

    def __repr__(self):
        return (f"MotionTracker(position={self.position:.4f}, velocity={self.velocity:.4f}, "
                f"stopped={self.stopped})")
