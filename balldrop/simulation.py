"""
Fixed-Step Drop Simulation
==========================
Runs a tracker at a constant host time step and records the full state
history, the way a display loop would sample it:

    for each frame:
        x, v ← tracker.advance(dt)

Bounces are resolved exactly inside the tracker, so the samples are exact
points on the bouncing trajectory whatever dt is; dt only controls how
densely the curve is sampled.

Output: TrajectoryResult dataclass with the full state history.
"""

import numpy as np
from dataclasses import dataclass
from typing import List, Optional

from .exceptions import InvalidArgumentError
from .logger import get_logger
from .tracker import BounceEvent, DropConditions

logger = get_logger(__name__)


@dataclass
class TrajectoryResult:
    """Complete trajectory output."""
    conditions: DropConditions
    dt: float                 # host time step used

    # Arrays — each has shape (N,)
    time: np.ndarray
    position: np.ndarray      # height above ground (m)
    velocity: np.ndarray      # m/s, + is upwards

    bounces: List[BounceEvent]
    stopped_at: Optional[float] = None   # s, when the tracker stopped

    @property
    def max_height(self) -> float:
        """Highest sampled position (m)."""
        return float(np.max(self.position))

    @property
    def bounce_count(self) -> int:
        return len(self.bounces)

    @property
    def duration(self) -> float:
        """Simulated time covered by the samples (s)."""
        return float(self.time[-1])

    @property
    def apex_heights(self) -> np.ndarray:
        """
        Peak height of each hop after a bounce (m), from the samples.

        Hops that were still in flight when the run ended are left out.
        """
        bounce_times = [b.time for b in self.bounces]
        peaks = []
        for start, end in zip(bounce_times, bounce_times[1:]):
            mask = (self.time >= start) & (self.time <= end)
            if np.any(mask):
                peaks.append(float(np.max(self.position[mask])))
        return np.array(peaks)

    def summary(self) -> str:
        """Human-readable summary string."""
        stopped = f"{self.stopped_at:>10.3f} s" if self.stopped_at is not None else "   running"
        lines = [
            f"╔══════════════════════════════════════════════════════╗",
            f"║  DROP SUMMARY{'':<40s}║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Start height : {self.conditions.start_height:>10.2f} m{'':<25s}║",
            f"║  Start vel    : {self.conditions.start_velocity:>10.2f} m/s{'':<23s}║",
            f"║  Gravity      : {self.conditions.gravity:>10.3f} m/s²{'':<22s}║",
            f"║  Restitution  : {self.conditions.restitution:>10.2f}{'':<27s}║",
            f"║  Timestep     : {self.dt:>10.4f} s{'':<25s}║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Max height   : {self.max_height:>10.3f} m{'':<25s}║",
            f"║  Bounces      : {self.bounce_count:>10d}{'':<27s}║",
            f"║  Stopped at   : {stopped:<37s}║",
            f"╚══════════════════════════════════════════════════════╝",
        ]
        return '\n'.join(lines)


def simulate_drop(conditions: DropConditions, dt: float = 1 / 60,
                  max_time: float = 30.0) -> TrajectoryResult:
    """
    Advance a fresh tracker in steps of dt until it stops or max_time passes.
    """
    if dt <= 0:
        raise InvalidArgumentError(f"dt must be positive, got {dt}")

    tracker = conditions.make_tracker()
    history = [(0.0, tracker.position, tracker.velocity)]
    stopped_at = None

    # Sample times are step·dt so they do not drift from the frame grid
    n_steps = int(np.ceil(max_time / dt - 1e-9))
    for step in range(1, n_steps + 1):
        tracker.advance(dt)
        history.append((step * dt, tracker.position, tracker.velocity))

        if tracker.is_stopped():
            stopped_at = tracker.time
            break

    times, positions, velocities = zip(*history)
    logger.debug("Simulated %d steps of %.4f s, %d bounces",
                 len(times) - 1, dt, len(tracker.bounces))

    return TrajectoryResult(
        conditions=conditions,
        dt=dt,
        time=np.array(times),
        position=np.array(positions),
        velocity=np.array(velocities),
        bounces=list(tracker.bounces),
        stopped_at=stopped_at,
    )
