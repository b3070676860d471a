"""
Frame Driver
============
Host-side loop that drives a tracker at display-refresh cadence.

Each frame the render callback receives the time since the first frame and
the time since the previous one (both in ms, like a browser animation frame
timestamp) and returns whether another frame should be scheduled.

BallScene is the host of one tracker / mapper pair: it advances the ball,
maps its height to a pixel row and keeps the last row as ``top``.
"""

from typing import Callable, Iterable, Iterator, List, Optional

from .exceptions import InvalidArgumentError
from .logger import get_logger
from .tracker import MotionTracker
from .viewport import CoordinateMapper

logger = get_logger(__name__)

RenderCallback = Callable[[float, float], bool]


def frame_clock(fps: float = 60.0, max_frames: Optional[int] = None,
                start_ms: float = 0.0) -> Iterator[float]:
    """Yield frame timestamps (ms) at a fixed refresh rate."""
    if fps <= 0:
        raise InvalidArgumentError(f"fps must be positive, got {fps}")
    period = 1000.0 / fps
    frame = 0
    while max_frames is None or frame < max_frames:
        yield start_ms + frame * period
        frame += 1


def animate(render: RenderCallback, frame_times: Iterable[float]) -> int:
    """
    Call render(elapsed, delta) once per frame until it returns False.

    Returns the number of frames rendered.
    """
    start_time = None
    prev_time = None
    frames = 0
    for time in frame_times:
        if start_time is None:
            start_time = time
        if prev_time is None:
            prev_time = time
        elapsed = time - start_time
        delta_t = time - prev_time
        prev_time = time

        frames += 1
        if not render(elapsed, delta_t):
            break
    return frames


class BallScene:
    """
    One ball on one field: the tracker, the mapper and the pixel row
    the presentation layer should draw the ball at.
    """

    def __init__(self, tracker: MotionTracker, mapper: CoordinateMapper,
                 start_height: float = 8.0, start_velocity: float = 5.0):
        self.tracker = tracker
        self.mapper = mapper
        self.start_height = start_height
        self.start_velocity = start_velocity

        self.top: Optional[int] = None
        self.history: List[int] = []

    def render(self, elapsed: float, delta_t: float) -> bool:
        """Advance by delta_t (ms) and place the ball. True while it moves."""
        position = self.tracker.advance(delta_t / 1000)
        self.top = self.mapper.map_y(position)
        self.history.append(self.top)
        return not self.tracker.is_stopped()

    def restart(self) -> None:
        """Drop the ball again from its starting state."""
        self.tracker.configure(self.start_height, self.start_velocity)
        self.history = []
        self.render(0, 0)

    def run(self, frame_times: Iterable[float]) -> int:
        """Restart and animate over the given frame timestamps."""
        self.restart()
        frames = animate(self.render, frame_times)
        logger.info("Scene rendered %d frames, stopped=%s", frames, self.tracker.is_stopped())
        return frames
