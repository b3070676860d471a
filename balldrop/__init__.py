"""
Ball Drop Simulator
===================
A single ball falling under constant gravity and bouncing on the ground,
mapped onto a pixel viewport for display:
  - Exact constant-acceleration kinematics (no step-size error)
  - Ground crossings located analytically inside any host time step,
    including several bounces per step
  - Coefficient-of-restitution energy loss and rest detection
  - Meters → pixels mapping with a flipped vertical axis

Ships with a frame-loop driver, fixed-step batch simulation, validation
against closed-form bounce theory and a SciPy event-driven ODE reference,
and matplotlib plots / GIF animation.
"""

from .environment import (
    STANDARD_GRAVITY, HELSINKI_GRAVITY, LOCAL_GRAVITY,
    normal_gravity, gravity_for,
)
from .exceptions import BallDropError, InvalidArgumentError, OutOfBoundsError
from .surfaces import Surface, ALL_SURFACES
from .tracker import MotionTracker, DropConditions, BounceEvent, find_ground_hit_time
from .viewport import CoordinateMapper
from .driver import BallScene, animate, frame_clock
from .simulation import simulate_drop, TrajectoryResult
from .validation import (
    analytic_bounce_schedule, analytic_rest_time, reference_ivp_positions,
    validate_against_analytic, step_equivalence_error, ValidationResult,
)
from .logger import get_logger, setup_logging

__version__ = "1.0.0"
__all__ = [
    'MotionTracker', 'DropConditions', 'BounceEvent', 'find_ground_hit_time',
    'CoordinateMapper',
    'BallScene', 'animate', 'frame_clock',
    'simulate_drop', 'TrajectoryResult',
    'Surface', 'ALL_SURFACES',
    'STANDARD_GRAVITY', 'HELSINKI_GRAVITY', 'LOCAL_GRAVITY',
    'normal_gravity', 'gravity_for',
    'BallDropError', 'InvalidArgumentError', 'OutOfBoundsError',
    'analytic_bounce_schedule', 'analytic_rest_time', 'reference_ivp_positions',
    'validate_against_analytic', 'step_equivalence_error', 'ValidationResult',
    'get_logger', 'setup_logging',
]
