"""
Validation Against Bounce Theory
================================
Compares the tracker against two independent references:

  - Closed-form bounce theory for a ball under constant gravity with a
    constant coefficient of restitution e:
        v₁   = sqrt(v₀² + 2 g h₀)              first impact speed
        t₁   = (v₀ + v₁) / g                    first impact time
        vₖ   = eᵏ⁻¹ v₁                          k-th impact speed
        hop  = 2 e vₖ / g                       flight after k-th bounce
        apex = (e vₖ)² / (2 g)                  peak after k-th bounce
        t_rest = t₁ + 2 e v₁ / (g (1 − e))      geometric series of hops

  - An event-driven ODE solution (SciPy solve_ivp with a terminal ground
    event, restarted after every bounce).
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, List
from scipy.integrate import solve_ivp

from .logger import get_logger
from .simulation import simulate_drop
from .tracker import MIN_FLIGHT_TIME, DropConditions

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of one bounce comparison."""
    bounce: int                 # 1-based bounce number
    ref_time: float             # s
    sim_time: float
    time_error_pct: float
    ref_impact_speed: float     # m/s
    sim_impact_speed: float
    speed_error_pct: float
    ref_apex: float             # m, peak of the following hop
    sim_apex: float
    apex_error_pct: float


def _pct_error(sim: float, ref: float) -> float:
    """Relative error in %, or the absolute difference when ref is 0."""
    if ref == 0:
        return abs(sim - ref)
    return 100.0 * (sim - ref) / ref


def _first_impact(conditions: DropConditions):
    g = conditions.gravity
    v0 = conditions.start_velocity
    v1 = np.sqrt(v0 ** 2 + 2 * g * conditions.start_height)
    return (v0 + v1) / g, v1


def analytic_bounce_schedule(conditions: DropConditions,
                             n_bounces: int = 10) -> Dict[str, np.ndarray]:
    """
    Closed-form impact times, speeds and following apex heights.

    Returns dict with keys: 'impact_time', 'impact_speed',
    'rebound_speed', 'apex_height'; each an array of length n_bounces.
    """
    g = conditions.gravity
    e = conditions.restitution
    t1, v1 = _first_impact(conditions)

    k = np.arange(n_bounces)
    impact_speed = v1 * e ** k
    rebound_speed = e * impact_speed
    hops = 2 * rebound_speed / g
    impact_time = t1 + np.concatenate(([0.0], np.cumsum(hops)[:-1]))
    return {
        'impact_time': impact_time,
        'impact_speed': impact_speed,
        'rebound_speed': rebound_speed,
        'apex_height': rebound_speed ** 2 / (2 * g),
    }


def analytic_rest_time(conditions: DropConditions) -> float:
    """Time (s) at which the infinite sequence of bounces converges."""
    g = conditions.gravity
    e = conditions.restitution
    t1, v1 = _first_impact(conditions)
    return float(t1 + 2 * e * v1 / (g * (1 - e)))


def reference_ivp_positions(conditions: DropConditions, times,
                            max_bounces: int = 200,
                            rtol: float = 1e-10, atol: float = 1e-12) -> np.ndarray:
    """
    Heights (m) at the given times from an event-driven ODE solution.

    times must be sorted and non-negative.
    """
    times = np.asarray(times, dtype=float)
    heights = np.zeros_like(times)
    if times.size == 0:
        return heights

    acceleration = conditions.acceleration

    def rhs(t: float, y: np.ndarray) -> np.ndarray:
        return np.array([y[1], acceleration])

    def ground_event(t: float, y: np.ndarray) -> float:
        return float(y[0])
    ground_event.terminal = True   # type: ignore[attr-defined]
    ground_event.direction = -1.0  # type: ignore[attr-defined]

    t0 = 0.0
    y0 = np.array([conditions.start_height, conditions.start_velocity])
    t_end = float(times[-1])

    for _ in range(max_bounces + 1):
        if t0 >= t_end:
            break
        sol = solve_ivp(
            rhs,
            t_span=(t0, t_end),
            y0=y0,
            method='RK45',
            rtol=rtol,
            atol=atol,
            events=ground_event,
            dense_output=True,
        )
        hit = sol.status == 1 and len(sol.t_events[0]) > 0
        t_stop = float(sol.t_events[0][0]) if hit else t_end

        mask = (times >= t0) & (times <= t_stop)
        if np.any(mask):
            heights[mask] = sol.sol(times[mask])[0]
        if not hit:
            break

        rebound = -float(sol.y_events[0][0][1]) * conditions.restitution
        if 2 * rebound / conditions.gravity < MIN_FLIGHT_TIME:
            # Resting: everything after stays on the ground
            heights[times > t_stop] = 0.0
            break
        t0 = t_stop
        y0 = np.array([0.0, rebound])

    return np.maximum(heights, 0.0)


def validate_against_analytic(conditions: DropConditions, dt: float = 1 / 60,
                              n_bounces: int = 5,
                              verbose: bool = True) -> List[ValidationResult]:
    """
    Run a fixed-step simulation and compare each bounce against theory.

    Returns list of ValidationResult, one per bounce the simulation reached.
    """
    reference = analytic_bounce_schedule(conditions, n_bounces)
    traj = simulate_drop(conditions, dt=dt,
                         max_time=analytic_rest_time(conditions) + 1.0)
    g = conditions.gravity

    if verbose:
        print(f"\n{'='*75}")
        print(f"  VALIDATION: h₀={conditions.start_height} m, v₀={conditions.start_velocity} m/s, "
              f"e={conditions.restitution}, dt={dt:.4f} s")
        print(f"{'='*75}")
        print(f"{'#':>3} {'Ref t':>9} {'Sim t':>9} {'Err %':>9} "
              f"{'Ref v':>8} {'Sim v':>8} {'Err %':>9} "
              f"{'Ref apex':>9} {'Sim apex':>9} {'Err %':>9}")
        print("-" * 75)

    results = []
    for k, event in enumerate(traj.bounces[:n_bounces]):
        ref_t = float(reference['impact_time'][k])
        ref_v = float(reference['impact_speed'][k])
        ref_apex = float(reference['apex_height'][k])
        sim_apex = event.rebound_speed ** 2 / (2 * g)

        vr = ValidationResult(
            bounce=k + 1,
            ref_time=ref_t,
            sim_time=event.time,
            time_error_pct=_pct_error(event.time, ref_t),
            ref_impact_speed=ref_v,
            sim_impact_speed=event.impact_speed,
            speed_error_pct=_pct_error(event.impact_speed, ref_v),
            ref_apex=ref_apex,
            sim_apex=sim_apex,
            apex_error_pct=_pct_error(sim_apex, ref_apex),
        )
        results.append(vr)

        if verbose:
            print(f"{vr.bounce:>3d} {ref_t:>9.4f} {event.time:>9.4f} {vr.time_error_pct:>+9.2e} "
                  f"{ref_v:>8.3f} {event.impact_speed:>8.3f} {vr.speed_error_pct:>+9.2e} "
                  f"{ref_apex:>9.4f} {sim_apex:>9.4f} {vr.apex_error_pct:>+9.2e}")

    if verbose and results:
        worst = max(max(abs(r.time_error_pct), abs(r.speed_error_pct), abs(r.apex_error_pct))
                    for r in results)
        print("-" * 75)
        print(f"  Worst relative error: {worst:.2e} %")
        status = "✓ PASS" if worst < 1e-6 else "✗ CHECK INTEGRATOR"
        print(f"  Status: {status}")
        print(f"{'='*75}\n")

    if len(results) < n_bounces:
        logger.warning("Simulation reached only %d of %d requested bounces",
                       len(results), n_bounces)
    return results


def step_equivalence_error(conditions: DropConditions, dt: float = 0.1,
                           n_steps: int = 7) -> float:
    """
    Largest height difference (m) between k steps of dt and a single
    advance of k·dt, for k = 1 … n_steps.
    """
    stepped = conditions.make_tracker()
    worst = 0.0
    for k in range(1, n_steps + 1):
        x_stepped = stepped.advance(dt)
        x_single = conditions.make_tracker().advance(k * dt)
        worst = max(worst, abs(x_stepped - x_single))
    return worst


if __name__ == "__main__":
    validate_against_analytic(DropConditions(), verbose=True)
    print(f"Step equivalence (7 × 0.1 s vs 0.7 s): "
          f"{step_equivalence_error(DropConditions()):.3e} m")
