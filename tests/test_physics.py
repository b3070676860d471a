"""
Unit Tests for Ball Drop Simulator
==================================
Tests the tracker, batch simulation and validation modules for correctness.
Run: python -m pytest tests/ -v
"""

import sys
import os
import logging
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import balldrop.tracker as tracker_module
from balldrop.environment import HELSINKI_GRAVITY
from balldrop.exceptions import InvalidArgumentError
from balldrop.tracker import DropConditions, MotionTracker, find_ground_hit_time
from balldrop.simulation import simulate_drop
from balldrop.validation import (
    analytic_bounce_schedule, analytic_rest_time, reference_ivp_positions,
    step_equivalence_error, validate_against_analytic,
)


G = HELSINKI_GRAVITY


def make_tracker(height=8.0, velocity=5.0, restitution=0.6, **kwargs):
    tracker = MotionTracker(-G, restitution, **kwargs)
    tracker.configure(height, velocity)
    return tracker


class TestGroundHitTime:
    """Discriminant-based ground crossing solver."""

    def test_falling_from_rest(self):
        assert find_ground_hit_time(-10.0, 0.0, 5.0) == pytest.approx(1.0)

    def test_leaving_the_ground_comes_back(self):
        assert find_ground_hit_time(-10.0, 5.0, 0.0) == pytest.approx(1.0)

    def test_on_ground_moving_down_hits_now(self):
        assert find_ground_hit_time(-10.0, -5.0, 0.0) == 0.0

    def test_resting_on_ground_single_root(self):
        assert find_ground_hit_time(-G, 0.0, 0.0) == 0.0

    def test_general_drop_matches_kinematics(self):
        """x(t) = h + v t - g t²/2 must vanish at the returned time."""
        t = find_ground_hit_time(-G, 5.0, 8.0)
        assert 8.0 + 5.0 * t - 0.5 * G * t ** 2 == pytest.approx(0.0, abs=1e-12)
        assert t == pytest.approx((5.0 + np.sqrt(25.0 + 2 * G * 8.0)) / G)

    def test_negative_discriminant_is_unresolvable(self):
        assert find_ground_hit_time(10.0, 0.0, 1.0) is None

    def test_two_positive_roots_are_ambiguous(self):
        assert find_ground_hit_time(10.0, -10.0, 3.0) is None


class TestConfigure:

    def test_sets_state(self):
        tracker = make_tracker(3.0, -2.0)
        assert tracker.position == 3.0
        assert tracker.velocity == -2.0
        assert not tracker.is_stopped()

    def test_negative_height_rejected_without_mutation(self):
        tracker = make_tracker(3.0, 2.0)
        with pytest.raises(InvalidArgumentError):
            tracker.configure(-1.0, 7.0)
        assert tracker.position == 3.0
        assert tracker.velocity == 2.0

    def test_invalid_argument_is_value_error(self):
        tracker = MotionTracker()
        with pytest.raises(ValueError):
            tracker.configure(-1.0, 0.0)

    @pytest.mark.parametrize("acceleration, restitution", [
        (0.0, 0.6), (9.825, 0.6), (-9.825, 0.0), (-9.825, 1.0), (-9.825, 1.5),
    ])
    def test_constructor_validation(self, acceleration, restitution):
        with pytest.raises(InvalidArgumentError):
            MotionTracker(acceleration, restitution)

    def test_negative_delta_rejected(self):
        tracker = make_tracker()
        with pytest.raises(InvalidArgumentError):
            tracker.advance(-0.1)

    def test_nan_delta_rejected(self):
        tracker = make_tracker()
        with pytest.raises(InvalidArgumentError):
            tracker.advance(float('nan'))
        assert tracker.position == 8.0
        assert not tracker.is_stopped()

    def test_configure_clears_history(self):
        tracker = make_tracker(0.5, 0.0)
        tracker.advance(1.0)
        assert tracker.bounces
        tracker.configure(2.0, 0.0)
        assert tracker.bounces == []
        assert tracker.time == 0.0


class TestAdvance:

    def test_free_flight_is_exact(self):
        """No bounce within 0.7 s: x = 8 + 5·0.7 − g·0.7²/2."""
        tracker = make_tracker()
        x = tracker.advance(0.7)
        assert x == pytest.approx(8.0 + 3.5 - 0.5 * G * 0.49, abs=1e-12)
        assert tracker.velocity == pytest.approx(5.0 - G * 0.7, abs=1e-12)

    @pytest.mark.parametrize("height, velocity, warmup", [
        (8.0, 5.0, 0.0),
        (8.0, 5.0, 2.0),     # just after the first bounce
        (0.0, 3.0, 0.0),
    ])
    def test_zero_delta_is_noop(self, height, velocity, warmup):
        tracker = make_tracker(height, velocity)
        tracker.advance(warmup)
        before = (tracker.position, tracker.velocity, len(tracker.bounces))
        assert tracker.advance(0.0) == before[0]
        assert (tracker.position, tracker.velocity, len(tracker.bounces)) == before

    def test_landing_exactly_at_end_of_step(self):
        """x₁ == 0 exactly: bounce with v = −v₁·e."""
        tracker = MotionTracker(-8.0, 0.5)
        tracker.configure(0.0, 4.0)
        assert tracker.advance(1.0) == 0.0
        assert tracker.velocity == 2.0
        assert len(tracker.bounces) == 1
        assert tracker.bounces[0].impact_speed == 4.0
        assert tracker.bounces[0].rebound_speed == 2.0

    def test_never_negative(self):
        rng = np.random.default_rng(42)
        for _ in range(50):
            tracker = make_tracker(rng.uniform(0, 10), rng.uniform(-10, 10),
                                   restitution=rng.uniform(0.05, 0.95))
            for _ in range(200):
                dt = 0.0 if rng.random() < 0.1 else rng.uniform(0, 0.5)
                assert tracker.advance(dt) >= 0.0
                assert tracker.position >= 0.0


class TestBounces:
    """Energy loss at the ground."""

    def test_rebound_speed_is_restitution_times_impact(self):
        tracker = make_tracker(5.0, 0.0)
        tracker.advance(2.0)
        assert len(tracker.bounces) == 1
        bounce = tracker.bounces[0]
        assert bounce.impact_speed == pytest.approx(np.sqrt(2 * G * 5.0), rel=1e-12)
        assert bounce.rebound_speed == pytest.approx(0.6 * bounce.impact_speed, rel=1e-12)
        assert bounce.time == pytest.approx(np.sqrt(2 * 5.0 / G), rel=1e-12)
        # State after the bounce continues from the rebound
        assert tracker.velocity == pytest.approx(bounce.rebound_speed - G * (2.0 - bounce.time))

    def test_apex_heights_strictly_decrease(self):
        tracker = make_tracker()
        tracker.advance(30.0)
        apexes = np.array([b.rebound_speed ** 2 / (2 * G) for b in tracker.bounces])
        assert apexes.size > 10
        assert np.all(np.diff(apexes) < 0)

    def test_sampled_apex_heights_strictly_decrease(self):
        result = simulate_drop(DropConditions(), dt=0.001)
        # Hops shorter than a few samples cannot resolve their apex
        apexes = result.apex_heights[:8]
        assert apexes.size == 8
        assert np.all(np.diff(apexes) < 0)

    def test_ratio_of_successive_apexes_is_e_squared(self):
        tracker = make_tracker(restitution=0.75)
        tracker.advance(20.0)
        speeds = np.array([b.rebound_speed for b in tracker.bounces])
        apexes = speeds ** 2 / (2 * G)
        np.testing.assert_allclose(apexes[1:] / apexes[:-1], 0.75 ** 2, rtol=1e-9)


class TestStepEquivalence:
    """Coarse and fine host steps land on the same trajectory."""

    def test_seven_steps_match_one(self):
        stepped = make_tracker()
        for _ in range(7):
            stepped.advance(0.1)
        single = make_tracker()
        single.advance(0.7)
        assert stepped.position == pytest.approx(single.position, abs=1e-9)
        assert stepped.velocity == pytest.approx(single.velocity, abs=1e-9)

    def test_equivalence_across_a_bounce(self):
        """The first impact (t ≈ 1.88 s) falls inside a step, not on a boundary."""
        stepped = make_tracker()
        for _ in range(20):
            stepped.advance(0.1)
        single = make_tracker()
        single.advance(2.0)
        assert len(stepped.bounces) == len(single.bounces) == 1
        assert stepped.position == pytest.approx(single.position, abs=1e-9)
        assert stepped.velocity == pytest.approx(single.velocity, abs=1e-9)

    def test_helper_reports_small_error(self):
        assert step_equivalence_error(DropConditions(), dt=0.1, n_steps=7) < 1e-9


class TestMultiBounce:
    """Several bounces resolved inside a single advance() call."""

    def test_matches_fine_step_reference(self):
        single = make_tracker(0.5, 0.0)
        x_single = single.advance(1.0)

        fine = make_tracker(0.5, 0.0)
        for _ in range(1000):
            fine.advance(0.001)

        assert len(single.bounces) == 3
        assert len(fine.bounces) == 3
        assert x_single == pytest.approx(fine.position, abs=1e-9)
        assert single.velocity == pytest.approx(fine.velocity, abs=1e-9)

    def test_matches_ode_reference(self):
        cond = DropConditions(start_height=0.5, start_velocity=0.0)
        tracker = cond.make_tracker()
        x = tracker.advance(1.0)
        ref = reference_ivp_positions(cond, [1.0])[0]
        assert x == pytest.approx(ref, abs=1e-6)


class TestRest:
    """The ball comes to rest instead of bouncing forever."""

    def test_resting_on_ground_terminates(self):
        tracker = make_tracker(0.0, 0.0)
        assert tracker.advance(1.0) == 0.0
        assert tracker.is_stopped()
        assert tracker.velocity == 0.0

    def test_large_step_converges_to_rest_time(self):
        cond = DropConditions(start_height=0.5, start_velocity=0.0)
        tracker = cond.make_tracker()
        assert tracker.advance(10.0) == 0.0
        assert tracker.is_stopped()
        assert 30 < len(tracker.bounces) < 60
        assert tracker.time == pytest.approx(analytic_rest_time(cond), abs=1e-6)

    def test_stopped_is_sticky_until_configure(self):
        tracker = make_tracker(0.0, 0.0)
        tracker.advance(1.0)
        assert tracker.advance(5.0) == 0.0
        assert tracker.is_stopped()
        tracker.configure(8.0, 5.0)
        assert not tracker.is_stopped()
        assert tracker.advance(0.1) > 8.0

    def test_iteration_cap(self, caplog):
        tracker = make_tracker(0.5, 0.0, max_bounces_per_step=3)
        with caplog.at_level(logging.WARNING, logger="balldrop"):
            assert tracker.advance(10.0) == 0.0
        assert tracker.is_stopped()
        assert len(tracker.bounces) == 3
        assert "without finishing" in caplog.text

    def test_unresolvable_crossing_freezes(self, monkeypatch, caplog):
        monkeypatch.setattr(tracker_module, "find_ground_hit_time", lambda *args: None)
        tracker = make_tracker(1.0, 0.0)
        with caplog.at_level(logging.WARNING, logger="balldrop"):
            assert tracker.advance(5.0) == 1.0
        assert tracker.is_stopped()
        assert tracker.advance(1.0) == 1.0
        assert "freezing trajectory" in caplog.text


class TestSimulation:

    def test_reference_drop(self):
        cond = DropConditions()
        result = simulate_drop(cond, dt=1 / 60)
        assert result.time[0] == 0.0
        assert result.position[0] == 8.0
        assert len(result.time) == len(result.position) == len(result.velocity)
        assert np.all(result.position >= 0.0)
        assert result.stopped_at == pytest.approx(analytic_rest_time(cond), abs=1e-6)

    def test_max_height_close_to_apex(self):
        result = simulate_drop(DropConditions(), dt=0.001)
        apex = 8.0 + 25.0 / (2 * G)
        assert apex - 1e-4 < result.max_height <= apex + 1e-12

    def test_max_time_limits_run(self):
        result = simulate_drop(DropConditions(), dt=0.1, max_time=1.0)
        assert result.stopped_at is None
        assert result.duration == pytest.approx(1.0)

    def test_invalid_dt(self):
        with pytest.raises(InvalidArgumentError):
            simulate_drop(DropConditions(), dt=0.0)

    def test_summary(self):
        text = simulate_drop(DropConditions(), dt=0.05).summary()
        assert "DROP SUMMARY" in text
        assert "Bounces" in text


class TestValidation:

    def test_first_impact(self):
        sched = analytic_bounce_schedule(DropConditions(), n_bounces=3)
        v1 = np.sqrt(25.0 + 2 * G * 8.0)
        assert sched['impact_speed'][0] == pytest.approx(v1)
        assert sched['impact_time'][0] == pytest.approx((5.0 + v1) / G)
        assert sched['impact_time'][1] == pytest.approx((5.0 + v1) / G + 2 * 0.6 * v1 / G)

    def test_tracker_agrees_with_theory(self):
        results = validate_against_analytic(DropConditions(), dt=1 / 60,
                                            n_bounces=6, verbose=False)
        assert len(results) == 6
        for r in results:
            assert abs(r.time_error_pct) < 1e-6
            assert abs(r.speed_error_pct) < 1e-6
            assert abs(r.apex_error_pct) < 1e-6

    def test_ode_reference_free_flight(self):
        heights = reference_ivp_positions(DropConditions(), [0.0, 0.7])
        assert heights[0] == pytest.approx(8.0)
        assert heights[1] == pytest.approx(8.0 + 3.5 - 0.5 * G * 0.49, abs=1e-6)

    def test_ode_reference_tracks_bounces(self):
        cond = DropConditions()
        times = np.linspace(0.0, 5.0, 51)
        result = simulate_drop(cond, dt=0.1, max_time=5.0)
        ref = reference_ivp_positions(cond, times)
        np.testing.assert_allclose(result.position[:51], ref, atol=1e-6)

    def test_drop_starting_on_the_ground(self):
        """A ball on the ground moving down bounces at t = 0."""
        cond = DropConditions(start_height=0.0, start_velocity=-1.0)
        results = validate_against_analytic(cond, dt=0.01, n_bounces=3, verbose=False)
        assert len(results) == 3
        assert results[0].ref_time == 0.0
        assert results[0].sim_time == 0.0
        for r in results:
            assert abs(r.time_error_pct) < 1e-6
            assert abs(r.speed_error_pct) < 1e-6
            assert abs(r.apex_error_pct) < 1e-6
