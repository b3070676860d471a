#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  BALL DROP SIMULATOR — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the complete simulation pipeline:
    1. Gravity presets and WGS-84 normal gravity
    2. Reference drop (h₀ = 8 m, v₀ = 5 m/s, e = 0.6, Helsinki gravity)
    3. Coarse vs fine host time step against the ODE reference
    4. Surface comparison (all restitution presets)
    5. Validation against closed-form bounce theory
    6. Frame-loop render through the pixel viewport
    7. Animated bounce GIF

  Parameters come from BALLDROP_* environment variables or a .env file.
  All outputs saved to the configured output directory (default outputs/).

  Usage:
    python main.py              # Run everything
    python main.py --quick      # Skip animation (faster)
═══════════════════════════════════════════════════════════════════════════════
"""

import sys
import os
import time
from dataclasses import replace

from balldrop.config import get_settings
from balldrop.driver import BallScene, frame_clock
from balldrop.environment import LOCAL_GRAVITY, normal_gravity
from balldrop.logger import setup_logging
from balldrop.simulation import simulate_drop
from balldrop.surfaces import ALL_SURFACES, Surface
from balldrop.tracker import MotionTracker
from balldrop.validation import (
    analytic_rest_time, step_equivalence_error, validate_against_analytic,
)
from balldrop.viewport import CoordinateMapper
from balldrop.visualization import (
    plot_trajectory, plot_surface_comparison, plot_step_comparison,
    plot_validation, create_bounce_animation, ensure_output_dir,
)

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


def banner():
    print("""
╔═══════════════════════════════════════════════════════════════════════╗
║                                                                       ║
║     BALL DROP SIMULATOR                                               ║
║     ─────────────────────────────────────────────────────             ║
║     Exact kinematics · Analytic ground crossings · Restitution        ║
║     Meters → pixels viewport │ Validated against bounce theory       ║
║                                                                       ║
╚═══════════════════════════════════════════════════════════════════════╝
""")


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def main():
    start_time = time.time()
    quick = '--quick' in sys.argv

    settings = get_settings()
    setup_logging(settings.logging.level, settings.logging.file)

    banner()
    out = ensure_output_dir(settings.animation.output_dir)
    cond = settings.drop_conditions()

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Gravity
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Gravity Presets")
    for name, g in LOCAL_GRAVITY.items():
        print(f"  {name:<12s} {g:>9.5f} m/s²")
    print(f"\n  {'Lat (°)':>8} {'g (m/s²)':>10}")
    for lat in [0, 30, 45, 60.17, 90]:
        print(f"  {lat:>8.2f} {normal_gravity(lat):>10.5f}")
    print(f"\n  Using g = {cond.gravity:.4f} m/s²")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Reference Drop
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Reference Drop")
    dt_frame = 1.0 / settings.animation.fps
    result = simulate_drop(cond, dt=dt_frame, max_time=analytic_rest_time(cond) + 1.0)
    print(result.summary())

    fig = plot_trajectory(result, save_path=f'{out}/01_reference_drop.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/01_reference_drop.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Host Time Step
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Coarse vs Fine Host Time Step")
    coarse = simulate_drop(cond, dt=0.25, max_time=result.duration)
    fine = simulate_drop(cond, dt=0.001, max_time=result.duration)
    print(f"  dt=0.250 s — {coarse.bounce_count:>3d} bounces, stopped at {coarse.stopped_at}")
    print(f"  dt=0.001 s — {fine.bounce_count:>3d} bounces, stopped at {fine.stopped_at}")
    err = step_equivalence_error(cond, dt=0.1, n_steps=7)
    print(f"  7 × advance(0.1) vs advance(0.7): max |Δx| = {err:.3e} m")

    fig = plot_step_comparison(coarse, fine, save_path=f'{out}/02_step_comparison.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/02_step_comparison.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Surface Comparison
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Surface Comparison (Same Drop)")
    surface_results = {}
    for key in ALL_SURFACES:
        surface = Surface(key)
        c = replace(cond, restitution=surface.restitution)
        r = simulate_drop(c, dt=0.005, max_time=analytic_rest_time(c) + 1.0)
        surface_results[key] = r
        print(f"  {surface.name:<26s}  e={surface.restitution:.2f}  "
              f"Bounces: {r.bounce_count:>4d}  "
              f"Rest: {analytic_rest_time(c):>6.2f} s")

    fig = plot_surface_comparison(surface_results,
                                  save_path=f'{out}/03_surface_comparison.png')
    plt.close(fig)
    print(f"\n  ✓ Saved: {out}/03_surface_comparison.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Validation
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: Validation — Closed-Form Bounce Theory")
    val_results = validate_against_analytic(cond, dt=dt_frame, n_bounces=8)
    fig = plot_validation(val_results, cond, save_path=f'{out}/04_validation.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/04_validation.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Frame Loop
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 6: Frame Loop Through the Pixel Viewport")
    vp = settings.viewport
    mapper = CoordinateMapper(vp.width_m, vp.height_m, vp.pixels_per_meter)
    width_px, height_px = mapper.get_viewport_size()
    print(f"  Viewport: {width_px} × {height_px} px")

    tracker = MotionTracker(
        cond.acceleration, cond.restitution,
        max_bounces_per_step=settings.physics.max_bounces_per_step,
        min_flight_time=settings.physics.min_flight_time,
    )
    scene = BallScene(tracker, mapper, cond.start_height, cond.start_velocity)
    frames = scene.run(frame_clock(settings.animation.fps, settings.animation.max_frames))
    print(f"  Frames rendered: {frames}  |  final top: {scene.top} px  |  "
          f"stopped: {tracker.is_stopped()}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 7: Animation
    # ══════════════════════════════════════════════════════════════════════
    if not quick:
        section("PHASE 7: Bounce Animation (GIF)")
        create_bounce_animation(scene,
                                frame_clock(30, settings.animation.max_frames),
                                save_path=f'{out}/05_bounce_animation.gif',
                                fps=30)
        print(f"  ✓ Saved: {out}/05_bounce_animation.gif")
    else:
        section("PHASE 7: Animation SKIPPED (--quick mode)")

    # ══════════════════════════════════════════════════════════════════════
    #  SUMMARY
    # ══════════════════════════════════════════════════════════════════════
    elapsed = time.time() - start_time
    section("COMPLETE")
    print(f"""
  All outputs saved to: {os.path.abspath(out)}/

  Generated files:
    01_reference_drop.png      — Height / velocity vs time
    02_step_comparison.png     — Host time step vs ODE reference
    03_surface_comparison.png  — Restitution presets
    04_validation.png          — Tracker vs bounce theory
    {'05_bounce_animation.gif   — Animated ball in pixel viewport' if not quick else '(animation skipped)'}

  Total runtime: {elapsed:.1f} seconds
""")


if __name__ == "__main__":
    main()
