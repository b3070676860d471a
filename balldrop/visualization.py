"""
Visualization Engine
====================
Plots for bounce analysis:
  1. Height and velocity vs time with bounce / apex markers
  2. Surface comparison (one drop per restitution preset)
  3. Coarse vs fine host time step against the ODE reference
  4. Validation against closed-form bounce theory
  5. Animated ball in the pixel viewport (saved as GIF)
"""

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.patches import Circle, Rectangle
from typing import Dict, Iterable, List, Optional
import os

from .driver import BallScene
from .simulation import TrajectoryResult
from .surfaces import ALL_SURFACES
from .tracker import DropConditions
from .validation import ValidationResult, reference_ivp_positions


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#0a0a0a',
    'text_color': '#e0e0e0',
    'grid_color': '#333333',
    'accent_colors': ['#00d4ff', '#ff6b35', '#00e676', '#ffeb3b',
                      '#e040fb', '#ff5252'],
    'font_family': 'monospace',
}

LEGEND_STYLE = {
    'facecolor': '#1a1a1a',
    'edgecolor': '#444',
    'labelcolor': STYLE['text_color'],
}


def _apply_dark_style(fig, axes):
    """Apply consistent dark theme to figure and axes."""
    fig.patch.set_facecolor(STYLE['bg_color'])
    if not isinstance(axes, np.ndarray):
        axes = [axes]
    else:
        axes = axes.flatten()

    for ax in axes:
        ax.set_facecolor(STYLE['bg_color'])
        ax.tick_params(colors=STYLE['text_color'])
        ax.xaxis.label.set_color(STYLE['text_color'])
        ax.yaxis.label.set_color(STYLE['text_color'])
        ax.title.set_color(STYLE['text_color'])
        ax.grid(True, color=STYLE['grid_color'], alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(STYLE['grid_color'])


def _finish(fig, save_path: Optional[str], show: bool = False) -> plt.Figure:
    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])
    if show:
        plt.show()
    return fig


def ensure_output_dir(path: str = 'outputs'):
    os.makedirs(path, exist_ok=True)
    return path


# ══════════════════════════════════════════════════════════════════════════
#  1. Single Drop
# ══════════════════════════════════════════════════════════════════════════

def plot_trajectory(result: TrajectoryResult, save_path: str = None,
                    show: bool = False) -> plt.Figure:
    """Height and velocity vs time for a single drop."""
    fig, axes = plt.subplots(2, 1, figsize=(12, 8), sharex=True)
    _apply_dark_style(fig, axes)

    ax = axes[0]
    ax.plot(result.time, result.position,
            color=STYLE['accent_colors'][0], linewidth=2.5, label='Height')
    bounce_times = [b.time for b in result.bounces]
    ax.plot(bounce_times, np.zeros(len(bounce_times)), 'x',
            color='#ff5252', markersize=10, markeredgewidth=2,
            label='Bounce', zorder=5)
    idx_max = np.argmax(result.position)
    ax.plot(result.time[idx_max], result.position[idx_max], '^',
            color='#ffeb3b', markersize=10, label='Apex', zorder=5)
    if result.stopped_at is not None:
        ax.axvline(result.stopped_at, color='#00e676', linestyle='--',
                   alpha=0.6, label='At rest')
    ax.set_ylabel('Height (m)', fontsize=12)
    ax.set_ylim(bottom=0)
    ax.set_title(f'Ball Drop — h₀={result.conditions.start_height:.1f} m, '
                 f'v₀={result.conditions.start_velocity:.1f} m/s, '
                 f'e={result.conditions.restitution:.2f} (dt={result.dt:.4f} s)',
                 fontsize=13, fontweight='bold')
    ax.legend(loc='upper right', fontsize=10, **LEGEND_STYLE)

    ax = axes[1]
    ax.plot(result.time, result.velocity,
            color=STYLE['accent_colors'][1], linewidth=1.5)
    ax.axhline(y=0, color='#555', linestyle='--', alpha=0.5)
    ax.set_xlabel('Time (s)', fontsize=12)
    ax.set_ylabel('Velocity (m/s)', fontsize=12)

    return _finish(fig, save_path, show)


# ══════════════════════════════════════════════════════════════════════════
#  2. Surface Comparison
# ══════════════════════════════════════════════════════════════════════════

def plot_surface_comparison(results: Dict[str, TrajectoryResult],
                            save_path: str = None) -> plt.Figure:
    """Same drop on every restitution preset."""
    fig, axes = plt.subplots(1, 2, figsize=(16, 6))
    _apply_dark_style(fig, axes)

    ax = axes[0]
    for key, res in results.items():
        data = ALL_SURFACES.get(key, {})
        ax.plot(res.time, res.position, color=data.get('color', '#ffffff'),
                linestyle=data.get('linestyle', '-'), linewidth=2,
                label=f"{data.get('name', key)} (e={res.conditions.restitution})")
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Height (m)')
    ax.set_title('Height vs Time', fontweight='bold')
    ax.legend(fontsize=9, **LEGEND_STYLE)
    ax.set_ylim(bottom=0)

    # Apex decay on a log scale is a straight line of slope 2·ln(e)
    ax = axes[1]
    for key, res in results.items():
        apexes = res.apex_heights
        if apexes.size == 0:
            continue
        data = ALL_SURFACES.get(key, {})
        ax.semilogy(np.arange(1, apexes.size + 1), apexes, 'o-',
                    color=data.get('color', '#ffffff'), linewidth=1.5, markersize=5)
    ax.set_xlabel('Bounce #')
    ax.set_ylabel('Apex height (m)')
    ax.set_title('Apex Decay', fontweight='bold')

    return _finish(fig, save_path)


# ══════════════════════════════════════════════════════════════════════════
#  3. Host Time Step Comparison
# ══════════════════════════════════════════════════════════════════════════

def plot_step_comparison(coarse: TrajectoryResult, fine: TrajectoryResult,
                         save_path: str = None) -> plt.Figure:
    """Coarse and fine sampling of the same drop against the ODE reference."""
    fig, axes = plt.subplots(1, 2, figsize=(16, 5))
    _apply_dark_style(fig, axes)

    reference = reference_ivp_positions(fine.conditions, fine.time)

    ax = axes[0]
    ax.plot(fine.time, reference, color='#888', linewidth=4, alpha=0.5,
            label='ODE reference')
    ax.plot(fine.time, fine.position, color='#00d4ff', linewidth=1.5,
            label=f'dt={fine.dt:.4f} s')
    ax.plot(coarse.time, coarse.position, 'o--', color='#ff6b35',
            linewidth=1, markersize=5, label=f'dt={coarse.dt:.4f} s')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Height (m)')
    ax.set_title('Samples Lie on the Exact Trajectory', fontweight='bold')
    ax.legend(fontsize=10, **LEGEND_STYLE)
    ax.set_ylim(bottom=0)

    ax = axes[1]
    error = np.abs(fine.position - reference)
    ax.semilogy(fine.time, np.maximum(error, 1e-18), color='#e040fb', linewidth=1)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('|tracker − reference| (m)')
    ax.set_title('Deviation from ODE Reference', fontweight='bold')

    return _finish(fig, save_path)


# ══════════════════════════════════════════════════════════════════════════
#  4. Validation Plot
# ══════════════════════════════════════════════════════════════════════════

def plot_validation(validation_results: List[ValidationResult],
                    conditions: DropConditions,
                    save_path: str = None) -> plt.Figure:
    """Simulated vs closed-form apex heights, and relative errors."""
    fig, axes = plt.subplots(1, 2, figsize=(14, 6))
    _apply_dark_style(fig, axes)

    bounces = [v.bounce for v in validation_results]

    ax = axes[0]
    ax.semilogy(bounces, [v.ref_apex for v in validation_results], 'o-',
                color='#ffeb3b', linewidth=2, markersize=8, label='Theory')
    ax.semilogy(bounces, [v.sim_apex for v in validation_results], 's--',
                color='#00d4ff', linewidth=2, markersize=8, label='Tracker')
    ax.set_xlabel('Bounce #')
    ax.set_ylabel('Apex height (m)')
    ax.set_title(f'Apex Validation — e={conditions.restitution}', fontweight='bold')
    ax.legend(fontsize=10, **LEGEND_STYLE)

    ax = axes[1]
    width = 0.25
    x = np.array(bounces, dtype=float)
    ax.bar(x - width, [abs(v.time_error_pct) for v in validation_results],
           width=width, color='#00e676', alpha=0.8, label='Impact time')
    ax.bar(x, [abs(v.speed_error_pct) for v in validation_results],
           width=width, color='#ff6b35', alpha=0.8, label='Impact speed')
    ax.bar(x + width, [abs(v.apex_error_pct) for v in validation_results],
           width=width, color='#e040fb', alpha=0.8, label='Apex')
    ax.set_xlabel('Bounce #')
    ax.set_ylabel('|Error| (%)')
    ax.set_title('Validation Error', fontweight='bold')
    ax.legend(fontsize=10, **LEGEND_STYLE)

    return _finish(fig, save_path)


# ══════════════════════════════════════════════════════════════════════════
#  5. Animated Ball (GIF)
# ══════════════════════════════════════════════════════════════════════════

def create_bounce_animation(scene: BallScene, frame_times: Iterable[float],
                            save_path: str = 'outputs/bounce_anim.gif',
                            fps: int = 30) -> str:
    """
    Drive the scene frame by frame and replay its pixel rows as a GIF.

    The axes use the pixel viewport directly: origin top-left, y down.
    """
    from matplotlib.animation import FuncAnimation, PillowWriter

    scene.run(frame_times)
    tops = list(scene.history)
    width_px, height_px = scene.mapper.get_viewport_size()
    radius_px = max(4.0, 0.02 * height_px)

    fig, ax = plt.subplots(figsize=(5, 5 * height_px / width_px))
    fig.patch.set_facecolor(STYLE['bg_color'])
    ax.set_facecolor(STYLE['bg_color'])
    ax.set_xlim(0, width_px)
    ax.set_ylim(height_px + radius_px, -radius_px)
    ax.set_aspect('equal')
    ax.axis('off')
    ax.add_patch(Rectangle((0, 0), width_px, height_px, fill=False,
                           edgecolor=STYLE['grid_color'], linewidth=1.5))

    ball = Circle((width_px / 2, tops[0] - radius_px), radius_px,
                  color=STYLE['accent_colors'][0])
    ax.add_patch(ball)
    label = ax.text(0.03, 0.97, '', transform=ax.transAxes, va='top',
                    color=STYLE['text_color'], fontsize=9, fontfamily='monospace')

    def animate(frame_idx):
        top = tops[frame_idx]
        # Ball sits on its pixel row so that height 0 touches the floor
        ball.center = (width_px / 2, top - radius_px)
        label.set_text(f'frame {frame_idx:>4d} | top={top:>4d}px')
        return ball, label

    anim = FuncAnimation(fig, animate, frames=len(tops), interval=1000 / fps, blit=True)
    anim.save(save_path, writer=PillowWriter(fps=fps),
              savefig_kwargs={'facecolor': STYLE['bg_color']})
    plt.close(fig)
    print(f"  Animation saved: {save_path}")
    return save_path
