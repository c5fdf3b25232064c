"""
Configuration objects for the reveal view.

Exposes physics strengths, layout radii, fade and settlement constants and
stage timings, enabling experiments without editing core logic.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Tuple


@dataclass
class SimulationConfig:
    """
    Tunables for `GraphView` and the components it drives.

    Distances are in surface units (pixels), times in milliseconds and
    velocity coefficients are fractions of the remaining gap applied once.
    """

    # Entity appearance
    node_radius: float = 8.0
    anchor_color: str = "#4299e1"
    default_color: str = "#ed8936"
    anchor_mass: float = 3.0
    default_mass: float = 1.0

    # Physics
    spring_length: float = 110.0
    spring_strength: float = 0.03
    repulsion_strength: float = 13000.0
    # Pairs further apart than this contribute no repulsion
    repulsion_cutoff: float = 300.0
    centering_strength: float = 0.003
    selected_strength: float = 0.05
    damping_factor: float = 0.1
    slow_damping: float = 0.9
    bounds_margin: float = 20.0

    # Idle floating motion
    float_amplitude: float = 0.05
    float_period_ms: float = 8000.0
    float_phase_step: float = 0.5

    # Concentric layout
    first_level_radius: float = 120.0
    second_level_radius: float = 170.0
    outer_level_radius: float = 300.0
    initial_radius: float = 150.0
    random_position_offset: float = 50.0
    anchor_offset: Tuple[float, float] = (80.0, 50.0)
    compact_anchor_offset: Tuple[float, float] = (40.0, 25.0)
    # Deep-linked entity outside the neighbourhood, relative to the centre
    pinned_offset: Tuple[float, float] = (60.0, -40.0)

    # Per-band velocity coefficients used on re-centering
    center_node_velocity: float = 0.015
    first_level_velocity: float = 0.015
    second_level_velocity: float = 0.04
    outer_node_velocity: float = 0.025

    # Fades and settlement
    fade_speed: float = 0.02
    settlement_threshold: float = 0.1
    settlement_frames_required: int = 5
    settlement_window: int = 10

    # Staged disclosure timing
    initial_node_delay_ms: float = 700.0
    node_processing_interval_ms: float = 500.0
    reveal_stagger_ms: float = 20.0
    transition_delay_ms: float = 600.0
    settlement_poll_ms: float = 50.0

    # Frame pacing: physics delta is min(elapsed, max_frame_ms) / frame_ms
    frame_ms: float = 16.0
    max_frame_ms: float = 32.0

    # Visibility cut-offs
    visibility_epsilon: float = 0.01
    hit_visibility: float = 0.1
    reveal_visibility: float = 0.5
    label_visibility: float = 0.7

    # Neighbourhood bound for distance queries
    max_distance: int = 2

    # Gestures
    click_distance: float = 5.0
    drag_release_ms: float = 100.0

    # Viewport
    compact_breakpoint: float = 1000.0
    desktop_center_offset_x: float = -300.0
    compact_size_multiplier: float = 0.75

    # Background grid
    grid_size: float = 30.0
    grid_opacity: float = 0.08
    grid_line_width: float = 0.5

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "SimulationConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        cfg = cls()
        if not data:
            return cfg
        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key in known:
                if isinstance(value, list):
                    value = tuple(value)
                setattr(cfg, key, value)
        return cfg
