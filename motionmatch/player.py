"""Player steering: preset movement loops and camera-relative input."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

Vec2 = tuple[float, float]

PRESET_DIRECTIONS: tuple[Vec2, ...] = (
    (0.0, 1.0),   # up
    (1.0, 0.0),   # right
    (0.0, -1.0),  # down
    (-1.0, 0.0),  # left
)
PRESET_DURATIONS: tuple[float, ...] = (2.0, 2.0, 2.0, 2.0)


@dataclass
class MovementConfig:
    """Speeds and smoothing used to move the player."""

    walk_speed: float = 2.0
    run_speed: float = 2.5
    lerp_factor: float = 10.0


@dataclass
class PresetDirectionCycle:
    """Walks a square: up, right, down, left, each for a fixed duration."""

    current_direction: int = 0
    elapsed_time: float = 0.0

    def step(self, delta_time: float) -> Vec2:
        """Advance by one frame and return the direction to steer toward."""
        new_elapsed = self.elapsed_time + delta_time
        if new_elapsed >= PRESET_DURATIONS[self.current_direction]:
            self.current_direction = (self.current_direction + 1) % len(
                PRESET_DIRECTIONS
            )
            self.elapsed_time = 0.0
        else:
            self.elapsed_time = new_elapsed
        return PRESET_DIRECTIONS[self.current_direction]


def steer(
    current: Vec2, target: Vec2, lerp_factor: float, delta_time: float
) -> Vec2:
    """Move ``current`` toward ``target`` by one frame, never overshooting."""
    t = min(1.0, lerp_factor * delta_time)
    return (
        current[0] + (target[0] - current[0]) * t,
        current[1] + (target[1] - current[1]) * t,
    )


def _ground(vector: Sequence[float]) -> Vec2:
    if len(vector) == 3:
        return (float(vector[0]), float(vector[2]))
    if len(vector) == 2:
        return (float(vector[0]), float(vector[1]))
    raise ValueError(f"expected a 2D or 3D vector, got {len(vector)} components")


def _normalize_or_zero(vector: Vec2) -> Vec2:
    length = math.hypot(vector[0], vector[1])
    if length == 0.0 or not math.isfinite(length):
        return (0.0, 0.0)
    return (vector[0] / length, vector[1] / length)


def camera_relative_direction(
    forward: Sequence[float], left: Sequence[float], axis: Sequence[float]
) -> Vec2:
    """Turn a stick axis into a ground-plane direction relative to the camera.

    ``forward`` and ``left`` are the camera's directions, either as (x, z)
    pairs or as 3D vectors whose x and z components are used.
    """
    ax, ay = _normalize_or_zero((float(axis[0]), float(axis[1])))
    ax = -ax
    fx, fz = _normalize_or_zero(_ground(forward))
    lx, lz = _normalize_or_zero(_ground(left))
    return (fx * ay + lx * ax, fz * ay + lz * ax)