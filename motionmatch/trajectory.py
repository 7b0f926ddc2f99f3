"""Trajectories: prediction, history reconstruction and comparison."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Any

import numpy as np

from .record import Records

Vec2 = tuple[float, float]

_F32_EPSILON = 1.1920929e-07


def _add(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] + b[0], a[1] + b[1])


def _sub(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] - b[0], a[1] - b[1])


def _scale(a: Vec2, s: float) -> Vec2:
    return (a[0] * s, a[1] * s)


def _length(a: Vec2) -> float:
    return math.hypot(a[0], a[1])


def _lerp(a: Vec2, b: Vec2, t: float) -> Vec2:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def _clamp_length_max(v: Vec2, max_length: float) -> Vec2:
    length = _length(v)
    if length > max_length:
        return _scale(v, max_length / length)
    return v


def _ieee_div(a: float, b: float) -> float:
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _vec(value: Any) -> Vec2:
    """Coerce a recorded value or point into a 2D vector; ``None`` is zero."""
    if value is None:
        return (0.0, 0.0)
    value = getattr(value, "translation", value)
    return (float(value[0]), float(value[1]))


@dataclass(frozen=True)
class TrajectoryPoint:
    """A single point on a trajectory."""

    translation: Vec2 = (0.0, 0.0)
    velocity: Vec2 = (0.0, 0.0)


@dataclass
class TrajectoryConfig:
    """Layout shared by all trajectories."""

    interval_time: float = 0.1667
    predict_count: int = 5
    history_count: int = 1

    def predict_time(self) -> float:
        """Duration of the prediction part."""
        return self.interval_time * self.predict_count

    def history_time(self) -> float:
        """Duration of the history part."""
        return self.interval_time * self.history_count

    def num_segments(self) -> int:
        """Number of segments in a trajectory."""
        return self.predict_count + self.history_count

    def num_points(self) -> int:
        """Number of points in a trajectory."""
        return self.num_segments() + 1

    def num_predict_segments(self) -> int:
        """Number of prediction segments."""
        return self.predict_count

    def num_predict_points(self) -> int:
        """Number of prediction points."""
        return self.num_predict_segments() + 1

    def num_history_segments(self) -> int:
        """Number of history segments."""
        return self.history_count

    def num_history_points(self) -> int:
        """Number of history points."""
        return self.num_history_segments() + 1

    def total_time(self) -> float:
        """Duration of the whole trajectory."""
        return self.interval_time * self.num_segments()


def trajectory_distance(lhs: Sequence[Any], rhs: Sequence[Any]) -> float:
    """Mean distance between the segment offsets of two trajectories.

    Points may be ``TrajectoryPoint`` objects or plain (x, y) pairs.
    Fewer than two points give NaN.
    """
    if len(lhs) != len(rhs):
        raise ValueError(
            f"trajectories differ in length: {len(lhs)} != {len(rhs)}"
        )
    a = [_vec(p) for p in lhs]
    b = [_vec(p) for p in rhs]
    total = sum(
        _length(_sub(_sub(b1, b0), _sub(a1, a0)))
        for a0, a1, b0, b1 in zip(a, a[1:], b, b[1:])
    )
    return _ieee_div(total, max(len(a) - 1, 0))


def resize_trajectory(
    points: Sequence[TrajectoryPoint], config: TrajectoryConfig
) -> list[TrajectoryPoint]:
    """Truncate or pad with default points to the configured point count."""
    num_points = config.num_points()
    resized = list(points[:num_points])
    resized.extend(TrajectoryPoint() for _ in range(num_points - len(resized)))
    return resized


def approach_speed(
    speed: float, target_speed: float, delta_time: float, lerp_factor: float
) -> float:
    """Move ``speed`` toward ``target_speed`` by one frame's worth."""
    return speed + (target_speed - speed) * (delta_time * lerp_factor)


def predict_trajectory(
    translation: Vec2,
    velocity: Vec2,
    direction: Vec2,
    speed: float,
    damping: float,
    config: TrajectoryConfig,
) -> list[TrajectoryPoint]:
    """Predict ``config.predict_count`` future points from the current state."""
    translation = _vec(translation)
    velocity = _vec(velocity)
    acceleration = _scale(_vec(direction), speed)
    points = []
    for _ in range(config.predict_count):
        velocity = _clamp_length_max(_add(velocity, acceleration), speed)
        translation = _add(translation, _scale(velocity, config.interval_time))
        velocity = _scale(velocity, damping)
        points.append(TrajectoryPoint(translation, velocity))
    return points


def history_trajectory(
    translation: Vec2,
    velocity: Vec2,
    transform_records: Records,
    velocity_records: Records,
    delta_time: float,
    config: TrajectoryConfig,
) -> list[TrajectoryPoint]:
    """Rebuild the history points from recorded transforms and velocities.

    Returns ``config.history_count`` points ordered oldest first.
    """
    if len(transform_records) != len(velocity_records):
        raise ValueError("transform and velocity records differ in length")
    record_len = len(transform_records)
    if record_len == 0:
        raise ValueError("records must not be empty")

    trans_start = _vec(translation)
    vel_start = _vec(velocity)
    trans_end = _vec(transform_records[0].value)
    vel_end = _vec(velocity_records[0].value)

    record_time = delta_time
    record_index = 0
    curr_delta_time = delta_time

    history: list[TrajectoryPoint] = [TrajectoryPoint()] * config.history_count
    for i in range(1, config.history_count + 1):
        target_time = i * config.interval_time

        for _ in range(record_index, record_len - 1):
            trans_end = _vec(transform_records[record_index].value)
            vel_end = _vec(velocity_records[record_index].value)

            if record_time > target_time:
                break

            curr_delta_time = transform_records[record_index].delta_time
            record_time += curr_delta_time
            record_index += 1

            trans_start = trans_end
            vel_start = vel_end

        factor = 1.0 - _ieee_div(record_time - target_time, curr_delta_time)
        history[config.history_count - i] = TrajectoryPoint(
            _lerp(trans_start, trans_end, factor),
            _lerp(vel_start, vel_end, factor),
        )
    return history


def update_velocity(
    previous: Vec2, current: Vec2, delta_time: float
) -> Vec2 | None:
    """Velocity between two translations, or None if the frame is too short."""
    if delta_time < _F32_EPSILON:
        return None
    return _scale(_sub(_vec(current), _vec(previous)), 1.0 / delta_time)


def to_local_points(
    points: Iterable[TrajectoryPoint], matrix: Any
) -> list[TrajectoryPoint]:
    """Express ground-plane points in the local space of a 4x4 world matrix."""
    inverse = np.linalg.inv(np.asarray(matrix, dtype=float))
    local = []
    for point in points:
        x, z = _vec(point)
        transformed = inverse @ np.array([x, 0.0, z, 1.0])
        local.append(
            replace(
                point,
                translation=(float(transformed[0]), float(transformed[2])),
            )
        )
    return local