"""Trajectory matching against recorded motion data."""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from .trajectory import TrajectoryConfig, trajectory_distance

Vec2 = tuple[float, float]

_F32_MAX = 3.4028234663852886e38


@dataclass
class MatchConfig:
    """Limits applied when searching for matching trajectories."""

    max_match_count: int = 5
    """Maximum number of trajectory matches."""
    match_threshold: float = 0.3
    """Any distance beyond this threshold is not considered."""
    pred_match_threshold: float = 0.15
    """Largest prediction distance that keeps the current animation playing."""


@dataclass(frozen=True)
class MatchTrajectory:
    """A candidate trajectory found in the motion data."""

    distance: float = 0.0
    chunk_index: int = 0
    chunk_offset: int = 0


@dataclass
class MatchingStats:
    """Running averages of search time and memory use."""

    avg_time: float = 0.0
    avg_memory: float = 0.0
    runs: int = 0

    def record(self, duration_ms: float, memory_mb: float) -> None:
        """Fold one more measurement into the running averages."""
        runs = self.runs + 1
        self.avg_time = (self.avg_time * self.runs + duration_ms) / runs
        self.avg_memory = (self.avg_memory * self.runs + memory_mb) / runs
        self.runs = runs


def _matrix(item: Any) -> np.ndarray:
    matrix = np.asarray(getattr(item, "matrix", item), dtype=float)
    if matrix.shape != (4, 4):
        raise ValueError(f"expected a 4x4 matrix, got shape {matrix.shape}")
    return matrix


def localize_data_trajectory(
    matrices: Sequence[Any], center_index: int, scale: float
) -> list[Vec2]:
    """Ground-plane translations relative to the matrix at ``center_index``.

    Each entry is a 4x4 world matrix (or an object with a ``matrix``
    attribute); the result is scaled by ``scale``.
    """
    mats = [_matrix(m) for m in matrices]
    inverse = np.linalg.inv(mats[center_index])
    points = []
    for matrix in mats:
        local = inverse @ np.append(matrix[:3, 3], 1.0)
        points.append((float(local[0]) * scale, float(local[2]) * scale))
    return points


def iter_candidate_windows(
    chunks: Sequence[Sequence[Any]],
    trajectory_config: TrajectoryConfig,
    scale: float,
) -> Iterator[tuple[int, int, list[Vec2]]]:
    """Yield ``(chunk_index, chunk_offset, points)`` for every data window.

    Each window spans ``num_points`` entries centred on the current point.
    """
    num_segments = trajectory_config.num_segments()
    num_points = trajectory_config.num_points()
    center = trajectory_config.history_count
    for chunk_index, chunk in enumerate(chunks):
        num_trajectories = len(chunk) - num_segments
        if num_trajectories < 0:
            raise ValueError(
                f"chunk {chunk_index} has {len(chunk)} entries, "
                f"fewer than {num_segments} segments"
            )
        for chunk_offset in range(num_trajectories):
            window = chunk[chunk_offset:chunk_offset + num_points]
            yield chunk_index, chunk_offset, localize_data_trajectory(
                window, center, scale
            )


def should_predict_match(
    elapsed_time: float,
    trajectory_config: TrajectoryConfig,
    interp_duration: float,
) -> bool:
    """Whether the playing animation has run long enough to be rechecked."""
    max_elapsed_time = trajectory_config.predict_time() - interp_duration
    if not max_elapsed_time > 0.0:
        raise ValueError(
            "Prediction duration cannot be shorter than interpolation duration!"
        )
    return not elapsed_time < max_elapsed_time


def brute_force_match(
    trajectory: Sequence[Any],
    chunks: Sequence[Sequence[Any]],
    trajectory_config: TrajectoryConfig,
    match_config: MatchConfig,
    scale: float,
) -> list[MatchTrajectory]:
    """Compare ``trajectory`` with every data window and keep the nearest.

    ``trajectory`` must already be in the entity's local space. The result
    is ordered by ascending distance.
    """
    nearest: list[MatchTrajectory] = []
    for chunk_index, chunk_offset, data_traj in iter_candidate_windows(
        chunks, trajectory_config, scale
    ):
        distance = trajectory_distance(trajectory, data_traj)
        if distance > match_config.match_threshold:
            continue

        candidate = MatchTrajectory(distance, chunk_index, chunk_offset)
        if len(nearest) < match_config.max_match_count:
            nearest.append(candidate)
        elif nearest and distance < nearest[-1].distance:
            nearest[-1] = candidate

        nearest.sort(key=lambda match: match.distance)
    return nearest


def prediction_needs_rematch(
    prediction: Sequence[Any],
    chunk: Sequence[Any] | None,
    chunk_offset: int,
    loopable: bool | None,
    trajectory_config: TrajectoryConfig,
    match_config: MatchConfig,
    scale: float,
) -> bool:
    """Whether the predicted path has drifted from the playing animation.

    ``prediction`` holds the local prediction points; ``chunk`` is the data
    being played, or None when it is missing, which forces a rematch.
    """
    if chunk is None or loopable is None:
        return True

    num_points = trajectory_config.num_predict_points()
    if max(len(chunk) - chunk_offset, 0) < num_points:
        if not loopable:
            return True
        chunk_offset = 0

    window = chunk[chunk_offset:chunk_offset + num_points]
    data_traj = localize_data_trajectory(window, 0, scale)
    distance = trajectory_distance(prediction, data_traj)
    return distance > match_config.pred_match_threshold


def select_best_match(
    candidates: Sequence[MatchTrajectory], pose_distances: Sequence[float]
) -> int:
    """Index of the candidate with the smallest trajectory plus pose distance."""
    if not candidates:
        raise ValueError("no candidate trajectories to choose from")
    if len(candidates) != len(pose_distances):
        raise ValueError("candidates and pose distances differ in length")

    smallest = _F32_MAX
    best_index = 0
    for index, (candidate, pose_distance) in enumerate(
        zip(candidates, pose_distances)
    ):
        total = pose_distance + candidate.distance
        if not math.isnan(total) and total < smallest:
            smallest = total
            best_index = index
    return best_index