"""Offline comparison of brute-force, k-d tree and k-means matching."""

from __future__ import annotations

import csv
import json
import math
import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from .kdtree_match import KdTreeIndex, offset_distance, trajectory_offsets
from .kmeans_match import KMeansIndex
from .matching import MatchConfig, MatchTrajectory, iter_candidate_windows
from .trajectory import TrajectoryConfig, trajectory_distance

Vec2 = tuple[float, float]

_F32_MAX = 3.4028234663852886e38

CSV_HEADER = (
    "Trajectories",
    "kNN_chunk_index",
    "kNN_chunk_offset",
    "kDTree_chunk_index",
    "kDTree_chunk_offset",
    "kMeans_chunk_index",
    "kMeans_chunk_offset",
)


def _no_match() -> MatchTrajectory:
    return MatchTrajectory(_F32_MAX, 0, 0)


@dataclass
class NearestResults:
    """Best match per test trajectory for each search method."""

    knn: list[MatchTrajectory] = field(default_factory=list)
    kmeans: list[MatchTrajectory] = field(default_factory=list)
    kdtree: list[MatchTrajectory] = field(default_factory=list)


def nearest_by_knn(
    test_data: Sequence[Sequence[Any]],
    chunks: Sequence[Sequence[Any]],
    trajectory_config: TrajectoryConfig,
    match_config: MatchConfig,
    scale: float,
) -> list[MatchTrajectory]:
    """Exhaustively find the nearest data window for every test trajectory.

    A trajectory without any window within the threshold gets a match with
    the largest single-precision distance at chunk 0, offset 0.
    """
    windows = list(iter_candidate_windows(chunks, trajectory_config, scale))
    results = []
    for trajectory in test_data:
        best = _no_match()
        for chunk_index, chunk_offset, data_traj in windows:
            distance = trajectory_distance(trajectory, data_traj)
            if distance > match_config.match_threshold:
                continue
            if distance < best.distance:
                best = MatchTrajectory(distance, chunk_index, chunk_offset)
        results.append(best)
    return results


def nearest_by_kdtree(
    test_data: Sequence[Sequence[Any]],
    index: KdTreeIndex,
    match_config: MatchConfig,
) -> list[MatchTrajectory]:
    """Nearest match for every test trajectory through a k-d tree.

    A query the tree rejects leaves the trajectory without a match.
    """
    results = []
    for trajectory in test_data:
        best = _no_match()
        offsets = trajectory_offsets(trajectory)
        try:
            found = index.nearest(offsets, match_config.max_match_count)
        except ValueError:
            found = []
        for distance, (chunk_index, chunk_offset) in found:
            if distance < match_config.match_threshold and distance < best.distance:
                best = MatchTrajectory(distance, chunk_index, chunk_offset)
        results.append(best)
    return results


def nearest_by_kmeans(
    test_data: Sequence[Sequence[Any]],
    index: KMeansIndex,
    match_config: MatchConfig,
) -> list[MatchTrajectory]:
    """Nearest match for every test trajectory among nearby cluster members."""
    threshold = match_config.match_threshold
    results = []
    for trajectory in test_data:
        best = _no_match()
        offsets = trajectory_offsets(trajectory)
        for _, centroid_index in index.nearest(offsets, threshold):
            for chunk_index, chunk_offset, member in index.cluster_members[centroid_index]:
                distance = offset_distance(offsets, member)
                if distance > threshold:
                    continue
                if distance < best.distance:
                    best = MatchTrajectory(distance, chunk_index, chunk_offset)
        results.append(best)
    return results


def _score(
    reference: Sequence[MatchTrajectory], candidates: Sequence[MatchTrajectory]
) -> int:
    return sum(
        (cand.chunk_index == ref.chunk_index) + (cand.chunk_offset == ref.chunk_offset)
        for ref, cand in zip(reference, candidates)
    )


def _percentage(score: int, count: int) -> float:
    denominator = count * 2.0
    if denominator == 0:
        return math.nan
    return score / denominator * 100.0


def accuracy(
    reference: Sequence[MatchTrajectory], candidates: Sequence[MatchTrajectory]
) -> float:
    """Percentage of chunk indices and offsets in ``candidates`` that agree
    with ``reference``; NaN when there is no reference."""
    return _percentage(_score(reference, candidates), len(reference))


def _format_trajectory(trajectory: Sequence[Any]) -> str:
    points = []
    for point in trajectory:
        point = getattr(point, "translation", point)
        points.append(f"Vec2({float(point[0])!r}, {float(point[1])!r})")
    return "[" + ", ".join(points) + "]"


def write_results_csv(
    path: str | os.PathLike[str],
    test_data: Sequence[Sequence[Any]],
    results: NearestResults,
) -> tuple[float, float]:
    """Write one row per test trajectory with the match of each method.

    Returns the k-d tree and k-means accuracies, measured against the
    brute-force results.
    """
    rows = min(len(test_data), len(results.knn), len(results.kdtree), len(results.kmeans))
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for trajectory, knn, kdtree, kmeans in zip(
            test_data[:rows], results.knn, results.kdtree, results.kmeans
        ):
            writer.writerow(
                (
                    _format_trajectory(trajectory),
                    knn.chunk_index,
                    knn.chunk_offset,
                    kdtree.chunk_index,
                    kdtree.chunk_offset,
                    kmeans.chunk_index,
                    kmeans.chunk_offset,
                )
            )

    data_count = len(results.knn)
    reference = results.knn[:rows]
    kdtree_accuracy = _percentage(_score(reference, results.kdtree[:rows]), data_count)
    kmeans_accuracy = _percentage(_score(reference, results.kmeans[:rows]), data_count)
    return kdtree_accuracy, kmeans_accuracy


def load_testing_data(path: str | os.PathLike[str]) -> list[list[Vec2]]:
    """Read a JSON list of trajectories, each a list of [x, y] pairs."""
    with open(path, encoding="utf-8") as handle:
        raw = json.load(handle)
    if not isinstance(raw, list):
        raise ValueError("testing data must be a list of trajectories")
    data = []
    for trajectory in raw:
        if not isinstance(trajectory, list):
            raise ValueError("each trajectory must be a list of points")
        points = []
        for point in trajectory:
            if (
                not isinstance(point, list)
                or len(point) != 2
                or not all(
                    isinstance(v, (int, float)) and not isinstance(v, bool)
                    for v in point
                )
            ):
                raise ValueError(f"invalid point in testing data: {point!r}")
            points.append((float(point[0]), float(point[1])))
        data.append(points)
    return data


def save_testing_data(
    path: str | os.PathLike[str], data: Sequence[Sequence[Any]]
) -> None:
    """Write trajectories as compact JSON, each point as [x, y]."""
    serializable = [
        [
            [float(p[0]), float(p[1])]
            for p in (getattr(point, "translation", point) for point in trajectory)
        ]
        for trajectory in data
    ]
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(json.dumps(serializable, separators=(",", ":")))