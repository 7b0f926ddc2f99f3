"""Trajectory matching through k-means clusters of segment offsets."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np

from .kdtree_match import offset_distance, trajectory_offsets
from .matching import MatchConfig, MatchTrajectory, iter_candidate_windows
from .trajectory import TrajectoryConfig

Member = tuple[int, int, list[float]]


def kmeans(
    data: Sequence[Sequence[float]],
    k: int,
    max_iter: int,
    seed: int | None = None,
) -> tuple[list[list[float]], list[int]]:
    """Cluster ``data`` into ``k`` groups with Lloyd's algorithm.

    Initial centroids are ``k`` distinct samples chosen at random. Returns
    the centroids and the cluster index of every sample.
    """
    points = np.asarray(data, dtype=float)
    if points.ndim != 2 or points.shape[0] == 0:
        raise ValueError("data must be a non-empty list of equal-length vectors")
    n = points.shape[0]
    if k <= 0 or k > n:
        raise ValueError(f"k must be between 1 and {n}, got {k}")

    rng = np.random.default_rng(seed)
    centroids = points[rng.choice(n, size=k, replace=False)].copy()

    def assign() -> np.ndarray:
        distances = ((points[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2)
        return distances.argmin(axis=1)

    membership = assign()
    for _ in range(max_iter):
        for cluster in range(k):
            mask = membership == cluster
            if mask.any():
                centroids[cluster] = points[mask].mean(axis=0)
        updated = assign()
        if np.array_equal(updated, membership):
            break
        membership = updated

    return [list(map(float, c)) for c in centroids], [int(m) for m in membership]


class KMeansIndex:
    """Data trajectories grouped into clusters around centroids."""

    def __init__(
        self,
        centroids: Sequence[Sequence[float]],
        cluster_members: Sequence[Sequence[Member]],
    ) -> None:
        if len(centroids) != len(cluster_members):
            raise ValueError("centroids and cluster members differ in length")
        self.centroids = [list(map(float, c)) for c in centroids]
        self.cluster_members = [
            [(int(ci), int(co), list(map(float, offs))) for ci, co, offs in members]
            for members in cluster_members
        ]

    @classmethod
    def build(
        cls,
        chunks: Sequence[Sequence[Any]],
        trajectory_config: TrajectoryConfig,
        scale: float,
        k: int = 10,
        max_iter: int = 70,
        seed: int | None = None,
    ) -> KMeansIndex:
        """Cluster every data window of ``chunks``."""
        windows = [
            (chunk_index, chunk_offset, trajectory_offsets(points))
            for chunk_index, chunk_offset, points in iter_candidate_windows(
                chunks, trajectory_config, scale
            )
        ]
        centroids, membership = kmeans(
            [offsets for _, _, offsets in windows], k, max_iter, seed
        )
        cluster_members: list[list[Member]] = [[] for _ in range(k)]
        for window, cluster in zip(windows, membership):
            cluster_members[cluster].append(window)
        return cls(centroids, cluster_members)

    def nearest(
        self, offsets: Sequence[float], threshold: float
    ) -> list[tuple[float, int]]:
        """Centroids within ``threshold`` as (distance, centroid index)."""
        return [
            (distance, index)
            for index, centroid in enumerate(self.centroids)
            if (distance := offset_distance(offsets, centroid)) <= threshold
        ]

    def match(
        self, offsets: Sequence[float], match_config: MatchConfig
    ) -> list[MatchTrajectory]:
        """Search the members of nearby clusters, nearest first."""
        nearest: list[MatchTrajectory] = []
        for _, centroid_index in self.nearest(offsets, match_config.match_threshold):
            for chunk_index, chunk_offset, member in self.cluster_members[centroid_index]:
                distance = offset_distance(offsets, member)
                if distance > match_config.match_threshold:
                    continue
                candidate = MatchTrajectory(distance, chunk_index, chunk_offset)
                if len(nearest) < match_config.max_match_count:
                    nearest.append(candidate)
                elif nearest and distance < nearest[-1].distance:
                    nearest[-1] = candidate
        nearest.sort(key=lambda m: m.distance)
        return nearest