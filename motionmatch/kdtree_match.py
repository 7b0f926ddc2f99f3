"""Trajectory matching through a k-d tree of segment offsets."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

import numpy as np
from scipy.spatial import cKDTree

from .matching import MatchConfig, MatchTrajectory, iter_candidate_windows
from .trajectory import TrajectoryConfig

Key = tuple[int, int]


def _divide(a: float, b: float) -> float:
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a)


def offset_distance(offsets0: Sequence[float], offsets1: Sequence[float]) -> float:
    """Mean distance between paired (x, y) offsets of two flat offset lists."""
    if len(offsets0) != len(offsets1):
        raise ValueError(
            f"offset lists differ in length: {len(offsets0)} != {len(offsets1)}"
        )
    pairs = len(offsets0) // 2
    total = sum(
        math.hypot(
            offsets0[2 * i] - offsets1[2 * i],
            offsets0[2 * i + 1] - offsets1[2 * i + 1],
        )
        for i in range(pairs)
    )
    return _divide(total, max(pairs - 1, 0))


def _point(item: Any) -> tuple[float, float]:
    item = getattr(item, "translation", item)
    return (float(item[0]), float(item[1]))


def trajectory_offsets(points: Sequence[Any]) -> list[float]:
    """Flatten the segment offsets of a trajectory into [dx0, dy0, dx1, ...]."""
    coords = [_point(p) for p in points]
    offsets: list[float] = []
    for (x0, y0), (x1, y1) in zip(coords, coords[1:]):
        offsets.extend((x1 - x0, y1 - y0))
    return offsets


class KdTreeIndex:
    """Nearest-neighbour index of data trajectories keyed by (chunk, offset)."""

    def __init__(self, offsets: Sequence[Sequence[float]], keys: Sequence[Key]) -> None:
        if len(offsets) != len(keys):
            raise ValueError("offsets and keys differ in length")
        self._keys = [tuple(key) for key in keys]
        if offsets:
            data = np.asarray(offsets, dtype=float)
            if data.ndim != 2:
                raise ValueError("all offset lists must share one dimension")
            if not np.isfinite(data).all():
                raise ValueError("offsets must be finite")
            self._data = data
            self._dimension: int | None = data.shape[1]
            self._tree: cKDTree | None = cKDTree(data)
        else:
            self._data = np.empty((0, 0))
            self._dimension = None
            self._tree = None

    @classmethod
    def build(
        cls,
        chunks: Sequence[Sequence[Any]],
        trajectory_config: TrajectoryConfig,
        scale: float,
    ) -> KdTreeIndex:
        """Index every data window of ``chunks``."""
        offsets = []
        keys = []
        for chunk_index, chunk_offset, points in iter_candidate_windows(
            chunks, trajectory_config, scale
        ):
            offsets.append(trajectory_offsets(points))
            keys.append((chunk_index, chunk_offset))
        return cls(offsets, keys)

    def __len__(self) -> int:
        return len(self._keys)

    def nearest(self, offsets: Sequence[float], count: int) -> list[tuple[float, Key]]:
        """Up to ``count`` entries as (squared distance, key), nearest first."""
        point = np.asarray(offsets, dtype=float)
        if self._dimension is not None and point.shape != (self._dimension,):
            raise ValueError(
                f"query has {point.size} values, index expects {self._dimension}"
            )
        if not np.isfinite(point).all():
            raise ValueError("query offsets must be finite")
        if count <= 0 or self._tree is None:
            return []
        k = min(count, len(self._keys))
        _, indices = self._tree.query(point, k=k)
        indices = np.atleast_1d(indices)
        results = [
            (float(((self._data[i] - point) ** 2).sum()), self._keys[int(i)])
            for i in indices
        ]
        results.sort(key=lambda item: item[0])
        return results

    def match(
        self, offsets: Sequence[float], match_config: MatchConfig
    ) -> list[MatchTrajectory]:
        """Nearest matches whose distance is below the match threshold."""
        return [
            MatchTrajectory(distance, chunk_index, chunk_offset)
            for distance, (chunk_index, chunk_offset) in self.nearest(
                offsets, match_config.max_match_count
            )
            if distance < match_config.match_threshold
        ]