"""Trajectory-based motion matching: prediction, history and nearest-trajectory search."""

__version__ = "0.1.0"

__all__ = [
    "evaluation",
    "kdtree_match",
    "kmeans_match",
    "matching",
    "player",
    "record",
    "trajectory",
    "transform2d",
]