import numpy as np
import pytest

from motionmatch.kdtree_match import trajectory_offsets
from motionmatch.kmeans_match import KMeansIndex, kmeans
from motionmatch.matching import MatchConfig
from motionmatch.trajectory import TrajectoryConfig

CONFIG = TrajectoryConfig(interval_time=0.1, predict_count=2, history_count=1)


def _chunk(count, dx=0.0, dz=0.0):
    mats = []
    for i in range(count):
        m = np.eye(4)
        m[0, 3] = i * dx
        m[2, 3] = i * dz
        mats.append(m)
    return mats


def test_kmeans_separates_groups():
    data = [[0.0, 0.0], [0.1, 0.0], [10.0, 0.0], [10.1, 0.0]]
    centroids, membership = kmeans(data, 2, 50, seed=1)
    assert membership[0] == membership[1]
    assert membership[2] == membership[3]
    assert membership[0] != membership[2]
    assert centroids[membership[0]] == pytest.approx([0.05, 0.0])


def test_kmeans_deterministic_with_seed():
    data = [[float(i % 7), float(i % 3)] for i in range(30)]
    first_centroids, first_membership = kmeans(data, 4, 20, seed=3)
    second_centroids, second_membership = kmeans(data, 4, 20, seed=3)
    assert len(first_membership) == 30
    assert len(first_centroids) == 4
    assert list(first_membership) == list(second_membership)
    for a, b in zip(first_centroids, second_centroids):
        assert list(a) == pytest.approx(list(b))


def test_kmeans_k_too_large():
    with pytest.raises(ValueError):
        kmeans([[0.0, 0.0]], 2, 10)


def test_kmeans_membership_in_range():
    data = [[float(i), float(i * i % 5)] for i in range(20)]
    centroids, membership = kmeans(data, 3, 30, seed=0)
    assert len(centroids) == 3
    assert len(membership) == 20
    assert set(membership) <= {0, 1, 2}


def _index():
    return KMeansIndex(
        [[0.0, 1.0, 0.0, 1.0], [5.0, 0.0, 5.0, 0.0]],
        [
            [(0, 0, [0.0, 1.0, 0.0, 1.0]), (0, 1, [0.1, 1.0, 0.0, 1.0]),
             (0, 2, [0.0, 1.2, 0.0, 1.0])],
            [(1, 0, [5.0, 0.0, 5.0, 0.0])],
        ],
    )


def test_nearest_centroids_within_threshold():
    index = _index()
    near = index.nearest([0.0, 1.0, 0.0, 1.0], 0.3)
    assert [i for _, i in near] == [0]
    assert near[0][0] == 0.0


def test_match_sorted_and_limited():
    index = _index()
    matches = index.match([0.0, 1.0, 0.0, 1.0], MatchConfig(max_match_count=2, match_threshold=0.3))
    assert len(matches) == 2
    assert matches[0].chunk_offset == 0
    distances = [m.distance for m in matches]
    assert distances == sorted(distances)
    assert all(m.chunk_index == 0 for m in matches)


def test_match_nothing_near():
    index = _index()
    assert index.match([-9.0, -9.0, -9.0, -9.0], MatchConfig()) == []


def test_constructor_rejects_mismatch():
    with pytest.raises(ValueError):
        KMeansIndex([[0.0, 0.0]], [])


def test_build_keeps_every_window():
    chunks = [_chunk(6, dz=1.0), _chunk(6, dx=1.0), _chunk(5, dz=0.5)]
    index = KMeansIndex.build(chunks, CONFIG, 1.0, k=2, max_iter=20, seed=0)
    members = [m for cluster in index.cluster_members for m in cluster]
    assert len(members) == 3 + 3 + 2
    assert {(ci, co) for ci, co, _ in members} == {
        (0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2), (2, 0), (2, 1)
    }


def test_build_match_finds_straight_chunk():
    chunks = [_chunk(6, dz=1.0), _chunk(6, dx=1.0)]
    index = KMeansIndex.build(chunks, CONFIG, 1.0, k=2, max_iter=20, seed=0)
    query = trajectory_offsets([(0, 0), (0, 1), (0, 2), (0, 3)])
    matches = index.match(query, MatchConfig(max_match_count=5, match_threshold=0.3))
    assert matches
    assert all(m.chunk_index == 0 for m in matches)
    assert matches[0].distance == pytest.approx(0.0, abs=1e-9)