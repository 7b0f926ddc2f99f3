import numpy as np
import pytest

from motionmatch.kdtree_match import KdTreeIndex, offset_distance, trajectory_offsets
from motionmatch.matching import MatchConfig
from motionmatch.trajectory import TrajectoryConfig, TrajectoryPoint


def _chunk(count, dx=0.0, dz=0.0):
    mats = []
    for i in range(count):
        m = np.eye(4)
        m[0, 3] = i * dx
        m[2, 3] = i * dz
        mats.append(m)
    return mats


CONFIG = TrajectoryConfig(interval_time=0.1, predict_count=2, history_count=1)


def test_trajectory_offsets_flattened():
    assert trajectory_offsets([(0, 0), (1, 2), (3, 3)]) == [1, 2, 2, 1]


def test_trajectory_offsets_accept_points():
    points = [TrajectoryPoint((0.0, 0.0)), TrajectoryPoint((0.5, 1.5))]
    assert trajectory_offsets(points) == trajectory_offsets([(0.0, 0.0), (0.5, 1.5)])


def test_offset_distance_identical_is_zero():
    offsets = [0.3, 1.0, -2.0, 0.5, 1.0, 1.0]
    assert offset_distance(offsets, offsets) == 0.0


def test_offset_distance_single_pair_is_nan():
    result = offset_distance([1.0, 2.0], [1.0, 2.0])
    assert result == pytest.approx(float("nan"), nan_ok=True)


def test_offset_distance_symmetric():
    a = [0.1, 0.2, 0.3, 0.4, 0.5, 0.6]
    b = [1.0, -1.0, 0.0, 2.0, 0.5, 0.5]
    assert offset_distance(a, b) == pytest.approx(offset_distance(b, a))


def test_offset_distance_length_mismatch():
    with pytest.raises(ValueError):
        offset_distance([0.0, 0.0], [0.0, 0.0, 0.0, 0.0])


def test_nearest_sorted_with_exact_match():
    index = KdTreeIndex([[0.0, 0.0], [1.0, 1.0], [5.0, 5.0]], [(0, 0), (0, 1), (1, 0)])
    results = index.nearest([1.0, 1.0], 3)
    assert results[0] == (0.0, (0, 1))
    distances = [d for d, _ in results]
    assert distances == sorted(distances)
    assert {key for _, key in results} == {(0, 0), (0, 1), (1, 0)}


def test_nearest_count_larger_than_size():
    index = KdTreeIndex([[0.0, 0.0], [1.0, 1.0]], [(0, 0), (0, 1)])
    assert len(index.nearest([0.0, 0.0], 10)) == 2


def test_nearest_zero_count_is_empty():
    index = KdTreeIndex([[0.0, 0.0]], [(0, 0)])
    assert index.nearest([0.0, 0.0], 0) == []


def test_nearest_dimension_mismatch():
    index = KdTreeIndex([[0.0, 0.0]], [(0, 0)])
    with pytest.raises(ValueError):
        index.nearest([0.0, 0.0, 0.0], 1)


def test_keys_and_offsets_must_match():
    with pytest.raises(ValueError):
        KdTreeIndex([[0.0, 0.0]], [(0, 0), (0, 1)])


def test_build_indexes_every_window():
    index = KdTreeIndex.build([_chunk(6, dz=1.0), _chunk(5, dx=1.0)], CONFIG, 1.0)
    assert len(index) == 3 + 2


def test_build_match_finds_straight_chunk():
    index = KdTreeIndex.build([_chunk(6, dz=1.0), _chunk(6, dx=1.0)], CONFIG, 1.0)
    query = trajectory_offsets([(0, 0), (0, 1), (0, 2), (0, 3)])
    matches = index.match(query, MatchConfig(max_match_count=5, match_threshold=0.3))
    assert matches
    assert all(m.chunk_index == 0 for m in matches)
    assert all(m.distance == pytest.approx(0.0, abs=1e-9) for m in matches)


def test_match_respects_threshold():
    index = KdTreeIndex([[0.0, 0.0], [0.1, 0.0], [3.0, 0.0]], [(0, 0), (0, 1), (0, 2)])
    matches = index.match([0.0, 0.0], MatchConfig(max_match_count=3, match_threshold=0.3))
    assert [(m.chunk_index, m.chunk_offset) for m in matches] == [(0, 0), (0, 1)]
    assert all(m.distance < 0.3 for m in matches)