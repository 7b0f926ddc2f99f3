# motionmatch

Trajectory-based motion matching for character animation.

A character's trajectory is a short series of 2D ground-plane points: a
few from its history, the current position, and a few predicted ahead.
`motionmatch` builds these trajectories and searches a motion database for
the windows whose path is closest. The motion database is given as a list
of chunks, each a list of 4×4 root matrices (numpy arrays, nested lists,
or objects with a `matrix` attribute).

## Installation

```
pip install motionmatch
```

The package needs `numpy` and `scipy`. Tests run with `pytest`
(`pip install motionmatch[test]`).

## Modules

- `motionmatch.transform2d`: `Transform2d`, a ground-plane translation
  with a heading angle, with `set_direction`, `forward`, `right`,
  `translation3d` and `direction3d`.
- `motionmatch.record`: `Record` and `Records`, a fixed-length history
  with the newest record at index 0. `push(value, delta_time)` drops the
  oldest record; `resize(length)` resets to empty records when the length
  changes.
- `motionmatch.trajectory`:
  - `TrajectoryConfig` (`interval_time=0.1667`, `predict_count=5`,
    `history_count=1`) with point, segment and time counts.
  - `TrajectoryPoint`, a translation and a velocity.
  - `predict_trajectory` predicts future points from position, velocity,
    direction, speed and damping.
  - `history_trajectory` interpolates history points from `Records` of
    transforms and velocities.
  - `approach_speed` and `update_velocity` give per-frame speed and
    velocity updates; `update_velocity` returns `None` for a near-zero
    frame time.
  - `resize_trajectory` truncates or pads a trajectory, and
    `to_local_points` moves points into a matrix's local space.
  - `trajectory_distance` is the mean distance between the segment
    offsets of two trajectories.
- `motionmatch.matching`:
  - `MatchConfig` (`max_match_count=5`, `match_threshold=0.3`,
    `pred_match_threshold=0.15`) and `MatchTrajectory`.
  - `MatchingStats` keeps running averages of search time and memory
    figures passed to `record`.
  - `iter_candidate_windows` and `localize_data_trajectory` produce the
    data windows.
  - `brute_force_match` returns the nearest windows, ordered by distance.
  - `should_predict_match` and `prediction_needs_rematch` decide when a
    new search is needed.
  - `select_best_match` picks the candidate with the smallest trajectory
    plus pose distance.
- `motionmatch.player`: `MovementConfig`, `PresetDirectionCycle` (up,
  right, down, left, two seconds each), `steer`, and
  `camera_relative_direction`.
- `motionmatch.kdtree_match`: `KdTreeIndex`, a k-d tree over flattened
  trajectory offsets (`trajectory_offsets`). `nearest` returns squared
  distances, and `match` keeps those below the match threshold. The module
  also provides `offset_distance`.
- `motionmatch.kmeans_match`: `kmeans` (Lloyd's algorithm with random
  initial centroids and an optional seed) and `KMeansIndex`, which
  searches the members of clusters whose centroid lies within the
  threshold.
- `motionmatch.evaluation`:
  - `nearest_by_knn`, `nearest_by_kdtree` and `nearest_by_kmeans` find the
    best match per test trajectory. These are gathered in
    `NearestResults`.
  - `accuracy` compares results with the brute-force ones.
  - `write_results_csv` writes one row per test trajectory and returns the
    k-d tree and k-means accuracies.
  - `load_testing_data` and `save_testing_data` read and write test
    trajectories as JSON lists of `[x, y]` pairs.

## Example

```python
import numpy as np

from motionmatch.trajectory import TrajectoryConfig, TrajectoryPoint
from motionmatch.matching import MatchConfig, brute_force_match

config = TrajectoryConfig(interval_time=0.1667, predict_count=5, history_count=1)
match_config = MatchConfig(max_match_count=5, match_threshold=0.3, pred_match_threshold=0.15)

def root(x, z):
    m = np.eye(4)
    m[0, 3], m[2, 3] = x, z
    return m

chunks = [[root(0.0, 0.1 * i) for i in range(20)]]

trajectory = [TrajectoryPoint((0.0, 0.1 * i), (0.0, 0.0)) for i in range(config.num_points())]
matches = brute_force_match(trajectory, chunks, config, match_config, 1.0)
for m in matches:
    print(m.chunk_index, m.chunk_offset, m.distance)
```

The k-d tree and k-means indexes are built from the same chunks with
`KdTreeIndex.build(chunks, config, scale)` and
`KMeansIndex.build(chunks, config, scale, k, max_iter, seed)`. Both are
queried with `match(offsets, match_config)`. Here `offsets` is the flat
list of point-to-point steps that `kdtree_match.trajectory_offsets`
returns for a trajectory.

## What it does not do

`motionmatch` is a library of the matching computations only. It does not
load animation or motion-data files. It does not hold pose data or compute
pose distances, so `select_best_match` takes them as input. It does not
play or blend animations, render anything, read input devices, or measure
memory use, so `MatchingStats` averages only the figures it is given. It
has no command-line program.