# glomap

Building blocks for global structure-from-motion, built on NumPy and SciPy.
The package holds the scene types (cameras, images, tracks, image pairs and
the view graph) and the processing steps that run over them: inlier scoring,
pose and track filtering, normalisation and clustering.

## Modules

- `glomap.types`: constants (`EPS`, `MAX_NUM_IMAGES`, `INVALID_IMAGE_PAIR_ID`),
  the `TwoViewConfig` enum and the `InlierThresholdOptions` dataclass.
- `glomap.rigid3d`: `Rigid3d` (`inverse()`, `apply(point)`, composition with
  `*`) and `Sim3d` (`apply(point)`); `transform_camera_world`, `calc_angle`,
  `calc_rotation_angle`, `calc_trans`, `calc_trans_angle`, `deg_to_rad`,
  `rad_to_deg`, `rigid3d_to_angle_axis`, `rotation_to_angle_axis` and
  `angle_axis_to_rotation`.
- `glomap.gravity`: `get_align_rot` (a rotation whose second column is the
  gravity direction), `rot_up_to_angle` and `angle_to_rot_up`.
- `glomap.union_find`: `UnionFind` with `find`, `union` and `clear`.
- `glomap.l1_solver`: `L1Solver` and `L1SolverOptions`, an ADMM solver for
  `min ||A x - b||_1`. `L1Solver.solve(rhs)` returns `x` and raises
  `L1SolverError` when the normal equations cannot be factorized.
- `glomap.camera`: `Camera` and `CameraModel` (`SIMPLE_PINHOLE`, `PINHOLE`,
  `SIMPLE_RADIAL`, `RADIAL`, `OPENCV`), with `focal()`, `get_k()`,
  `principal_point()`, `cam_from_img(point)` and `img_from_cam(point)`.
- `glomap.image`: `Image` (pose, features, `center()`), `GravityInfo`
  (`set_gravity(g)`) and `Track`.
- `glomap.image_pair`: `ImagePair`, `image_pair_to_pair_id` and
  `pair_id_to_image_pair`.
- `glomap.view_graph`: `ViewGraph`, with `establish_adjacency_list`,
  `keep_largest_connected_components`, `mark_connected_components` and
  `remove_invalid_pair`.
- `glomap.two_view_geometry`: `check_cheirality`, `get_orientation_signum`,
  `essential_from_motion`, `fundamental_from_motion_and_cameras`,
  `sampson_error` (2D points or 3D rays) and `homography_error`.
- `glomap.tree`: `bfs(graph, root, banned_edges)`, returning the number of
  vertices reached and the parent list, and
  `maximum_spanning_tree(view_graph, images, weight_type)`, returning the root
  image id and a parent map; `WeightType` selects inlier count or inlier ratio.
- `glomap.image_pair_inliers`: `ImagePairInliers.score_error()` and
  `image_pairs_inlier_count`, which store inlier rows on each pair according
  to its calibrated, uncalibrated or homography configuration.
- `glomap.image_undistorter`: `undistort_images` fills
  `Image.features_undist` with unit rays.
- `glomap.gravity_io`: `read_gravity(path, images)`.
- `glomap.relpose_filter`: `filter_rotations`, `filter_inlier_num` and
  `filter_inlier_ratio`; each returns the number of pairs made invalid.
- `glomap.track_filter`: `filter_tracks_by_reprojection`,
  `filter_tracks_by_angle` and `filter_track_triangulation_angle`; each
  returns the number of tracks changed.
- `glomap.reconstruction_normalizer`: `normalize_reconstruction` centres and
  scales the registered cameras and the tracks, returning the applied `Sim3d`.
- `glomap.view_graph_manipulation`: `sparsify_graph` (with an optional `rng`
  object that has a `random()` method), `establish_strong_clusters` with
  `StrongClusterCriteria`, and `update_image_pairs_config`.
- `glomap.reconstruction_pruning`: `prune_weakly_connected_images` clusters
  images by the 3D points they share and returns the number of clusters.

Progress and summary messages go to the standard `logging` module.

## Installation

```
pip install .
```

To also install what the tests need:

```
pip install .[test]
```

## Example

```python
import numpy as np

from glomap.rigid3d import Rigid3d, angle_axis_to_rotation, calc_angle

a = Rigid3d()
b = Rigid3d(rotation=angle_axis_to_rotation(np.array([0.0, np.pi / 2, 0.0])))
print(calc_angle(a, b))  # about 90.0
```

### Gravity file format

`read_gravity` reads one line per image, the fields separated by single
spaces:

```
image_name.jpg gx gy gz
```

The vector is the direction of `[0, 1, 0]` in the image frame. For every
image named in the file, the gravity is stored on the image and its rotation
is set to agree with it; lines naming unknown images are skipped. A line with
fewer than four fields raises `ValueError`. The function returns the number of
images that received a gravity.

## What the package does not do

This is a library of parts, not a complete mapper. It has no command-line
program, does not read feature or match databases, does not read or write
reconstruction files, and does not estimate relative poses, average
rotations, solve for global positions or run bundle adjustment. Scenes are
built in memory from `Camera`, `Image`, `Track`, `ImagePair` and `ViewGraph`
objects by the caller.

## Tests

```
pytest
```