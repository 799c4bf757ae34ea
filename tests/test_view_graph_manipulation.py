from itertools import combinations

import numpy as np
import pytest

from glomap.camera import Camera, CameraModel
from glomap.image import Image
from glomap.image_pair import ImagePair
from glomap.rigid3d import Rigid3d
from glomap.two_view_geometry import fundamental_from_motion_and_cameras
from glomap.types import TwoViewConfig
from glomap.view_graph import ViewGraph
from glomap.view_graph_manipulation import (
    StrongClusterCriteria,
    establish_strong_clusters,
    sparsify_graph,
    update_image_pairs_config,
)


class _FixedRng:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def _images(ids, camera_id=1):
    return {i: Image(image_id=i, camera_id=camera_id, file_name=f"{i}.jpg") for i in ids}


def _graph(edges):
    graph = ViewGraph()
    for id1, id2, weight in edges:
        pair = ImagePair(id1, id2)
        pair.weight = weight
        graph.image_pairs[pair.pair_id] = pair
    return graph


def _pair(graph, id1, id2):
    return next(
        p for p in graph.image_pairs.values() if {p.image_id1, p.image_id2} == {id1, id2}
    )


def _clique(ids, weight):
    return [(a, b, weight) for a, b in combinations(ids, 2)]


def test_weak_bridge_splits_into_two_clusters():
    images = _images(range(1, 7))
    graph = _graph(_clique([1, 2, 3], 200) + _clique([4, 5, 6], 200) + [(3, 4, 10)])
    result = establish_strong_clusters(
        graph, images, StrongClusterCriteria.WEIGHT, 100
    )
    assert result == 2
    assert not _pair(graph, 3, 4).is_valid
    assert images[1].cluster_id == images[2].cluster_id == images[3].cluster_id
    assert images[4].cluster_id == images[5].cluster_id == images[6].cluster_id
    assert images[1].cluster_id != images[4].cluster_id
    assert {images[1].cluster_id, images[4].cluster_id} == {0, 1}


def test_two_medium_edges_merge_clusters():
    images = _images(range(1, 7))
    graph = _graph(
        _clique([1, 2, 3], 200) + _clique([4, 5, 6], 200) + [(1, 4, 80), (2, 5, 80)]
    )
    result = establish_strong_clusters(
        graph, images, StrongClusterCriteria.WEIGHT, 100
    )
    assert result == 1
    assert all(p.is_valid for p in graph.image_pairs.values())
    assert {img.cluster_id for img in images.values()} == {0}


def test_single_medium_edge_does_not_merge():
    images = _images(range(1, 7))
    graph = _graph(_clique([1, 2, 3], 200) + _clique([4, 5, 6], 200) + [(1, 4, 80)])
    result = establish_strong_clusters(
        graph, images, StrongClusterCriteria.WEIGHT, 100
    )
    assert result == 2
    assert not _pair(graph, 1, 4).is_valid


def test_inlier_num_criterion():
    images = _images(range(1, 5))
    graph = _graph(_clique([1, 2], 0) + _clique([3, 4], 0) + [(2, 3, 0)])
    _pair(graph, 1, 2).inliers = list(range(5))
    _pair(graph, 3, 4).inliers = list(range(5))
    _pair(graph, 2, 3).inliers = [0]
    result = establish_strong_clusters(
        graph, images, StrongClusterCriteria.INLIER_NUM, 3
    )
    assert result == 2
    assert not _pair(graph, 2, 3).is_valid
    assert images[1].cluster_id == images[2].cluster_id
    assert images[3].cluster_id == images[4].cluster_id


def test_smaller_component_is_dropped():
    images = _images(range(1, 6))
    graph = _graph(_clique([1, 2, 3], 200) + [(4, 5, 200)])
    result = establish_strong_clusters(
        graph, images, StrongClusterCriteria.WEIGHT, 100
    )
    assert result == 1
    assert not _pair(graph, 4, 5).is_valid
    assert images[4].cluster_id == -1
    assert images[5].cluster_id == -1
    assert not images[4].is_registered


def test_sparsify_keeps_all_edges_with_large_expected_degree():
    images = _images(range(1, 9))
    graph = _graph(_clique(range(1, 7), 1) + [(7, 8, 1)])
    kept = sparsify_graph(graph, images, 50)
    assert kept == len(_clique(range(1, 7), 1))
    assert not _pair(graph, 7, 8).is_valid
    assert all(_pair(graph, a, b).is_valid for a, b, _ in _clique(range(1, 7), 1))


def test_sparsify_drops_everything_when_draw_is_high():
    images = _images(range(1, 7))
    graph = _graph(_clique(range(1, 7), 1))
    kept = sparsify_graph(graph, images, 1, _FixedRng(1.0))
    assert kept == 0
    assert not any(p.is_valid for p in graph.image_pairs.values())


def test_sparsify_keeps_everything_when_draw_is_low():
    images = _images(range(1, 7))
    graph = _graph(_clique(range(1, 7), 1))
    kept = sparsify_graph(graph, images, 1, _FixedRng(0.0))
    assert kept == len(graph.image_pairs)
    assert all(p.is_valid for p in graph.image_pairs.values())


def _camera(prior=True):
    return Camera(
        CameraModel.PINHOLE, [500.0, 500.0, 320.0, 240.0], 640, 480, 1, prior
    )


def _config_graph(configs):
    graph = ViewGraph()
    for (id1, id2), config in configs.items():
        pair = ImagePair(id1, id2, Rigid3d(np.eye(3), [1.0, 0.0, 0.0]))
        pair.config = config
        graph.image_pairs[pair.pair_id] = pair
    return graph


def test_update_config_promotes_uncalibrated_pair():
    cameras = {1: _camera()}
    images = _images(range(1, 5))
    graph = _config_graph(
        {
            (1, 2): TwoViewConfig.CALIBRATED,
            (2, 3): TwoViewConfig.CALIBRATED,
            (3, 4): TwoViewConfig.UNCALIBRATED,
        }
    )
    update_image_pairs_config(graph, cameras, images)
    pair = _pair(graph, 3, 4)
    assert pair.config == TwoViewConfig.CALIBRATED
    expected = fundamental_from_motion_and_cameras(
        cameras[1], cameras[1], pair.cam2_from_cam1
    )
    np.testing.assert_allclose(pair.F, expected)


def test_update_config_keeps_pair_when_majority_uncalibrated():
    cameras = {1: _camera()}
    images = _images(range(1, 5))
    graph = _config_graph(
        {
            (1, 2): TwoViewConfig.CALIBRATED,
            (2, 3): TwoViewConfig.UNCALIBRATED,
            (3, 4): TwoViewConfig.UNCALIBRATED,
        }
    )
    update_image_pairs_config(graph, cameras, images)
    assert _pair(graph, 2, 3).config == TwoViewConfig.UNCALIBRATED
    assert _pair(graph, 3, 4).config == TwoViewConfig.UNCALIBRATED
    assert np.all(_pair(graph, 3, 4).F == 0)


def test_update_config_ignores_cameras_without_prior():
    cameras = {1: _camera(prior=False)}
    images = _images(range(1, 5))
    graph = _config_graph(
        {
            (1, 2): TwoViewConfig.CALIBRATED,
            (2, 3): TwoViewConfig.CALIBRATED,
            (3, 4): TwoViewConfig.UNCALIBRATED,
        }
    )
    update_image_pairs_config(graph, cameras, images)
    assert _pair(graph, 3, 4).config == TwoViewConfig.UNCALIBRATED


def test_update_config_missing_image_raises():
    cameras = {1: _camera()}
    images = _images([1])
    graph = _config_graph({(1, 2): TwoViewConfig.CALIBRATED})
    with pytest.raises(KeyError):
        update_image_pairs_config(graph, cameras, images)