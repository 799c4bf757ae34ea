import numpy as np
import pytest

from glomap.image_pair import ImagePair, image_pair_to_pair_id, pair_id_to_image_pair
from glomap.types import MAX_NUM_IMAGES, TwoViewConfig


def test_pair_id_is_symmetric():
    assert image_pair_to_pair_id(3, 7) == image_pair_to_pair_id(7, 3)


def test_pair_id_layout():
    assert image_pair_to_pair_id(1, 2) == MAX_NUM_IMAGES + 2


@pytest.mark.parametrize("ids", [(1, 2), (9, 4), (0, 5), (123456, 42)])
def test_pair_id_round_trip(ids):
    pair_id = image_pair_to_pair_id(*ids)
    assert pair_id_to_image_pair(pair_id) == (min(ids), max(ids))


def test_image_pair_sets_pair_id():
    pair = ImagePair(5, 3)
    assert pair.pair_id == image_pair_to_pair_id(3, 5)
    assert (pair.image_id1, pair.image_id2) == (5, 3)


def test_image_pair_defaults():
    pair = ImagePair(1, 2)
    assert pair.is_valid is True
    assert pair.config == TwoViewConfig.UNDEFINED
    assert np.allclose(pair.F, np.zeros((3, 3)))
    assert pair.matches.shape == (0, 2)
    assert pair.inliers == []
    assert np.allclose(pair.cam2_from_cam1.rotation, np.eye(3))