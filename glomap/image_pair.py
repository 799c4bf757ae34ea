"""Pairs of images with their two-view geometry and matches."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from glomap.rigid3d import Rigid3d
from glomap.types import MAX_NUM_IMAGES, TwoViewConfig


def image_pair_to_pair_id(image_id1: int, image_id2: int) -> int:
    """Order-independent id of a pair of images."""
    if image_id1 > image_id2:
        return MAX_NUM_IMAGES * image_id2 + image_id1
    return MAX_NUM_IMAGES * image_id1 + image_id2


def pair_id_to_image_pair(pair_id: int) -> tuple[int, int]:
    """Image ids of a pair id, smaller id first."""
    image_id1 = pair_id % MAX_NUM_IMAGES
    image_id2 = (pair_id - image_id1) // MAX_NUM_IMAGES
    return image_id2, image_id1


@dataclass
class ImagePair:
    """Two images, their relative geometry and the matches between them."""

    image_id1: int
    image_id2: int
    cam2_from_cam1: Rigid3d = field(default_factory=Rigid3d)
    pair_id: int = field(init=False)
    is_valid: bool = True
    # Initial inlier ratio.
    weight: float = 0.0
    config: TwoViewConfig = TwoViewConfig.UNDEFINED
    E: np.ndarray = field(default_factory=lambda: np.zeros((3, 3)))
    F: np.ndarray = field(default_factory=lambda: np.zeros((3, 3)))
    H: np.ndarray = field(default_factory=lambda: np.zeros((3, 3)))
    # Rows of (feature index in image 1, feature index in image 2).
    matches: np.ndarray = field(default_factory=lambda: np.zeros((0, 2), dtype=int))
    # Row indices of inliers in ``matches``.
    inliers: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.pair_id = image_pair_to_pair_id(self.image_id1, self.image_id2)