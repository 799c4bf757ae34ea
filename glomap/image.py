"""Images, their gravity information and 3D tracks."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from glomap.gravity import get_align_rot
from glomap.rigid3d import Rigid3d

# An observation is (image_id, feature_id).
Observation = tuple[int, int]


@dataclass
class GravityInfo:
    """Gravity direction of an image and the rotation aligned with it."""

    has_gravity: bool = False
    gravity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    # Alignment matrix; its second column is the gravity direction.
    r_align: np.ndarray = field(default_factory=lambda: np.eye(3))

    def set_gravity(self, g) -> None:
        self.gravity = np.asarray(g, dtype=float).reshape(3).copy()
        self.r_align = get_align_rot(self.gravity)
        self.has_gravity = True


@dataclass
class Image:
    """An image with its pose and feature points."""

    image_id: int = -1
    camera_id: int = -1
    file_name: str = ""
    # Whether the image lies in the largest connected component.
    is_registered: bool = False
    cluster_id: int = -1
    # Transformation from world to camera.
    cam_from_world: Rigid3d = field(default_factory=Rigid3d)
    gravity_info: GravityInfo = field(default_factory=GravityInfo)
    # Distorted feature points in pixels.
    features: list[np.ndarray] = field(default_factory=list)
    # Normalized feature rays, filled by undistortion.
    features_undist: list[np.ndarray] = field(default_factory=list)

    def center(self) -> np.ndarray:
        """Camera centre in world coordinates."""
        pose = self.cam_from_world
        return pose.rotation.T @ -pose.translation


@dataclass
class Track:
    """A 3D point and the image features that observe it."""

    track_id: int = -1
    xyz: np.ndarray = field(default_factory=lambda: np.zeros(3))
    color: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.uint8))
    is_initialized: bool = False
    observations: list[Observation] = field(default_factory=list)