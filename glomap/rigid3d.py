"""Rigid and similarity transforms and rotation helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np
from scipy.spatial.transform import Rotation

from glomap.types import EPS


def _as_rotation(value) -> np.ndarray:
    rotation = np.array(value, dtype=float)
    if rotation.shape != (3, 3):
        raise ValueError(f"rotation must be a 3x3 matrix, got shape {rotation.shape}")
    return rotation


def _as_vector(value) -> np.ndarray:
    vector = np.array(value, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {vector.shape}")
    return vector


@dataclass
class Rigid3d:
    """Rotation followed by translation: x -> R x + t."""

    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        self.rotation = _as_rotation(self.rotation)
        self.translation = _as_vector(self.translation)

    def inverse(self) -> Rigid3d:
        """Return the transform that undoes this one."""
        rot_t = self.rotation.T
        return Rigid3d(rot_t, -rot_t @ self.translation)

    def apply(self, point) -> np.ndarray:
        """Transform a 3D point."""
        return self.rotation @ _as_vector(point) + self.translation

    def __mul__(self, other):
        if not isinstance(other, Rigid3d):
            return NotImplemented
        return Rigid3d(
            self.rotation @ other.rotation,
            self.rotation @ other.translation + self.translation,
        )


@dataclass
class Sim3d:
    """Scaled rotation followed by translation: x -> s R x + t."""

    scale: float = 1.0
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        self.scale = float(self.scale)
        self.rotation = _as_rotation(self.rotation)
        self.translation = _as_vector(self.translation)

    def apply(self, point) -> np.ndarray:
        """Transform a 3D point."""
        return self.scale * (self.rotation @ _as_vector(point)) + self.translation

    def _inverse(self) -> Sim3d:
        rot_t = self.rotation.T
        return Sim3d(1.0 / self.scale, rot_t, -(rot_t @ self.translation) / self.scale)

    def _compose(self, other: Sim3d) -> Sim3d:
        return Sim3d(
            self.scale * other.scale,
            self.rotation @ other.rotation,
            self.scale * (self.rotation @ other.translation) + self.translation,
        )


def transform_camera_world(sim: Sim3d, cam_from_world: Rigid3d) -> Rigid3d:
    """Re-express a camera pose after the world is moved by ``sim``."""
    cam_sim = Sim3d(1.0, cam_from_world.rotation, cam_from_world.translation)
    cam_from_new_world = cam_sim._compose(sim._inverse())
    return Rigid3d(
        cam_from_new_world.rotation, cam_from_new_world.translation * sim.scale
    )


def _angle_from_cos(cos_r: float) -> float:
    return float(np.degrees(np.arccos(np.clip(cos_r, -1.0, 1.0))))


def calc_rotation_angle(rotation1, rotation2) -> float:
    """Angle in degrees between two rotation matrices."""
    rel = _as_rotation(rotation1).T @ _as_rotation(rotation2)
    return _angle_from_cos((float(np.diagonal(rel).sum()) - 1) / 2)


def calc_angle(pose1: Rigid3d, pose2: Rigid3d) -> float:
    """Angle in degrees between the rotations of two poses."""
    return calc_rotation_angle(pose1.rotation, pose2.rotation)


def calc_trans(pose1: Rigid3d, pose2: Rigid3d) -> float:
    """Distance between the camera centres of two poses."""
    return float(
        np.linalg.norm(pose1.inverse().translation - pose2.inverse().translation)
    )


def calc_trans_angle(pose1: Rigid3d, pose2: Rigid3d) -> float:
    """Angle in degrees between the translation directions of two poses."""
    t1, t2 = pose1.translation, pose2.translation
    with np.errstate(divide="ignore", invalid="ignore"):
        cos_r = np.dot(t1, t2) / (np.linalg.norm(t1) * np.linalg.norm(t2))
    return _angle_from_cos(cos_r)


def deg_to_rad(degree: float) -> float:
    return degree * math.pi / 180


def rad_to_deg(radian: float) -> float:
    return radian * 180 / math.pi


def rotation_to_angle_axis(rot) -> np.ndarray:
    """Convert a rotation matrix to an angle-axis vector."""
    return Rotation.from_matrix(_as_rotation(rot)).as_rotvec()


def rigid3d_to_angle_axis(pose: Rigid3d) -> np.ndarray:
    """Angle-axis vector of the rotation of a pose."""
    return rotation_to_angle_axis(pose.rotation)


def angle_axis_to_rotation(aa) -> np.ndarray:
    """Convert an angle-axis vector to a rotation matrix."""
    aa_vec = _as_vector(aa)
    angle = float(np.linalg.norm(aa_vec))
    if angle > EPS:
        axis = aa_vec / angle
        k = np.array(
            [
                [0.0, -axis[2], axis[1]],
                [axis[2], 0.0, -axis[0]],
                [-axis[1], axis[0], 0.0],
            ]
        )
        return np.eye(3) + math.sin(angle) * k + (1 - math.cos(angle)) * (k @ k)
    # First-order approximation for tiny angles.
    return np.array(
        [
            [1.0, -aa_vec[2], aa_vec[1]],
            [aa_vec[2], 1.0, -aa_vec[0]],
            [-aa_vec[1], aa_vec[0], 1.0],
        ]
    )