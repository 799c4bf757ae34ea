"""Helpers for gravity-aligned rotations."""

from __future__ import annotations

import numpy as np

from glomap.rigid3d import angle_axis_to_rotation, rotation_to_angle_axis


def get_align_rot(gravity) -> np.ndarray:
    """Rotation whose second column is the gravity direction."""
    g = np.asarray(gravity, dtype=float).reshape(3)
    norm = np.linalg.norm(g)
    v = g / norm if norm > 0 else g
    q, _ = np.linalg.qr(v.reshape(3, 1), mode="complete")
    rot = np.empty((3, 3))
    rot[:, 1] = v
    rot[:, 0] = q[:, 1]
    rot[:, 2] = q[:, 2]
    if np.linalg.det(rot) < 0:
        rot[:, 2] = -rot[:, 2]
    return rot


def rot_up_to_angle(r_up) -> float:
    """Rotation angle of an upright rotation (about the y axis)."""
    return float(rotation_to_angle_axis(r_up)[1])


def angle_to_rot_up(angle: float) -> np.ndarray:
    """Upright rotation (about the y axis) by the given angle."""
    return angle_axis_to_rotation([0.0, angle, 0.0])