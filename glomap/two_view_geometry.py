"""Two-view geometry: cheirality, epipolar matrices and residuals."""

from __future__ import annotations

import numpy as np

from glomap.camera import Camera
from glomap.rigid3d import Rigid3d
from glomap.types import EPS


def check_cheirality(
    pose: Rigid3d, x1, x2, min_depth: float = 0.0, max_depth: float = 100.0
) -> bool:
    """Whether the unit rays x1, x2 triangulate in front of both cameras."""
    x1 = np.asarray(x1, dtype=float)
    x2 = np.asarray(x2, dtype=float)
    rx1 = pose.rotation @ x1

    # [1 a; a 1] [l1; l2] = [b1; b2]; the positive factor 1/(1-a^2) is dropped.
    a = -float(rx1 @ x2)
    b1 = -float(rx1 @ pose.translation)
    b2 = float(x2 @ pose.translation)
    lambda1 = b1 - a * b2
    lambda2 = -a * b1 + b2

    scale = 1 - a * a
    min_depth *= scale
    max_depth *= scale
    return min_depth < lambda1 < max_depth and min_depth < lambda2 < max_depth


def get_orientation_signum(f, epipole, pt1, pt2) -> float:
    """Orientation signum of a correspondence under a fundamental matrix."""
    f = np.asarray(f, dtype=float)
    signum1 = f[0, 0] * pt2[0] + f[1, 0] * pt2[1] + f[2, 0]
    signum2 = epipole[1] - epipole[2] * pt1[1]
    return float(signum1 * signum2)


def essential_from_motion(pose: Rigid3d) -> np.ndarray:
    """Essential matrix [t]_x R of a relative pose."""
    t = pose.translation
    skew = np.array(
        [
            [0.0, -t[2], t[1]],
            [t[2], 0.0, -t[0]],
            [-t[1], t[0], 0.0],
        ]
    )
    return skew @ pose.rotation


def fundamental_from_motion_and_cameras(
    camera1: Camera, camera2: Camera, pose: Rigid3d
) -> np.ndarray:
    """Fundamental matrix of a relative pose between two calibrated cameras."""
    e = essential_from_motion(pose)
    return np.linalg.inv(camera2.get_k().T) @ e @ np.linalg.inv(camera1.get_k())


def sampson_error(e, x1, x2) -> float:
    """Squared Sampson error of a correspondence.

    Accepts normalized image points (2-vectors) or image rays (3-vectors).
    """
    e = np.asarray(e, dtype=float)
    x1 = np.asarray(x1, dtype=float).reshape(-1)
    x2 = np.asarray(x2, dtype=float).reshape(-1)
    if x1.shape != x2.shape or x1.shape[0] not in (2, 3):
        raise ValueError("points must both be 2-vectors or both 3-vectors")
    if x1.shape[0] == 2:
        x1h = np.append(x1, 1.0)
        x2h = np.append(x2, 1.0)
        ex1 = e @ x1h
        etx2 = e.T @ x2h
    else:
        x2h = x2
        ex1 = e @ x1 / (EPS + x1[2])
        etx2 = e.T @ x2 / (EPS + x2[2])
    c = float(ex1 @ x2h)
    cx = float(ex1[:2] @ ex1[:2])
    cy = float(etx2[:2] @ etx2[:2])
    return c * c / (cx + cy)


def homography_error(h, x1, x2) -> float:
    """Squared transfer error of x1 mapped by h against x2."""
    h = np.asarray(h, dtype=float)
    x1 = np.asarray(x1, dtype=float).reshape(2)
    x2 = np.asarray(x2, dtype=float).reshape(2)
    hx1 = h @ np.append(x1, 1.0)
    diff = hx1[:2] / (EPS + hx1[2]) - x2
    return float(diff @ diff)