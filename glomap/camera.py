"""Camera intrinsics with projection to and from normalized image coordinates."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np


class CameraModel(IntEnum):
    """Supported camera models and their numeric ids."""

    SIMPLE_PINHOLE = 0
    PINHOLE = 1
    SIMPLE_RADIAL = 2
    RADIAL = 3
    OPENCV = 4

    @property
    def num_params(self) -> int:
        return _NUM_PARAMS[self]

    @property
    def has_distortion(self) -> bool:
        return self not in (CameraModel.SIMPLE_PINHOLE, CameraModel.PINHOLE)


_NUM_PARAMS = {
    CameraModel.SIMPLE_PINHOLE: 3,
    CameraModel.PINHOLE: 4,
    CameraModel.SIMPLE_RADIAL: 4,
    CameraModel.RADIAL: 5,
    CameraModel.OPENCV: 8,
}

# Parameter layout: focal length indices, principal point indices.
_SINGLE_FOCAL = ((0, 0), (1, 2))
_TWO_FOCALS = ((0, 1), (2, 3))
_LAYOUT = {
    CameraModel.SIMPLE_PINHOLE: _SINGLE_FOCAL,
    CameraModel.PINHOLE: _TWO_FOCALS,
    CameraModel.SIMPLE_RADIAL: _SINGLE_FOCAL,
    CameraModel.RADIAL: _SINGLE_FOCAL,
    CameraModel.OPENCV: _TWO_FOCALS,
}

_UNDISTORT_ITERATIONS = 100
_MAX_STEP_SQUARED_NORM = 1e-10
_REL_STEP_SIZE = 1e-6


def _as_point2(point) -> np.ndarray:
    vec = np.asarray(point, dtype=float).reshape(-1)
    if vec.shape != (2,):
        raise ValueError(f"expected a 2-vector, got shape {vec.shape}")
    return vec


@dataclass
class Camera:
    """A camera: model, its parameter vector and image size."""

    model: CameraModel
    params: np.ndarray
    width: int = 0
    height: int = 0
    camera_id: int = -1
    has_prior_focal_length: bool = False
    has_refined_focal_length: bool = False

    def __post_init__(self) -> None:
        self.model = CameraModel(self.model)
        self.params = np.array(self.params, dtype=float).reshape(-1)
        expected = self.model.num_params
        if self.params.shape[0] != expected:
            raise ValueError(
                f"{self.model.name} takes {expected} parameters, "
                f"got {self.params.shape[0]}"
            )

    def focal_length_x(self) -> float:
        return float(self.params[_LAYOUT[self.model][0][0]])

    def focal_length_y(self) -> float:
        return float(self.params[_LAYOUT[self.model][0][1]])

    def focal(self) -> float:
        """Mean of the horizontal and vertical focal lengths."""
        return (self.focal_length_x() + self.focal_length_y()) / 2.0

    def principal_point(self) -> np.ndarray:
        cx, cy = _LAYOUT[self.model][1]
        return np.array([self.params[cx], self.params[cy]])

    def get_k(self) -> np.ndarray:
        """Calibration matrix."""
        cx, cy = self.principal_point()
        return np.array(
            [
                [self.focal_length_x(), 0.0, cx],
                [0.0, self.focal_length_y(), cy],
                [0.0, 0.0, 1.0],
            ]
        )

    def _distortion(self, uv: np.ndarray) -> np.ndarray:
        u, v = uv
        extra = self.params
        r2 = u * u + v * v
        if self.model is CameraModel.SIMPLE_RADIAL:
            radial = extra[3] * r2
            return np.array([u * radial, v * radial])
        if self.model is CameraModel.RADIAL:
            radial = extra[3] * r2 + extra[4] * r2 * r2
            return np.array([u * radial, v * radial])
        if self.model is CameraModel.OPENCV:
            k1, k2, p1, p2 = extra[4:8]
            uv_prod = u * v
            radial = k1 * r2 + k2 * r2 * r2
            return np.array(
                [
                    u * radial + 2 * p1 * uv_prod + p2 * (r2 + 2 * u * u),
                    v * radial + 2 * p2 * uv_prod + p1 * (r2 + 2 * v * v),
                ]
            )
        return np.zeros(2)

    def _undistort(self, distorted: np.ndarray) -> np.ndarray:
        x = distorted.copy()
        eps = np.finfo(float).eps
        for _ in range(_UNDISTORT_ITERATIONS):
            steps = np.maximum(eps, _REL_STEP_SIZE * np.abs(x))
            jac = np.eye(2)
            for axis, step in enumerate(steps):
                offset = np.zeros(2)
                offset[axis] = step
                forward = self._distortion(x + offset)
                backward = self._distortion(x - offset)
                jac[:, axis] += (forward - backward) / (2 * step)
            residual = x + self._distortion(x) - distorted
            delta = np.linalg.solve(jac, residual)
            x = x - delta
            if float(delta @ delta) < _MAX_STEP_SQUARED_NORM:
                break
        return x

    def cam_from_img(self, point) -> np.ndarray:
        """Pixel coordinates to undistorted normalized image coordinates."""
        pixel = _as_point2(point)
        focal = np.array([self.focal_length_x(), self.focal_length_y()])
        normalized = (pixel - self.principal_point()) / focal
        if self.model.has_distortion:
            normalized = self._undistort(normalized)
        return normalized

    def img_from_cam(self, point) -> np.ndarray:
        """Normalized image coordinates to distorted pixel coordinates."""
        uv = _as_point2(point)
        distorted = uv + self._distortion(uv)
        focal = np.array([self.focal_length_x(), self.focal_length_y()])
        return distorted * focal + self.principal_point()


__all__ = ["Camera", "CameraModel"]

_ = field  # dataclass helpers kept available for subclasses