"""Conversion of pixel features to unit viewing rays."""

from __future__ import annotations

import logging

import numpy as np

from glomap.camera import Camera
from glomap.image import Image

logger = logging.getLogger(__name__)


def _feature_ray(camera: Camera, feature) -> np.ndarray:
    normalized = camera.cam_from_img(feature)
    ray = np.append(normalized, 1.0)
    return ray / np.linalg.norm(ray)


def undistort_images(
    cameras: dict[int, Camera],
    images: dict[int, Image],
    clean_points: bool = True,
) -> None:
    """Fill ``features_undist`` of each image with unit rays.

    Images whose rays already match their features are left alone unless
    ``clean_points`` is set.
    """
    logger.info("Undistorting images..")
    for image in images.values():
        if len(image.features_undist) == len(image.features) and not clean_points:
            continue
        camera = cameras[image.camera_id]
        image.features_undist = [_feature_ray(camera, f) for f in image.features]
    logger.info("Image undistortion done")