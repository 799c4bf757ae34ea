"""Moving and scaling a reconstruction into a canonical frame."""

from __future__ import annotations

import numpy as np

from glomap.camera import Camera
from glomap.image import Image, Track
from glomap.rigid3d import Sim3d, transform_camera_world


def normalize_reconstruction(
    cameras: dict[int, Camera],
    images: dict[int, Image],
    tracks: dict[int, Track],
    fixed_scale: bool = False,
    extent: float = 10.0,
    p0: float = 0.1,
    p1: float = 0.9,
) -> Sim3d:
    """Centre the registered cameras at the origin and scale them to ``extent``.

    The centre and extent come from the camera centres between the ``p0`` and
    ``p1`` quantiles of each axis (all centres when there are at most three).
    Registered poses and all tracks are transformed in place; the applied
    transform is returned.
    """
    centers = [image.center() for image in images.values() if image.is_registered]
    if not centers:
        raise ValueError("no registered images to normalize")

    coords = np.sort(np.asarray(centers, dtype=np.float32), axis=0).astype(float)
    count = coords.shape[0]
    if count > 3:
        lo = int(p0 * (count - 1))
        hi = int(p1 * (count - 1))
    else:
        lo, hi = 0, count - 1

    bbox_min = coords[lo]
    bbox_max = coords[hi]
    mean_coord = coords[lo : hi + 1].sum(axis=0) / (hi - lo + 1)

    scale = 1.0
    if not fixed_scale:
        old_extent = float(np.linalg.norm(bbox_max - bbox_min))
        if old_extent >= np.finfo(float).eps:
            scale = extent / old_extent

    tform = Sim3d(scale, np.eye(3), -scale * mean_coord)

    for image in images.values():
        if image.is_registered:
            image.cam_from_world = transform_camera_world(tform, image.cam_from_world)

    for track in tracks.values():
        track.xyz = tform.apply(track.xyz)

    return tform