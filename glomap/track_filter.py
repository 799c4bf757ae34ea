"""Removal of track observations that disagree with the reconstruction."""

from __future__ import annotations

import logging
import math

import numpy as np

from glomap.camera import Camera
from glomap.image import Image, Observation, Track
from glomap.rigid3d import deg_to_rad
from glomap.types import EPS
from glomap.view_graph import ViewGraph

logger = logging.getLogger(__name__)


def _replace_observations(track: Track, kept: list[Observation]) -> bool:
    if len(kept) == len(track.observations):
        return False
    track.observations = kept
    return True


def filter_tracks_by_reprojection(
    view_graph: ViewGraph,
    cameras: dict[int, Camera],
    images: dict[int, Image],
    tracks: dict[int, Track],
    max_reprojection_error: float = 1e-2,
    in_normalized_image: bool = True,
) -> int:
    """Drop observations whose reprojection error reaches the threshold.

    The error is measured between normalized image points, or in pixels when
    ``in_normalized_image`` is false. Points behind the camera are dropped.
    Returns the number of tracks that lost observations.
    """
    counter = 0
    for track in tracks.values():
        kept: list[Observation] = []
        for image_id, feature_id in track.observations:
            image = images[image_id]
            pt_calc = image.cam_from_world.apply(track.xyz)
            if pt_calc[2] < EPS:
                continue

            pt_reproj = pt_calc[:2] / pt_calc[2]
            if in_normalized_image:
                feature = np.asarray(image.features_undist[feature_id], dtype=float)
                error = np.linalg.norm(pt_reproj - feature[:2] / (feature[2] + EPS))
            else:
                pt_dist = cameras[image.camera_id].img_from_cam(pt_reproj)
                feature = np.asarray(image.features[feature_id], dtype=float)
                error = np.linalg.norm(pt_dist - feature)

            if error < max_reprojection_error:
                kept.append((image_id, feature_id))
        if _replace_observations(track, kept):
            counter += 1

    logger.info(
        "Filtered %d / %d tracks by reprojection error", counter, len(tracks)
    )
    return counter


def filter_tracks_by_angle(
    view_graph: ViewGraph,
    cameras: dict[int, Camera],
    images: dict[int, Image],
    tracks: dict[int, Track],
    max_angle_error: float = 1.0,
) -> int:
    """Drop observations whose ray is too far from the direction to the point.

    ``max_angle_error`` is in degrees; cameras without a prior focal length
    get twice the angle. Returns the number of tracks that lost observations.
    """
    thres = math.cos(deg_to_rad(max_angle_error))
    thres_uncalib = math.cos(deg_to_rad(max_angle_error * 2))
    counter = 0
    for track in tracks.values():
        kept: list[Observation] = []
        for image_id, feature_id in track.observations:
            image = images[image_id]
            feature = np.asarray(image.features_undist[feature_id], dtype=float)
            pt_calc = image.cam_from_world.apply(track.xyz)
            if pt_calc[2] < EPS:
                continue
            pt_calc = pt_calc / np.linalg.norm(pt_calc)
            thres_cam = (
                thres if cameras[image.camera_id].has_prior_focal_length else thres_uncalib
            )
            if float(pt_calc @ feature) > thres_cam:
                kept.append((image_id, feature_id))
        if _replace_observations(track, kept):
            counter += 1

    logger.info("Filtered %d / %d tracks by angle error", counter, len(tracks))
    return counter


def filter_track_triangulation_angle(
    view_graph: ViewGraph,
    images: dict[int, Image],
    tracks: dict[int, Track],
    min_angle: float = 1.0,
) -> int:
    """Clear tracks whose viewing rays never span more than ``min_angle``.

    ``min_angle`` is in degrees. Returns the number of tracks cleared.
    """
    thres = math.cos(deg_to_rad(min_angle))
    counter = 0
    for track in tracks.values():
        directions = []
        for image_id, _ in track.observations:
            direction = np.asarray(track.xyz, dtype=float) - images[image_id].center()
            directions.append(direction / np.linalg.norm(direction))

        wide_enough = any(
            float(first @ second) < thres
            for i, first in enumerate(directions)
            for second in directions[i + 1 :]
        )
        if not wide_enough:
            counter += 1
            track.observations.clear()

    logger.info(
        "Filtered %d / %d tracks by too small triangulation angle",
        counter,
        len(tracks),
    )
    return counter