"""Inlier classification of image pair matches under their two-view geometry."""

from __future__ import annotations

import math

import numpy as np

from glomap.camera import Camera
from glomap.image import Image
from glomap.image_pair import ImagePair
from glomap.rigid3d import deg_to_rad
from glomap.two_view_geometry import (
    check_cheirality,
    essential_from_motion,
    get_orientation_signum,
    homography_error,
    sampson_error,
)
from glomap.types import EPS, InlierThresholdOptions, TwoViewConfig
from glomap.view_graph import ViewGraph

_HOMOGRAPHY_CONFIGS = (
    TwoViewConfig.PLANAR,
    TwoViewConfig.PANORAMIC,
    TwoViewConfig.PLANAR_OR_PANORAMIC,
)


class ImagePairInliers:
    """Scores the matches of one image pair and records its inliers."""

    def __init__(
        self,
        image_pair: ImagePair,
        images: dict[int, Image],
        options: InlierThresholdOptions,
        cameras: dict[int, Camera] | None = None,
    ) -> None:
        self.image_pair = image_pair
        self.images = images
        self.options = options
        self.cameras = cameras

    def score_error(self) -> float:
        """Score the matches and store the inlier rows in the image pair."""
        config = self.image_pair.config
        if config in _HOMOGRAPHY_CONFIGS:
            return self._score_error_homography()
        if config == TwoViewConfig.UNCALIBRATED:
            return self._score_error_fundamental()
        if config == TwoViewConfig.CALIBRATED:
            return self._score_error_essential()
        return 0.0

    def _match_rows(self):
        for k, (idx1, idx2) in enumerate(np.asarray(self.image_pair.matches)):
            yield k, int(idx1), int(idx2)

    def _score_error_essential(self) -> float:
        if self.cameras is None:
            raise ValueError("cameras are required to score a calibrated pair")
        pair = self.image_pair
        pose = pair.cam2_from_cam1
        essential = essential_from_motion(pose)

        # epipole12 is camera 1 seen in image 2, epipole21 the reverse.
        epipole12 = pose.translation.copy()
        epipole21 = pose.inverse().translation
        if epipole12[2] < 0:
            epipole12 = -epipole12
        if epipole21[2] < 0:
            epipole21 = -epipole21

        pair.inliers.clear()
        image1 = self.images[pair.image_id1]
        image2 = self.images[pair.image_id2]

        # Convert the pixel threshold to normalized image space.
        thres = (
            self.options.max_epipolar_error_E
            * 0.5
            * (
                1.0 / self.cameras[image1.camera_id].focal()
                + 1.0 / self.cameras[image2.camera_id].focal()
            )
        )
        sq_threshold = thres * thres
        thres_angle = 1.0 + 1e-6
        thres_epipole = math.cos(deg_to_rad(3.0)) + 1e-6
        rotation_inv = pose.rotation.T

        score = 0.0
        for k, idx1, idx2 in self._match_rows():
            pt1 = np.asarray(image1.features_undist[idx1], dtype=float)
            pt2 = np.asarray(image2.features_undist[idx2], dtype=float)
            r2 = sampson_error(essential, pt1, pt2)
            if r2 >= sq_threshold:
                score += sq_threshold
                continue

            cheirality = check_cheirality(pose, pt1, pt2, 1e-2, 100.0)
            # Reject rays that are nearly parallel or close to the epipoles.
            not_degenerate = (
                float(pt1 @ (rotation_inv @ pt2)) < thres_angle
                and float(pt1 @ epipole21) < thres_epipole
                and float(pt2 @ epipole12) < thres_epipole
            )
            if cheirality and not_degenerate:
                score += r2
                pair.inliers.append(k)
            else:
                score += sq_threshold
        return score

    def _score_error_fundamental(self) -> float:
        pair = self.image_pair
        pair.inliers.clear()
        fundamental = np.asarray(pair.F, dtype=float)

        epipole = np.cross(fundamental[0], fundamental[2])
        if not np.any(np.abs(epipole) > EPS):
            epipole = np.cross(fundamental[1], fundamental[2])

        image1 = self.images[pair.image_id1]
        image2 = self.images[pair.image_id2]
        thres = self.options.max_epipolar_error_F
        sq_threshold = thres * thres

        score = 0.0
        candidates: list[tuple[int, float, float]] = []
        for k, idx1, idx2 in self._match_rows():
            pt1 = np.asarray(image1.features[idx1], dtype=float)
            pt2 = np.asarray(image2.features[idx2], dtype=float)
            r2 = sampson_error(fundamental, pt1, pt2)
            if r2 < sq_threshold:
                signum = get_orientation_signum(fundamental, epipole, pt1, pt2)
                candidates.append((k, r2, signum))
            else:
                score += sq_threshold

        positive_count = sum(1 for _, _, signum in candidates if signum > 0)
        negative_count = len(candidates) - positive_count
        # Without a dominant orientation the pair cannot be trusted.
        if positive_count == negative_count:
            return 0.0
        is_positive = positive_count > negative_count

        for k, r2, signum in candidates:
            if (signum > 0) == is_positive:
                pair.inliers.append(k)
                score += r2
            else:
                score += sq_threshold
        return score

    def _score_error_homography(self) -> float:
        pair = self.image_pair
        pair.inliers.clear()
        image1 = self.images[pair.image_id1]
        image2 = self.images[pair.image_id2]
        thres = self.options.max_epipolar_error_H
        sq_threshold = thres * thres

        score = 0.0
        for k, idx1, idx2 in self._match_rows():
            r2 = homography_error(pair.H, image1.features[idx1], image2.features[idx2])
            if r2 < sq_threshold:
                score += r2
                pair.inliers.append(k)
            else:
                score += sq_threshold
        return score


def image_pairs_inlier_count(
    view_graph: ViewGraph,
    cameras: dict[int, Camera],
    images: dict[int, Image],
    options: InlierThresholdOptions,
    clean_inliers: bool,
) -> None:
    """Find the inliers of every valid pair.

    Pairs that already have inliers are kept unless ``clean_inliers`` is set.
    """
    for pair in view_graph.image_pairs.values():
        if not clean_inliers and pair.inliers:
            continue
        pair.inliers.clear()
        if not pair.is_valid:
            continue
        ImagePairInliers(pair, images, options, cameras).score_error()