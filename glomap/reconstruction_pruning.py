"""Pruning of images that are only weakly tied to the reconstruction."""

from __future__ import annotations

import logging
from collections import Counter

from glomap.image import Image, Track
from glomap.image_pair import ImagePair, image_pair_to_pair_id, pair_id_to_image_pair
from glomap.view_graph import ViewGraph
from glomap.view_graph_manipulation import (
    StrongClusterCriteria,
    establish_strong_clusters,
)

logger = logging.getLogger(__name__)

# A relative pose is only fixed by at least this many common points.
_MIN_COVISIBLE_POINTS = 5
_MIN_CLUSTER_THRESHOLD = 20.0


def prune_weakly_connected_images(
    images: dict[int, Image],
    tracks: dict[int, Track],
    min_num_images: int = 2,
    min_num_observations: int = 0,
) -> int:
    """Cluster images by how many 3D points they share.

    Only tracks with more than two observations count. Pairs sharing at least
    five points, whose images each have ``min_num_observations`` observations,
    form a visibility graph that is split into strong clusters; the cluster
    threshold is the median pair count minus its median absolute deviation,
    but at least 20. Returns the number of clusters.
    """
    pair_covisibility: Counter[int] = Counter()
    image_observations: Counter[int] = Counter()
    for track in tracks.values():
        observations = track.observations
        if len(observations) <= 2:
            continue
        for i, (image_id1, _) in enumerate(observations):
            image_observations[image_id1] += 1
            for image_id2, _ in observations[i + 1 :]:
                if image_id1 == image_id2:
                    continue
                pair_covisibility[image_pair_to_pair_id(image_id1, image_id2)] += 1

    visibility_graph = ViewGraph()
    pair_counts: list[int] = []
    counter = 0
    for pair_id, count in pair_covisibility.items():
        if count < _MIN_COVISIBLE_POINTS:
            continue
        counter += 1
        image_id1, image_id2 = pair_id_to_image_pair(pair_id)
        if (
            image_observations[image_id1] < min_num_observations
            or image_observations[image_id2] < min_num_observations
        ):
            continue
        pair = ImagePair(image_id1, image_id2)
        pair.is_valid = True
        pair.weight = count
        visibility_graph.image_pairs[pair_id] = pair
        pair_counts.append(count)
    logger.info("Established visibility graph with %d pairs", counter)

    if not pair_counts:
        raise ValueError("no image pairs share enough points to build clusters")

    pair_counts.sort()
    median_count = float(pair_counts[len(pair_counts) // 2])
    deviations = sorted(abs(count - median_count) for count in pair_counts)
    median_deviation = deviations[len(deviations) // 2]

    logger.info(
        "Threshold for Strong Clustering: %s", median_count - median_deviation
    )
    return establish_strong_clusters(
        visibility_graph,
        images,
        StrongClusterCriteria.WEIGHT,
        max(median_count - median_deviation, _MIN_CLUSTER_THRESHOLD),
        min_num_images,
    )