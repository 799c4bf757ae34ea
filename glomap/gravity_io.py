"""Reading per-image gravity directions from a text file."""

from __future__ import annotations

import logging
import os

import numpy as np

from glomap.image import Image

logger = logging.getLogger(__name__)


def read_gravity(gravity_path: str | os.PathLike, images: dict[int, Image]) -> int:
    """Load gravity directions and align the initial rotations with them.

    Each line holds an image name and three numbers, separated by single
    spaces; the gravity is the direction of [0, 1, 0] in the image frame.
    Lines naming unknown images are skipped. Returns the number of images
    that received a gravity.
    """
    name_to_id = {image.file_name: image_id for image_id, image in images.items()}

    counter = 0
    with open(gravity_path, encoding="utf-8") as stream:
        for line_number, raw_line in enumerate(stream, start=1):
            line = raw_line.rstrip("\r\n")
            if not line.strip():
                continue
            parts = line.split(" ")
            if len(parts) < 4:
                raise ValueError(
                    f"{gravity_path}:{line_number}: expected a name and 3 numbers"
                )
            name = parts[0]
            gravity = np.array([float(item) for item in parts[1:4]])

            image_id = name_to_id.get(name)
            if image_id is None:
                continue
            counter += 1
            image = images[image_id]
            image.gravity_info.set_gravity(gravity)
            # Start from a rotation that agrees with the gravity.
            image.cam_from_world.rotation = image.gravity_info.r_align.T.copy()

    logger.info("%d images are loaded with gravity", counter)
    return counter