import numpy as np
import pytest

from glomap.gravity_io import read_gravity
from glomap.image import Image


def _images():
    return {
        1: Image(image_id=1, camera_id=1, file_name="a.jpg"),
        2: Image(image_id=2, camera_id=1, file_name="b.jpg"),
    }


def test_reads_gravity_and_aligns_rotation(tmp_path):
    path = tmp_path / "gravity.txt"
    path.write_text("a.jpg 0.1 0.9 -0.2\nunknown.jpg 0 1 0\n")
    images = _images()
    assert read_gravity(path, images) == 1

    image = images[1]
    assert image.gravity_info.has_gravity
    np.testing.assert_allclose(image.gravity_info.gravity, [0.1, 0.9, -0.2])
    rotation = image.cam_from_world.rotation
    np.testing.assert_allclose(rotation, image.gravity_info.r_align.T)
    g = np.array([0.1, 0.9, -0.2])
    np.testing.assert_allclose(rotation @ (g / np.linalg.norm(g)), [0.0, 1.0, 0.0], atol=1e-12)
    assert np.linalg.det(rotation) == pytest.approx(1.0)
    assert not images[2].gravity_info.has_gravity


def test_blank_lines_skipped(tmp_path):
    path = tmp_path / "gravity.txt"
    path.write_text("a.jpg 0 1 0\n\nb.jpg 0 1 0\n")
    images = _images()
    assert read_gravity(path, images) == 2
    assert images[2].gravity_info.has_gravity


def test_bad_number_raises(tmp_path):
    path = tmp_path / "gravity.txt"
    path.write_text("a.jpg 0 up 0\n")
    with pytest.raises(ValueError):
        read_gravity(path, _images())


def test_short_line_raises(tmp_path):
    path = tmp_path / "gravity.txt"
    path.write_text("a.jpg 0 1\n")
    with pytest.raises(ValueError):
        read_gravity(path, _images())


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_gravity(tmp_path / "missing.txt", _images())