import numpy as np

from glomap.image import GravityInfo, Image, Track
from glomap.rigid3d import Rigid3d, angle_axis_to_rotation


def test_center_maps_to_camera_origin():
    pose = Rigid3d(angle_axis_to_rotation([0.1, -0.3, 0.2]), [1.0, 2.0, -3.0])
    image = Image(1, 1, "a.jpg", cam_from_world=pose)
    assert np.allclose(pose.apply(image.center()), np.zeros(3))


def test_center_of_identity_pose_is_origin():
    assert np.allclose(Image(2, 1, "b.jpg").center(), np.zeros(3))


def test_set_gravity_aligns_second_column():
    info = GravityInfo()
    g = np.array([0.2, 1.5, -0.3])
    info.set_gravity(g)
    assert info.has_gravity
    assert np.allclose(info.gravity, g)
    assert np.allclose(info.r_align[:, 1], g / np.linalg.norm(g))
    assert np.allclose(info.r_align.T @ info.r_align, np.eye(3))
    assert np.linalg.det(info.r_align) > 0


def test_image_defaults():
    image = Image(3, 4, "c.jpg")
    assert image.cluster_id == -1
    assert image.is_registered is False
    assert image.features == [] and image.features_undist == []
    assert image.gravity_info.has_gravity is False


def test_track_defaults_are_independent():
    first = Track()
    second = Track()
    first.observations.append((1, 2))
    assert second.observations == []
    assert np.allclose(first.xyz, np.zeros(3))
    assert first.is_initialized is False