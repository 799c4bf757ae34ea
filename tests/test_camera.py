import numpy as np
import pytest

from glomap.camera import Camera, CameraModel


def test_get_k_pinhole_uses_params():
    cam = Camera(CameraModel.PINHOLE, [500.0, 600.0, 320.0, 240.0])
    expected = np.array([[500.0, 0.0, 320.0], [0.0, 600.0, 240.0], [0.0, 0.0, 1.0]])
    assert np.allclose(cam.get_k(), expected)


def test_focal_is_mean_of_focal_lengths():
    cam = Camera(CameraModel.PINHOLE, [500.0, 600.0, 320.0, 240.0])
    assert cam.focal() == pytest.approx(550.0)


def test_simple_pinhole_single_focal():
    cam = Camera(CameraModel.SIMPLE_PINHOLE, [700.0, 100.0, 50.0])
    assert cam.focal_length_x() == cam.focal_length_y() == 700.0
    assert np.allclose(cam.principal_point(), [100.0, 50.0])


def test_principal_point_maps_to_origin():
    cam = Camera(CameraModel.SIMPLE_RADIAL, [500.0, 320.0, 240.0, 0.05])
    assert np.allclose(cam.cam_from_img([320.0, 240.0]), [0.0, 0.0])


@pytest.mark.parametrize(
    "model, params",
    [
        (CameraModel.SIMPLE_PINHOLE, [500.0, 320.0, 240.0]),
        (CameraModel.PINHOLE, [500.0, 520.0, 320.0, 240.0]),
        (CameraModel.SIMPLE_RADIAL, [500.0, 320.0, 240.0, 0.1]),
        (CameraModel.RADIAL, [500.0, 320.0, 240.0, 0.1, -0.02]),
        (CameraModel.OPENCV, [500.0, 510.0, 320.0, 240.0, 0.1, -0.02, 0.001, 0.002]),
    ],
)
def test_projection_round_trip(model, params):
    cam = Camera(model, params)
    point = np.array([0.2, -0.1])
    pixel = cam.img_from_cam(point)
    assert np.allclose(cam.cam_from_img(pixel), point, atol=1e-8)


def test_distortion_changes_pixel_position():
    plain = Camera(CameraModel.SIMPLE_PINHOLE, [500.0, 320.0, 240.0])
    radial = Camera(CameraModel.SIMPLE_RADIAL, [500.0, 320.0, 240.0, 0.1])
    point = [0.3, 0.2]
    assert not np.allclose(plain.img_from_cam(point), radial.img_from_cam(point))


def test_wrong_param_count_raises():
    with pytest.raises(ValueError):
        Camera(CameraModel.PINHOLE, [500.0, 320.0, 240.0])


def test_wrong_point_shape_raises():
    cam = Camera(CameraModel.SIMPLE_PINHOLE, [500.0, 320.0, 240.0])
    with pytest.raises(ValueError):
        cam.img_from_cam([1.0, 2.0, 3.0])