from unittest.mock import MagicMock, patch

import numpy as np

from aidentifier.core.camera import (
    Camera,
    VideoDevice,
    enumerate_video_devices,
    select_device,
)

DEVICES = [
    VideoDevice("/dev/video0", 0, "Integrated Webcam"),
    VideoDevice("/dev/video2", 2, "Back Camera (USB)"),
    VideoDevice("/dev/video4", 4, "FRONT camera"),
]


def fake_capture(frame=None, opened=True):
    cap = MagicMock()
    cap.isOpened.return_value = opened
    cap.read.return_value = (frame is not None, frame)
    return cap


def test_select_device_case_insensitive():
    assert select_device(DEVICES, "back").device_id == "/dev/video2"
    assert select_device(DEVICES, "front").device_id == "/dev/video4"


def test_select_device_no_match():
    assert select_device(DEVICES[:1], "back") is None


def test_enumerate_from_sysfs(tmp_path):
    for name, label in [("video2", "Rear Cam"), ("video0", "Front Cam"), ("vbi0", "x")]:
        (tmp_path / name).mkdir()
        (tmp_path / name / "name").write_text(label + "\n")

    devices = enumerate_video_devices(sysfs_dir=tmp_path)

    assert [d.index for d in devices] == [0, 2]
    assert devices[0] == VideoDevice("/dev/video0", 0, "Front Cam")


@patch("aidentifier.core.camera.cv2.VideoCapture")
def test_enumerate_probes_without_sysfs(mock_capture, tmp_path):
    mock_capture.side_effect = lambda index: fake_capture(opened=index == 1)

    devices = enumerate_video_devices(max_devices=3, sysfs_dir=tmp_path / "missing")

    assert devices == [VideoDevice("1", 1, "Camera 1")]


@patch("aidentifier.core.camera.cv2.VideoCapture")
def test_start_opens_matching_device(mock_capture):
    mock_capture.return_value = fake_capture()
    camera = Camera(facing="back", enumerate_devices=lambda n: DEVICES)

    state = camera.start()

    mock_capture.assert_called_once_with(2)
    assert state.active
    assert state.device_id == "/dev/video2"
    assert camera.is_open


@patch("aidentifier.core.camera.cv2.VideoCapture")
def test_start_falls_back_to_default(mock_capture):
    mock_capture.return_value = fake_capture()
    camera = Camera(facing="back", enumerate_devices=lambda n: DEVICES[:1])

    state = camera.start()

    mock_capture.assert_called_once_with(0)
    assert state.device_id is None


@patch("aidentifier.core.camera.cv2.VideoCapture")
def test_start_failure_still_active(mock_capture, capsys):
    mock_capture.return_value = fake_capture(opened=False)
    camera = Camera(enumerate_devices=lambda n: [])

    state = camera.start()

    assert state.active
    assert not camera.is_open
    assert "Error accessing camera" in capsys.readouterr().err


def test_enumeration_failure_still_active(capsys):
    def broken(n):
        raise PermissionError("denied")

    state = Camera(enumerate_devices=broken).start()

    assert state.active
    assert "denied" in capsys.readouterr().err


@patch("aidentifier.core.camera.cv2.VideoCapture")
def test_toggle_facing_restarts(mock_capture):
    first, second = fake_capture(), fake_capture()
    mock_capture.side_effect = [first, second]
    camera = Camera(facing="front", enumerate_devices=lambda n: DEVICES)
    camera.start()

    state = camera.toggle_facing()

    assert state.facing == "back"
    assert state.device_id == "/dev/video2"
    first.release.assert_called_once()
    assert mock_capture.call_count == 2


@patch("aidentifier.core.camera.cv2.VideoCapture")
def test_capture_frame_encodes_png_and_stops(mock_capture):
    frame = np.zeros((6, 10, 3), dtype=np.uint8)
    cap = fake_capture(frame=frame)
    mock_capture.return_value = cap
    camera = Camera(enumerate_devices=lambda n: [])
    camera.start()

    image = camera.capture_frame()

    try:
        assert image.filename == "captured_image.png"
        assert image.content_type == "image/png"
        assert image.data.startswith(b"\x89PNG")
        assert image.to_array().shape == (6, 10, 3)
    finally:
        image.release()
    assert not camera.state.active
    cap.release.assert_called_once()


@patch("aidentifier.core.camera.cv2.VideoCapture")
def test_capture_without_frame_deactivates(mock_capture):
    mock_capture.return_value = fake_capture(frame=None)
    camera = Camera(enumerate_devices=lambda n: [])
    camera.start()

    assert camera.capture_frame() is None
    assert not camera.state.active


def test_capture_when_never_started():
    camera = Camera()
    assert camera.capture_frame() is None
    assert camera.read_frame() == (False, None)


@patch("aidentifier.core.camera.cv2.VideoCapture")
def test_start_skips_matching_device_that_cannot_open(mock_capture):
    devices = [
        VideoDevice("/dev/video2", 2, "Back Camera"),
        VideoDevice("/dev/video3", 3, "Back Camera"),
    ]
    mock_capture.side_effect = lambda index: fake_capture(opened=index == 3)
    camera = Camera(facing="back", enumerate_devices=lambda n: devices)

    state = camera.start()

    assert [c.args[0] for c in mock_capture.call_args_list] == [2, 3]
    assert state.device_id == "/dev/video3"
    assert camera.is_open


@patch("aidentifier.core.camera.cv2.VideoCapture")
def test_start_uses_default_when_no_match_opens(mock_capture):
    mock_capture.side_effect = lambda index: fake_capture(opened=index == 0)
    camera = Camera(facing="back", enumerate_devices=lambda n: DEVICES)

    state = camera.start()

    assert [c.args[0] for c in mock_capture.call_args_list] == [2, 0]
    assert state.device_id is None
    assert camera.is_open
