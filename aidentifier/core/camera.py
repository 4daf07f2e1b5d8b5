"""Camera discovery, acquisition and frame capture."""

import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import cv2
import numpy as np

from .io import ImageSource


SYSFS_VIDEO_DIR = Path("/sys/class/video4linux")


@dataclass(frozen=True)
class VideoDevice:
    """A video input device.

    Attributes:
        device_id: Stable identifier (device node path or index string).
        index: OpenCV capture index.
        label: Human-readable device name.
    """

    device_id: str
    index: int
    label: str


@dataclass(frozen=True)
class CameraState:
    """Live camera state.

    Attributes:
        active: Whether the live feed has been requested.
        facing: Requested logical camera, "front" or "back".
        device_id: Device chosen by the last start, None for platform default.
    """

    active: bool = False
    facing: str = "front"
    device_id: Optional[str] = None


def _sysfs_devices(sysfs_dir: Path) -> List[VideoDevice]:
    devices = []
    for node in sorted(sysfs_dir.glob("video*")):
        suffix = node.name[len("video"):]
        if not suffix.isdigit():
            continue
        name_file = node / "name"
        label = name_file.read_text().strip() if name_file.exists() else node.name
        devices.append(VideoDevice(f"/dev/{node.name}", int(suffix), label))
    return sorted(devices, key=lambda d: d.index)


def _probe_devices(max_devices: int) -> List[VideoDevice]:
    devices = []
    for index in range(max_devices):
        cap = cv2.VideoCapture(index)
        try:
            if cap.isOpened():
                devices.append(VideoDevice(str(index), index, f"Camera {index}"))
        finally:
            cap.release()
    return devices


def enumerate_video_devices(
    max_devices: int = 10, sysfs_dir: Path = SYSFS_VIDEO_DIR
) -> List[VideoDevice]:
    """List available video input devices.

    Labels come from video4linux where available; otherwise capture indices
    are probed with OpenCV and given generic labels.

    Args:
        max_devices: Maximum number of indices to probe.
        sysfs_dir: video4linux class directory.

    Returns:
        Devices ordered by capture index.
    """
    if sysfs_dir.is_dir():
        devices = _sysfs_devices(sysfs_dir)
        if devices:
            return devices
    return _probe_devices(max_devices)


def select_device(devices: List[VideoDevice], facing: str) -> Optional[VideoDevice]:
    """Pick the first device whose label mentions the facing preference.

    Matching is a case-insensitive substring test on the label, which is a
    heuristic: labels vary by platform and locale.

    Args:
        devices: Candidate devices.
        facing: "front" or "back".

    Returns:
        Matching device, or None to use the platform default.
    """
    matches = matching_devices(devices, facing)
    return matches[0] if matches else None


def matching_devices(devices: List[VideoDevice], facing: str) -> List[VideoDevice]:
    """All devices whose label mentions the facing preference, in order."""
    wanted = facing.lower()
    return [device for device in devices if wanted in device.label.lower()]


class Camera:
    """Live camera feed that can be switched between front and back."""

    def __init__(
        self,
        facing: str = "front",
        max_devices: int = 10,
        filename: str = "captured_image.png",
        enumerate_devices: Callable[[int], List[VideoDevice]] = enumerate_video_devices,
    ):
        """Initialize the camera in the inactive state.

        Args:
            facing: Initial facing preference.
            max_devices: Maximum number of devices to probe.
            filename: Filename given to captured images.
            enumerate_devices: Device enumeration function.
        """
        self.state = CameraState(facing=facing)
        self.max_devices = max_devices
        self.filename = filename
        self._enumerate_devices = enumerate_devices
        self._cap = None

    @property
    def is_open(self) -> bool:
        """True if a capture handle is currently open."""
        return self._cap is not None

    def start(self, facing: Optional[str] = None) -> CameraState:
        """Acquire a camera matching the facing preference.

        The state is marked active before acquisition and stays active if
        acquisition fails; the failure is only reported on stderr.

        Args:
            facing: Facing preference; defaults to the stored one.

        Returns:
            Updated camera state.
        """
        if facing is not None:
            self.state = replace(self.state, facing=facing)
        self.state = replace(self.state, active=True)
        self._release()

        try:
            devices = self._enumerate_devices(self.max_devices)
            # Metadata nodes often share the camera's name but cannot stream
            for device in matching_devices(devices, self.state.facing):
                cap = self._open(device.index)
                if cap is not None:
                    self._cap = cap
                    self.state = replace(self.state, device_id=device.device_id)
                    return self.state

            self.state = replace(self.state, device_id=None)
            cap = self._open(0)
            if cap is None:
                raise IOError("Cannot open camera: 0")
            self._cap = cap
        except Exception as e:
            print(f"Error accessing camera: {e}", file=sys.stderr)

        return self.state

    @staticmethod
    def _open(index: int):
        cap = cv2.VideoCapture(index)
        if cap.isOpened():
            return cap
        cap.release()
        return None

    def toggle_facing(self) -> CameraState:
        """Flip between front and back and restart acquisition.

        Returns:
            Updated camera state.
        """
        facing = "back" if self.state.facing == "front" else "front"
        return self.start(facing)

    def read_frame(self) -> Tuple[bool, Optional[np.ndarray]]:
        """Read the current frame of the live feed.

        Returns:
            Tuple of (success, frame). Frame is RGB numpy array.
        """
        if self._cap is None:
            return False, None
        ret, frame = self._cap.read()
        if not ret or frame is None:
            return False, None
        return True, cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    def capture_frame(self) -> Optional[ImageSource]:
        """Grab the current frame as a PNG image and stop the live feed.

        Returns:
            New ImageSource, or None if no frame could be read.
        """
        image = None
        if self._cap is not None:
            ret, frame = self._cap.read()
            if ret and frame is not None:
                # Native resolution, encoded straight from OpenCV's BGR buffer
                ok, buffer = cv2.imencode(".png", frame)
                if ok:
                    image = ImageSource(buffer.tobytes(), self.filename, "image/png")
        self.stop()
        return image

    def stop(self) -> CameraState:
        """Release the capture handle and deactivate the feed.

        Returns:
            Updated camera state.
        """
        self._release()
        self.state = replace(self.state, active=False)
        return self.state

    def _release(self):
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
