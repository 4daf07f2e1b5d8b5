"""Session controller tying state, camera, client and image lifetimes together."""

import sys
from concurrent.futures import Executor, Future
from typing import Optional, Tuple

import numpy as np

from .config import AppConfig
from .core.camera import Camera
from .core.io import ImageSource, select_file
from .core.utils import render_preview
from .detection.base import Identifier
from .detection.client import InferenceClient, InferenceError
from . import state as transitions
from .state import AppState


class App:
    """Holds one AppState and applies user actions to it.

    The app owns the current ImageSource: replacing it releases the old one,
    and ``close`` releases whatever is left along with the camera.
    """

    def __init__(self, identifier: Identifier, camera: Optional[Camera] = None):
        """Initialize the app.

        Args:
            identifier: Backend used by ``identify``.
            camera: Camera to drive; a default one is created if omitted.
        """
        self.identifier = identifier
        self.camera = camera or Camera()
        self.state = AppState(camera=self.camera.state)
        self.last_error: Optional[InferenceError] = None

    @classmethod
    def from_config(cls, config: AppConfig) -> "App":
        """Create App from AppConfig.

        Args:
            config: Session configuration.

        Returns:
            Configured App instance.
        """
        camera = Camera(
            facing=config.camera.facing,
            max_devices=config.camera.max_devices,
            filename=config.camera.filename,
        )
        return cls(InferenceClient.from_config(config.client), camera=camera)

    def _set_image(self, image: Optional[ImageSource]):
        previous = self.state.image
        self.state = transitions.with_image(self.state, image)
        if previous is not None and previous is not image:
            previous.release()

    def _sync_camera(self):
        self.state = transitions.with_camera(self.state, self.camera.state)

    def select_file(self, path: str) -> ImageSource:
        """Use a file as the current image.

        Args:
            path: Path to any file.

        Returns:
            The new ImageSource.
        """
        image = select_file(path)
        self._set_image(image)
        return image

    def start_camera(self, facing: Optional[str] = None) -> AppState:
        """Open the live feed for the given (or stored) facing preference."""
        self.camera.start(facing)
        self._sync_camera()
        return self.state

    def toggle_facing(self) -> AppState:
        """Switch between front and back cameras."""
        self.camera.toggle_facing()
        self._sync_camera()
        return self.state

    def capture_frame(self) -> Optional[ImageSource]:
        """Turn the current live frame into the current image.

        Returns:
            The captured ImageSource, or None if nothing was captured.
        """
        image = self.camera.capture_frame()
        self._sync_camera()
        if image is not None:
            self._set_image(image)
        return image

    def identify(self) -> AppState:
        """Send the current image to the backend and apply the result.

        Does nothing when there is no image. Failures are reported on stderr,
        kept in ``last_error``, and leave the previous detections in place.

        Returns:
            Updated state.
        """
        generation = self.begin_identify()
        if generation is None:
            return self.state

        detections = None
        try:
            detections = self.identifier.identify(self.state.image)
        except InferenceError as e:
            self._report(generation, e)
        finally:
            self.finish_identify(generation, detections)
        return self.state

    def submit_identify(self, executor: Executor) -> Optional[Tuple[int, Future]]:
        """Start ``identify`` on an executor without blocking.

        Pass the returned pair to ``complete_identify`` once the future is
        done.

        Args:
            executor: Executor running the request.

        Returns:
            (generation, future), or None when there is no image.
        """
        generation = self.begin_identify()
        if generation is None:
            return None
        return generation, executor.submit(self.identifier.identify, self.state.image)

    def complete_identify(self, generation: int, future: Future) -> AppState:
        """Apply a finished request started by ``submit_identify``."""
        detections = None
        try:
            detections = future.result()
        except InferenceError as e:
            self._report(generation, e)
        finally:
            self.finish_identify(generation, detections)
        return self.state

    def begin_identify(self) -> Optional[int]:
        """Mark a request in flight.

        Returns:
            Generation token of the new request, or None when there is no
            image to send.
        """
        image = self.state.image
        if image is None or image.is_empty:
            return None
        self.state = transitions.begin_inference(self.state)
        self.last_error = None
        return self.state.generation

    def _report(self, generation: int, error: InferenceError):
        print(str(error), file=sys.stderr)
        if generation == self.state.generation:
            self.last_error = error

    def finish_identify(self, generation: int, detections=None) -> AppState:
        """Apply detections (None on failure) for request ``generation``.

        Results of superseded requests are dropped.
        """
        self.state = transitions.finish_inference(self.state, generation, detections)
        return self.state

    def toggle_selection(self, label: str) -> AppState:
        """Show or hide the mask of the first detection with ``label``."""
        self.state = transitions.toggle_selection(self.state, label)
        return self.state

    @property
    def most_likely_label(self) -> Optional[str]:
        """Label of the highest-scoring detection, or None."""
        return self.state.most_likely_label

    def render(self) -> Optional[np.ndarray]:
        """Render the preview for the current state.

        Returns:
            RGB image, or None if no displayable image is selected.
        """
        image = self.state.image
        base = image.to_array() if image is not None else None
        try:
            return render_preview(base, self.state.selection)
        except ValueError as e:
            print(f"Cannot overlay mask of {self.state.selection.label!r}: {e}", file=sys.stderr)
            return base

    def close(self):
        """Release the camera, the current image and the client session."""
        self.camera.stop()
        self._sync_camera()
        self._set_image(None)
        close = getattr(self.identifier, "close", None)
        if close is not None:
            close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
