"""Application state and its transitions.

All transitions are pure: they take an AppState and return a new one.
Side effects (network, camera, preview files) live in ``app.App``.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Sequence, Tuple

from .core.camera import CameraState
from .core.io import ImageSource
from .detection.base import DetectedObject


@dataclass(frozen=True)
class AppState:
    """Snapshot of everything the UI shows.

    Attributes:
        image: Currently chosen image, if any.
        detections: Detections from the latest applied inference result.
        selection: Detection whose mask is shown, by identity.
        busy: Whether the latest inference request is in flight.
        camera: Live camera state.
        generation: Token of the most recently started inference request.
    """

    image: Optional[ImageSource] = None
    detections: Tuple[DetectedObject, ...] = ()
    selection: Optional[DetectedObject] = None
    busy: bool = False
    camera: CameraState = field(default_factory=CameraState)
    generation: int = 0

    @property
    def most_likely_label(self) -> Optional[str]:
        """Label of the highest-scoring detection, or None."""
        best = most_likely(self.detections)
        return best.label if best is not None else None


def most_likely(detections: Sequence[DetectedObject]) -> Optional[DetectedObject]:
    """Return the detection with the highest score.

    Ties keep the earliest detection.

    Args:
        detections: Detections in backend order.

    Returns:
        Highest-scoring detection, or None if the list is empty.
    """
    best = None
    for detection in detections:
        if best is None or detection.score > best.score:
            best = detection
    return best


def with_image(state: AppState, image: Optional[ImageSource]) -> AppState:
    """Replace the current image."""
    return replace(state, image=image)


def with_camera(state: AppState, camera: CameraState) -> AppState:
    """Replace the camera state."""
    return replace(state, camera=camera)


def with_detections(state: AppState, detections: Iterable[DetectedObject]) -> AppState:
    """Replace the detection list, dropping a selection not in the new list.

    Args:
        state: Current state.
        detections: New detections.

    Returns:
        New state.
    """
    detections = tuple(detections)
    selection = state.selection
    if not any(d is selection for d in detections):
        selection = None
    return replace(state, detections=detections, selection=selection)


def begin_inference(state: AppState) -> AppState:
    """Mark a new request in flight and bump the generation token."""
    return replace(state, busy=True, generation=state.generation + 1)


def finish_inference(
    state: AppState,
    generation: int,
    detections: Optional[Sequence[DetectedObject]],
) -> AppState:
    """Apply the outcome of an inference request.

    Results from a request older than the latest one are ignored.

    Args:
        state: Current state.
        generation: Token returned when the request began.
        detections: Detections on success, None on failure.

    Returns:
        New state.
    """
    if generation != state.generation:
        return state
    state = replace(state, busy=False)
    if detections is None:
        return state
    return with_detections(state, detections)


def toggle_selection(state: AppState, label: str) -> AppState:
    """Show the first detection with ``label``, or hide it if already shown.

    Args:
        state: Current state.
        label: Label of the button pressed.

    Returns:
        New state.
    """
    found = next((d for d in state.detections if d.label == label), None)
    selection = None if found is state.selection else found
    return replace(state, selection=selection)
