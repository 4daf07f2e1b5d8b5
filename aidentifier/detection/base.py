"""Detection result type and identifier protocol."""

from dataclasses import dataclass
from typing import List, Protocol

from ..core.io import ImageSource


@dataclass(frozen=True, eq=False)
class DetectedObject:
    """One detection returned by the inference backend.

    Instances compare by identity, so an object from one response never
    matches an equal-looking object from another.

    Attributes:
        label: Class label name, used as display key (not unique).
        mask: Base64-encoded mask image.
        score: Confidence score (0.0 to 1.0).
    """

    label: str
    mask: str
    score: float


class Identifier(Protocol):
    """Protocol for anything that turns an image into detections."""

    def identify(self, image: ImageSource) -> List[DetectedObject]:
        """Identify objects in an image.

        Args:
            image: Image to submit.

        Returns:
            List of DetectedObject in backend order.
        """
        ...
