"""HTTP client for the object-detection backend."""

from typing import Any, List, Optional

import requests

from ..config import ClientConfig
from ..core.io import ImageSource
from .base import DetectedObject


class InferenceError(RuntimeError):
    """Raised when an inference request fails or returns an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def parse_detections(payload: Any) -> List[DetectedObject]:
    """Convert a backend response into detections.

    Args:
        payload: Decoded JSON of the form {"body": [{label, mask, score}, ...]}.

    Returns:
        List of DetectedObject in response order.

    Raises:
        InferenceError: If the payload does not have the expected fields.
    """
    try:
        detections = [
            DetectedObject(
                label=str(item["label"]),
                mask=item["mask"],
                score=float(item["score"]),
            )
            for item in payload["body"]
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise InferenceError(f"Malformed inference response: {e!r}") from e

    for detection in detections:
        if not isinstance(detection.mask, str):
            raise InferenceError(
                f"Malformed inference response: mask of {detection.label!r} is not a string"
            )
    return detections


class InferenceClient:
    """Posts images to the inference endpoint as multipart form data.

    Implements the Identifier protocol.

    Attributes:
        api_url: Endpoint receiving the POST.
        field_name: Multipart field holding the image.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        api_url: str,
        field_name: str = "theImage",
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url
        self.field_name = field_name
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: ClientConfig) -> "InferenceClient":
        """Create InferenceClient from ClientConfig.

        Args:
            config: Client configuration.

        Returns:
            Configured InferenceClient instance.
        """
        return cls(
            api_url=config.api_url,
            field_name=config.field_name,
            timeout=config.timeout,
        )

    def identify(self, image: ImageSource) -> List[DetectedObject]:
        """Submit an image and return the detections.

        Args:
            image: Image to upload.

        Returns:
            List of DetectedObject in backend order.

        Raises:
            InferenceError: On network failure, non-2xx status or bad body.
        """
        files = {self.field_name: (image.filename, image.data, image.content_type)}
        try:
            response = self.session.post(self.api_url, files=files, timeout=self.timeout)
        except requests.RequestException as e:
            raise InferenceError(f"Error occurred during API call: {e}") from e

        if not 200 <= response.status_code < 300:
            raise InferenceError(
                f"Failed to upload file: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise InferenceError(f"Invalid JSON in inference response: {e}") from e

        return parse_detections(payload)

    def close(self):
        """Close the underlying HTTP session."""
        self.session.close()
