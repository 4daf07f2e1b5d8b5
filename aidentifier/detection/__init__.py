"""Detection types and the inference backend client."""

from .base import DetectedObject, Identifier
from .client import InferenceClient, InferenceError, parse_detections

__all__ = [
    "DetectedObject",
    "Identifier",
    "InferenceClient",
    "InferenceError",
    "parse_detections",
]
