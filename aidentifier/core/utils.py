"""Mask compositing and result text formatting."""

import base64
import binascii
import io
import math
from typing import Optional, Tuple

import cv2
import numpy as np
from PIL import Image

from ..detection.base import DetectedObject


PLACEHOLDER_TEXT = "No image uploaded"


def decode_mask(mask: str) -> np.ndarray:
    """Decode a base64 mask image to a grayscale array.

    Args:
        mask: Base64-encoded image bytes (PNG from the backend).

    Returns:
        2D uint8 array.

    Raises:
        ValueError: If the mask is not valid base64 or not an image.
    """
    try:
        raw = base64.b64decode(mask, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Mask is not valid base64: {e}") from e
    try:
        with Image.open(io.BytesIO(raw)) as img:
            return np.array(img.convert("L"))
    except OSError as e:
        raise ValueError(f"Mask is not a readable image: {e}") from e


def screen_blend(base: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    """Screen-blend two images: 1 - (1 - base) * (1 - overlay).

    Args:
        base: Bottom image (uint8).
        overlay: Top image (uint8), same shape as base.

    Returns:
        Blended image as uint8 array.

    Raises:
        ValueError: If image shapes don't match.
    """
    if base.shape != overlay.shape:
        raise ValueError(f"Shape mismatch: {base.shape} vs {overlay.shape}")

    a = base.astype(np.float32) / 255.0
    b = overlay.astype(np.float32) / 255.0
    blended = 1.0 - (1.0 - a) * (1.0 - b)
    return np.clip(np.rint(blended * 255.0), 0, 255).astype(np.uint8)


def composite_mask(image: np.ndarray, mask: str) -> np.ndarray:
    """Overlay an inverted mask on an image with a screen blend.

    Masked (white) regions keep the photo; everything else washes out.

    Args:
        image: RGB image.
        mask: Base64-encoded mask.

    Returns:
        Composited RGB image.
    """
    height, width = image.shape[:2]
    gray = decode_mask(mask)
    if gray.shape != (height, width):
        gray = cv2.resize(gray, (width, height), interpolation=cv2.INTER_NEAREST)
    inverted = 255 - gray
    overlay = np.repeat(inverted[:, :, np.newaxis], 3, axis=2)
    return screen_blend(image, overlay)


def placeholder_image(size: Tuple[int, int] = (320, 320)) -> np.ndarray:
    """Dark panel with the "No image uploaded" caption.

    Args:
        size: (width, height) of the panel.

    Returns:
        RGB image.
    """
    width, height = size
    panel = np.full((height, width, 3), (31, 41, 55), dtype=np.uint8)
    font = cv2.FONT_HERSHEY_SIMPLEX
    (text_w, text_h), _ = cv2.getTextSize(PLACEHOLDER_TEXT, font, 0.5, 1)
    origin = ((width - text_w) // 2, (height + text_h) // 2)
    cv2.putText(panel, PLACEHOLDER_TEXT, origin, font, 0.5, (107, 114, 128), 1, cv2.LINE_AA)
    return panel


def render_preview(
    image: Optional[np.ndarray], selection: Optional[DetectedObject]
) -> Optional[np.ndarray]:
    """Render the preview: base image plus the selected mask, if any.

    Args:
        image: Decoded base image, or None.
        selection: Detection whose mask is shown.

    Returns:
        RGB image, or None when there is no base image.
    """
    if image is None:
        return None
    if selection is None:
        return image
    return composite_mask(image, selection.mask)


def percent(score: float) -> int:
    """Score as a whole percentage, rounding halves up."""
    return int(math.floor(score * 100 + 0.5))


def format_detection(detection: DetectedObject) -> str:
    """Button caption for a detection, e.g. "cat - 92%"."""
    return f"{detection.label} - {percent(detection.score)}%"


def format_summary(label: str) -> str:
    """Sentence naming the most likely object."""
    return f"The object detected is likely a {label}."


def go_caption(busy: bool) -> str:
    """Caption of the identify trigger."""
    return "Analyzing..." if busy else "Go!"


def camera_toggle_caption(facing: str) -> str:
    """Caption of the camera switch, naming the camera it switches to."""
    return f"Switch to {'Rear' if facing == 'front' else 'Front'} Camera"
