"""Headless one-shot runner."""

import sys

import numpy as np
from PIL import Image

from ..app import App
from ..config import AppConfig
from ..core.utils import format_detection, format_summary
from ..state import AppState


def save_image(path: str, image: np.ndarray) -> None:
    """Write an RGB array to an image file.

    Args:
        path: Output path; format follows the extension.
        image: RGB numpy array.
    """
    Image.fromarray(image).save(path)


def print_results(state: AppState) -> None:
    """Print detections and the most likely label.

    Args:
        state: State after identification.
    """
    if not state.detections:
        print("No objects identified.")
        return

    print("Identified objects:")
    for detection in state.detections:
        marker = "*" if detection is state.selection else " "
        print(f" {marker} {format_detection(detection)}")
    print(format_summary(state.most_likely_label))


def run_headless(config: AppConfig) -> None:
    """Acquire one image, identify it and report the result.

    Args:
        config: Session configuration.

    Raises:
        SystemExit: If no image could be acquired or identification failed.
    """
    with App.from_config(config) as app:
        if config.camera.enabled:
            print(f"Starting {config.camera.facing} camera...")
            app.start_camera(config.camera.facing)
            if app.state.camera.device_id:
                print(f"Using camera: {app.state.camera.device_id}")
            if app.capture_frame() is None:
                print("Failed to capture image", file=sys.stderr)
                sys.exit(1)
        elif config.input_path:
            app.select_file(config.input_path)

        image = app.state.image
        if image is None:
            print("No image uploaded", file=sys.stderr)
            sys.exit(1)

        print(f"Analyzing {image.filename} via {config.client.api_url}...")
        app.identify()
        if app.last_error is not None:
            sys.exit(1)

        if config.display.select:
            app.toggle_selection(config.display.select)
            if app.state.selection is None:
                print(f"No detection labelled {config.display.select!r}", file=sys.stderr)

        print_results(app.state)

        if config.display.output_path:
            rendered = app.render()
            if rendered is None:
                print(f"Cannot preview {image.filename}; nothing written", file=sys.stderr)
            else:
                save_image(config.display.output_path, rendered)
                print(f"Preview saved to: {config.display.output_path}")
