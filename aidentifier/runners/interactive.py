"""OpenCV window runner with keyboard controls."""

import threading
from concurrent.futures import Executor, Future
from typing import List, Tuple

import cv2
import numpy as np

from ..app import App
from ..config import AppConfig
from ..core.utils import (
    camera_toggle_caption,
    format_detection,
    format_summary,
    go_caption,
    placeholder_image,
)

PREVIEW_SIZE = (320, 320)
PANEL_WIDTH = 360
LINE_HEIGHT = 22

BACKGROUND = (17, 24, 39)
TEXT = (255, 255, 255)
MUTED = (156, 163, 175)
HIGHLIGHT = (37, 99, 235)

SELECT_KEYS = {ord(str(n)): n - 1 for n in range(1, 10)}


class DaemonExecutor(Executor):
    """Runs each call on its own daemon thread.

    Quitting never waits for an in-flight request.
    """

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future = Future()

        def run():
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(fn(*args, **kwargs))
            except BaseException as e:
                future.set_exception(e)

        threading.Thread(target=run, daemon=True).start()
        return future


def fit_preview(image: np.ndarray, size=PREVIEW_SIZE) -> np.ndarray:
    """Letterbox an RGB image into the preview box.

    Args:
        image: RGB image.
        size: (width, height) of the box.

    Returns:
        RGB image of exactly ``size``.
    """
    width, height = size
    h, w = image.shape[:2]
    scale = min(width / w, height / h)
    new_w, new_h = max(1, int(w * scale)), max(1, int(h * scale))
    resized = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)
    box = np.full((height, width, 3), (31, 41, 55), dtype=np.uint8)
    x, y = (width - new_w) // 2, (height - new_h) // 2
    box[y:y + new_h, x:x + new_w] = resized
    return box


def text_lines(app: App) -> List[Tuple[str, tuple]]:
    """Caption lines shown beside the preview, with their colors."""
    state = app.state
    lines = [
        ("[c] Capture with Camera", TEXT),
        (f"[f] {camera_toggle_caption(state.camera.facing)}", TEXT),
    ]
    if state.camera.active:
        lines.append(("[space] Capture Image", TEXT))
    if state.image is not None:
        lines.append((f"[g] {go_caption(state.busy)}", MUTED if state.busy else TEXT))
    if state.detections:
        lines.append(("", TEXT))
        lines.append(("Identified objects:", TEXT))
        for n, detection in enumerate(state.detections[:9], start=1):
            color = HIGHLIGHT if detection is state.selection else MUTED
            lines.append((f"[{n}] {format_detection(detection)}", color))
        lines.append(("", TEXT))
        lines.append((format_summary(state.most_likely_label), TEXT))
    lines.append(("[q] Quit", MUTED))
    return lines


def compose_window(app: App, preview: np.ndarray) -> np.ndarray:
    """Build the BGR window image: preview on the left, controls on the right."""
    height = PREVIEW_SIZE[1]
    panel = np.full((height, PANEL_WIDTH, 3), BACKGROUND, dtype=np.uint8)
    for row, (text, color) in enumerate(text_lines(app)):
        y = 20 + row * LINE_HEIGHT
        if y > height:
            break
        cv2.putText(panel, text, (10, y), cv2.FONT_HERSHEY_SIMPLEX, 0.45, color, 1, cv2.LINE_AA)
    frame = np.hstack([fit_preview(preview), panel])
    return cv2.cvtColor(frame, cv2.COLOR_RGB2BGR)


def current_preview(app: App) -> np.ndarray:
    """Live frame while the camera is on, otherwise the rendered result."""
    if app.state.camera.active:
        ret, frame = app.camera.read_frame()
        if ret:
            return frame
        return placeholder_image(PREVIEW_SIZE)
    rendered = app.render()
    return rendered if rendered is not None else placeholder_image(PREVIEW_SIZE)


def run_interactive(config: AppConfig) -> None:
    """Run the windowed UI until the user quits.

    Inference runs on a worker thread so the window stays responsive;
    superseded requests are discarded when they complete.

    Args:
        config: Session configuration.
    """
    window = config.display.window_name
    pending: List[Tuple[int, Future]] = []

    executor = DaemonExecutor()
    with App.from_config(config) as app:
        if config.input_path:
            app.select_file(config.input_path)
        elif config.camera.enabled:
            app.start_camera(config.camera.facing)

        cv2.namedWindow(window)
        try:
            while True:
                for item in [p for p in pending if p[1].done()]:
                    pending.remove(item)
                    app.complete_identify(*item)

                cv2.imshow(window, compose_window(app, current_preview(app)))
                key = cv2.waitKey(30) & 0xFF

                if key in (ord("q"), 27):
                    break
                elif key == ord("c"):
                    app.start_camera()
                elif key == ord("f"):
                    app.toggle_facing()
                elif key == ord(" ") and app.state.camera.active:
                    app.capture_frame()
                elif key == ord("g") and not app.state.busy:
                    submitted = app.submit_identify(executor)
                    if submitted is not None:
                        pending.append(submitted)
                elif key in SELECT_KEYS:
                    index = SELECT_KEYS[key]
                    if index < len(app.state.detections):
                        app.toggle_selection(app.state.detections[index].label)
        finally:
            cv2.destroyWindow(window)
