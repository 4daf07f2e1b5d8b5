import threading

import numpy as np
import pytest

from aidentifier.app import App
from aidentifier.detection.base import DetectedObject
from aidentifier.detection.client import InferenceError
from aidentifier.runners.interactive import (
    DaemonExecutor,
    PANEL_WIDTH,
    PREVIEW_SIZE,
    compose_window,
    current_preview,
    fit_preview,
    text_lines,
)


class StaticIdentifier:
    def identify(self, image):
        return [DetectedObject("cat", "", 0.92), DetectedObject("dog", "", 0.91)]


def test_fit_preview_letterboxes():
    out = fit_preview(np.full((10, 20, 3), 200, dtype=np.uint8))
    assert out.shape == (PREVIEW_SIZE[1], PREVIEW_SIZE[0], 3)
    assert np.all(out[0, 0] == (31, 41, 55))
    assert np.all(out[PREVIEW_SIZE[1] // 2, PREVIEW_SIZE[0] // 2] == 200)


def test_text_lines_follow_state(photo_path):
    with App(StaticIdentifier()) as app:
        captions = [text for text, _ in text_lines(app)]
        assert "[f] Switch to Rear Camera" in captions
        assert not any("Go!" in text for text in captions)

        app.select_file(str(photo_path))
        app.identify()
        captions = [text for text, _ in text_lines(app)]

        assert "[g] Go!" in captions
        assert "[1] cat - 92%" in captions
        assert "[2] dog - 91%" in captions
        assert "The object detected is likely a cat." in captions


def test_compose_window_shape(photo_path):
    with App(StaticIdentifier()) as app:
        assert current_preview(app).shape == (PREVIEW_SIZE[1], PREVIEW_SIZE[0], 3)
        app.select_file(str(photo_path))
        window = compose_window(app, current_preview(app))
        assert window.shape == (PREVIEW_SIZE[1], PREVIEW_SIZE[0] + PANEL_WIDTH, 3)


def test_daemon_executor_runs_off_main_thread():
    seen = []

    def work(value):
        seen.append(threading.current_thread().daemon)
        return value * 2

    future = DaemonExecutor().submit(work, 21)

    assert future.result(timeout=5) == 42
    assert seen == [True]


def test_daemon_executor_propagates_errors():
    def fail():
        raise InferenceError("Failed to upload file: HTTP 500")

    future = DaemonExecutor().submit(fail)

    with pytest.raises(InferenceError):
        future.result(timeout=5)
