from unittest.mock import patch

import numpy as np
import pytest
from PIL import Image

from aidentifier.cli import parse_args
from aidentifier.detection.base import DetectedObject
from aidentifier.detection.client import InferenceError
from aidentifier.runners.headless import run_headless


@patch("aidentifier.detection.client.InferenceClient.identify")
def test_run_headless_writes_overlay(mock_identify, photo_path, tmp_path, encode_mask, capsys):
    mask = np.zeros((8, 8), dtype=np.uint8)
    mask[:4] = 255
    mock_identify.return_value = [
        DetectedObject("cat", encode_mask(mask), 0.92),
        DetectedObject("dog", encode_mask(mask), 0.91),
    ]
    output = tmp_path / "overlay.png"

    run_headless(parse_args([str(photo_path), "--select", "dog", "-o", str(output)]))

    out = capsys.readouterr().out
    assert "cat - 92%" in out
    assert "* dog - 91%" in out
    assert "The object detected is likely a cat." in out

    rendered = np.array(Image.open(output))
    assert np.all(rendered[:4] == 100)
    assert np.all(rendered[4:] == 255)


@patch("aidentifier.detection.client.InferenceClient.identify")
def test_run_headless_no_detections(mock_identify, photo_path, capsys):
    mock_identify.return_value = []

    run_headless(parse_args([str(photo_path)]))

    assert "No objects identified." in capsys.readouterr().out


@patch("aidentifier.detection.client.InferenceClient.identify")
def test_run_headless_exits_on_failed_identify(mock_identify, photo_path, capsys):
    mock_identify.side_effect = InferenceError("Failed to upload file: HTTP 500")

    with pytest.raises(SystemExit) as exc:
        run_headless(parse_args([str(photo_path)]))

    assert exc.value.code == 1
    captured = capsys.readouterr()
    assert "HTTP 500" in captured.err
    assert "No objects identified." not in captured.out
