"""Command-line interface for aidentifier."""

import argparse
from pathlib import Path

from . import __version__
from .config import API_URL_ENV, FACINGS, AppConfig

EPILOG = f"""\
Examples:
  aidentifier photo.jpg
  aidentifier photo.jpg -o overlay.png --select cat
  aidentifier --camera --facing back -o overlay.png
  aidentifier --interactive

The inference endpoint defaults to ${API_URL_ENV}, or
http://localhost:3000/api when unset.

Interactive keys:
  c  start camera        f  switch front/back camera
  space  capture frame   g  identify (Go!)
  1-9  toggle mask       q  quit
"""


def parse_args(args=None) -> AppConfig:
    """Parse command-line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv).

    Returns:
        AppConfig with parsed options.
    """
    parser = argparse.ArgumentParser(
        prog="aidentifier",
        description="Identify objects in a photo using a remote detection model.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "input",
        type=str,
        nargs="?",
        help="Image file to identify (any file is accepted)",
    )

    parser.add_argument(
        "--camera",
        action="store_true",
        help="Capture the image from a camera instead of a file",
    )

    parser.add_argument(
        "--facing",
        type=str,
        default="front",
        choices=FACINGS,
        help="Preferred camera, matched against device names (default: front)",
    )

    parser.add_argument(
        "--max-devices",
        type=int,
        default=10,
        help="Camera indices to probe when device names are unavailable (default: 10)",
    )

    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help=f"Inference endpoint (default: ${API_URL_ENV} or http://localhost:3000/api)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=60.0,
        help="Request timeout in seconds (default: 60)",
    )

    parser.add_argument(
        "--select",
        type=str,
        default=None,
        metavar="LABEL",
        help="Overlay the mask of the first detection with this label",
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Write the rendered preview to this image file",
    )

    parser.add_argument(
        "-i", "--interactive",
        action="store_true",
        help="Open a window with live camera and result controls",
    )

    parsed = parser.parse_args(args)

    if not (parsed.input or parsed.camera or parsed.interactive):
        parser.error("an input file, --camera or --interactive is required")
    if parsed.input and parsed.camera:
        parser.error("use either an input file or --camera, not both")
    if parsed.input and not Path(parsed.input).exists():
        parser.error(f"Input file not found: {parsed.input}")
    if parsed.timeout <= 0:
        parser.error("--timeout must be positive")

    return AppConfig.from_args(
        input_path=parsed.input,
        api_url=parsed.api_url,
        timeout=parsed.timeout,
        camera_enabled=parsed.camera,
        facing=parsed.facing,
        max_devices=parsed.max_devices,
        output_path=parsed.output,
        select=parsed.select,
        interactive=parsed.interactive,
    )
