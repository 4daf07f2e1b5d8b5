"""Configuration dataclasses for aidentifier."""

import os
from dataclasses import dataclass, field
from typing import Optional


DEFAULT_API_URL = "http://localhost:3000/api"
API_URL_ENV = "AIDENTIFIER_API_URL"

FACINGS = ("front", "back")


def default_api_url() -> str:
    """Return the inference endpoint from the environment or the built-in default."""
    return os.environ.get(API_URL_ENV, DEFAULT_API_URL)


@dataclass
class ClientConfig:
    """Configuration for the inference HTTP client."""

    api_url: str = field(default_factory=default_api_url)
    field_name: str = "theImage"
    timeout: float = 60.0


@dataclass
class CameraConfig:
    """Configuration for camera capture."""

    enabled: bool = False
    facing: str = "front"
    max_devices: int = 10
    filename: str = "captured_image.png"


@dataclass
class DisplayConfig:
    """Configuration for result presentation."""

    output_path: Optional[str] = None
    select: Optional[str] = None
    interactive: bool = False
    window_name: str = "AI-Dentifier"


@dataclass
class AppConfig:
    """Combined configuration for a session."""

    input_path: Optional[str]
    client: ClientConfig
    camera: CameraConfig
    display: DisplayConfig

    @classmethod
    def from_args(
        cls,
        input_path: Optional[str] = None,
        # Client config
        api_url: Optional[str] = None,
        timeout: float = 60.0,
        # Camera config
        camera_enabled: bool = False,
        facing: str = "front",
        max_devices: int = 10,
        # Display config
        output_path: Optional[str] = None,
        select: Optional[str] = None,
        interactive: bool = False,
    ) -> "AppConfig":
        """Create AppConfig from CLI arguments."""
        return cls(
            input_path=input_path,
            client=ClientConfig(
                api_url=api_url or default_api_url(),
                timeout=timeout,
            ),
            camera=CameraConfig(
                enabled=camera_enabled,
                facing=facing,
                max_devices=max_devices,
            ),
            display=DisplayConfig(
                output_path=output_path,
                select=select,
                interactive=interactive,
            ),
        )
