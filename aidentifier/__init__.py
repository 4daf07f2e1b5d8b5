"""Upload a photo to an object-detection backend and inspect the results."""

__version__ = "0.1.0"
