"""Short Video Maker - narrated short-form videos from scene lists."""

__version__ = "1.0.0"
