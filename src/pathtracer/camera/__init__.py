"""Camera module for view and ray generation.

Components:
    pinhole: Simple pinhole (perspective) camera model

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .pinhole import Camera

__all__ = [
    "Camera",
]
