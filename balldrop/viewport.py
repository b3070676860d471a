"""
Physical → Pixel Viewport Mapping
=================================
The physical viewport is the first quadrant of conventional coordinates:
(x, y) == (0, 0) is the bottom-left corner and y grows upwards (m).

The pixel viewport is a screen coordinate system: (0, 0) is the top-left
corner and y grows downwards (px).

Both share the same scale, pixels_per_meter; the vertical axis is flipped.
"""

import numpy as np
from typing import Tuple

from .exceptions import InvalidArgumentError, OutOfBoundsError


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 going up as browsers do."""
    return int(np.floor(value + 0.5))


class CoordinateMapper:
    """
    Converts positions in meters into pixel positions.

    Parameters
    ----------
    width_m, height_m : float
        Size of the physical field (m).
    pixels_per_meter : float
        Display scale.
    """

    def __init__(self, width_m: float, height_m: float, pixels_per_meter: float):
        for label, value in (('width_m', width_m), ('height_m', height_m),
                             ('pixels_per_meter', pixels_per_meter)):
            if not value > 0:
                raise InvalidArgumentError(f"{label} must be positive, got {value}")

        self._width_m = float(width_m)
        self._height_m = float(height_m)
        self._pixels_per_meter = float(pixels_per_meter)

        self._width_px = round_half_up(self._width_m * self._pixels_per_meter)
        self._height_px = round_half_up(self._height_m * self._pixels_per_meter)

    @property
    def width_m(self) -> float:
        return self._width_m

    @property
    def height_m(self) -> float:
        return self._height_m

    @property
    def pixels_per_meter(self) -> float:
        return self._pixels_per_meter

    def get_viewport_size(self) -> Tuple[int, int]:
        """(width, height) of the pixel viewport."""
        return self._width_px, self._height_px

    def map_x(self, x: float) -> int:
        """Horizontal meters → pixel column."""
        if not 0 <= x <= self._width_m:
            raise OutOfBoundsError(f"x={x} is out of bounds [0, {self._width_m}]")
        return round_half_up((x / self._width_m) * self._width_px)

    def map_y(self, y: float) -> int:
        """Height above ground (m) → pixel row, counted from the top."""
        if not 0 <= y <= self._height_m:
            raise OutOfBoundsError(f"y={y} is out of bounds [0, {self._height_m}]")
        flipped_y = self._height_m - y
        return round_half_up((flipped_y / self._height_m) * self._height_px)

    def __repr__(self):
        return (f"CoordinateMapper({self._width_m}, {self._height_m}, "
                f"{self._pixels_per_meter})")
