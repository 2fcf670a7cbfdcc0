"""
Geometric primitives shared by the transform, layout and gesture code.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Vec2:
    """
    A 2D point or displacement. Used for both world and screen coordinates;
    which space a value lives in is up to the caller.
    """
    x: float
    y: float

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    def __truediv__(self, scalar: float) -> Vec2:
        return Vec2(self.x / scalar, self.y / scalar)

    def distance_to(self, other: Vec2) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def midpoint(self, other: Vec2) -> Vec2:
        return Vec2((self.x + other.x) / 2, (self.y + other.y) / 2)

    def is_close(self, other: Vec2, tol: float = 1e-9) -> bool:
        return math.isclose(self.x, other.x, abs_tol=tol) and math.isclose(self.y, other.y, abs_tol=tol)


@dataclass(frozen=True)
class Size:
    """Viewport size in logical pixels."""
    width: float
    height: float

    @property
    def center(self) -> Vec2:
        return Vec2(self.width / 2, self.height / 2)

    def is_empty(self) -> bool:
        return self.width <= 1 or self.height <= 1


def bounding_box(points: npt.NDArray[np.float64]) -> tuple[float, float, float, float]:
    """
    Axis-aligned bounding box of an (N, 2) array.

    Returns:
        (x_min, x_max, y_min, y_max)

    Raises:
        ValueError: If the array is empty or not of shape (N, 2).
    """
    pts = np.asarray(points, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError(f"Expected shape (N, 2), got {pts.shape}.")
    if pts.shape[0] == 0:
        raise ValueError("Cannot compute the bounding box of zero points.")
    x_min, y_min = pts.min(axis=0)
    x_max, y_max = pts.max(axis=0)
    return float(x_min), float(x_max), float(y_min), float(y_max)
