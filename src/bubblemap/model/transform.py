"""
World <-> Screen Transform
==========================
Holds the affine mapping of the 2D map viewport: a translation plus a uniform
scale, with the scale always clamped to [min_scale, max_scale].

    screen = world * scale + translate
    world  = (screen - translate) / scale

The translation is unbounded (the map can be panned forever); only the scale
is bounded. Every mutating method re-establishes the scale invariant, so
zoom requests outside the bounds saturate instead of failing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np

from bubblemap.config import DEFAULT_CONFIG, ViewportConfig
from bubblemap.model.geometry_primitives import Size, Vec2, bounding_box

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


def clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


@dataclass(frozen=True)
class TransformState:
    """Immutable copy of the transform, handed to the renderer each frame."""
    translate: Vec2
    scale: float
    min_scale: float
    max_scale: float


class CoordinateTransform:
    def __init__(self, config: Optional[ViewportConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self.translate: Vec2 = Vec2(0.0, 0.0)
        self.scale: float = 1.0
        self.min_scale: float = self.config.initial_min_scale
        self.max_scale: float = self.config.initial_max_scale

    def __repr__(self) -> str:
        return (f"CoordinateTransform(translate=({self.translate.x:.2f}, {self.translate.y:.2f}), "
                f"scale={self.scale:.3f}, bounds=[{self.min_scale:.3f}, {self.max_scale:.3f}])")

    # ------------------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------------------

    def world_to_screen(self, p: Vec2) -> Vec2:
        return Vec2(p.x * self.scale + self.translate.x, p.y * self.scale + self.translate.y)

    def screen_to_world(self, p: Vec2) -> Vec2:
        return (p - self.translate) / self.scale

    def world_to_screen_array(self, pts: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Vectorised world_to_screen for an (N, 2) array."""
        pts = np.asarray(pts, dtype=np.float64).reshape(-1, 2)
        return pts * self.scale + np.array([self.translate.x, self.translate.y])

    def snapshot(self) -> TransformState:
        return TransformState(self.translate, self.scale, self.min_scale, self.max_scale)

    # ------------------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------------------

    def pan(self, delta: Vec2) -> None:
        self.translate = self.translate + delta

    def zoom_at(self, anchor: Vec2, new_scale: float) -> None:
        """
        Change the scale while keeping the world point under `anchor` fixed
        on screen. `new_scale` is clamped to the current bounds.
        """
        world_anchor = self.screen_to_world(anchor)
        self.scale = clamp(new_scale, self.min_scale, self.max_scale)
        self.translate = Vec2(
            anchor.x - world_anchor.x * self.scale,
            anchor.y - world_anchor.y * self.scale,
        )

    def fit_to_content(self, points: npt.NDArray[np.float64], viewport: Size) -> bool:
        """
        Fit the bounding box of `points` (world space, shape (N, 2)) into the
        viewport and derive new scale bounds around the fitted scale.

        Returns:
            False (and leaves the transform untouched) when there is nothing
            to fit, True otherwise.
        """
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        if pts.shape[0] < 1:
            logger.debug("fit_to_content skipped: no nodes.")
            return False

        cfg = self.config
        x_min, x_max, y_min, y_max = bounding_box(pts)
        range_x = max(x_max - x_min, cfg.min_range)
        range_y = max(y_max - y_min, cfg.min_range)

        base_scale = min(viewport.width / range_x, viewport.height / range_y) * cfg.fit_margin
        self.scale = clamp(base_scale, cfg.fit_min_scale, cfg.fit_max_scale)
        self.min_scale = self.scale * cfg.min_scale_factor
        self.max_scale = self.scale * cfg.max_scale_factor

        center = Vec2((x_min + x_max) / 2, (y_min + y_max) / 2)
        self.translate = viewport.center - center * self.scale
        logger.debug(f"Fitted {pts.shape[0]} nodes into {viewport.width:.0f}x{viewport.height:.0f}: {self!r}")
        return True
