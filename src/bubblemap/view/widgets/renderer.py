"""
Map Renderer
Paints one frame of the 2D bubble map with a QPainter: background, grid,
connections, nodes and labels.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, AbstractSet, Optional, Sequence

import numpy as np
from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QBrush, QColor, QFont, QPainter, QPen, QRadialGradient

from bubblemap.config import DEFAULT_CONFIG, ViewportConfig
from bubblemap.model.geometry_primitives import Size
from bubblemap.model.layout import AnimatedLayout, Connection
from bubblemap.model.transform import CoordinateTransform, TransformState

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

BACKGROUND_INNER = QColor.fromRgbF(8 / 255, 14 / 255, 28 / 255, 0.96)
BACKGROUND_OUTER = QColor.fromRgbF(2 / 255, 6 / 255, 16 / 255, 0.96)
GRID_COLOR = QColor(255, 255, 255, 13)
LINK_COLOR = QColor(255, 255, 255, 38)
OUTLINE_COLOR = QColor(255, 255, 255, 56)
TITLE_COLOR = QColor("#f5fbff")
TAG_COLOR = QColor(232, 247, 255, 178)

TAG_SEPARATOR = " · "


def grid_lines(
    view: TransformState,
    width: float,
    height: float,
    step: float,
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Screen x and y positions of the background grid lines.

    The grid origin follows the view so the grid pans with the map:
    origin = (-translate / scale mod step) * scale + translate.
    Lines are drawn at origin + k * step for every k that lands on screen.

    Returns:
        (xs, ys) arrays of line positions in [0, width) and [0, height).
    """
    if step <= 0:
        return np.empty(0), np.empty(0)

    t, s = view.translate, view.scale
    origin_x = np.fmod(-t.x / s, step) * s + t.x
    origin_y = np.fmod(-t.y / s, step) * s + t.y
    xs = np.arange(np.mod(origin_x, step), width, step)
    ys = np.arange(np.mod(origin_y, step), height, step)
    return xs, ys


def tag_preview(tags: Sequence[str], limit: int) -> str:
    return TAG_SEPARATOR.join(tags[:limit])


class MapRenderer:
    def __init__(
        self,
        transform: CoordinateTransform,
        config: Optional[ViewportConfig] = None,
    ) -> None:
        self.transform = transform
        self.config = config or DEFAULT_CONFIG
        self.title_font = QFont("Inter", 11)
        self.title_font.setPixelSize(14)

    def draw(
        self,
        painter: QPainter,
        size: Size,
        layout: Optional[AnimatedLayout],
        connections: Sequence[Connection],
        t: float,
        focused_id: Optional[str] = None,
        related: AbstractSet[str] = frozenset(),
    ) -> None:
        """
        Paint one frame at animation time `t`.

        When `related` is non-empty, nodes outside it and links not joining two
        of its members are drawn faded.
        """
        view = self.transform.snapshot()
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        self._draw_background(painter, size)
        self._draw_grid(painter, size, view)

        if layout is None or len(layout) == 0:
            return

        world = layout.positions_array(t)
        screen = self.transform.world_to_screen_array(world)
        index = {node.id: i for i, node in enumerate(layout.nodes)}

        self._draw_connections(painter, screen, index, connections, related)
        self._draw_nodes(painter, screen, layout, focused_id, related)

    # ---- layers ----

    def _draw_background(self, painter: QPainter, size: Size) -> None:
        w, h = size.width, size.height
        gradient = QRadialGradient(QPointF(w / 2, h / 2), w * 0.8, QPointF(w * 0.3, h * 0.3), 80)
        gradient.setColorAt(0.0, BACKGROUND_INNER)
        gradient.setColorAt(1.0, BACKGROUND_OUTER)
        painter.fillRect(QRectF(0, 0, w, h), QBrush(gradient))

    def _draw_grid(self, painter: QPainter, size: Size, view: TransformState) -> None:
        xs, ys = grid_lines(view, size.width, size.height, self.config.grid_step_px)
        painter.save()
        painter.setPen(QPen(GRID_COLOR, 1))
        for x in xs:
            painter.drawLine(QPointF(x, 0), QPointF(x, size.height))
        for y in ys:
            painter.drawLine(QPointF(0, y), QPointF(size.width, y))
        painter.restore()

    def _draw_connections(
        self,
        painter: QPainter,
        screen: npt.NDArray[np.float64],
        index: dict[str, int],
        connections: Sequence[Connection],
        related: AbstractSet[str],
    ) -> None:
        painter.save()
        painter.setPen(QPen(LINK_COLOR, 1.4))
        for pair in connections:
            i, j = index.get(pair.a), index.get(pair.b)
            if i is None or j is None:
                continue
            in_focus = not related or (pair.a in related and pair.b in related)
            painter.setOpacity(1.0 if in_focus else self.config.dimmed_link_opacity)
            painter.drawLine(QPointF(*screen[i]), QPointF(*screen[j]))
        painter.restore()

    def _draw_nodes(
        self,
        painter: QPainter,
        screen: npt.NDArray[np.float64],
        layout: AnimatedLayout,
        focused_id: Optional[str],
        related: AbstractSet[str],
    ) -> None:
        cfg = self.config
        painter.setFont(self.title_font)
        line_height = painter.fontMetrics().height()

        for node, (x, y) in zip(layout.nodes, screen):
            center = QPointF(x, y)
            radius = cfg.focused_radius_px if node.id == focused_id else cfg.node_radius_px
            dimmed = bool(related) and node.id not in related
            painter.setOpacity(cfg.dimmed_node_opacity if dimmed else 1.0)

            # outer glow
            glow = QRadialGradient(center, radius * 1.9, center, 4)
            glow.setColorAt(0.0, QColor(node.glow))
            glow.setColorAt(1.0, QColor(255, 255, 255, 0))
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(glow))
            painter.drawEllipse(center, radius * 1.8, radius * 1.8)

            # body
            painter.setBrush(QBrush(QColor(node.color)))
            painter.setPen(QPen(OUTLINE_COLOR, 1.4))
            painter.drawEllipse(center, radius, radius)

            # labels
            painter.setPen(TITLE_COLOR)
            title_rect = QRectF(x - 120, y + radius + 6, 240, line_height)
            painter.drawText(title_rect, Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignTop, node.title)

            preview = tag_preview(node.tags, cfg.max_tag_preview)
            if preview:
                painter.setPen(TAG_COLOR)
                tag_rect = QRectF(x - 120, y + radius + 22, 240, line_height)
                painter.drawText(tag_rect, Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignTop, preview)

        painter.setOpacity(1.0)
        painter.setBrush(Qt.BrushStyle.NoBrush)
