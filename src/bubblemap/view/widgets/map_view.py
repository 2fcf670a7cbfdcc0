"""
2D Map Viewport Widget
Interactive, continuously animated map of the bubble network.

Input (mouse, touch, wheel) goes through the GestureTracker, which mutates
the shared CoordinateTransform; the frame scheduler advances the animation
clock and requests a repaint; taps are resolved by the HitTester and
reported through the `bubble_focused` signal.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

import numpy as np
from PySide6.QtCore import QEvent, Qt, Signal
from PySide6.QtGui import (
    QEventPoint, QMouseEvent, QPainter, QPaintEvent, QResizeEvent, QTouchEvent, QWheelEvent
)
from PySide6.QtWidgets import QWidget

from bubblemap.config import DEFAULT_CONFIG, ViewportConfig
from bubblemap.controller.gestures import GestureTracker
from bubblemap.controller.hit_test import HitTester
from bubblemap.controller.scheduler import FrameScheduler, QtFrameScheduler
from bubblemap.model.geometry_primitives import Size, Vec2
from bubblemap.model.layout import AnimatedLayout, Connection, build_connections, build_nodes
from bubblemap.model.records import BubbleRecord, find_record, related_ids
from bubblemap.model.transform import CoordinateTransform
from bubblemap.view.widgets.renderer import MapRenderer

logger = logging.getLogger(__name__)

MOUSE_POINTER_ID = -1


class Map2DWidget(QWidget):
    bubble_focused = Signal(object)  # BubbleRecord

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        config: Optional[ViewportConfig] = None,
        scheduler: Optional[FrameScheduler] = None,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__(parent)
        self.config = config or DEFAULT_CONFIG
        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        self.setMouseTracking(False)
        self.setMinimumSize(200, 150)
        self.setToolTip(self.tr("Drag to explore, pinch or scroll to zoom. Tap a bubble to focus it."))

        self.transform = CoordinateTransform(self.config)
        self.tracker = GestureTracker(self.transform, on_tap=self._on_tap, config=self.config)
        self.renderer = MapRenderer(self.transform, self.config)

        self.scheduler: FrameScheduler = scheduler or QtFrameScheduler(
            interval_ms=self.config.frame_interval_ms, parent=self
        )
        self.scheduler.on_frame = self._on_frame

        self._seed = seed
        self._records: list[BubbleRecord] = []
        self._focused_id: Optional[str] = None
        self._related: frozenset[str] = frozenset()
        self._layout: Optional[AnimatedLayout] = None
        self._connections: list[Connection] = []
        self._hit_tester: Optional[HitTester] = None
        self._active: bool = False
        self._time: float = 0.0
        self._surface_missing: bool = False

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def layout_model(self) -> Optional[AnimatedLayout]:
        return self._layout

    @property
    def connections(self) -> list[Connection]:
        return list(self._connections)

    @property
    def clock(self) -> float:
        return self._time

    def set_bubbles(self, records: Sequence[BubbleRecord]) -> None:
        self._records = list(records)
        self._related = self._relations_of(self._focused_id)
        if self._active:
            # nodes are immutable for an activation; rebuild
            self.deactivate()
            self.activate()

    @property
    def related(self) -> frozenset[str]:
        """Ids drawn at full strength while a bubble is focused; empty when none is."""
        return self._related

    def set_focused(self, bubble_id: Optional[str]) -> None:
        self._focused_id = bubble_id
        self._related = self._relations_of(bubble_id)
        self.update()

    def _relations_of(self, bubble_id: Optional[str]) -> frozenset[str]:
        if bubble_id is None:
            return frozenset()
        return frozenset(related_ids(self._records, bubble_id))

    def activate(self) -> None:
        if self._active:
            return
        rng = np.random.default_rng(self._seed)
        nodes = build_nodes(self._records, rng=rng, config=self.config)
        self._layout = AnimatedLayout(nodes, self.config)
        self._connections = build_connections(self._records)
        self._hit_tester = HitTester(self.transform, self._layout, self.config)
        self._active = True
        self.refit()
        self.scheduler.start()
        logger.info(f"Map activated with {len(nodes)} nodes and {len(self._connections)} connections.")

    def deactivate(self) -> None:
        if not self._active:
            return
        self.scheduler.stop()
        self.tracker.reset()
        self._layout = None
        self._hit_tester = None
        self._connections = []
        self._active = False
        logger.info("Map deactivated.")

    def refit(self) -> bool:
        """Fit the view to the node anchors. No-op while inactive or unsized."""
        if not self._active or self._layout is None:
            return False
        size = self._surface_size()
        if size.is_empty():
            logger.debug("Refit deferred: viewport has no size yet.")
            return False
        fitted = self.transform.fit_to_content(self._layout.base_positions, size)
        self.update()
        return fitted

    # ------------------------------------------------------------------------------
    # Frame / paint
    # ------------------------------------------------------------------------------

    def _surface_size(self) -> Size:
        return Size(float(self.width()), float(self.height()))

    def _on_frame(self, t: float) -> None:
        self._time = t
        self.update()

    def paintEvent(self, event: QPaintEvent) -> None:
        size = self._surface_size()
        if size.is_empty():
            if not self._surface_missing:
                logger.debug("Skipping frame: no drawing surface.")
            self._surface_missing = True
            return
        self._surface_missing = False

        painter = QPainter(self)
        try:
            self.renderer.draw(
                painter, size, self._layout, self._connections, self._time,
                self._focused_id, self._related,
            )
        finally:
            painter.end()

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        if not self._active:
            return
        self.refit()

    # ------------------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------------------

    def _on_tap(self, point: Vec2) -> None:
        if self._hit_tester is None:
            return
        node = self._hit_tester.find_nearest(point, self._time)
        if node is None:
            return
        record = find_record(self._records, node.id)
        if record is not None:
            logger.info(f"Bubble focused: {record.id}")
            self.bubble_focused.emit(record)

    # ------------------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------------------

    @staticmethod
    def _vec(pos) -> Vec2:
        return Vec2(float(pos.x()), float(pos.y()))

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if not self._active or event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        self.tracker.pointer_down(MOUSE_POINTER_ID, self._vec(event.position()))
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if not self._active:
            super().mouseMoveEvent(event)
            return
        self.tracker.pointer_move(MOUSE_POINTER_ID, self._vec(event.position()))
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if not self._active or event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return
        self.tracker.pointer_up(MOUSE_POINTER_ID, self._vec(event.position()))
        event.accept()

    def wheelEvent(self, event: QWheelEvent) -> None:
        if not self._active:
            super().wheelEvent(event)
            return
        # Qt reports +120 per notch away from the user; flip to the
        # "positive delta zooms out" convention used by the tracker.
        delta_y = -float(event.angleDelta().y())
        self.tracker.wheel(self._vec(event.position()), delta_y)
        event.accept()

    def event(self, event: QEvent) -> bool:
        touch_types = (
            QEvent.Type.TouchBegin, QEvent.Type.TouchUpdate,
            QEvent.Type.TouchEnd, QEvent.Type.TouchCancel,
        )
        if event.type() in touch_types and self._active:
            self._handle_touch(event)
            event.accept()
            return True
        return super().event(event)

    def _handle_touch(self, event: QTouchEvent) -> None:
        points = [(p.id(), p.state(), self._vec(p.position())) for p in event.points()]
        self.route_touch_points(points, cancelled=event.type() == QEvent.Type.TouchCancel)

    def route_touch_points(
        self,
        points: Iterable[tuple[int, QEventPoint.State, Vec2]],
        cancelled: bool = False,
    ) -> None:
        """Feed `(touch id, state, position)` triples to the gesture tracker."""
        if not self._active:
            return
        if cancelled:
            for point_id, _, _ in points:
                self.tracker.pointer_cancel(point_id)
            self.tracker.reset()
            return

        for point_id, state, pos in points:
            if state == QEventPoint.State.Pressed:
                self.tracker.pointer_down(point_id, pos)
            elif state == QEventPoint.State.Updated:
                self.tracker.pointer_move(point_id, pos)
            elif state == QEventPoint.State.Released:
                self.tracker.pointer_up(point_id, pos)

    def hideEvent(self, event) -> None:
        # Abandon any gesture in progress; the release will never arrive.
        self.tracker.reset()
        super().hideEvent(event)
