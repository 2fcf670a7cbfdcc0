"""
Gesture Tracker
===============
Pointer-event state machine for the map viewport. Raw pointer and wheel
events come in; pan and zoom calls on a `CoordinateTransform` and tap
notifications go out.

The pointer session is an explicit tagged variant:

    Idle      no pointer down
    Panning   one pointer down; becomes a drag once it moves past the
              tap threshold, otherwise its release is a tap
    Pinching  two pointers down; zooms around the live midpoint

A third simultaneous pointer is ignored until one of the tracked pointers
lifts. A gesture that ever reached `Pinching` never produces a tap, even if
it drops back to one pointer.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from bubblemap.config import DEFAULT_CONFIG, ViewportConfig
from bubblemap.model.geometry_primitives import Vec2
from bubblemap.model.transform import CoordinateTransform

logger = logging.getLogger(__name__)

PointerId = int
TapCallback = Callable[[Vec2], None]


@dataclass(frozen=True)
class PinchStart:
    distance: float
    scale: float


@dataclass
class Idle:
    pass


@dataclass
class Panning:
    pointer_id: PointerId
    last: Vec2
    tap_start: Optional[Vec2]
    tap_moved: bool = False


@dataclass
class Pinching:
    pointers: dict[PointerId, Vec2] = field(default_factory=dict)
    pinch_start: Optional[PinchStart] = None

    def pair(self) -> tuple[Vec2, Vec2]:
        a, b = self.pointers.values()
        return a, b


Session = Union[Idle, Panning, Pinching]


class GestureTracker:
    def __init__(
        self,
        transform: CoordinateTransform,
        on_tap: Optional[TapCallback] = None,
        config: Optional[ViewportConfig] = None,
    ) -> None:
        self.transform = transform
        self.on_tap = on_tap
        self.config = config or DEFAULT_CONFIG
        self.session: Session = Idle()

    @property
    def pointer_count(self) -> int:
        if isinstance(self.session, Panning):
            return 1
        if isinstance(self.session, Pinching):
            return len(self.session.pointers)
        return 0

    def is_tracking(self, pointer_id: PointerId) -> bool:
        session = self.session
        if isinstance(session, Panning):
            return session.pointer_id == pointer_id
        if isinstance(session, Pinching):
            return pointer_id in session.pointers
        return False

    def reset(self) -> None:
        self.session = Idle()

    # ------------------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------------------

    def pointer_down(self, pointer_id: PointerId, point: Vec2) -> None:
        session = self.session

        if isinstance(session, Idle):
            self.session = Panning(pointer_id=pointer_id, last=point, tap_start=point)

        elif isinstance(session, Panning):
            if session.pointer_id == pointer_id:
                return
            pointers = {session.pointer_id: session.last, pointer_id: point}
            a, b = pointers.values()
            self.session = Pinching(
                pointers=pointers,
                pinch_start=PinchStart(distance=a.distance_to(b), scale=self.transform.scale),
            )
            logger.debug(f"Pinch started: distance={a.distance_to(b):.1f}, scale={self.transform.scale:.3f}")

        else:
            logger.debug(f"Ignoring extra pointer {pointer_id}; already tracking two.")

    def pointer_move(self, pointer_id: PointerId, point: Vec2) -> None:
        session = self.session
        if not self.is_tracking(pointer_id):
            return

        if isinstance(session, Panning):
            delta = point - session.last
            session.last = point
            if not session.tap_moved and session.tap_start is not None:
                moved = point - session.tap_start
                threshold = self.config.tap_threshold_px
                if abs(moved.x) > threshold or abs(moved.y) > threshold:
                    session.tap_moved = True
            if session.tap_moved:
                self.transform.pan(delta)

        elif isinstance(session, Pinching):
            session.pointers[pointer_id] = point
            if session.pinch_start is None or len(session.pointers) < 2:
                return
            a, b = session.pair()
            distance = a.distance_to(b)
            start_distance = session.pinch_start.distance or 1.0
            self.transform.zoom_at(a.midpoint(b), session.pinch_start.scale * (distance / start_distance))

    def pointer_up(self, pointer_id: PointerId, point: Vec2) -> Optional[Vec2]:
        """
        Release a pointer. Returns the release point when the gesture was a
        tap (and forwards it to `on_tap`), otherwise None.
        """
        return self._release(pointer_id, point, allow_tap=True)

    def pointer_cancel(self, pointer_id: PointerId) -> None:
        self._release(pointer_id, None, allow_tap=False)

    def _release(self, pointer_id: PointerId, point: Optional[Vec2], allow_tap: bool) -> Optional[Vec2]:
        session = self.session
        if not self.is_tracking(pointer_id):
            return None

        if isinstance(session, Panning):
            was_tap = allow_tap and not session.tap_moved and session.tap_start is not None
            self.session = Idle()
            if was_tap and point is not None:
                logger.debug(f"Tap at ({point.x:.1f}, {point.y:.1f})")
                if self.on_tap is not None:
                    self.on_tap(point)
                return point
            return None

        # Pinching: drop the pointer; the survivor keeps dragging but is no
        # longer eligible to become a tap.
        del session.pointers[pointer_id]
        if len(session.pointers) < 2:
            session.pinch_start = None
        if not session.pointers:
            self.session = Idle()
        elif len(session.pointers) == 1:
            (survivor_id, survivor_point), = session.pointers.items()
            self.session = Panning(
                pointer_id=survivor_id,
                last=survivor_point,
                tap_start=None,
                tap_moved=True,
            )
        return None

    # ------------------------------------------------------------------------------
    # Wheel
    # ------------------------------------------------------------------------------

    def wheel(self, cursor: Vec2, delta_y: float) -> None:
        """Zoom around the cursor; positive `delta_y` zooms out (DOM convention)."""
        factor = 1.0 + (-delta_y * self.config.wheel_sensitivity)
        self.transform.zoom_at(cursor, self.transform.scale * factor)
