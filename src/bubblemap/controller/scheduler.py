"""
Frame Scheduling
================
The map redraws continuously so the bubbles keep drifting. The frame source
is abstracted behind `FrameScheduler.tick(dt)`:

    ManualScheduler   driven explicitly (tests, offscreen rendering)
    QtFrameScheduler  driven by a QTimer on the GUI thread

Each tick advances the animation clock and calls the frame callback. All
work is synchronous on the caller's thread.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from PySide6.QtCore import QElapsedTimer, QObject, QTimer

from bubblemap.config import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


class FrameScheduler(ABC):
    def __init__(self, on_frame: Optional[FrameCallback] = None) -> None:
        self.on_frame = on_frame
        self.elapsed: float = 0.0
        self._running: bool = False

    @property
    def is_running(self) -> bool:
        return self._running

    def tick(self, dt: float) -> None:
        """Advance the clock by `dt` seconds and run one frame."""
        if not self._running:
            return
        self.elapsed += max(dt, 0.0)
        if self.on_frame is not None:
            self.on_frame(self.elapsed)

    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...


class ManualScheduler(FrameScheduler):
    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        self._running = False


class QtFrameScheduler(FrameScheduler):
    def __init__(
        self,
        on_frame: Optional[FrameCallback] = None,
        interval_ms: int = DEFAULT_CONFIG.frame_interval_ms,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(on_frame)
        self._timer = QTimer(parent)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_timeout)
        self._clock = QElapsedTimer()

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._clock.start()
        self._timer.start()
        logger.debug("Frame scheduler started.")

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._timer.stop()
        logger.debug("Frame scheduler stopped.")

    def _on_timeout(self) -> None:
        dt = self._clock.restart() / 1000.0
        self.tick(dt)
