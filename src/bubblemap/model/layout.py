"""
Animated Layout
===============
Turns bubble records into map nodes and computes where each node is drawn
at a given clock value.

Every node drifts around its static anchor:

    x(t) = base.x + drift * sin(t * fx + offset)
    y(t) = base.y + drift * cos(t * fy + offset * ky)

The x and y frequencies differ so the motion is not a perfect circle. The
positions are a pure function of `t`; drawing and hit testing both go
through `AnimatedLayout` so what the user sees is what they can tap.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np
from PySide6.QtGui import QColor

from bubblemap.config import DEFAULT_CONFIG, ViewportConfig
from bubblemap.model.geometry_primitives import Vec2
from bubblemap.model.records import BubbleRecord
from bubblemap.model.tags import ensure_tags

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Node:
    id: str
    title: str
    tags: tuple[str, ...]
    color: str
    glow: str
    base: Vec2
    drift: float
    offset: float


@dataclass(frozen=True)
class Connection:
    """Unordered edge; `a` <= `b` so equal pairs compare equal."""
    a: str
    b: str

    @classmethod
    def between(cls, first: str, second: str) -> Connection:
        lo, hi = sorted((first, second))
        return cls(lo, hi)


def _qcolor(color: str) -> QColor:
    qc = QColor(color)
    if not qc.isValid():
        logger.warning(f"Invalid colour '{color}', using white.")
        qc = QColor("white")
    return qc


def lighten(color: str, amount: float) -> str:
    """Raise the HSL lightness of `color` by `amount` (0..1)."""
    base = _qcolor(color)
    h, s, l, a = base.getHslF()
    glow = QColor.fromHslF(max(h, 0.0), s, min(l + amount, 1.0), a)
    return glow.name()


def build_nodes(
    records: Sequence[BubbleRecord],
    rng: Optional[np.random.Generator] = None,
    config: Optional[ViewportConfig] = None,
) -> list[Node]:
    """
    Create one node per record. Drift amplitude and phase are random; pass a
    seeded generator for a reproducible layout.
    """
    cfg = config or DEFAULT_CONFIG
    rng = rng if rng is not None else np.random.default_rng()

    nodes: list[Node] = []
    for index, record in enumerate(records):
        tags = record.seed_tags or ensure_tags(record.note, record.title)
        nodes.append(Node(
            id=record.id,
            title=record.title,
            tags=tuple(tags),
            color=_qcolor(record.color).name(),
            glow=lighten(record.color, cfg.glow_lightness),
            base=record.position.to_map(),
            drift=cfg.drift_min + float(rng.random()) * cfg.drift_spread,
            offset=float(rng.random()) * math.pi * 2 + index * cfg.phase_step,
        ))
    return nodes


def build_connections(records: Sequence[BubbleRecord]) -> list[Connection]:
    """
    Deduplicated, unordered edges in declaration order. Self loops and edges
    to ids that are not in `records` are dropped.
    """
    known = {record.id for record in records}
    seen: set[Connection] = set()
    pairs: list[Connection] = []
    for record in records:
        for target in record.connections:
            if target == record.id or target not in known:
                continue
            pair = Connection.between(record.id, target)
            if pair in seen:
                continue
            seen.add(pair)
            pairs.append(pair)
    return pairs


class AnimatedLayout:
    def __init__(self, nodes: Sequence[Node], config: Optional[ViewportConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self.nodes: list[Node] = list(nodes)
        self._index = {node.id: i for i, node in enumerate(self.nodes)}

        self._base = np.array([[n.base.x, n.base.y] for n in self.nodes], dtype=np.float64).reshape(-1, 2)
        self._drift = np.array([n.drift for n in self.nodes], dtype=np.float64)
        self._offset = np.array([n.offset for n in self.nodes], dtype=np.float64)

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def base_positions(self) -> npt.NDArray[np.float64]:
        return self._base

    def position(self, node: Node, t: float) -> Vec2:
        cfg = self.config
        return Vec2(
            node.base.x + node.drift * math.sin(t * cfg.drift_freq_x + node.offset),
            node.base.y + node.drift * math.cos(t * cfg.drift_freq_y + node.offset * cfg.drift_phase_y),
        )

    def positions_array(self, t: float) -> npt.NDArray[np.float64]:
        """(N, 2) world positions at time `t`, in node order."""
        cfg = self.config
        out = self._base.copy()
        out[:, 0] += self._drift * np.sin(t * cfg.drift_freq_x + self._offset)
        out[:, 1] += self._drift * np.cos(t * cfg.drift_freq_y + self._offset * cfg.drift_phase_y)
        return out

    def node(self, node_id: str) -> Optional[Node]:
        i = self._index.get(node_id)
        return None if i is None else self.nodes[i]
