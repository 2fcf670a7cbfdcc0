"""
Shared test fixtures for bubblemap tests.

Qt runs on the offscreen platform so widget and painter tests work headless.
"""
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from typing import Optional

import pytest
from PySide6.QtWidgets import QApplication

from bubblemap.config import ViewportConfig
from bubblemap.model.geometry_primitives import Vec2
from bubblemap.model.layout import AnimatedLayout, Node
from bubblemap.model.records import BubbleRecord, Position3D
from bubblemap.model.transform import CoordinateTransform


@pytest.fixture(scope="session")
def qapp() -> QApplication:
    app = QApplication.instance() or QApplication([])
    yield app


def make_record(
    bubble_id: str,
    x: float = 0.0,
    z: float = 0.0,
    connections: tuple[str, ...] = (),
    color: str = "#8fb4ff",
    note: Optional[str] = None,
    parent: Optional[str] = None,
    level: int = 0,
) -> BubbleRecord:
    return BubbleRecord(
        id=bubble_id,
        title=bubble_id.title(),
        position=Position3D(x=x, y=1.0, z=z),
        color=color,
        note=note,
        connections=connections,
        parent=parent,
        level=level,
    )


def make_node(node_id: str, x: float, y: float, drift: float = 1e-9, offset: float = 0.0) -> Node:
    """A node that (practically) sits still at its anchor."""
    return Node(
        id=node_id,
        title=node_id,
        tags=("#a", "#b", "#c"),
        color="#7cc4d8",
        glow="#c0e3ec",
        base=Vec2(x, y),
        drift=drift,
        offset=offset,
    )


@pytest.fixture
def config() -> ViewportConfig:
    return ViewportConfig()


@pytest.fixture
def transform(config: ViewportConfig) -> CoordinateTransform:
    """A fitted-looking transform: scale 20 within [10, 60]."""
    t = CoordinateTransform(config)
    t.scale = 20.0
    t.min_scale = 10.0
    t.max_scale = 60.0
    t.translate = Vec2(100.0, 50.0)
    return t


@pytest.fixture
def records() -> list[BubbleRecord]:
    """Small network; a<->b is declared in both directions."""
    return [
        make_record("a", x=0.0, z=0.0, connections=("b",), level=0),
        make_record("b", x=4.0, z=0.0, connections=("a", "c"), parent="a", level=1),
        make_record("c", x=0.0, z=3.0, connections=("c",), parent="a", level=1),
        make_record("d", x=-4.0, z=-3.0, connections=("ghost",), parent="b", level=2),
    ]


@pytest.fixture
def still_layout(config: ViewportConfig) -> AnimatedLayout:
    return AnimatedLayout([make_node("n1", 5.0, 5.0), make_node("n2", 20.0, 20.0)], config)
