"""
Tests for nearest-node selection on animated, projected positions.
"""
import numpy as np
import pytest

from bubblemap.controller.hit_test import HitTester
from bubblemap.model.geometry_primitives import Vec2
from bubblemap.model.layout import AnimatedLayout, build_nodes
from bubblemap.model.transform import CoordinateTransform

from conftest import make_node


@pytest.fixture
def unit_transform(config) -> CoordinateTransform:
    t = CoordinateTransform(config)
    t.scale = 10.0
    t.min_scale, t.max_scale = 5.0, 50.0
    return t


def test_point_within_radius_hits(unit_transform, still_layout):
    # n1 sits at world (5, 5) -> screen (50, 50)
    hit = HitTester(unit_transform, still_layout).find_nearest(Vec2(55.0, 52.0), t=0.0)
    assert hit is not None
    assert hit.id == "n1"


def test_point_outside_radius_misses(unit_transform, still_layout):
    tester = HitTester(unit_transform, still_layout)
    assert tester.find_nearest(Vec2(50.0, 79.0), t=0.0) is None
    assert tester.find_nearest(Vec2(-500.0, 0.0), t=0.0) is None


def test_radius_is_strict(unit_transform, still_layout, config):
    tester = HitTester(unit_transform, still_layout)
    edge = Vec2(50.0 + config.selection_radius_px, 50.0)
    assert tester.find_nearest(edge, t=0.0) is None


def test_nearest_of_several_wins(unit_transform, config):
    layout = AnimatedLayout([make_node("far", 0.0, 0.0), make_node("near", 2.0, 0.0)], config)
    hit = HitTester(unit_transform, layout).find_nearest(Vec2(14.0, 0.0), t=0.0)
    assert hit.id == "near"


def test_tie_goes_to_first_node(unit_transform, config):
    layout = AnimatedLayout([make_node("first", 3.0, 3.0), make_node("second", 3.0, 3.0)], config)
    hit = HitTester(unit_transform, layout).find_nearest(Vec2(30.0, 30.0), t=0.0)
    assert hit.id == "first"


def test_empty_layout_returns_none(unit_transform, config):
    assert HitTester(unit_transform, AnimatedLayout([], config)).find_nearest(Vec2(0.0, 0.0), 0.0) is None


def test_hit_follows_drift_and_transform(records, config, transform):
    layout = AnimatedLayout(build_nodes(records, rng=np.random.default_rng(5)), config)
    tester = HitTester(transform, layout, config)
    for t in (0.0, 2.5, 17.0):
        for node in layout.nodes:
            screen = transform.world_to_screen(layout.position(node, t))
            hit = tester.find_nearest(screen + Vec2(1.0, -1.0), t)
            assert hit is not None and hit.id == node.id
