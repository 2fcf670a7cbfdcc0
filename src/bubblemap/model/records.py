"""
Bubble Records
==============
The external description of the bubble network, as produced by the data
layer. The map viewport consumes these records read-only and hands the full
record back to the host when a bubble is selected.

Classes:
    Position3D: Position in the 3D scene (the map uses x and z).
    BubbleRecord: One bubble of the network.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from bubblemap.model.geometry_primitives import Vec2

# Colour per hierarchy level (0 = root, 1 = first ring, 2+ = leaves)
LEVEL_COLORS: tuple[str, ...] = ("#8fb4ff", "#7cc4d8", "#c5b8ff")


def level_color(level: int) -> str:
    return LEVEL_COLORS[min(max(level, 0), len(LEVEL_COLORS) - 1)]


@dataclass(frozen=True)
class Position3D:
    x: float
    y: float
    z: float = 0.0

    def to_map(self) -> Vec2:
        """Project onto the ground plane: scene (x, z) becomes map (x, y)."""
        return Vec2(self.x, self.z)


@dataclass(frozen=True)
class BubbleRecord:
    id: str
    title: str
    position: Position3D
    color: str = LEVEL_COLORS[0]
    note: Optional[str] = None
    connections: tuple[str, ...] = field(default_factory=tuple)
    level: int = 0
    parent: Optional[str] = None
    seed_tags: Optional[tuple[str, ...]] = None


def find_record(records: Sequence[BubbleRecord], bubble_id: str) -> Optional[BubbleRecord]:
    for record in records:
        if record.id == bubble_id:
            return record
    return None


def related_ids(records: Iterable[BubbleRecord], bubble_id: str) -> set[str]:
    """
    Ids sharing a glow with `bubble_id`: itself, its parent, its declared
    connections, its children and its siblings. Unknown ids give an empty set.
    """
    records = list(records)
    bubble = find_record(records, bubble_id)
    if bubble is None:
        return set()

    relations = {bubble_id}
    relations.update(bubble.connections)
    for other in records:
        if other.parent == bubble_id:
            relations.add(other.id)
    if bubble.parent:
        relations.add(bubble.parent)
        relations.update(other.id for other in records if other.parent == bubble.parent)
    return relations
