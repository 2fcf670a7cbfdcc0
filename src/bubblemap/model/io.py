"""
Input Manager (JSON)
Loads the bubble network description from a .json file.

Expected document:
    {
      "bubbles": [
        {"id": "root", "title": "Source", "level": 0,
         "position": {"x": 0, "y": 1.4, "z": -2},
         "color": "#8fb4ff", "note": "...",
         "connections": ["flow"], "children": [...], "links": [...]}
      ]
    }

`connections`, `children` and `links` are all optional and are merged (in
that order, without duplicates) into `BubbleRecord.connections`.
"""
import json
import logging
import os
from typing import Any, Optional

from bubblemap.model.records import BubbleRecord, Position3D, level_color

logger = logging.getLogger(__name__)


class BubbleDataError(ValueError):
    """Raised when a bubble document cannot be turned into records."""


class BubbleLoader:

    @staticmethod
    def load_bubbles(filepath: str) -> list[BubbleRecord]:
        logger.info(f"Loading bubbles from: {filepath}")
        if not os.path.exists(filepath):
            raise BubbleDataError(f"Bubble file not found: {filepath}")

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise BubbleDataError(f"Invalid JSON in '{filepath}': {e}") from e
        except UnicodeDecodeError as e:
            raise BubbleDataError(f"'{filepath}' is not UTF-8 text: {e}") from e
        except OSError as e:
            raise BubbleDataError(f"Cannot read '{filepath}': {e}") from e

        records = BubbleLoader.parse_document(document)
        logger.info(f"Loaded {len(records)} bubbles.")
        return records

    @staticmethod
    def parse_document(document: Any) -> list[BubbleRecord]:
        if isinstance(document, dict):
            raw = document.get("bubbles")
        else:
            raw = document
        if not isinstance(raw, list):
            raise BubbleDataError("Expected a list of bubbles (or an object with a 'bubbles' list).")

        records: list[BubbleRecord] = []
        seen: set[str] = set()
        for index, item in enumerate(raw):
            record = BubbleLoader._parse_bubble(item, index)
            if record.id in seen:
                raise BubbleDataError(f"Duplicate bubble id '{record.id}'.")
            seen.add(record.id)
            records.append(record)

        for record in records:
            for target in record.connections:
                if target not in seen:
                    logger.warning(f"Bubble '{record.id}' connects to unknown id '{target}'.")
        return records

    @staticmethod
    def _parse_bubble(item: Any, index: int) -> BubbleRecord:
        if not isinstance(item, dict):
            raise BubbleDataError(f"Bubble #{index} is not an object.")

        bubble_id = item.get("id")
        if not isinstance(bubble_id, str) or not bubble_id:
            raise BubbleDataError(f"Bubble #{index} has no string 'id'.")

        pos = item.get("position")
        if not isinstance(pos, dict):
            raise BubbleDataError(f"Bubble '{bubble_id}' has no 'position' object.")
        try:
            position = Position3D(
                x=float(pos.get("x", 0.0)),
                y=float(pos.get("y", 0.0)),
                z=float(pos.get("z", 0.0)),
            )
        except (TypeError, ValueError) as e:
            raise BubbleDataError(f"Bubble '{bubble_id}' has a non-numeric position: {e}") from e

        raw_level = item.get("level") or 0
        if isinstance(raw_level, bool) or not isinstance(raw_level, (int, float)):
            raise BubbleDataError(f"Bubble '{bubble_id}' has a non-numeric 'level': {raw_level!r}")
        try:
            level = int(raw_level)
        except (ValueError, OverflowError) as e:
            raise BubbleDataError(f"Bubble '{bubble_id}' has an invalid 'level': {raw_level!r}") from e

        connections: list[str] = []
        for key in ("connections", "children", "links"):
            for target in BubbleLoader._string_list(item, key, bubble_id):
                if target not in connections:
                    connections.append(target)

        seed_tags: Optional[tuple[str, ...]] = None
        tags = BubbleLoader._string_list(item, "seedTags", bubble_id)
        if tags:
            seed_tags = tuple(tags)

        title = BubbleLoader._optional_string(item, "title", bubble_id)
        color = BubbleLoader._optional_string(item, "color", bubble_id)
        return BubbleRecord(
            id=bubble_id,
            title=title if title is not None else bubble_id,
            position=position,
            color=color or level_color(level),
            note=BubbleLoader._optional_string(item, "note", bubble_id),
            connections=tuple(connections),
            level=level,
            parent=BubbleLoader._optional_string(item, "parent", bubble_id),
            seed_tags=seed_tags,
        )

    @staticmethod
    def _optional_string(item: dict, key: str, bubble_id: str) -> Optional[str]:
        value = item.get(key)
        if value is not None and not isinstance(value, str):
            raise BubbleDataError(f"Bubble '{bubble_id}' has a non-string '{key}': {value!r}")
        return value

    @staticmethod
    def _string_list(item: dict, key: str, bubble_id: str) -> list[str]:
        value = item.get(key)
        if value is None:
            return []
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise BubbleDataError(f"Bubble '{bubble_id}' has a '{key}' that is not a list of strings.")
        return value
