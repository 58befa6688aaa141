"""Directions of keys around a centre key on Svalboard-style key clusters."""

from __future__ import annotations

from enum import Enum
from typing import Any, Tuple


class SvalKeyDirection(Enum):
    """Position of a key relative to the centre of its cluster."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"
    CENTER = "center"

    @classmethod
    def from_key(cls, key: Any, closest_center: Tuple[int, int]) -> "SvalKeyDirection":
        """Classify a key (with a ``matrix_position``) relative to a centre position."""
        x, y = key.matrix_position[0], key.matrix_position[1]
        cx, cy = closest_center[0], closest_center[1]
        if (x, y) == (cx, cy):
            return cls.CENTER
        if x == cx:
            return cls.NORTH if y < cy else cls.SOUTH
        if y == cy:
            return cls.WEST if x < cx else cls.EAST
        raise ValueError("Key is not on the closest center")