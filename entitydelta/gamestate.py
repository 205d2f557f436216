"""A sample game-state entity covering every supported wire type."""

from __future__ import annotations

import dataclasses
from typing import Optional

from entitydelta.entity import Entity, wire


@dataclasses.dataclass
class GameState(Entity):
    """Game state with integer, float, string, bool, slice and map fields."""

    # Integer types
    id: int = wire("int64")
    round: int = wire("int16")
    score: int = wire("int32")
    lives: int = wire("int8")
    max_hp: int = wire("uint16")

    # Floating point types
    x: float = wire("float64")
    y: float = wire("float64")
    speed: float = wire("float32")

    # String
    player_name: str = wire("string")

    # Boolean
    is_active: bool = wire("bool")

    # Slice types
    inventory: Optional[list[str]] = wire("[]string")
    positions: Optional[list[float]] = wire("[]float64")
    player_ids: Optional[list[int]] = wire("[]int64")
    data: Optional[bytes] = wire("[]byte")

    # Map types
    player_scores: Optional[dict[str, int]] = wire("map[string]int16")
    item_counts: Optional[dict[int, int]] = wire("map[int8]int32")
    metadata: Optional[dict[str, str]] = wire("map[string]string")