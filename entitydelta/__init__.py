"""Field-level deltas between entity snapshots, with a compact binary wire format."""

__version__ = "0.1.0"

__all__ = ["binary", "wiretypes", "entity", "gamestate"]