import io

import pytest

from entitydelta.entity import Delta
from entitydelta.gamestate import GameState


def _full_state() -> GameState:
    return GameState(
        id=1,
        round=5,
        score=50,
        lives=2,
        max_hp=100,
        x=5.5,
        y=10.5,
        speed=2.5,
        player_name="TestPlayer",
        is_active=True,
        inventory=["sword", "potion"],
        positions=[1.5, 2.5, 3.5],
        player_ids=[10, 20, 30],
        data=bytes([0xAA, 0xBB, 0xCC]),
        player_scores={"alice": 100, "bob": 200},
        item_counts={1: 5, 2: 3},
        metadata={"level": "forest", "mode": "survival"},
    )


def test_defaults_are_zero_values():
    state = GameState()
    assert state.id == 0
    assert state.player_name == ""
    assert state.is_active is False
    assert state.x == 0.0
    assert state.inventory is None
    assert state.metadata is None


def test_get_id():
    assert _full_state().get_id() == 1


def test_round_trip():
    original = _full_state()

    cloned = original.clone()
    assert cloned == original

    original.inventory[0] = "modified"
    assert cloned.inventory[0] == "sword"
    original.inventory[0] = "sword"

    cloned.score = 75
    cloned.lives = 1
    cloned.x = 15.5
    cloned.player_name = "ModifiedPlayer"
    cloned.is_active = False
    cloned.inventory = ["bow", "arrow", "map"]
    cloned.positions = [10.0, 20.0]
    cloned.player_ids.append(40)
    cloned.data = None
    cloned.player_scores["alice"] = 150
    cloned.player_scores["charlie"] = 300
    del cloned.item_counts[1]
    cloned.metadata = None

    assert original.player_ids == [10, 20, 30]
    assert original.player_scores == {"alice": 100, "bob": 200}

    d = original.delta(cloned)
    assert d is not None
    cloned.apply_delta(d)
    assert cloned == original

    cloned.apply_delta(None)
    assert cloned == original

    assert original.delta(None) is None


def test_delta_of_other_type_is_none():
    assert _full_state().delta("not a state") is None


def test_delta_of_identical_states_is_empty():
    state = _full_state()
    assert state.delta(state.clone()).changes == {}


def test_applied_collections_are_independent():
    source = GameState(id=1, inventory=["a"])
    target = GameState(id=1)
    d = source.delta(target)
    target.apply_delta(d)
    target.inventory.append("b")
    assert source.inventory == ["a"]
    assert d.changes["inventory"] == ["a"]


def test_absent_slice_against_present_becomes_empty():
    source = GameState(id=1)
    target = GameState(id=1, data=b"x", inventory=["y"])
    d = source.delta(target)
    target.apply_delta(d)
    assert target.data == b""
    assert target.inventory == []


def test_serialize_deserialize():
    original = GameState(
        id=1,
        round=5,
        score=100,
        x=10.5,
        y=20.5,
        player_name="TestPlayer",
        is_active=True,
        inventory=["sword", "potion"],
        player_scores={"alice": 150, "bob": 200},
    )
    modified = GameState(
        id=1,
        round=3,
        score=50,
        x=5.0,
        y=20.5,
        player_name="DifferentPlayer",
        is_active=True,
        inventory=["bow"],
        player_scores={"alice": 100, "charlie": 75},
    )

    d = original.delta(modified)
    buf = io.BytesIO()
    d.serialize(buf)
    buf.seek(0)

    restored = Delta(GameState).deserialize(buf)
    assert restored == d
    assert set(restored.changes) == {"round", "score", "x", "player_name", "inventory", "player_scores"}


def test_serialize_full_delta_round_trip():
    d = _full_state().delta(GameState())
    buf = io.BytesIO()
    d.serialize(buf)
    buf.seek(0)
    restored = Delta(GameState).deserialize(buf)
    assert restored == d
    assert restored.changes["data"] == bytes([0xAA, 0xBB, 0xCC])
    assert restored.changes["item_counts"] == {1: 5, 2: 3}


def test_serialized_id_only_bytes():
    buf = io.BytesIO()
    Delta(GameState, {"id": 7}).serialize(buf)
    assert buf.getvalue() == bytes([1, 0, 0, 0, 0, 0, 0, 0, 7, 0, 0, 0, 0, 0, 0, 0])


def test_serialized_metadata_uses_bit_sixteen():
    buf = io.BytesIO()
    Delta(GameState, {"metadata": {"k": "v"}}).serialize(buf)
    assert buf.getvalue() == bytes([0, 0, 1, 0, 0, 0, 0, 0, 1, 1, ord("k"), 1, ord("v")])


def test_deserialize_truncated_raises():
    buf = io.BytesIO()
    Delta(GameState, {"score": 9}).serialize(buf)
    truncated = io.BytesIO(buf.getvalue()[:-1])
    with pytest.raises(EOFError):
        Delta(GameState).deserialize(truncated)