# entitydelta

Compute what changed between two snapshots of an entity, ship only those
changes over the wire, and apply them on the other side.

An entity is a dataclass of typed fields with an integer `id`. Comparing
two instances yields a `Delta` holding only the fields whose values
differ. A delta can be applied to an entity to bring it up to date, and it
can be written to and read from any binary stream.

## Installation

```
pip install entitydelta
```

The package has no runtime dependencies.

## Declaring an entity

An entity is a `dataclasses.dataclass` that derives from
`entitydelta.entity.Entity`. Each public field is declared with `wire()`,
which records the field's wire type and gives it that type's zero value as
default (`0`, `0.0`, `""`, `False`; `None` for slices and maps):

```python
import dataclasses
from typing import Optional

from entitydelta.entity import Entity, wire


@dataclasses.dataclass
class Player(Entity):
    id: int = wire("int64")
    name: str = wire("string")
    hp: int = wire("uint16")
    tags: Optional[list[str]] = wire("[]string")
    stats: Optional[dict[str, int]] = wire("map[string]int32")
```

Supported wire types are `bool`, `int8`, `int16`, `int32`, `int64`,
`uint8` (or `byte`), `uint16`, `uint32`, `uint64`, `float32`, `float64`,
`string`, slices such as `[]string` or `[]byte`, and maps such as
`map[int8]int32`.

Rules, checked by `collect_fields(cls)` the first time the class is used
(by `clone`, `delta` or `Delta(...)`), which raises `EntityError` when
they are broken:

- the class must be a dataclass;
- every public field (a name not starting with `_`, see `is_exported`)
  must be declared with `wire()`; fields starting with `_` are ignored;
- there must be an `id` field of wire type `int64`;
- there may be at most 64 public fields.

`collect_fields` returns a tuple of `FieldInfo(name, type)` in declaration
order; `FieldInfo.kind` is a `FieldKind` (`PRIMITIVE`, `SLICE`, `MAP`).

`entitydelta.gamestate.GameState` is a ready-made entity that uses every
supported kind of field.

## Clone, diff, apply

```python
from entitydelta.gamestate import GameState

current = GameState(id=1, score=50, inventory=["sword", "potion"],
                    player_scores={"alice": 100})
previous = current.clone()        # slices and maps are copied, not shared
previous.score = 75
previous.inventory = ["bow"]

change = current.delta(previous)  # values of `current` that differ from `previous`
# Delta(GameState, {'score': 50, 'inventory': ['sword', 'potion']})
previous.apply_delta(change)
assert previous == current
```

- `get_id()` returns the `id` field.
- `delta(other)` returns `None` when `other` is `None` or of another class.
- `apply_delta(d)` does nothing for `None`, for non-deltas, or for a delta
  made for another class; `Delta.apply_to(entity)` likewise ignores
  entities of another class.
- Slices and maps are compared with `slices_equal` and `maps_equal`, which
  treat `None` as equal to an empty collection. A changed slice or map is
  carried whole; when the newer value is `None` the delta carries an empty
  collection instead.
- Applied slices and maps are copied into the entity.

A `Delta` is built as `Delta(entity_cls, changes)`, where `changes` maps
field names to values; unknown names raise `EntityError`. Deltas compare
equal when their class and changes are equal.

## Wire format

```python
import io
from entitydelta.entity import Delta
from entitydelta.gamestate import GameState

buffer = io.BytesIO()
change.serialize(buffer)

buffer.seek(0)
received = Delta(GameState).deserialize(buffer)
assert received == change
```

A serialized delta is:

1. a little-endian `uint64` bitmask, bit *i* set when the *i*-th declared
   field is present;
2. the value of each present field, in declaration order.

Fixed-size numbers are little-endian; `bool` is one byte. Strings are a
varint byte length followed by UTF-8 bytes. Slices are a varint count
followed by each element; maps are a varint count followed by key/value
pairs in the mapping's iteration order. A `[]byte` or `[]uint8` slice is
read back as `bytes`.

Reading a truncated stream raises `EOFError`; a varint longer than 32 bits
raises `ValueError`. Writing a number outside its type's range raises
`OverflowError`.

## Low-level reader and writer

`entitydelta.binary` exposes the primitives used by the format:

```python
import io
from entitydelta.binary import BinaryReader, BinaryWriter

stream = io.BytesIO()
writer = BinaryWriter(stream)
writer.write_var_uint32(300)   # b"\xac\x02"
writer.write_string("sword")
writer.write_float64(2.5)

stream.seek(0)
reader = BinaryReader(stream)
assert reader.read_var_uint32() == 300
assert reader.read_string() == "sword"
assert reader.read_float64() == 2.5
```

Both classes have a `write_*` / `read_*` method for `byte`, `bool`,
`int8`–`int64`, `uint8`–`uint64`, `float32`, `float64`, `string`, `bytes`
and `var_uint32`.

`entitydelta.wiretypes` works on type strings: `kind_of`,
`is_slice_type`, `is_map_type`, `slice_element_type`, `map_key_type`,
`map_value_type`, `writer_method`, `reader_method`, and `write_value` /
`read_value`, which encode and decode one field value of a given type.

## What it does not do

There is no command-line tool and no code generation: entity classes are
written by hand as dataclasses, as shown above. Nested entities, pointers
and struct-typed fields are not supported; any wire type the table above
does not name is encoded as a string.

## Running the tests

```
pip install -e ".[test]"
pytest
```