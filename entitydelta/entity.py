"""Entities whose changes are captured as deltas and encoded in a compact binary form.

An entity is a dataclass deriving from :class:`Entity` whose public fields are
declared with :func:`wire`, which records the field's wire type (``"int64"``,
``"[]string"``, ``"map[string]int16"`` and so on). Every entity needs an ``id``
field of wire type ``int64``. Slice and map fields default to ``None``, which
stands for an absent collection and is distinct from an empty one.
"""

from __future__ import annotations

import copy
import dataclasses
import functools
from typing import Any, BinaryIO, Mapping, Optional

from entitydelta.binary import BinaryReader, BinaryWriter
from entitydelta.wiretypes import (
    FieldKind,
    kind_of,
    read_value,
    slice_element_type,
    write_value,
)

WIRE_KEY = "wire_type"
ID_FIELD = "id"
ID_TYPE = "int64"
MAX_FIELDS = 64

_INT_TYPES = frozenset(
    {"int8", "int16", "int32", "int64", "uint8", "byte", "uint16", "uint32", "uint64"}
)
_FLOAT_TYPES = frozenset({"float32", "float64"})
_BYTE_ELEMENTS = frozenset({"byte", "uint8"})


class EntityError(Exception):
    """Raised when an entity class or a delta is not well formed."""


@dataclasses.dataclass(frozen=True)
class FieldInfo:
    """A public entity field and its wire type."""

    name: str
    type: str

    @property
    def kind(self) -> FieldKind:
        return kind_of(self.type)


def _zero_value(type_str: str) -> Any:
    if kind_of(type_str) is not FieldKind.PRIMITIVE:
        return None
    if type_str == "bool":
        return False
    if type_str == "string":
        return ""
    if type_str in _FLOAT_TYPES:
        return 0.0
    if type_str in _INT_TYPES:
        return 0
    return None


def wire(type_str: str) -> Any:
    """Declare a dataclass field carrying the given wire type, with its zero value as default."""
    return dataclasses.field(default=_zero_value(type_str), metadata={WIRE_KEY: type_str})


def is_exported(name: str) -> bool:
    """True for public field names: non-empty and not starting with an underscore."""
    return bool(name) and not name.startswith("_")


@functools.lru_cache(maxsize=None)
def collect_fields(cls: type) -> tuple[FieldInfo, ...]:
    """Return the public wire fields of an entity class in declaration order."""
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise EntityError(f"{cls!r} is not a dataclass")
    infos = []
    for field in dataclasses.fields(cls):
        if not is_exported(field.name):
            continue
        type_str = field.metadata.get(WIRE_KEY)
        if type_str is None:
            raise EntityError(f"field {field.name} of {cls.__name__} has no wire type")
        infos.append(FieldInfo(field.name, type_str))
    if not any(info.name == ID_FIELD and info.type == ID_TYPE for info in infos):
        raise EntityError(f"{cls.__name__} does not have an {ID_FIELD} field of type {ID_TYPE}")
    if len(infos) > MAX_FIELDS:
        raise EntityError(f"{cls.__name__} has {len(infos)} fields; at most {MAX_FIELDS} fit the mask")
    return tuple(infos)


def slices_equal(a, b) -> bool:
    """Element-wise equality; an absent sequence equals an empty one."""
    a = a if a is not None else ()
    b = b if b is not None else ()
    if len(a) != len(b):
        return False
    return all(x == y for x, y in zip(a, b))


def maps_equal(a, b) -> bool:
    """Key and value equality; an absent mapping equals an empty one."""
    a = a if a is not None else {}
    b = b if b is not None else {}
    if len(a) != len(b):
        return False
    return all(key in b and b[key] == value for key, value in a.items())


def _copy_container(value: Any) -> Any:
    return None if value is None else copy.copy(value)


def _empty_like(info: FieldInfo) -> Any:
    if info.kind is FieldKind.MAP:
        return {}
    return b"" if slice_element_type(info.type) in _BYTE_ELEMENTS else []


class Entity:
    """Base for dataclass entities that can be cloned and diffed."""

    def get_id(self) -> int:
        return getattr(self, ID_FIELD)

    def clone(self) -> "Entity":
        """Return a copy whose slices and maps are independent of this entity's."""
        duplicate = copy.copy(self)
        for info in collect_fields(type(self)):
            if info.kind is not FieldKind.PRIMITIVE:
                setattr(duplicate, info.name, _copy_container(getattr(self, info.name)))
        return duplicate

    def delta(self, other: Optional["Entity"]) -> Optional["Delta"]:
        """Return the values of this entity that differ from ``other``.

        Returns None when ``other`` is None or not of the same class.
        """
        if other is None or type(other) is not type(self):
            return None
        changes: dict[str, Any] = {}
        for info in collect_fields(type(self)):
            mine = getattr(self, info.name)
            theirs = getattr(other, info.name)
            if info.kind is FieldKind.SLICE:
                if not slices_equal(mine, theirs):
                    changes[info.name] = _empty_like(info) if mine is None else copy.copy(mine)
            elif info.kind is FieldKind.MAP:
                if not maps_equal(mine, theirs):
                    changes[info.name] = {} if mine is None else dict(mine)
            elif mine != theirs:
                changes[info.name] = mine
        return Delta(type(self), changes)

    def apply_delta(self, d: Optional["Delta"]) -> None:
        """Apply a delta made for this entity's class; anything else is ignored."""
        if d is None or not isinstance(d, Delta) or d.entity_cls is not type(self):
            return
        d.apply_to(self)


class Delta:
    """A set of changed field values for one entity class."""

    def __init__(self, entity_cls: type, changes: Optional[Mapping[str, Any]] = None) -> None:
        if not (isinstance(entity_cls, type) and issubclass(entity_cls, Entity)):
            raise EntityError(f"{entity_cls!r} is not an Entity class")
        known = {info.name for info in collect_fields(entity_cls)}
        self.entity_cls = entity_cls
        self.changes: dict[str, Any] = dict(changes or {})
        unknown = sorted(set(self.changes) - known)
        if unknown:
            raise EntityError(f"{entity_cls.__name__} has no fields {', '.join(unknown)}")

    @property
    def fields(self) -> tuple[FieldInfo, ...]:
        return collect_fields(self.entity_cls)

    def apply_to(self, entity: Entity) -> None:
        """Write the changed values into ``entity``; entities of another class are ignored."""
        if type(entity) is not self.entity_cls:
            return
        for info in self.fields:
            if info.name not in self.changes:
                continue
            value = self.changes[info.name]
            if info.kind is not FieldKind.PRIMITIVE:
                value = _copy_container(value)
            setattr(entity, info.name, value)

    def serialize(self, stream: BinaryIO) -> None:
        """Write a uint64 presence mask followed by each present field's value."""
        writer = BinaryWriter(stream)
        present = [(bit, info) for bit, info in enumerate(self.fields) if info.name in self.changes]
        writer.write_uint64(sum(1 << bit for bit, _ in present))
        for _, info in present:
            value = self.changes[info.name]
            if value is None and info.kind is not FieldKind.PRIMITIVE:
                value = _empty_like(info)
            write_value(writer, info.type, value)

    def deserialize(self, stream: BinaryIO) -> "Delta":
        """Read fields written by :meth:`serialize` into this delta and return it."""
        reader = BinaryReader(stream)
        mask = reader.read_uint64()
        for bit, info in enumerate(self.fields):
            if mask >> bit & 1:
                self.changes[info.name] = read_value(reader, info.type)
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Delta):
            return NotImplemented
        return self.entity_cls is other.entity_cls and self.changes == other.changes

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Delta({self.entity_cls.__name__}, {self.changes!r})"