"""Field type descriptions and their mapping onto binary reader/writer calls."""

from __future__ import annotations

import enum
from typing import Any

from entitydelta.binary import BinaryReader, BinaryWriter

_PRIMITIVE_SUFFIX = {
    "bool": "bool",
    "int8": "int8",
    "int16": "int16",
    "int32": "int32",
    "int64": "int64",
    "uint8": "uint8",
    "byte": "uint8",
    "uint16": "uint16",
    "uint32": "uint32",
    "uint64": "uint64",
    "float32": "float32",
    "float64": "float64",
    "string": "string",
}

_BYTE_ELEMENTS = frozenset({"byte", "uint8"})


class FieldKind(enum.Enum):
    """How a field type is compared, copied and encoded."""

    PRIMITIVE = "primitive"
    SLICE = "slice"
    MAP = "map"


def is_slice_type(type_str: str) -> bool:
    return type_str.startswith("[]")


def is_map_type(type_str: str) -> bool:
    return type_str.startswith("map[")


def kind_of(type_str: str) -> FieldKind:
    if is_slice_type(type_str):
        return FieldKind.SLICE
    if is_map_type(type_str):
        return FieldKind.MAP
    return FieldKind.PRIMITIVE


def slice_element_type(type_str: str) -> str:
    """Return the element type of a slice type, or the type itself otherwise."""
    return type_str[2:] if is_slice_type(type_str) else type_str


def _key_end(type_str: str) -> int | None:
    """Index of the bracket closing a map's key type, if any."""
    if not is_map_type(type_str):
        return None
    depth = 1
    for pos, char in enumerate(type_str[4:], start=4):
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return pos
    return None


def map_key_type(type_str: str) -> str:
    """Return a map type's key type; "string" if it cannot be found."""
    end = _key_end(type_str)
    return "string" if end is None else type_str[4:end]


def map_value_type(type_str: str) -> str:
    """Return a map type's value type; "string" if it cannot be found."""
    end = _key_end(type_str)
    return "string" if end is None else type_str[end + 1:]


def _method_suffix(type_str: str) -> str:
    suffix = _PRIMITIVE_SUFFIX.get(type_str)
    if suffix is not None:
        return suffix
    return "bytes" if type_str.startswith("[]byte") else "string"


def writer_method(type_str: str) -> str:
    """Name of the BinaryWriter method that encodes a single value of this type."""
    return f"write_{_method_suffix(type_str)}"


def reader_method(type_str: str) -> str:
    """Name of the BinaryReader method that decodes a single value of this type."""
    return f"read_{_method_suffix(type_str)}"


def _write_one(writer: BinaryWriter, type_str: str, value: Any) -> None:
    getattr(writer, writer_method(type_str))(value)


def _read_one(reader: BinaryReader, type_str: str) -> Any:
    return getattr(reader, reader_method(type_str))()


def write_value(writer: BinaryWriter, type_str: str, value: Any) -> None:
    """Encode a field value: slices and maps as a varint count followed by items."""
    kind = kind_of(type_str)
    if kind is FieldKind.SLICE:
        element = slice_element_type(type_str)
        writer.write_var_uint32(len(value))
        for item in value:
            _write_one(writer, element, item)
    elif kind is FieldKind.MAP:
        key_type, value_type = map_key_type(type_str), map_value_type(type_str)
        writer.write_var_uint32(len(value))
        for key, item in value.items():
            _write_one(writer, key_type, key)
            _write_one(writer, value_type, item)
    else:
        _write_one(writer, type_str, value)


def read_value(reader: BinaryReader, type_str: str) -> Any:
    """Decode a field value written by write_value."""
    kind = kind_of(type_str)
    if kind is FieldKind.SLICE:
        element = slice_element_type(type_str)
        length = reader.read_var_uint32()
        items = [_read_one(reader, element) for _ in range(length)]
        return bytes(items) if element in _BYTE_ELEMENTS else items
    if kind is FieldKind.MAP:
        key_type, value_type = map_key_type(type_str), map_value_type(type_str)
        length = reader.read_var_uint32()
        result = {}
        for _ in range(length):
            key = _read_one(reader, key_type)
            result[key] = _read_one(reader, value_type)
        return result
    return _read_one(reader, type_str)