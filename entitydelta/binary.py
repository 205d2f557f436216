"""Little-endian binary primitives used to serialize deltas."""

from __future__ import annotations

import struct
from typing import BinaryIO

_UINT32_LIMIT = 1 << 32


class BinaryWriter:
    """Writes fixed-width little-endian values and length-prefixed data to a stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def _pack(self, fmt: str, value) -> None:
        try:
            data = struct.pack(fmt, value)
        except struct.error as exc:
            raise OverflowError(str(exc)) from exc
        self._stream.write(data)

    def write_byte(self, value: int) -> None:
        self._pack("<B", value)

    def write_bool(self, value: bool) -> None:
        self.write_byte(1 if value else 0)

    def write_int8(self, value: int) -> None:
        self._pack("<b", value)

    def write_int16(self, value: int) -> None:
        self._pack("<h", value)

    def write_int32(self, value: int) -> None:
        self._pack("<i", value)

    def write_int64(self, value: int) -> None:
        self._pack("<q", value)

    def write_uint8(self, value: int) -> None:
        self.write_byte(value)

    def write_uint16(self, value: int) -> None:
        self._pack("<H", value)

    def write_uint32(self, value: int) -> None:
        self._pack("<I", value)

    def write_uint64(self, value: int) -> None:
        self._pack("<Q", value)

    def write_float32(self, value: float) -> None:
        self._pack("<f", value)

    def write_float64(self, value: float) -> None:
        self._pack("<d", value)

    def write_string(self, value: str) -> None:
        """Write a varint byte length followed by the UTF-8 encoded text."""
        data = value.encode("utf-8", "surrogateescape")
        self.write_var_uint32(len(data))
        self._stream.write(data)

    def write_bytes(self, value: bytes) -> None:
        """Write a varint length followed by the raw bytes."""
        data = bytes(value)
        self.write_var_uint32(len(data))
        self._stream.write(data)

    def write_var_uint32(self, value: int) -> None:
        """Write an unsigned 32-bit integer as a base-128 varint."""
        if not 0 <= value < _UINT32_LIMIT:
            raise OverflowError(f"value {value} does not fit in uint32")
        while value >= 0x80:
            self.write_byte((value & 0x7F) | 0x80)
            value >>= 7
        self.write_byte(value)


class BinaryReader:
    """Reads values written by BinaryWriter; raises EOFError on short input."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def _read_exact(self, size: int) -> bytes:
        chunks = []
        remaining = size
        while remaining:
            chunk = self._stream.read(remaining)
            if not chunk:
                raise EOFError(f"expected {size} bytes, got {size - remaining}")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _unpack(self, fmt: str):
        return struct.unpack(fmt, self._read_exact(struct.calcsize(fmt)))[0]

    def read_byte(self) -> int:
        return self._read_exact(1)[0]

    def read_bool(self) -> bool:
        return self.read_byte() != 0

    def read_int8(self) -> int:
        return self._unpack("<b")

    def read_int16(self) -> int:
        return self._unpack("<h")

    def read_int32(self) -> int:
        return self._unpack("<i")

    def read_int64(self) -> int:
        return self._unpack("<q")

    def read_uint8(self) -> int:
        return self.read_byte()

    def read_uint16(self) -> int:
        return self._unpack("<H")

    def read_uint32(self) -> int:
        return self._unpack("<I")

    def read_uint64(self) -> int:
        return self._unpack("<Q")

    def read_float32(self) -> float:
        return self._unpack("<f")

    def read_float64(self) -> float:
        return self._unpack("<d")

    def read_string(self) -> str:
        length = self.read_var_uint32()
        return self._read_exact(length).decode("utf-8", "surrogateescape")

    def read_bytes(self) -> bytes:
        length = self.read_var_uint32()
        return self._read_exact(length)

    def read_var_uint32(self) -> int:
        """Read a base-128 varint; raises ValueError if it runs past 32 bits."""
        result = 0
        shift = 0
        while True:
            byte = self.read_byte()
            result |= (byte & 0x7F) << shift
            if byte < 0x80:
                return result & 0xFFFFFFFF
            shift += 7
            if shift >= 32:
                raise ValueError("varint overflow")