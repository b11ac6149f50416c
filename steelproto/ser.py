"""Big-endian primitive readers and writers over binary streams."""

from __future__ import annotations

import io
import struct
from typing import BinaryIO, Union

from . import varint
from .errors import IncompleteError, ReadingError, TooLargeError, WritingError

_EOF_MESSAGE = "failed to fill whole buffer"
_CHUNK_SIZE = 1024
_I32_MAX = (1 << 31) - 1
_MAX_READ_STRING = _I32_MAX
_MAX_WRITE_STRING = (1 << 15) - 1

_I8 = struct.Struct(">b")
_U8 = struct.Struct(">B")
_I16 = struct.Struct(">h")
_U16 = struct.Struct(">H")
_I32 = struct.Struct(">i")
_U32 = struct.Struct(">I")
_I64 = struct.Struct(">q")
_U64 = struct.Struct(">Q")
_F32 = struct.Struct(">f")
_F64 = struct.Struct(">d")


class NetworkReader:
    """Reads protocol primitives from a binary stream or a bytes object."""

    def __init__(self, stream: Union[BinaryIO, bytes, bytearray, memoryview]) -> None:
        if isinstance(stream, (bytes, bytearray, memoryview)):
            stream = io.BytesIO(bytes(stream))
        self._stream = stream

    def _read_chunk(self, size: int) -> bytes:
        try:
            return self._stream.read(size)
        except OSError as err:
            raise IncompleteError(str(err)) from err

    def _read_exact(self, count: int) -> bytes:
        buffer = bytearray()
        while len(buffer) < count:
            chunk = self._read_chunk(count - len(buffer))
            if not chunk:
                raise IncompleteError(_EOF_MESSAGE)
            buffer += chunk
        return bytes(buffer)

    def _unpack(self, codec: struct.Struct):
        return codec.unpack(self._read_exact(codec.size))[0]

    def get_i8(self) -> int:
        return self._unpack(_I8)

    def get_u8(self) -> int:
        return self._unpack(_U8)

    def get_i16(self) -> int:
        return self._unpack(_I16)

    def get_u16(self) -> int:
        return self._unpack(_U16)

    def get_i32(self) -> int:
        return self._unpack(_I32)

    def get_u32(self) -> int:
        return self._unpack(_U32)

    def get_i64(self) -> int:
        return self._unpack(_I64)

    def get_u64(self) -> int:
        return self._unpack(_U64)

    def get_i128(self) -> int:
        return int.from_bytes(self._read_exact(16), "big", signed=True)

    def get_u128(self) -> int:
        return int.from_bytes(self._read_exact(16), "big", signed=False)

    def get_f32(self) -> float:
        return self._unpack(_F32)

    def get_f64(self) -> float:
        return self._unpack(_F64)

    def read_bytes(self, count: int) -> bytes:
        """Read exactly ``count`` bytes."""
        return self._read_exact(count)

    def read_remaining(self, bound: int) -> bytes:
        """Read to the end of the stream, failing if more than ``bound`` bytes remain."""
        buffer = bytearray()
        while True:
            chunk = self._read_chunk(_CHUNK_SIZE)
            if not chunk:
                return bytes(buffer)
            if len(buffer) + len(chunk) > bound:
                raise TooLargeError("Read remaining too long")
            buffer += chunk

    def get_bool(self) -> bool:
        return self.get_u8() != 0

    def get_var_int(self) -> int:
        return varint.read_var_int(self._stream)

    def get_var_uint(self) -> int:
        return varint.read_var_uint(self._stream)

    def get_string_bounded(self, bound: int) -> str:
        """Read a length-prefixed UTF-8 string of at most ``bound`` bytes."""
        size = self.get_var_uint()
        if size > bound:
            raise TooLargeError("string")
        data = self._read_exact(size)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as err:
            raise ReadingError(str(err)) from err

    def get_string(self) -> str:
        return self.get_string_bounded(_MAX_READ_STRING)


class NetworkWriter:
    """Writes protocol primitives to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def _write(self, data: bytes) -> None:
        try:
            self._stream.write(data)
        except OSError as err:
            raise WritingError(str(err), kind=WritingError.IO) from err

    def _pack(self, codec: struct.Struct, value) -> None:
        try:
            data = codec.pack(value)
        except (struct.error, OverflowError) as err:
            raise ValueError(f"{value!r} cannot be packed as {codec.format}: {err}") from err
        self._write(data)

    def _write_128(self, value: int, signed: bool) -> None:
        try:
            data = value.to_bytes(16, "big", signed=signed)
        except OverflowError as err:
            raise ValueError(f"{value} does not fit in 128 bits") from err
        self._write(data)

    def write_i8(self, value: int) -> None:
        self._pack(_I8, value)

    def write_u8(self, value: int) -> None:
        self._pack(_U8, value)

    def write_i16(self, value: int) -> None:
        self._pack(_I16, value)

    def write_u16(self, value: int) -> None:
        self._pack(_U16, value)

    def write_i32(self, value: int) -> None:
        self._pack(_I32, value)

    def write_u32(self, value: int) -> None:
        self._pack(_U32, value)

    def write_i64(self, value: int) -> None:
        self._pack(_I64, value)

    def write_u64(self, value: int) -> None:
        self._pack(_U64, value)

    def write_i128(self, value: int) -> None:
        self._write_128(value, signed=True)

    def write_u128(self, value: int) -> None:
        self._write_128(value, signed=False)

    def write_f32(self, value: float) -> None:
        self._pack(_F32, value)

    def write_f64(self, value: float) -> None:
        self._pack(_F64, value)

    def write_bytes(self, data: bytes) -> None:
        self._write(bytes(data))

    def write_bool(self, value: bool) -> None:
        self.write_u8(1 if value else 0)

    def write_var_int(self, value: int) -> None:
        varint.write_var_int(value, self._stream)

    def write_var_uint(self, value: int) -> None:
        varint.write_var_uint(value, self._stream)

    def write_string_bounded(self, value: str, bound: int) -> None:
        """Write a length-prefixed UTF-8 string of at most ``bound`` bytes."""
        data = value.encode("utf-8")
        if len(data) > bound:
            raise ValueError(f"string of {len(data)} bytes exceeds the bound of {bound}")
        if len(data) > _I32_MAX:
            raise WritingError(f"{len(data)} isn't representable as a VarInt")
        self.write_var_int(len(data))
        self._write(data)

    def write_string(self, value: str) -> None:
        self.write_string_bounded(value, _MAX_WRITE_STRING)