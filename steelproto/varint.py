"""Variable-length integer encoding used by the protocol."""

from __future__ import annotations

import asyncio
from typing import BinaryIO

from .errors import CleanEOFError, IncompleteError, TooLargeError, WritingError

_MAX_SIZE = 5
_I32_MIN = -(1 << 31)
_I32_MAX = (1 << 31) - 1
_U32_MAX = (1 << 32) - 1
_EOF_MESSAGE = "failed to fill whole buffer"


def _check_i32(value: int) -> None:
    if not _I32_MIN <= value <= _I32_MAX:
        raise ValueError(f"{value} does not fit in a VarInt")


def _check_u32(value: int) -> None:
    if not 0 <= value <= _U32_MAX:
        raise ValueError(f"{value} does not fit in a VarUInt")


def _to_i32(value: int) -> int:
    value &= _U32_MAX
    return value - (1 << 32) if value > _I32_MAX else value


def _encode_unsigned(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _write(data: bytes, stream: BinaryIO) -> None:
    try:
        stream.write(data)
    except OSError as err:
        raise WritingError(str(err), kind=WritingError.IO) from err


def _read_byte(stream: BinaryIO) -> int:
    try:
        chunk = stream.read(1)
    except OSError as err:
        raise IncompleteError(str(err)) from err
    if not chunk:
        raise IncompleteError(_EOF_MESSAGE)
    return chunk[0]


def _read_unsigned(stream: BinaryIO, name: str) -> int:
    value = 0
    for index in range(_MAX_SIZE):
        byte = _read_byte(stream)
        value |= (byte & 0x7F) << (7 * index)
        if not byte & 0x80:
            return value & _U32_MAX
    raise TooLargeError(name)


def var_int_size(value: int) -> int:
    """Number of bytes the VarInt encoding of ``value`` takes."""
    _check_i32(value)
    if value == 0:
        return 1
    if value < 0:
        return _MAX_SIZE
    return (value.bit_length() - 1) // 7 + 1


def encode_var_int(value: int) -> bytes:
    """Encode a signed 32-bit integer as a VarInt."""
    _check_i32(value)
    return _encode_unsigned(value & _U32_MAX)


def write_var_int(value: int, stream: BinaryIO) -> None:
    """Write ``value`` as a VarInt to a binary stream."""
    _write(encode_var_int(value), stream)


def read_var_int(stream: BinaryIO) -> int:
    """Read a VarInt from a binary stream."""
    return _to_i32(_read_unsigned(stream, "VarInt"))


async def read_var_int_async(reader: asyncio.StreamReader) -> int:
    """Read a VarInt from an object with an async ``readexactly``."""
    value = 0
    for index in range(_MAX_SIZE):
        try:
            chunk = await reader.readexactly(1)
        except asyncio.IncompleteReadError as err:
            if index == 0:
                raise CleanEOFError("VarInt") from err
            raise IncompleteError(str(err)) from err
        except OSError as err:
            raise IncompleteError(str(err)) from err
        byte = chunk[0]
        value |= (byte & 0x7F) << (7 * index)
        if not byte & 0x80:
            return _to_i32(value)
    raise TooLargeError("VarInt")


async def write_var_int_async(value: int, writer: asyncio.StreamWriter) -> None:
    """Write a VarInt to an object with ``write`` and an async ``drain``."""
    data = encode_var_int(value)
    try:
        writer.write(data)
        await writer.drain()
    except OSError as err:
        raise WritingError(str(err), kind=WritingError.IO) from err


def var_uint_size(value: int) -> int:
    """Number of bytes the VarUInt encoding of ``value`` takes."""
    _check_u32(value)
    return -(-max(value.bit_length(), 1) // 7)


def encode_var_uint(value: int) -> bytes:
    """Encode an unsigned 32-bit integer as a VarUInt."""
    _check_u32(value)
    return _encode_unsigned(value)


def write_var_uint(value: int, stream: BinaryIO) -> None:
    """Write ``value`` as a VarUInt to a binary stream."""
    _write(encode_var_uint(value), stream)


def read_var_uint(stream: BinaryIO) -> int:
    """Read a VarUInt from a binary stream."""
    return _read_unsigned(stream, "VarUInt")