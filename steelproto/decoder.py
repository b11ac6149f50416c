"""Reading framed, optionally compressed and encrypted packets from a stream."""

from __future__ import annotations

import asyncio
import dataclasses
import io
import zlib
from typing import Any, Optional

from .cipher import StreamDecryptor
from .errors import (
    MAX_PACKET_DATA_SIZE,
    MAX_PACKET_SIZE,
    CleanEOFError,
    FailedDecompressionError,
    NotCompressedError,
    OutOfBoundsError,
    PacketTooLongError,
    ReadingError,
    to_packet_read_error,
)
from .varint import read_var_int, read_var_int_async, var_int_size


@dataclasses.dataclass(frozen=True)
class RawPacket:
    """A packet's ID and its still-undecoded payload."""

    id: int
    payload: bytes


def _read_leading_var_int(stream: io.BytesIO, size: int) -> int:
    if stream.tell() >= size:
        raise CleanEOFError("VarInt")
    return read_var_int(stream)


def _decompress(data: bytes) -> bytes:
    inflater = zlib.decompressobj()
    try:
        body = inflater.decompress(data)
    except zlib.error as err:
        raise FailedDecompressionError(str(err)) from err
    if not inflater.eof:
        raise FailedDecompressionError("unexpected end of file")
    return body


class NetworkDecoder:
    """Reads client-to-server packets, handling zlib compression and AES-128 CFB8.

    ``reader`` needs async ``read(n)`` and ``readexactly(n)``, as an
    ``asyncio.StreamReader`` has.
    """

    def __init__(self, reader: Any) -> None:
        self._reader = reader
        self._encrypted = False
        self._compression: Optional[int] = None

    def set_compression(self, threshold: int) -> None:
        self._compression = threshold

    def set_encryption(self, key: bytes) -> None:
        """Decrypt everything read from now on; this cannot be undone."""
        if self._encrypted:
            raise RuntimeError("Cannot upgrade a stream that already has a cipher!")
        self._reader = StreamDecryptor(key, self._reader)
        self._encrypted = True

    async def _read_frame(self, length: int) -> bytes:
        try:
            return await self._reader.readexactly(length)
        except asyncio.IncompleteReadError as err:
            return err.partial

    async def get_raw_packet(self) -> RawPacket:
        """Read the next packet from the stream."""
        try:
            packet_len = await read_var_int_async(self._reader)
            if packet_len < 0 or packet_len > MAX_PACKET_SIZE:
                raise OutOfBoundsError()

            frame = await self._read_frame(packet_len)
            stream = io.BytesIO(frame)

            if self._compression is not None:
                decompressed_len = _read_leading_var_int(stream, len(frame))
                raw_packet_len = packet_len - var_int_size(decompressed_len)
                if decompressed_len < 0 or decompressed_len > MAX_PACKET_DATA_SIZE:
                    raise PacketTooLongError()
                if decompressed_len > 0:
                    body = _decompress(stream.read())
                else:
                    if raw_packet_len > self._compression:
                        raise NotCompressedError()
                    body = stream.read()
            else:
                body = stream.read()

            body_stream = io.BytesIO(body)
            packet_id = _read_leading_var_int(body_stream, len(body))
            payload = body_stream.read()
        except ReadingError as err:
            raise to_packet_read_error(err) from err
        return RawPacket(id=packet_id, payload=payload)