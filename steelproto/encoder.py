"""Writing framed, optionally compressed and encrypted packets to a stream."""

from __future__ import annotations

import zlib
from typing import Any, Optional, Tuple

from .cipher import StreamEncryptor
from .errors import (
    MAX_PACKET_DATA_SIZE,
    MAX_PACKET_SIZE,
    PacketTooLargeError,
    PacketWriteError,
)
from .varint import encode_var_int, var_int_size

_I32_MAX = (1 << 31) - 1
_MIN_LEVEL = 0
_MAX_LEVEL = 9


class NetworkEncoder:
    """Writes server-to-client packets, handling zlib compression and AES-128 CFB8.

    ``writer`` needs ``write(data)`` and an async ``drain()``, as an
    ``asyncio.StreamWriter`` has. Packets are given as already serialized
    packet ID and data.
    """

    def __init__(self, writer: Any) -> None:
        self._writer = writer
        self._encrypted = False
        self._compression: Optional[Tuple[int, int]] = None

    def set_compression(self, threshold: int, level: int) -> None:
        """Compress packets of at least ``threshold`` bytes at zlib ``level``."""
        if threshold < 0:
            raise ValueError(f"compression threshold must not be negative, got {threshold}")
        level = min(max(level, _MIN_LEVEL), _MAX_LEVEL)
        self._compression = (threshold, level)

    def set_encryption(self, key: bytes) -> None:
        """Encrypt everything written from now on; this cannot be undone."""
        if self._encrypted:
            raise RuntimeError("Cannot upgrade a stream that already has a cipher!")
        self._writer = StreamEncryptor(key, self._writer)
        self._encrypted = True

    def _frame(self, data: bytes) -> bytes:
        data_len = len(data)
        if data_len > MAX_PACKET_DATA_SIZE:
            raise PacketTooLargeError(data_len)

        if self._compression is None:
            complete_len = var_int_size(data_len) + data_len
            if complete_len > MAX_PACKET_SIZE:
                raise PacketTooLargeError(complete_len)
            return encode_var_int(data_len) + data

        threshold, level = self._compression
        if data_len >= threshold:
            try:
                compressed = zlib.compress(data, level)
            except zlib.error as err:
                raise PacketWriteError(str(err)) from err
            full_packet_len = var_int_size(data_len) + len(compressed)
            if full_packet_len > _I32_MAX:
                raise PacketWriteError(
                    f"Full packet length is too large to fit in VarInt! ({data_len})"
                )
            complete_len = var_int_size(full_packet_len) + full_packet_len
            if complete_len > MAX_PACKET_SIZE:
                raise PacketTooLargeError(complete_len)
            return encode_var_int(full_packet_len) + encode_var_int(data_len) + compressed

        # A data length of zero marks the packet as sent uncompressed.
        full_packet_len = var_int_size(0) + data_len
        complete_len = var_int_size(full_packet_len) + full_packet_len
        if complete_len > MAX_PACKET_SIZE:
            raise PacketTooLargeError(complete_len)
        return encode_var_int(full_packet_len) + encode_var_int(0) + data

    async def write_packet(self, packet_data: bytes) -> None:
        """Frame ``packet_data`` (packet ID and data), write it and flush."""
        frame = self._frame(bytes(packet_data))
        try:
            self._writer.write(frame)
            await self._writer.drain()
        except OSError as err:
            raise PacketWriteError(str(err)) from err