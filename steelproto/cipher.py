"""AES-128 CFB8 stream encryption for protocol connections."""

from __future__ import annotations

import asyncio
from typing import Any

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

_KEY_SIZE = 16


def _cipher(key: bytes) -> Cipher:
    key = bytes(key)
    if len(key) != _KEY_SIZE:
        raise ValueError(f"AES-128 keys are {_KEY_SIZE} bytes long, got {len(key)}")
    # The protocol uses the shared secret both as key and as IV.
    return Cipher(algorithms.AES(key), modes.CFB8(key))


class StreamEncryptor:
    """Encrypts everything written through it before passing it on.

    ``writer`` needs ``write(data)``, an async ``drain()`` and ``close()``,
    as an ``asyncio.StreamWriter`` has.
    """

    def __init__(self, key: bytes, writer: Any) -> None:
        self._encryptor = _cipher(key).encryptor()
        self._writer = writer

    def write(self, data: bytes) -> None:
        self._writer.write(self._encryptor.update(bytes(data)))

    async def drain(self) -> None:
        await self._writer.drain()

    def close(self) -> None:
        self._writer.close()


class StreamDecryptor:
    """Decrypts everything read through it.

    ``reader`` needs async ``read(n)`` and ``readexactly(n)``, as an
    ``asyncio.StreamReader`` has.
    """

    def __init__(self, key: bytes, reader: Any) -> None:
        self._decryptor = _cipher(key).decryptor()
        self._reader = reader

    async def read(self, n: int = -1) -> bytes:
        data = await self._reader.read(n)
        return self._decryptor.update(data)

    async def readexactly(self, n: int) -> bytes:
        try:
            data = await self._reader.readexactly(n)
        except asyncio.IncompleteReadError as err:
            partial = self._decryptor.update(err.partial)
            raise asyncio.IncompleteReadError(partial, err.expected) from err
        return self._decryptor.update(data)