"""Error types raised while reading and writing protocol data."""

from __future__ import annotations

# Protocol size limits.
MAX_PACKET_SIZE = 2_097_152
MAX_PACKET_DATA_SIZE = 8_388_608


class ReadingError(Exception):
    """A value could not be read from a byte stream."""

    _template = "{}"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(self._template.format(detail))


class CleanEOFError(ReadingError):
    """The stream ended before the first byte of a value."""

    _template = "EOF, Tried to read {} but No bytes left to consume"


class IncompleteError(ReadingError):
    """The stream ended or failed part way through a value."""

    _template = "incomplete: {}"


class TooLargeError(ReadingError):
    """A value was longer than allowed."""

    _template = "too large: {}"


class WritingError(Exception):
    """A value could not be written to a byte stream."""

    IO = "io"
    SERDE = "serde"
    MESSAGE = "message"

    _templates = {
        IO: "IO error: {}",
        SERDE: "Serde failure: {}",
        MESSAGE: "Failed to serialize packet: {}",
    }

    def __init__(self, detail: str = "", kind: str = MESSAGE) -> None:
        if kind not in self._templates:
            raise ValueError(f"unknown writing error kind: {kind!r}")
        self.detail = detail
        self.kind = kind
        super().__init__(self._templates[kind].format(detail))


class PacketReadError(Exception):
    """A packet could not be read."""

    _template = "{}"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(self._template.format(detail))


class DecodeIdError(PacketReadError):
    _template = "failed to decode packet ID"


class PacketTooLongError(PacketReadError):
    _template = "packet exceeds maximum length"


class OutOfBoundsError(PacketReadError):
    _template = "packet length is out of bounds"


class MalformedLengthError(PacketReadError):
    _template = "malformed packet length VarInt: {}"


class MalformedValueError(PacketReadError):
    _template = "malformed packet value: {}"


class FailedDecompressionError(PacketReadError):
    _template = "failed to decompress packet: {}"


class NotCompressedError(PacketReadError):
    _template = "packet is uncompressed but greater than the threshold"


class ConnectionClosedError(PacketReadError):
    _template = "the connection has closed"


class PacketWriteError(Exception):
    """A packet could not be written."""

    _template = "Writing packet failed: {}"

    def __init__(self, detail: object = "") -> None:
        self.detail = detail
        super().__init__(self._template.format(detail))


class PacketTooLargeError(PacketWriteError):
    """The packet is longer than the protocol allows."""

    _template = "Packet exceeds maximum length: {}"

    def __init__(self, length: int) -> None:
        self.length = length
        super().__init__(length)


class CompressionFailedError(PacketWriteError):
    _template = "Compression failed {}"


def to_packet_read_error(error: ReadingError) -> PacketReadError:
    """Map a low-level reading error to the packet-level error it stands for."""
    if not isinstance(error, ReadingError):
        raise TypeError(f"expected a ReadingError, got {type(error).__name__}")
    if isinstance(error, CleanEOFError):
        return ConnectionClosedError()
    if isinstance(error, TooLargeError):
        return MalformedLengthError(error.detail)
    return FailedDecompressionError(str(error))


def to_packet_write_error(error: WritingError) -> PacketWriteError:
    """Map a low-level writing error to a packet-level error."""
    if not isinstance(error, WritingError):
        raise TypeError(f"expected a WritingError, got {type(error).__name__}")
    if error.kind == WritingError.IO:
        return PacketWriteError(f"IO error: {error.detail}")
    if error.kind == WritingError.SERDE:
        return PacketWriteError(f"Serialization error: {error.detail}")
    return PacketWriteError(error.detail)