"""Declarative packets: dataclasses and enums that read and write themselves."""

from __future__ import annotations

import dataclasses
import enum
import functools
import io
import json
from typing import Any, Callable, Optional

from .errors import (
    MalformedValueError,
    PacketWriteError,
    ReadingError,
    WritingError,
    to_packet_read_error,
    to_packet_write_error,
)
from .ser import NetworkReader, NetworkWriter

_META_KEY = "steelproto"
_NUMERIC_KINDS = ("i8", "i16", "i32", "i64", "i128", "u8", "u16", "u32", "u64", "u128")

_READERS: dict[str, Callable[[NetworkReader], Any]] = {
    "var_int": NetworkReader.get_var_int,
    "var_uint": NetworkReader.get_var_uint,
    "bool": NetworkReader.get_bool,
    "i8": NetworkReader.get_i8,
    "i16": NetworkReader.get_i16,
    "i32": NetworkReader.get_i32,
    "i64": NetworkReader.get_i64,
    "i128": NetworkReader.get_i128,
    "u8": NetworkReader.get_u8,
    "u16": NetworkReader.get_u16,
    "u32": NetworkReader.get_u32,
    "u64": NetworkReader.get_u64,
    "u128": NetworkReader.get_u128,
    "f32": NetworkReader.get_f32,
    "f64": NetworkReader.get_f64,
}

_WRITERS: dict[str, Callable[[NetworkWriter, Any], None]] = {
    "var_int": NetworkWriter.write_var_int,
    "var_uint": NetworkWriter.write_var_uint,
    "bool": NetworkWriter.write_bool,
    "i8": NetworkWriter.write_i8,
    "i16": NetworkWriter.write_i16,
    "i32": NetworkWriter.write_i32,
    "i64": NetworkWriter.write_i64,
    "i128": NetworkWriter.write_i128,
    "u8": NetworkWriter.write_u8,
    "u16": NetworkWriter.write_u16,
    "u32": NetworkWriter.write_u32,
    "u64": NetworkWriter.write_u64,
    "u128": NetworkWriter.write_u128,
    "f32": NetworkWriter.write_f32,
    "f64": NetworkWriter.write_f64,
}

_READ_KINDS = frozenset(_READERS) | {"string"}
_WRITE_KINDS = frozenset(_WRITERS) | {"string", "json"}
_ENUM_KINDS = frozenset({"var_int", *_NUMERIC_KINDS})

_BUILTIN_KINDS = {str: "string", bool: "bool"}
_BUILTIN_NAMES = {"str": "string", "bool": "bool"}

# Packet and enum classes, for resolving annotations written as strings.
_BY_QUALNAME: dict[tuple[str, str], type] = {}
_BY_NAME: dict[str, type] = {}


def _register(cls: type) -> None:
    _BY_QUALNAME[(cls.__module__, cls.__qualname__)] = cls
    _BY_NAME[cls.__name__] = cls


@dataclasses.dataclass(frozen=True)
class _FieldSpec:
    read_as: Optional[str] = None
    write_as: Optional[str] = None
    bound: Optional[int] = None


_NO_SPEC = _FieldSpec()


def packet_field(read_as=None, write_as=None, bound=None, default=dataclasses.MISSING):
    """A dataclass field with an explicit wire format.

    ``write_as`` falls back to ``read_as``; ``bound`` limits string lengths.
    """
    if read_as is not None and read_as not in _READ_KINDS:
        raise ValueError(f"Unknown read strategy: `{read_as}`")
    if write_as is None:
        write_as = read_as
    if write_as is not None and write_as not in _WRITE_KINDS:
        raise ValueError(f"Unknown write strategy: `{write_as}`")
    if bound is not None and bound < 0:
        raise ValueError(f"bound must not be negative, got {bound}")
    spec = _FieldSpec(read_as=read_as, write_as=write_as, bound=bound)
    return dataclasses.field(default=default, metadata={_META_KEY: spec})


def _is_packet_type(kind: Any) -> bool:
    return isinstance(kind, type) and issubclass(kind, (Packet, PacketEnum))


def read_value(kind, reader: NetworkReader, bound: Optional[int] = None) -> Any:
    """Read one value of the given wire kind, or of a packet or enum class."""
    if _is_packet_type(kind):
        return kind.read_packet(reader)
    if kind == "string":
        return reader.get_string() if bound is None else reader.get_string_bounded(bound)
    read = _READERS.get(kind) if isinstance(kind, str) else None
    if read is None:
        raise ValueError(f"Unknown read strategy: `{kind}`")
    return read(reader)


def write_value(kind, value: Any, writer: NetworkWriter, bound: Optional[int] = None) -> None:
    """Write one value in the given wire kind, or with its own ``write_packet``."""
    if _is_packet_type(kind):
        value.write_packet(writer)
        return
    if kind == "string":
        if bound is None:
            writer.write_string(value)
        else:
            writer.write_string_bounded(value, bound)
        return
    if kind == "json":
        try:
            text = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as err:
            raise PacketWriteError(f"Failed to serialize: {err}") from err
        writer.write_string(text)
        return
    write = _WRITERS.get(kind) if isinstance(kind, str) else None
    if write is None:
        raise ValueError(f"Unknown write strategy: `{kind}`")
    write(writer, value)


def _kind_for_type(owner: type, tp: Any):
    if isinstance(tp, str):
        name = tp.strip()
        if name in _BUILTIN_NAMES:
            return _BUILTIN_NAMES[name]
        found = _BY_QUALNAME.get((owner.__module__, name)) or _BY_NAME.get(name)
        return found if found is not None and _is_packet_type(found) else None
    if isinstance(tp, type):
        if _is_packet_type(tp):
            return tp
        return _BUILTIN_KINDS.get(tp)
    return None


@functools.lru_cache(maxsize=None)
def _field_plan(cls: type, reading: bool) -> tuple:
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls.__name__} must be a dataclass to be a packet")
    plan = []
    for field in dataclasses.fields(cls):
        if not field.init:
            continue
        spec = field.metadata.get(_META_KEY, _NO_SPEC)
        kind = spec.read_as if reading else spec.write_as
        if kind is None:
            kind = _kind_for_type(cls, field.type)
        if kind is None:
            side = "read_as" if reading else "write_as"
            raise TypeError(f"{cls.__name__}.{field.name} needs a {side} strategy")
        plan.append((field.name, kind, spec.bound))
    return tuple(plan)


class Packet:
    """Base for dataclass packets whose fields are read and written in order."""

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        _register(cls)

    @classmethod
    def read_packet(cls, reader: NetworkReader):
        values = {}
        try:
            for name, kind, bound in _field_plan(cls, True):
                values[name] = read_value(kind, reader, bound)
        except ReadingError as err:
            raise to_packet_read_error(err) from err
        return cls(**values)

    def write_packet(self, writer: NetworkWriter) -> None:
        try:
            for name, kind, bound in _field_plan(type(self), False):
                write_value(kind, getattr(self, name), writer, bound)
        except WritingError as err:
            raise to_packet_write_error(err) from err

    @classmethod
    def from_bytes(cls, data: bytes):
        return cls.read_packet(NetworkReader(data))

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.write_packet(NetworkWriter(buffer))
        return buffer.getvalue()


class PacketEnum(enum.IntEnum):
    """Integer enum sent as its discriminant.

    Subclasses choose the wire format with class keywords, for example
    ``class Intent(PacketEnum, read_as="var_int", write_as="var_int")``.
    Reading defaults to a VarInt; writing needs ``write_as``.
    """

    def __init_subclass__(cls, read_as="var_int", write_as=None, **kwargs):
        super().__init_subclass__(**kwargs)
        if read_as not in _ENUM_KINDS:
            raise ValueError(f"Unknown read strategy: `{read_as}`")
        if write_as is not None and write_as not in _ENUM_KINDS:
            raise ValueError(f"Unknown write strategy: `{write_as}`")
        cls._wire_read = read_as
        cls._wire_write = write_as
        _register(cls)

    @classmethod
    def read_packet(cls, reader: NetworkReader):
        try:
            raw = read_value(cls._wire_read, reader)
        except ReadingError as err:
            raise to_packet_read_error(err) from err
        try:
            return cls(raw)
        except ValueError:
            raise MalformedValueError(f"Invalid {cls.__name__}") from None

    def write_packet(self, writer: NetworkWriter) -> None:
        kind = type(self)._wire_write
        if kind is None:
            raise TypeError(f"{type(self).__name__} has no write_as strategy")
        try:
            write_value(kind, int(self), writer)
        except WritingError as err:
            raise to_packet_write_error(err) from err