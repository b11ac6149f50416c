import dataclasses
import io
import json

import pytest

from steelproto.errors import (
    FailedDecompressionError,
    MalformedLengthError,
    MalformedValueError,
    PacketWriteError,
)
from steelproto.packet import Packet, PacketEnum, packet_field, read_value, write_value
from steelproto.ser import NetworkReader, NetworkWriter


class Color(PacketEnum, read_as="var_int", write_as="var_int"):
    RED = 1
    GREEN = 2


class Small(PacketEnum, read_as="u8", write_as="u8"):
    ONE = 1
    TWO = 2


class ReadOnly(PacketEnum):
    ONLY = 3


@dataclasses.dataclass
class Sample(Packet):
    count: int = packet_field(read_as="var_int")
    name: str = packet_field(read_as="string", bound=8)
    port: int = packet_field(read_as="u16")
    flag: bool = packet_field(read_as="bool")


@dataclasses.dataclass
class Outer(Packet):
    inner: Sample
    color: Color
    label: str


@dataclasses.dataclass
class Message(Packet):
    reason: dict = packet_field(write_as="json")


@dataclasses.dataclass
class Untyped(Packet):
    value: int


class NotData(Packet):
    pass


def _write(kind, value, bound=None):
    buffer = io.BytesIO()
    write_value(kind, value, NetworkWriter(buffer), bound)
    return buffer.getvalue()


def test_sample_wire_bytes():
    packet = Sample(count=300, name="ab", port=25565, flag=True)
    assert Packet.to_bytes(packet) == b"\xac\x02\x02ab\x63\xdd\x01"


def test_sample_round_trip():
    packet = Sample(count=-7, name="hostname", port=1, flag=False)
    data = Packet.to_bytes(packet)
    assert read_value(Sample, NetworkReader(data)) == packet
    assert Sample.from_bytes(data) == packet


def test_nested_packet_and_enum_round_trip():
    packet = Outer(inner=Sample(5, "x", 80, True), color=Color.GREEN, label="label")
    decoded = read_value(Outer, NetworkReader(Packet.to_bytes(packet)))
    assert decoded == packet
    assert decoded.color is Color.GREEN


def test_truncated_data_is_a_read_error():
    data = Packet.to_bytes(Sample(count=300, name="ab", port=1, flag=True))
    with pytest.raises(FailedDecompressionError):
        read_value(Sample, NetworkReader(data[:4]))


def test_empty_data_is_a_read_error():
    with pytest.raises(FailedDecompressionError):
        read_value(Sample, NetworkReader(b""))


def test_string_over_read_bound():
    data = b"\x01\x09" + b"x" * 9 + b"\x00\x01\x01"
    with pytest.raises(MalformedLengthError):
        read_value(Sample, NetworkReader(data))


def test_string_over_write_bound():
    with pytest.raises(ValueError):
        Packet.to_bytes(Sample(count=1, name="x" * 9, port=1, flag=True))


def test_json_field_is_written_as_string():
    reason = {"text": "bye", "bold": True}
    data = Packet.to_bytes(Message(reason=reason))
    assert json.loads(NetworkReader(data).get_string()) == reason


def test_json_field_cannot_be_read():
    with pytest.raises(TypeError):
        read_value(Message, NetworkReader(b"\x02{}"))


def test_unserializable_json_is_a_write_error():
    with pytest.raises(PacketWriteError) as info:
        Packet.to_bytes(Message(reason={"x": object()}))
    assert "Failed to serialize" in str(info.value)


def test_int_field_without_strategy():
    with pytest.raises(TypeError):
        Packet.to_bytes(Untyped(1))
    with pytest.raises(TypeError):
        read_value(Untyped, NetworkReader(b"\x00\x00\x00\x01"))


def test_non_dataclass_packet():
    with pytest.raises(TypeError):
        read_value(NotData, NetworkReader(b""))


@pytest.mark.parametrize("read_as, write_as", [("nope", None), (None, "nope"), ("json", None)])
def test_unknown_field_strategy(read_as, write_as):
    with pytest.raises(ValueError):
        packet_field(read_as=read_as, write_as=write_as)


@pytest.mark.parametrize(
    "kind, value",
    [
        ("i8", -128),
        ("u8", 255),
        ("i16", -32768),
        ("u16", 65535),
        ("i32", -(2**31)),
        ("u32", 2**32 - 1),
        ("i64", -(2**63)),
        ("u64", 2**64 - 1),
        ("i128", -(2**127)),
        ("u128", 2**128 - 1),
        ("f32", 0.25),
        ("f64", 1.5),
        ("var_int", -1),
        ("var_uint", 2**32 - 1),
        ("bool", True),
        ("string", "héllo"),
    ],
)
def test_value_round_trip(kind, value):
    assert read_value(kind, NetworkReader(_write(kind, value))) == value


def test_write_i32_minus_one():
    assert _write("i32", -1) == b"\xff\xff\xff\xff"


def test_unknown_value_kinds():
    with pytest.raises(ValueError):
        read_value("json", NetworkReader(b"\x00"))
    with pytest.raises(ValueError):
        write_value("nope", 1, NetworkWriter(io.BytesIO()))


def test_enum_u8_write_and_read():
    data = _write(Small, Small.TWO)
    assert len(data) == 1
    assert Small.read_packet(NetworkReader(data)) is Small.TWO


def test_enum_invalid_discriminant():
    with pytest.raises(MalformedValueError) as info:
        Color.read_packet(NetworkReader(_write("var_int", 9)))
    assert str(info.value) == "malformed packet value: Invalid Color"


def test_enum_read_defaults_to_var_int():
    assert ReadOnly.read_packet(NetworkReader(_write("var_int", 3))) is ReadOnly.ONLY


def test_enum_without_write_strategy():
    with pytest.raises(TypeError):
        ReadOnly.ONLY.write_packet(NetworkWriter(io.BytesIO()))


def test_enum_unknown_strategy():
    with pytest.raises(ValueError):

        class Bad(PacketEnum, read_as="string"):
            A = 1

        read_value(Bad, NetworkReader(b"\x01"))