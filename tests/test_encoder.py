import asyncio
import zlib

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from steelproto.decoder import NetworkDecoder
from steelproto.encoder import NetworkEncoder
from steelproto.errors import MAX_PACKET_DATA_SIZE, MAX_PACKET_SIZE, PacketTooLargeError
from steelproto.ser import NetworkReader
from steelproto.varint import encode_var_int

STATUS_JSON = b'{"description": "A Minecraft Server"}'


class _Sink:
    def __init__(self):
        self.data = bytearray()
        self.drains = 0

    def write(self, data):
        self.data += data

    async def drain(self):
        self.drains += 1

    def close(self):
        pass


def _status_packet(text=STATUS_JSON):
    return encode_var_int(0) + encode_var_int(len(text)) + text


def _decrypt(data, key):
    decryptor = Cipher(algorithms.AES(key), modes.CFB8(key)).decryptor()
    return decryptor.update(bytes(data)) + decryptor.finalize()


async def _encode(packet, compression=None, key=None):
    sink = _Sink()
    encoder = NetworkEncoder(sink)
    if compression is not None:
        encoder.set_compression(*compression)
    if key is not None:
        encoder.set_encryption(key)
    await encoder.write_packet(packet)
    return sink


@pytest.mark.asyncio
async def test_encode_without_compression_and_encryption():
    packet = _status_packet()
    sink = await _encode(packet)
    assert bytes(sink.data) == encode_var_int(len(packet)) + packet
    assert sink.drains == 1


@pytest.mark.asyncio
async def test_encode_with_compression():
    packet = _status_packet()
    sink = await _encode(packet, compression=(0, 6))
    reader = NetworkReader(bytes(sink.data))
    packet_length = reader.get_var_int()
    rest = reader.read_remaining(MAX_PACKET_SIZE)
    assert packet_length == len(rest)
    inner = NetworkReader(rest)
    assert inner.get_var_int() == len(packet)
    assert zlib.decompress(inner.read_remaining(MAX_PACKET_SIZE)) == packet


@pytest.mark.asyncio
async def test_encode_with_encryption():
    key = bytes(16)
    packet = _status_packet()
    sink = await _encode(packet, key=key)
    assert bytes(sink.data) != encode_var_int(len(packet)) + packet
    assert _decrypt(sink.data, key) == encode_var_int(len(packet)) + packet


@pytest.mark.asyncio
async def test_encode_with_compression_and_encryption():
    key = bytes([1]) * 16
    packet = _status_packet()
    sink = await _encode(packet, compression=(0, 6), key=key)
    reader = NetworkReader(_decrypt(sink.data, key))
    packet_length = reader.get_var_int()
    rest = reader.read_remaining(MAX_PACKET_SIZE)
    assert packet_length == len(rest)
    inner = NetworkReader(rest)
    assert inner.get_var_int() == len(packet)
    assert zlib.decompress(inner.read_remaining(MAX_PACKET_SIZE)) == packet


@pytest.mark.asyncio
async def test_encode_zero_length_payload():
    packet = _status_packet(b"")
    sink = await _encode(packet)
    reader = NetworkReader(bytes(sink.data))
    assert reader.get_var_int() == len(packet)
    assert reader.get_var_int() == 0
    assert reader.get_string() == ""


@pytest.mark.asyncio
async def test_encode_maximum_string_length():
    packet = _status_packet(b"A" * 32767)
    sink = await _encode(packet)
    assert len(sink.data) <= MAX_PACKET_SIZE
    reader = NetworkReader(bytes(sink.data))
    assert reader.get_var_int() == len(packet)
    assert reader.get_var_int() == 0
    assert reader.get_string() == "A" * 32767


@pytest.mark.asyncio
async def test_encode_exceeding_maximum_size():
    sink = _Sink()
    encoder = NetworkEncoder(sink)
    with pytest.raises(PacketTooLargeError) as info:
        await encoder.write_packet(bytes(MAX_PACKET_SIZE + 1))
    assert info.value.length > MAX_PACKET_SIZE
    assert sink.data == bytearray()


@pytest.mark.asyncio
async def test_encode_exceeding_maximum_data_size():
    encoder = NetworkEncoder(_Sink())
    encoder.set_compression(0, 6)
    with pytest.raises(PacketTooLargeError) as info:
        await encoder.write_packet(bytes(MAX_PACKET_DATA_SIZE + 1))
    assert info.value.length == MAX_PACKET_DATA_SIZE + 1


@pytest.mark.asyncio
async def test_encode_small_payload_no_compression():
    packet = _status_packet(b"Hi")
    sink = await _encode(packet, compression=(10, 6))
    reader = NetworkReader(bytes(sink.data))
    packet_length = reader.get_var_int()
    rest = reader.read_remaining(MAX_PACKET_SIZE)
    assert packet_length == len(rest)
    inner = NetworkReader(rest)
    assert inner.get_var_int() == 0
    assert inner.get_var_int() == 0
    assert inner.get_string() == "Hi"


def test_set_encryption_twice_fails():
    encoder = NetworkEncoder(_Sink())
    encoder.set_encryption(bytes(16))
    with pytest.raises(RuntimeError):
        encoder.set_encryption(bytes(16))


def test_set_encryption_rejects_bad_key():
    encoder = NetworkEncoder(_Sink())
    with pytest.raises(ValueError):
        encoder.set_encryption(bytes(8))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "compression,key",
    [(None, None), ((0, 6), None), ((64, 6), None), (None, bytes(16)), ((1, 9), bytes([7]) * 16)],
)
async def test_round_trip_through_decoder(compression, key):
    packets = [_status_packet(), _status_packet(b"x" * 200), encode_var_int(5)]
    sink = _Sink()
    encoder = NetworkEncoder(sink)
    if compression is not None:
        encoder.set_compression(*compression)
    if key is not None:
        encoder.set_encryption(key)
    for packet in packets:
        await encoder.write_packet(packet)

    stream = asyncio.StreamReader()
    stream.feed_data(bytes(sink.data))
    stream.feed_eof()
    decoder = NetworkDecoder(stream)
    if compression is not None:
        decoder.set_compression(compression[0])
    if key is not None:
        decoder.set_encryption(key)

    decoded = [await decoder.get_raw_packet() for _ in packets]
    assert [raw.id for raw in decoded] == [0, 0, 5]
    assert decoded[0].payload == packets[0][1:]
    assert decoded[1].payload == packets[1][1:]
    assert decoded[2].payload == b""