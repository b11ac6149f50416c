# steelproto

Building blocks for speaking the Minecraft Java Edition network protocol
from Python:

- VarInt / VarUInt encoding (`steelproto.varint`)
- big-endian primitive and string reading/writing over byte streams
  (`steelproto.ser`)
- declarative packet classes with per-field wire formats (`steelproto.packet`)
- the handshake packet (`steelproto.handshake`)
- AES-128/CFB8 stream wrappers (`steelproto.cipher`)
- asyncio packet framing with optional zlib compression and encryption
  (`steelproto.decoder`, `steelproto.encoder`)
- the error types all of these raise (`steelproto.errors`)

## Installation

```
pip install steelproto
```

Python 3.10 or newer is required. Encryption uses the `cryptography` package.

## VarInts

```python
import io
from steelproto.varint import encode_var_int, read_var_int, var_int_size

data = encode_var_int(300)          # b"\xac\x02"
assert var_int_size(300) == len(data)
assert read_var_int(io.BytesIO(data)) == 300
```

VarInts hold signed 32-bit values; negative values are written as their
32-bit two's complement and always take five bytes. `encode_var_uint`,
`read_var_uint` and `var_uint_size` do the same for unsigned 32-bit values.
Values out of range raise `ValueError`. A value running past five bytes
raises `steelproto.errors.TooLargeError`; input that ends part way raises
`steelproto.errors.IncompleteError`.

For asyncio streams, `read_var_int_async(reader)` reads from anything with an
async `readexactly` (raising `CleanEOFError` if the stream is already at its
end), and `write_var_int_async(value, writer)` writes and drains.

## Primitive values

```python
import io
from steelproto.ser import NetworkReader, NetworkWriter

buffer = io.BytesIO()
out = NetworkWriter(buffer)
out.write_var_int(47)
out.write_string("localhost")
out.write_u16(25565)

reader = NetworkReader(buffer.getvalue())
assert reader.get_var_int() == 47
assert reader.get_string() == "localhost"
assert reader.get_u16() == 25565
```

`NetworkReader` takes a binary stream or a bytes-like object. Both classes
cover signed and unsigned integers from 8 to 128 bits, 32- and 64-bit floats,
booleans, VarInts, VarUInts, raw bytes and strings, all big-endian.

Strings are length-prefixed UTF-8. `get_string_bounded` raises
`TooLargeError` when the declared length exceeds the bound; `write_string`
refuses strings longer than 32 767 bytes with `ValueError`.
`read_remaining(bound)` reads to the end of the stream and raises
`TooLargeError` if more than `bound` bytes are left.

## Packets

Packets are dataclasses that read and write their fields in order. The
handshake packet is included:

```python
from steelproto.handshake import ClientIntent, ClientIntentionPacket

packet = ClientIntentionPacket(
    protocol_version=772,
    hostname="localhost",
    port=25565,
    intention=ClientIntent.LOGIN,
)
payload = packet.to_bytes()
assert ClientIntentionPacket.from_bytes(payload) == packet
```

Custom packets subclass `steelproto.packet.Packet`, are decorated with
`@dataclasses.dataclass`, and describe each field with `packet_field`:

```python
import dataclasses
from steelproto.packet import Packet, PacketEnum, packet_field


class Mode(PacketEnum, read_as="var_int", write_as="u8"):
    OFF = 0
    ON = 1


@dataclasses.dataclass
class Example(Packet):
    count: int = packet_field(read_as="var_int")
    name: str = packet_field(read_as="string", bound=16)
    mode: Mode = packet_field()
```

Wire formats are `var_int`, `var_uint`, `bool`, `i8`…`i128`, `u8`…`u128`,
`f32`, `f64` and `string`; `json` is available for writing only.
`write_as` defaults to `read_as`. Fields without a format fall back on their
type: `str` is a string, `bool` a boolean, and `Packet` or `PacketEnum`
classes read and write themselves.

`PacketEnum` values are sent as their integer. Reading defaults to a VarInt;
writing needs `write_as`. Reading an unknown value raises
`steelproto.errors.MalformedValueError`.

## Framing over a connection

`NetworkDecoder` reads framed packets from an `asyncio.StreamReader`;
`NetworkEncoder` writes them to an `asyncio.StreamWriter`. The data handed to
`write_packet` is the packet id as a VarInt followed by the packet body;
`get_raw_packet` returns a `RawPacket` with `id` and `payload`.

```python
from steelproto.decoder import NetworkDecoder
from steelproto.encoder import NetworkEncoder
from steelproto.varint import encode_var_int


async def handle(reader, writer):
    decoder = NetworkDecoder(reader)
    encoder = NetworkEncoder(writer)

    raw = await decoder.get_raw_packet()
    print(raw.id, raw.payload)

    # Once compression has been agreed:
    decoder.set_compression(256)
    encoder.set_compression(256, 6)

    await encoder.write_packet(encode_var_int(0x00) + b"...")
```

With compression on, the encoder compresses packets of at least the threshold
(the level is clamped to zlib's 0–9) and sends smaller ones with a data length
of zero; the decoder rejects an uncompressed packet longer than its threshold
with `NotCompressedError`.

Once the shared secret has been agreed, call `set_encryption(shared_secret)`
on both the decoder and the encoder with the 16-byte secret, which serves as
both key and IV. Encryption can be switched on only once per stream; a second
call raises `RuntimeError`.

Limits follow the protocol: a frame may be at most 2 097 152 bytes and the
uncompressed data at most 8 388 608 bytes. On reading, violations raise
`OutOfBoundsError` or `PacketTooLongError`; on writing,
`PacketTooLargeError`. Bad compressed data raises
`FailedDecompressionError`, and a connection closed between packets raises
`ConnectionClosedError`. All read failures derive from
`steelproto.errors.PacketReadError` and write failures from
`steelproto.errors.PacketWriteError`.

## What this package does not do

It provides the wire format only. There is no server or client, no
connection-state handling, and no packets beyond the handshake — status,
login and play packets, and chat text components, are not included.

## Running the tests

```
pip install "steelproto[test]"
pytest
```