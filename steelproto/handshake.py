"""Handshake packets: the first packet a client sends on a new connection."""

from __future__ import annotations

import dataclasses

from .packet import Packet, PacketEnum, packet_field


class ClientIntent(PacketEnum, read_as="var_int", write_as="var_int"):
    """What the client wants to do after the handshake."""

    STATUS = 1
    LOGIN = 2
    TRANSFER = 3


@dataclasses.dataclass
class ClientIntentionPacket(Packet):
    """Serverbound handshake naming the protocol version, address and intent."""

    protocol_version: int = packet_field(read_as="var_int")
    hostname: str = packet_field(read_as="string", bound=255)
    port: int = packet_field(read_as="u16")
    intention: ClientIntent