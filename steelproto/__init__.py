"""Minecraft Java Edition protocol primitives: VarInts, packets, framing, compression and encryption."""

__version__ = "0.1.0"

__all__ = [
    "cipher",
    "decoder",
    "encoder",
    "errors",
    "handshake",
    "packet",
    "ser",
    "varint",
]