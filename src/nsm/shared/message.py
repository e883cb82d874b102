"""OSC message value and its datagram encoding.

The encoding itself is delegated to python-osc. Outbound arguments are limited
to the OSC types the NSM API uses: strings, 32-bit integers and floats.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from pythonosc.osc_message_builder import OscMessageBuilder
from pythonosc.osc_packet import OscPacket, ParseError

logger = logging.getLogger(__name__)

OscArgument = str | int | float


@dataclass(frozen=True)
class Message:
    """A single OSC message: an address and its positional arguments."""

    address: str
    args: tuple[Any, ...] = field(default=())

    def __str__(self) -> str:
        rendered = " ".join(repr(arg) for arg in self.args)
        return f"{self.address} {rendered}".rstrip()


def _arg_type(value: OscArgument) -> str:
    # bool is an int subclass, but maps to the OSC T/F tags which NSM never uses
    if isinstance(value, bool):
        raise TypeError("Boolean OSC arguments are not supported")
    if isinstance(value, str):
        return OscMessageBuilder.ARG_TYPE_STRING
    if isinstance(value, int):
        return OscMessageBuilder.ARG_TYPE_INT
    if isinstance(value, float):
        return OscMessageBuilder.ARG_TYPE_FLOAT
    raise TypeError(f"Unsupported OSC argument type: {type(value).__name__}")


def encode_message(message: Message) -> bytes:
    builder = OscMessageBuilder(address=message.address)
    for arg in message.args:
        builder.add_arg(arg, _arg_type(arg))
    return builder.build().dgram


def decode_datagram(datagram: bytes) -> list[Message]:
    """Decode a datagram into its messages.

    Bundles are flattened in timetag order. A datagram that
    cannot be parsed yields no messages.
    """
    try:
        packet = OscPacket(datagram)
    except ParseError as e:
        logger.debug(f"Dropping malformed datagram ({len(datagram)} bytes): {e}")
        return []
    return [Message(timed.message.address, tuple(timed.message.params)) for timed in packet.messages]
