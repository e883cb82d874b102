"""Capability sets and their colon-delimited wire form."""

import logging
from collections.abc import Iterable
from enum import Enum
from typing import TypeVar

from nsm.types import ClientCapability, ServerCapability

logger = logging.getLogger(__name__)

CapabilityT = TypeVar("CapabilityT", ServerCapability, ClientCapability)


def has_server_capability(capabilities: Iterable[ServerCapability], capability: ServerCapability) -> bool:
    return capability in capabilities


def has_client_capability(capabilities: Iterable[ClientCapability], capability: ClientCapability) -> bool:
    return capability in capabilities


def encode_capabilities(capabilities: Iterable[Enum]) -> str:
    """Render capabilities as ``:cap1:cap2:``; an empty list renders as ``::``."""
    tokens = list(dict.fromkeys(capability.value for capability in capabilities))
    if not tokens:
        return "::"
    return ":" + ":".join(tokens) + ":"


def decode_capabilities(
    text: str,
    vocabulary: type[CapabilityT] = ServerCapability,
) -> frozenset[CapabilityT]:
    """Parse a colon-delimited capability list.

    Bracketing colons are optional. Tokens outside ``vocabulary`` are skipped.
    """
    capabilities: set[CapabilityT] = set()
    for token in text.split(":"):
        if not token:
            continue
        try:
            capabilities.add(vocabulary(token))
        except ValueError:
            logger.debug(f"Ignoring unknown capability {token!r}")
    return frozenset(capabilities)
