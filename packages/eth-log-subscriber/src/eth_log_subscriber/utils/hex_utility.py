"""
Hex normalization helpers for filter construction and log parsing.

Addresses, topics and block numbers arrive from configuration and from
node responses in loosely formatted hex. These helpers turn them into the
canonical forms used on the wire.
"""

from typing import Any

import eth_utils
from hexbytes import HexBytes
from web3 import Web3

ADDRESS_LENGTH = 20
HASH_LENGTH = 32

# Block tag understood by nodes as "the current head"
LATEST = "latest"


def to_fixed_bytes(value: str, length: int) -> bytes:
    """
    Decode a hex string into exactly ``length`` bytes.

    Odd-length input gets a leading zero nibble. Longer input keeps the
    right-most ``length`` bytes, shorter input is left-padded with zeros.

    Args:
        value: Hex string, with or without ``0x`` prefix
        length: Target width in bytes

    Returns:
        Fixed-width bytes

    Raises:
        ValueError: If the value is not valid hex
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected a hex string, got {type(value).__name__}")

    digits = value[2:] if value[:2] in ("0x", "0X") else value
    try:
        raw = bytes(HexBytes("0x" + digits))
    except ValueError:
        raise ValueError(f"Invalid hex value: {value!r}") from None

    if len(raw) > length:
        raw = raw[-length:]
    return raw.rjust(length, b"\x00")


def to_address(value: str) -> str:
    """Normalize a hex string of any length to a checksummed 20-byte address."""
    return Web3.to_checksum_address(Web3.to_hex(to_fixed_bytes(value, ADDRESS_LENGTH)))


def to_hash(value: str) -> str:
    """Normalize a hex string of any length to a lowercase 32-byte hash."""
    return Web3.to_hex(to_fixed_bytes(value, HASH_LENGTH))


def is_hex(value: str) -> bool:
    """Check whether a string is hex, allowing an optional ``0x`` prefix."""
    if not isinstance(value, str):
        return False
    return eth_utils.is_hex(value)


def encode_block_number(number: int) -> str:
    """Encode a block number as minimal ``0x`` hex (``0`` -> ``"0x0"``)."""
    if number < 0:
        raise ValueError(f"Block number must be non-negative, got {number}")
    return Web3.to_hex(number)


def decode_quantity(value: Any) -> int:
    """
    Parse a hex quantity (block number, log index) as reported by a node.

    Nodes report quantities such as ``blockNumber`` as ``0x``-prefixed hex.
    Plain integers are accepted as well since some providers pre-decode
    them. Python integers are arbitrary precision, so no width limit applies.

    Raises:
        ValueError: If the value is not a non-negative quantity
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid quantity: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Invalid quantity: {value!r}")
        return value
    if not isinstance(value, str) or value[:2] not in ("0x", "0X"):
        raise ValueError(f"Invalid quantity: {value!r}")

    digits = value[2:]
    if not digits or not eth_utils.is_hex(value):
        raise ValueError(f"Invalid quantity: {value!r}")
    return int(digits, 16)


def parse_block_arg(value: str) -> int | str | None:
    """
    Parse a user supplied block argument.

    Accepts ``""`` (unset), ``"latest"``, ``0x`` hex or decimal.
    """
    value = value.strip()
    if not value:
        return None
    if value.lower() == LATEST:
        return LATEST
    if value[:2] in ("0x", "0X"):
        return decode_quantity(value)
    if value.isdigit():
        return int(value)
    raise ValueError(f"Invalid block argument: {value!r}")
