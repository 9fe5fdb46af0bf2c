"""ABI encoding and tolerant decoding helpers.

Calldata is built as bytes from a 4-byte selector and ``eth_abi`` encoded
arguments. Decoders never raise on malformed node output: they return the
documented empty value instead, because a single bad contract must not abort
a batch.
"""

import re
from typing import Any, Optional, Sequence, Tuple, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import decode_hex, encode_hex, is_hex_address, to_normalized_address

HexOrBytes = Union[str, bytes]

WORD_SIZE = 32
ADDRESS_SIZE = 20
TX_HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")

_DECODE_ERRORS = (DecodingError, UnicodeDecodeError, ValueError, TypeError, OverflowError)


def selector_bytes(selector: HexOrBytes) -> bytes:
    """Normalize a function selector to its 4 raw bytes."""
    raw = decode_hex(selector) if isinstance(selector, str) else bytes(selector)
    if len(raw) != 4:
        raise ValueError(f"Function selector must be 4 bytes, got {len(raw)}")
    return raw


def encode_call(
    selector: HexOrBytes,
    arg_types: Sequence[str] = (),
    args: Sequence[Any] = ()
) -> bytes:
    """
    Build calldata for a contract call.

    Args:
        selector: 4-byte function selector, hex string or bytes
        arg_types: ABI types of the arguments, e.g. ``["address"]``
        args: Argument values; addresses may use any hex casing

    Returns:
        Calldata bytes
    """
    if len(arg_types) != len(args):
        raise ValueError("Argument types and values must have the same length")

    values = [
        to_normalized_address(value) if abi_type == "address" else value
        for abi_type, value in zip(arg_types, args)
    ]
    return selector_bytes(selector) + (encode(list(arg_types), values) if arg_types else b"")


def to_hex(data: bytes) -> str:
    """Hex encode bytes with a 0x prefix."""
    return encode_hex(data)


def hex_to_bytes(value: Optional[str]) -> bytes:
    """Decode a 0x-prefixed hex payload, treating empty values as no bytes."""
    if not value or value in ("0x", "0X"):
        return b""
    return decode_hex(value)


def hex_to_int(value: Optional[Union[str, int]], default: int = 0) -> int:
    """Parse a JSON-RPC quantity (``0x1a``) into an int."""
    if value is None:
        return default
    if isinstance(value, int):
        return value
    try:
        return int(value, 16)
    except (TypeError, ValueError):
        return default


def int_to_hex(value: int) -> str:
    """Encode an int as a JSON-RPC quantity."""
    return hex(value)


def decode_string(payload: Optional[str]) -> str:
    """
    Decode a string returned by a contract call.

    Payloads of at most one word are treated as fixed ``bytes32`` strings
    (some older tokens return those) and decoded directly. Longer payloads
    are decoded as a dynamic ABI string: offset word, length word at the
    offset, then the bytes. NUL characters and surrounding whitespace are
    stripped. Malformed input yields ``""``.
    """
    try:
        data = hex_to_bytes(payload)
    except _DECODE_ERRORS:
        return ""

    if not data:
        return ""

    if len(data) <= WORD_SIZE:
        return data.decode("utf-8", errors="replace").replace("\x00", "").strip()

    try:
        (text,) = decode(["string"], data)
    except _DECODE_ERRORS:
        return ""
    return text.replace("\x00", "").strip()


def decode_uint(payload: Optional[str], default: int = 0) -> int:
    """Decode the first word of a return payload as uint256."""
    words = decode_uint_words(payload, 1)
    return words[0] if words else default


def decode_uint_words(payload: Optional[str], count: int) -> Tuple[int, ...]:
    """
    Decode the first ``count`` words of a payload as uint256 values.

    Returns an empty tuple when the payload is shorter than ``count`` words
    or is not valid hex.
    """
    try:
        data = hex_to_bytes(payload)
    except _DECODE_ERRORS:
        return ()
    if count < 1 or len(data) < WORD_SIZE * count:
        return ()
    try:
        return tuple(decode(["uint256"] * count, data[:WORD_SIZE * count]))
    except _DECODE_ERRORS:
        return ()


def decode_bool(payload: Optional[str]) -> bool:
    """A bool return is true when the payload holds any non-zero value."""
    try:
        data = hex_to_bytes(payload)
    except _DECODE_ERRORS:
        return False
    return any(data)


def address_to_topic(address: str) -> str:
    """Left-pad an address to a 32-byte topic word."""
    return to_hex(encode(["address"], [to_normalized_address(address)]))


def topic_to_address(topic: Optional[str]) -> Optional[str]:
    """
    Extract the lower-cased address held in the low 20 bytes of a topic.

    Returns None for anything that is not a full 32-byte topic word.
    """
    if not isinstance(topic, str) or len(topic) != 2 + WORD_SIZE * 2:
        return None
    candidate = "0x" + topic[-ADDRESS_SIZE * 2:]
    if not is_hex_address(candidate):
        return None
    return candidate.lower()


def is_valid_address(address: Optional[str]) -> bool:
    """Check for a 0x-prefixed, 40 hex digit address."""
    return isinstance(address, str) and address.startswith("0x") and is_hex_address(address)


def is_valid_tx_hash(tx_hash: Optional[str]) -> bool:
    """Check for a 0x-prefixed, 64 hex digit transaction hash."""
    return isinstance(tx_hash, str) and TX_HASH_PATTERN.match(tx_hash) is not None
