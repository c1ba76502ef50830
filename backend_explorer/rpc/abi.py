"""
ABI return-data decoding for ERC20 metadata calls.

Only what metadata lookups need: a uint256 word and a dynamic string (with
the bytes32 fallback some older tokens use for symbol/name). Decoding is
done by eth_abi; failures surface as ValueError so the RPC client can map
them to UpstreamError.
"""

from __future__ import annotations

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector

WORD_BYTES = 32


def selector(signature: str) -> str:
    """0x-prefixed 4-byte selector of a function signature, e.g. "decimals()"."""
    return encode_hex(function_signature_to_4byte_selector(signature))


SELECTOR_DECIMALS = selector("decimals()")
SELECTOR_SYMBOL = selector("symbol()")
SELECTOR_NAME = selector("name()")
SELECTOR_TOTAL_SUPPLY = selector("totalSupply()")


def _to_bytes(data: str) -> bytes:
    if not isinstance(data, str) or not data.startswith("0x"):
        raise ValueError("ABI data must be 0x-prefixed hex")
    return decode_hex(data)


def decode_uint256(data: str) -> int:
    try:
        (value,) = abi_decode(["uint256"], _to_bytes(data))
    except DecodingError as e:
        raise ValueError(f"cannot decode uint256: {e}") from e
    return value


def decode_string(data: str) -> str:
    """Decode an ABI-encoded dynamic string; a single word is read as null-padded bytes32."""
    raw = _to_bytes(data)
    try:
        if len(raw) == WORD_BYTES:
            (value,) = abi_decode(["bytes32"], raw)
            return value.rstrip(b"\x00").decode("utf-8")
        (text,) = abi_decode(["string"], raw)
    except (DecodingError, UnicodeDecodeError) as e:
        raise ValueError(f"cannot decode string: {e}") from e
    return text
