"""Tiered variable-length integer encoding used by compact terms.

The low three bits of a tag byte hold the primary tag; the rest classify
the value's length:

    xxxx0ttt   value = xxxx (0..15), no extra bytes
    xxx01ttt   value = xxx << 8 | next byte (0..2047)
    nnn11ttt   value = next (nnn + 2) bytes, big-endian (nnn != 0b111)
    11111ttt   byte count = 9 + nested literal, then that many bytes

The unsigned path reads machine words and rejects runs wider than
WORD_BYTES. The signed path reads two's-complement integers of any size.
"""

from __future__ import annotations

from ..coding import Encoder
from ..constants import (
    EXTENDED_LENGTH_BIAS,
    MAX_INLINE_NUM_BYTES,
    MIN_NUM_BYTES,
    TAG_MASK,
    WORD_BYTES,
    WORD_MAX,
    Tag,
)
from ..errors import EncodeError, UnknownTagError, ValueTooLargeError
from .reader import StreamCtx

_SMALL_BIT = 0b0000_1000
_MEDIUM_BIT = 0b0001_0000
_MEDIUM_HIGH_MASK = 0b1110_0000
_EXTENDED_LENGTH = 0b111


def _read_length_prefix(ctx: StreamCtx) -> int:
    tag = ctx.read_u8()
    if tag & TAG_MASK != Tag.U:
        raise UnknownTagError(tag)
    return decode_unsigned(tag, ctx) + EXTENDED_LENGTH_BIAS


def _num_byte_size(tag: int, ctx: StreamCtx) -> int:
    if tag >> 5 != _EXTENDED_LENGTH:
        return (tag >> 5) + 2
    return _read_length_prefix(ctx)


def decode_unsigned(tag: int, ctx: StreamCtx) -> int:
    """Decode the value carried by `tag` (already consumed) as a machine word."""
    if tag & _SMALL_BIT == 0:
        return tag >> 4
    if tag & _MEDIUM_BIT == 0:
        return ((tag & _MEDIUM_HIGH_MASK) << 3) | ctx.read_u8()
    byte_size = _num_byte_size(tag, ctx)
    if byte_size > WORD_BYTES:
        raise ValueTooLargeError(byte_size)
    return int.from_bytes(ctx.read_bytes(byte_size), "big")


def decode_signed(tag: int, ctx: StreamCtx) -> int:
    """Decode the value carried by `tag` (already consumed) as a bignum."""
    if tag & _SMALL_BIT == 0:
        return tag >> 4
    if tag & _MEDIUM_BIT == 0:
        return ((tag & _MEDIUM_HIGH_MASK) << 3) | ctx.read_u8()
    byte_size = _num_byte_size(tag, ctx)
    return int.from_bytes(ctx.read_bytes(byte_size), "big", signed=True)


def signed_byte_length(value: int) -> int:
    """Smallest two's-complement byte count that keeps the sign of `value`."""
    magnitude = value if value >= 0 else ~value
    return magnitude.bit_length() // 8 + 1


def _encode_small(tag: int, value: int, enc: Encoder) -> None:
    if value < 16:
        enc.unsigned_byte((value << 4) | tag)
    else:
        enc.unsigned_byte(((value >> 3) & _MEDIUM_HIGH_MASK) | _SMALL_BIT | tag)
        enc.unsigned_byte(value & 0xFF)


def _encode_num_bytes(tag: int, payload: bytes, enc: Encoder) -> None:
    size = len(payload)
    assert size >= MIN_NUM_BYTES, "payload shorter than the byte-run tier"
    if size <= MAX_INLINE_NUM_BYTES:
        enc.unsigned_byte(((size - 2) << 5) | _MEDIUM_BIT | _SMALL_BIT | tag)
    else:
        enc.unsigned_byte((_EXTENDED_LENGTH << 5) | _MEDIUM_BIT | _SMALL_BIT | tag)
        encode_unsigned(Tag.U, size - EXTENDED_LENGTH_BIAS, enc)
    enc.write_bytes(payload)


def encode_unsigned(tag: int, value: int, enc: Encoder) -> None:
    if not 0 <= value <= WORD_MAX:
        raise EncodeError(f"Unsigned value out of range: {value}")
    if value < 0x800:
        _encode_small(tag, value, enc)
        return
    size = max(MIN_NUM_BYTES, (value.bit_length() + 7) // 8)
    _encode_num_bytes(tag, value.to_bytes(size, "big"), enc)


def encode_signed(tag: int, value: int, enc: Encoder) -> None:
    if 0 <= value < 0x800:
        _encode_small(tag, value, enc)
        return
    size = max(MIN_NUM_BYTES, signed_byte_length(value))
    _encode_num_bytes(tag, value.to_bytes(size, "big", signed=True), enc)
