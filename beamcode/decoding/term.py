"""Compact term model and codec.

Every operand in a BEAM instruction stream is a compact term: one tag byte
(primary tag in the low three bits) followed by an optional payload. Terms
are immutable and compare structurally.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..coding import Encoder
from ..constants import MAX_LIST_DEPTH, TAG_MASK, WORD_MAX, ExtTag, Tag
from ..errors import (
    DecodeError,
    EncodeError,
    NestingTooDeepError,
    UnknownTagError,
    UnsupportedTermError,
)
from .reader import StreamCtx
from .varint import decode_signed, decode_unsigned, encode_signed, encode_unsigned


def _check_word(label: str, value: int) -> None:
    if not 0 <= value <= WORD_MAX:
        raise ValueError(f"{label} out of range: {value}")


@dataclass(frozen=True, slots=True)
class Literal:
    value: int

    def __post_init__(self) -> None:
        _check_word("Literal", self.value)


@dataclass(frozen=True, slots=True)
class Integer:
    value: int


@dataclass(frozen=True, slots=True)
class Atom:
    value: int

    def __post_init__(self) -> None:
        _check_word("Atom", self.value)


@dataclass(frozen=True, slots=True)
class XRegister:
    value: int
    type_hint: Optional[int] = None

    def __post_init__(self) -> None:
        _check_word("XRegister", self.value)
        if self.type_hint is not None:
            _check_word("XRegister type hint", self.type_hint)


@dataclass(frozen=True, slots=True)
class YRegister:
    value: int
    type_hint: Optional[int] = None

    def __post_init__(self) -> None:
        _check_word("YRegister", self.value)
        if self.type_hint is not None:
            _check_word("YRegister type hint", self.type_hint)


@dataclass(frozen=True, slots=True)
class Label:
    value: int

    def __post_init__(self) -> None:
        _check_word("Label", self.value)


@dataclass(frozen=True, slots=True)
class List:
    elements: Tuple["Term", ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.elements, tuple):
            object.__setattr__(self, "elements", tuple(self.elements))

    def __len__(self) -> int:
        return len(self.elements)


@dataclass(frozen=True, slots=True)
class ExtendedLiteral:
    value: int

    def __post_init__(self) -> None:
        _check_word("ExtendedLiteral", self.value)


Term = Union[Literal, Integer, Atom, XRegister, YRegister, Label, List, ExtendedLiteral]
Register = Union[XRegister, YRegister]

TERM_TYPES = (Literal, Integer, Atom, XRegister, YRegister, Label, List, ExtendedLiteral)


def _ext_tag(sub: ExtTag) -> int:
    return (sub << 4) | Tag.Z


def decode_literal(ctx: StreamCtx) -> Literal:
    """Read a term that must carry the literal tag (sizes, counts, hints)."""
    tag = ctx.read_u8()
    if tag & TAG_MASK != Tag.U:
        raise UnknownTagError(tag)
    return Literal(decode_unsigned(tag, ctx))


def _decode_typed_register(ctx: StreamCtx) -> Register:
    tag = ctx.read_u8()
    primary = tag & TAG_MASK
    if primary == Tag.X:
        cls = XRegister
    elif primary == Tag.Y:
        cls = YRegister
    else:
        raise UnknownTagError(tag)
    value = decode_unsigned(tag, ctx)
    type_hint = decode_literal(ctx).value
    return cls(value, type_hint)


def _decode_extended(tag: int, ctx: StreamCtx, depth: int) -> Term:
    sub = tag >> 4
    if sub == ExtTag.LIST:
        if depth >= MAX_LIST_DEPTH:
            raise NestingTooDeepError(MAX_LIST_DEPTH)
        size = decode_literal(ctx).value
        return List(tuple(decode_term(ctx, depth + 1) for _ in range(size)))
    if sub == ExtTag.FLOAT_REGISTER:
        raise UnsupportedTermError(tag, "floating-point register")
    if sub == ExtTag.ALLOC_LIST:
        raise UnsupportedTermError(tag, "allocation list")
    if sub == ExtTag.EXTENDED_LITERAL:
        return ExtendedLiteral(decode_literal(ctx).value)
    if sub == ExtTag.TYPED_REGISTER:
        return _decode_typed_register(ctx)
    raise UnknownTagError(tag)


def decode_term_with_tag(tag: int, ctx: StreamCtx, depth: int = 0) -> Term:
    """Decode the rest of a term whose tag byte was already read.

    `depth` counts the enclosing lists; past MAX_LIST_DEPTH decoding fails
    with NestingTooDeepError.
    """
    primary = tag & TAG_MASK
    if primary == Tag.U:
        return Literal(decode_unsigned(tag, ctx))
    if primary == Tag.I:
        return Integer(decode_signed(tag, ctx))
    if primary == Tag.A:
        return Atom(decode_unsigned(tag, ctx))
    if primary == Tag.X:
        return XRegister(decode_unsigned(tag, ctx))
    if primary == Tag.Y:
        return YRegister(decode_unsigned(tag, ctx))
    if primary == Tag.F:
        return Label(decode_unsigned(tag, ctx))
    if primary == Tag.H:
        raise UnsupportedTermError(tag, "character")
    return _decode_extended(tag, ctx, depth)


def decode_term(ctx: StreamCtx, depth: int = 0) -> Term:
    return decode_term_with_tag(ctx.read_u8(), ctx, depth)


def _encode_register(tag: Tag, reg: Register, enc: Encoder) -> None:
    if reg.type_hint is None:
        encode_unsigned(tag, reg.value, enc)
        return
    enc.unsigned_byte(_ext_tag(ExtTag.TYPED_REGISTER))
    encode_unsigned(tag, reg.value, enc)
    encode_unsigned(Tag.U, reg.type_hint, enc)


def encode_term(term: Term, enc: Encoder, depth: int = 0) -> None:
    if isinstance(term, Literal):
        encode_unsigned(Tag.U, term.value, enc)
    elif isinstance(term, Integer):
        encode_signed(Tag.I, term.value, enc)
    elif isinstance(term, Atom):
        encode_unsigned(Tag.A, term.value, enc)
    elif isinstance(term, XRegister):
        _encode_register(Tag.X, term, enc)
    elif isinstance(term, YRegister):
        _encode_register(Tag.Y, term, enc)
    elif isinstance(term, Label):
        encode_unsigned(Tag.F, term.value, enc)
    elif isinstance(term, List):
        if depth >= MAX_LIST_DEPTH:
            raise EncodeError(f"List nesting deeper than {MAX_LIST_DEPTH} levels")
        enc.unsigned_byte(_ext_tag(ExtTag.LIST))
        encode_unsigned(Tag.U, len(term.elements), enc)
        for element in term.elements:
            encode_term(element, enc, depth + 1)
    elif isinstance(term, ExtendedLiteral):
        enc.unsigned_byte(_ext_tag(ExtTag.EXTENDED_LITERAL))
        encode_unsigned(Tag.U, term.value, enc)
    else:
        raise TypeError(f"Unsupported term {term!r}")


def term_to_bytes(term: Term) -> bytes:
    enc = Encoder()
    encode_term(term, enc)
    return enc.getvalue()


def term_from_bytes(data: bytes) -> Term:
    """Decode exactly one term; trailing bytes are an error."""
    ctx = StreamCtx(data=data)
    term = decode_term(ctx)
    if not ctx.at_end():
        raise DecodeError(
            f"{ctx.remaining()} trailing bytes after term at offset {ctx.idx}"
        )
    return term
