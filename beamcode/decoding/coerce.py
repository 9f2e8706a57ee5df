"""Narrowing of decoded terms to the operand kinds instructions declare."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Tuple

from ..errors import OperandTypeError
from . import term as t


class OperandKind(str, Enum):
    """Operand shapes an instruction field can declare."""

    TERM = "term"
    LITERAL = "literal"
    INTEGER = "integer"
    ATOM = "atom"
    LABEL = "label"
    X_REGISTER = "x-register"
    Y_REGISTER = "y-register"
    REGISTER = "register"
    LIST = "list"
    EXTENDED_LITERAL = "extended literal"
    Y_REGISTERS = "y-register list"


def _narrow(kind: OperandKind, cls: type) -> Callable[[t.Term], object]:
    def narrow(term: t.Term) -> object:
        if not isinstance(term, cls):
            raise OperandTypeError(kind.value, term)
        return term

    narrow.__name__ = f"as_{kind.name.lower()}"
    return narrow


as_literal = _narrow(OperandKind.LITERAL, t.Literal)
as_integer = _narrow(OperandKind.INTEGER, t.Integer)
as_atom = _narrow(OperandKind.ATOM, t.Atom)
as_label = _narrow(OperandKind.LABEL, t.Label)
as_x_register = _narrow(OperandKind.X_REGISTER, t.XRegister)
as_y_register = _narrow(OperandKind.Y_REGISTER, t.YRegister)
as_list = _narrow(OperandKind.LIST, t.List)
as_extended_literal = _narrow(OperandKind.EXTENDED_LITERAL, t.ExtendedLiteral)


def as_term(term: t.Term) -> t.Term:
    if not isinstance(term, t.TERM_TYPES):
        raise OperandTypeError(OperandKind.TERM.value, term)
    return term


def as_register(term: t.Term) -> t.Register:
    if isinstance(term, (t.XRegister, t.YRegister)):
        return term
    raise OperandTypeError(OperandKind.REGISTER.value, term)


def as_y_registers(term: t.Term) -> Tuple[t.YRegister, ...]:
    """A list term whose elements must all be Y registers."""
    if not isinstance(term, t.List):
        raise OperandTypeError(OperandKind.LIST.value, term)
    return tuple(as_y_register(element) for element in term.elements)  # type: ignore[misc]


COERCERS: Dict[OperandKind, Callable[[t.Term], object]] = {
    OperandKind.TERM: as_term,
    OperandKind.LITERAL: as_literal,
    OperandKind.INTEGER: as_integer,
    OperandKind.ATOM: as_atom,
    OperandKind.LABEL: as_label,
    OperandKind.X_REGISTER: as_x_register,
    OperandKind.Y_REGISTER: as_y_register,
    OperandKind.REGISTER: as_register,
    OperandKind.LIST: as_list,
    OperandKind.EXTENDED_LITERAL: as_extended_literal,
    OperandKind.Y_REGISTERS: as_y_registers,
}


def coerce(kind: OperandKind, term: t.Term) -> object:
    return COERCERS[kind](term)


def to_term(kind: OperandKind, value: object) -> t.Term:
    """Inverse of `coerce`: rebuild the term an operand value is encoded as."""
    if kind is OperandKind.Y_REGISTERS:
        if not isinstance(value, (tuple, list)):
            raise OperandTypeError(kind.value, value)
        return t.List(tuple(as_y_register(reg) for reg in value))  # type: ignore[arg-type]
    coerce(kind, value)  # type: ignore[arg-type]
    return value  # type: ignore[return-value]
