from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from ..coding import Encoder
from ..errors import EncodeError, OperandTypeError, UnsupportedOpcodeError
from .coerce import OperandKind, coerce, to_term
from .reader import LayoutEntry, StreamCtx
from .term import decode_term, encode_term

_TERM = OperandKind.TERM
_LITERAL = OperandKind.LITERAL
_ATOM = OperandKind.ATOM
_LABEL = OperandKind.LABEL
_XREG = OperandKind.X_REGISTER
_YREG = OperandKind.Y_REGISTER
_REG = OperandKind.REGISTER
_LIST = OperandKind.LIST
_YREGS = OperandKind.Y_REGISTERS

Operand = Tuple[str, OperandKind]


@dataclass(frozen=True, slots=True)
class OpcodeSpec:
    """Static shape of one opcode: its code, name and ordered operands."""

    code: int
    name: str
    operands: Tuple[Operand, ...]

    @property
    def arity(self) -> int:
        return len(self.operands)

    @property
    def operand_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.operands)


@dataclass(frozen=True, slots=True)
class Operation:
    opcode: int
    name: str
    binds: Mapping[str, object] = field(default_factory=dict)
    length: int = field(default=0, compare=False)
    layout: Tuple[LayoutEntry, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "binds", MappingProxyType(dict(self.binds)))

    def __hash__(self) -> int:
        return hash((self.opcode, self.name, frozenset(self.binds.items())))

    @property
    def arity(self) -> int:
        return len(self.binds)

    @property
    def spec(self) -> OpcodeSpec:
        return OPCODES[self.opcode]

    def __getitem__(self, key: str) -> object:
        return self.binds[key]


def _op(code: int, name: str, *operands: Operand) -> OpcodeSpec:
    return OpcodeSpec(code=code, name=name, operands=tuple(operands))


def _type_test(code: int, name: str) -> OpcodeSpec:
    return _op(code, name, ("label", _LABEL), ("arg1", _TERM))


def _compare(code: int, name: str) -> OpcodeSpec:
    return _op(code, name, ("label", _LABEL), ("arg1", _TERM), ("arg2", _TERM))


def _bs_args(code: int, name: str, count: int) -> OpcodeSpec:
    return _op(code, name, *((f"arg{i}", _TERM) for i in range(1, count + 1)))


_CATALOG: Tuple[OpcodeSpec, ...] = (
    _op(1, "label", ("literal", _LITERAL)),
    _op(2, "func_info", ("module", _ATOM), ("function", _ATOM), ("arity", _LITERAL)),
    _op(3, "int_code_end"),
    _op(4, "call", ("arity", _LITERAL), ("label", _LABEL)),
    _op(
        5,
        "call_last",
        ("arity", _LITERAL),
        ("label", _LABEL),
        ("deallocate", _LITERAL),
    ),
    _op(6, "call_only", ("arity", _LITERAL), ("label", _LABEL)),
    # destination is an index into the import table
    _op(7, "call_ext", ("arity", _LITERAL), ("destination", _LITERAL)),
    _op(
        8,
        "call_ext_last",
        ("arity", _LITERAL),
        ("destination", _LITERAL),
        ("deallocate", _LITERAL),
    ),
    _op(12, "allocate", ("stack_need", _LITERAL), ("live", _LITERAL)),
    _op(
        13,
        "allocate_heap",
        ("stack_need", _LITERAL),
        ("heap_need", _LITERAL),
        ("live", _LITERAL),
    ),
    _op(14, "allocate_zero", ("stack_need", _LITERAL), ("live", _LITERAL)),
    _op(
        15,
        "allocate_heap_zero",
        ("stack_need", _LITERAL),
        ("heap_need", _LITERAL),
        ("live", _LITERAL),
    ),
    _op(16, "test_heap", ("heap_need", _LITERAL), ("live", _LITERAL)),
    _op(18, "deallocate", ("n", _LITERAL)),
    _op(19, "return"),
    _op(20, "send"),
    _op(21, "remove_message"),
    _op(22, "timeout"),
    _op(23, "loop_rec", ("label", _LABEL), ("source", _TERM)),
    _op(24, "loop_rec_end", ("label", _LABEL)),
    _op(25, "wait", ("label", _LABEL)),
    _op(26, "wait_timeout", ("label", _LABEL), ("timeout", _TERM)),
    _compare(39, "is_lt"),
    _compare(40, "is_ge"),
    _compare(41, "is_eq"),
    _compare(42, "is_ne"),
    _compare(43, "is_eq_exact"),
    _compare(44, "is_ne_exact"),
    _type_test(45, "is_integer"),
    _type_test(46, "is_float"),
    _type_test(47, "is_number"),
    _type_test(48, "is_atom"),
    _type_test(49, "is_pid"),
    _type_test(50, "is_reference"),
    _type_test(51, "is_port"),
    _type_test(52, "is_nil"),
    _type_test(53, "is_binary"),
    _type_test(55, "is_list"),
    _type_test(56, "is_nonempty_list"),
    _type_test(57, "is_tuple"),
    _op(58, "test_arity", ("label", _LABEL), ("arg1", _TERM), ("arity", _LITERAL)),
    # destinations alternate value and label
    _op(59, "select_val", ("arg", _TERM), ("fail_label", _LABEL), ("destinations", _LIST)),
    _op(
        60,
        "select_tuple_arity",
        ("arg", _TERM),
        ("fail_label", _LABEL),
        ("destinations", _LIST),
    ),
    _op(61, "jump", ("label", _LABEL)),
    _op(62, "catch", ("register", _YREG), ("label", _LABEL)),
    _op(63, "catch_end", ("register", _YREG)),
    _op(64, "move", ("src", _TERM), ("dst", _REG)),
    _op(65, "get_list", ("source", _TERM), ("head", _REG), ("tail", _REG)),
    _op(
        66,
        "get_tuple_element",
        ("source", _REG),
        ("element", _LITERAL),
        ("destination", _REG),
    ),
    _op(69, "put_list", ("head", _TERM), ("tail", _TERM), ("destination", _REG)),
    _op(72, "badmatch", ("arg1", _TERM)),
    _op(73, "if_end"),
    _op(74, "case_end", ("arg1", _TERM)),
    _op(75, "call_fun", ("arity", _LITERAL)),
    _type_test(77, "is_function"),
    _op(78, "call_ext_only", ("arity", _LITERAL), ("destination", _LITERAL)),
    _op(104, "try", ("register", _YREG), ("label", _LABEL)),
    _op(105, "try_end", ("register", _YREG)),
    _op(106, "try_case", ("register", _YREG)),
    _op(107, "try_case_end", ("arg1", _TERM)),
    _op(108, "raise", ("stacktrace", _TERM), ("exc_value", _TERM)),
    _type_test(114, "is_boolean"),
    _op(115, "is_function2", ("label", _LABEL), ("arg1", _TERM), ("arity", _TERM)),
    _bs_args(117, "bs_get_integer2", 7),
    _bs_args(119, "bs_get_binary2", 7),
    _bs_args(121, "bs_test_tail2", 3),
    _op(
        124,
        "gc_bif1",
        ("fail", _LABEL),
        ("live", _LITERAL),
        ("bif", _LITERAL),
        ("arg1", _TERM),
        ("destination", _REG),
    ),
    _op(
        125,
        "gc_bif2",
        ("fail", _LABEL),
        ("live", _LITERAL),
        ("bif", _LITERAL),
        ("arg1", _TERM),
        ("arg2", _TERM),
        ("destination", _REG),
    ),
    _bs_args(131, "bs_test_unit", 3),
    _op(153, "line", ("literal", _LITERAL)),
    _op(
        159,
        "is_tagged_tuple",
        ("label", _LABEL),
        ("register", _XREG),
        ("arity", _LITERAL),
        ("atom", _ATOM),
    ),
    _op(160, "build_stacktrace"),
    _op(161, "raw_raise"),
    _op(162, "get_hd", ("source", _TERM), ("head", _REG)),
    _op(163, "get_tl", ("source", _TERM), ("tail", _REG)),
    _op(164, "put_tuple2", ("destination", _REG), ("elements", _LIST)),
    _op(165, "bs_get_tail", ("context", _TERM), ("destination", _REG), ("live", _LITERAL)),
    _op(
        166,
        "bs_start_match3",
        ("fail", _LABEL),
        ("bin", _TERM),
        ("live", _LITERAL),
        ("destination", _REG),
    ),
    _op(
        167,
        "bs_get_position",
        ("context", _TERM),
        ("destination", _REG),
        ("live", _LITERAL),
    ),
    _op(168, "bs_set_position", ("context", _TERM), ("position", _TERM)),
    _op(169, "swap", ("register1", _REG), ("register2", _REG)),
    _op(172, "init_yregs", ("registers", _YREGS)),
)

OPCODES: Dict[int, OpcodeSpec] = {spec.code: spec for spec in _CATALOG}
OPCODES_BY_NAME: Dict[str, OpcodeSpec] = {spec.name: spec for spec in _CATALOG}


def opcode_spec(opcode: int) -> OpcodeSpec:
    try:
        return OPCODES[opcode]
    except KeyError as exc:
        raise UnsupportedOpcodeError(opcode) from exc


def _record(
    ctx: StreamCtx, key: str, kind: str, *, start: Optional[int] = None, **meta
) -> None:
    if start is not None:
        meta = dict(meta)
        meta.setdefault("offset", start)
        meta.setdefault("length_bytes", ctx.bytes_consumed() - start)
    ctx.record_operand(key, kind, **meta)


def decode_operation(ctx: StreamCtx) -> Operation:
    """Decode one instruction: the opcode byte, then each declared operand."""
    start = ctx.bytes_consumed()
    ctx.clear_layout()
    spec = opcode_spec(ctx.read_u8())
    binds: Dict[str, object] = {}
    for key, kind in spec.operands:
        operand_start = ctx.bytes_consumed()
        binds[key] = coerce(kind, decode_term(ctx))
        _record(ctx, key, kind.value, start=operand_start)
    return Operation(
        opcode=spec.code,
        name=spec.name,
        binds=binds,
        length=ctx.bytes_consumed() - start,
        layout=ctx.snapshot_layout(),
    )


def _normalize_binds(spec: OpcodeSpec, binds: Mapping[str, object]) -> Dict[str, object]:
    expected = spec.operand_names
    if set(binds) != set(expected):
        raise EncodeError(
            f"{spec.name} takes operands {list(expected)}, got {sorted(binds)}"
        )
    normalized: Dict[str, object] = {}
    for key, kind in spec.operands:
        value = binds[key]
        try:
            term = to_term(kind, value)
        except OperandTypeError as exc:
            raise EncodeError(f"{spec.name} operand {key!r}: {exc}") from exc
        normalized[key] = coerce(kind, term)
    return normalized


def make_operation(name: str, **binds: object) -> Operation:
    """Build a validated operation, e.g. `make_operation("jump", label=Label(3))`."""
    try:
        spec = OPCODES_BY_NAME[name]
    except KeyError as exc:
        raise KeyError(f"No opcode named {name!r}") from exc
    return Operation(opcode=spec.code, name=spec.name, binds=_normalize_binds(spec, binds))


def encode_operation(op: Operation, enc: Encoder) -> None:
    spec = OPCODES.get(op.opcode)
    if spec is None:
        raise EncodeError(f"No encoder registered for opcode {op.opcode}")
    binds = _normalize_binds(spec, op.binds)
    enc.unsigned_byte(spec.code)
    for key, kind in spec.operands:
        encode_term(to_term(kind, binds[key]), enc)
