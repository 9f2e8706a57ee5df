import pytest

from beamcode.coding import Encoder
from beamcode.decoding import decode_map
from beamcode.decoding.reader import StreamCtx
from beamcode.decoding.term import Atom, Integer, Label, List, Literal, XRegister, YRegister
from beamcode.errors import EncodeError, OperandTypeError, UnsupportedOpcodeError


def _decode(data: bytes) -> decode_map.Operation:
    ctx = StreamCtx(data=data)
    op = decode_map.decode_operation(ctx)
    assert ctx.at_end()
    return op


def test_decode_label() -> None:
    op = _decode(bytes([0x01, 0x10]))
    assert op.name == "label"
    assert op.opcode == 1
    assert op.binds == {"literal": Literal(1)}
    assert op.length == 2


def test_decode_func_info() -> None:
    op = _decode(bytes([0x02, 0x12, 0x22, 0x30]))
    assert op["module"] == Atom(1)
    assert op["function"] == Atom(2)
    assert op["arity"] == Literal(3)
    assert op.arity == 3


def test_decode_return_has_no_operands() -> None:
    op = _decode(bytes([0x13]))
    assert op.name == "return"
    assert op.binds == {}
    assert op.length == 1


def test_decode_move_between_registers() -> None:
    op = _decode(bytes([0x40, 0x03, 0x13]))
    assert op["src"] == XRegister(0)
    assert op["dst"] == XRegister(1)


def test_decode_move_integer_to_y_register() -> None:
    op = _decode(bytes([0x40, 0x19, 0xFE, 0xBD, 0x04]))
    assert op["src"] == Integer(-323)
    assert op["dst"] == YRegister(0)


def test_decode_get_tuple_element() -> None:
    op = _decode(bytes([0x42, 0x03, 0x10, 0x14]))
    assert op["source"] == XRegister(0)
    assert op["element"] == Literal(1)
    assert op["destination"] == YRegister(1)


def test_decode_call_ext() -> None:
    op = _decode(bytes([0x07, 0x20, 0x50]))
    assert op.name == "call_ext"
    assert op["arity"] == Literal(2)
    assert op["destination"] == Literal(5)


def test_decode_select_val_destinations() -> None:
    op = _decode(bytes([0x3B, 0x03, 0x15, 0x17, 0x40, 0x22, 0x35, 0x32, 0x45]))
    assert op["arg"] == XRegister(0)
    assert op["fail_label"] == Label(1)
    assert op["destinations"] == List((Atom(2), Label(3), Atom(3), Label(4)))


def test_decode_is_tagged_tuple() -> None:
    op = _decode(bytes([0x9F, 0x25, 0x03, 0x20, 0x42]))
    assert op["label"] == Label(2)
    assert op["register"] == XRegister(0)
    assert op["arity"] == Literal(2)
    assert op["atom"] == Atom(4)


def test_decode_init_yregs() -> None:
    op = _decode(bytes([0xAC, 0x17, 0x20, 0x04, 0x14]))
    assert op["registers"] == (YRegister(0), YRegister(1))


def test_init_yregs_rejects_x_register() -> None:
    with pytest.raises(OperandTypeError) as excinfo:
        _decode(bytes([0xAC, 0x17, 0x10, 0x03]))
    assert excinfo.value.expected == "y-register"


def test_unknown_opcode_consumes_only_opcode_byte() -> None:
    ctx = StreamCtx(data=bytes([0xFF, 0x10, 0x20]))
    with pytest.raises(UnsupportedOpcodeError) as excinfo:
        decode_map.decode_operation(ctx)
    assert excinfo.value.opcode == 0xFF
    assert ctx.bytes_consumed() == 1


def test_label_operand_rejects_atom() -> None:
    with pytest.raises(OperandTypeError) as excinfo:
        _decode(bytes([0x3D, 0x12]))
    assert excinfo.value.expected == "label"
    assert excinfo.value.actual == Atom(1)


def test_catalog_is_keyed_by_code() -> None:
    for code, spec in decode_map.OPCODES.items():
        assert spec.code == code
        assert 0 <= code <= 0xFF
        assert decode_map.OPCODES_BY_NAME[spec.name] is spec
    assert decode_map.OPCODES[153].name == "line"
    assert decode_map.OPCODES[172].operands == (
        ("registers", decode_map.OperandKind.Y_REGISTERS),
    )


def test_make_and_encode_operation() -> None:
    op = decode_map.make_operation("call", arity=Literal(2), label=Label(42))
    enc = Encoder()
    decode_map.encode_operation(op, enc)
    assert enc.getvalue() == bytes([0x04, 0x20, 0x0D, 0x2A])
    assert _decode(enc.getvalue()) == op


def test_make_operation_normalizes_y_register_list() -> None:
    op = decode_map.make_operation("init_yregs", registers=[YRegister(0)])
    assert op["registers"] == (YRegister(0),)


def test_make_operation_rejects_bad_binds() -> None:
    with pytest.raises(EncodeError):
        decode_map.make_operation("jump", label=Atom(1))
    with pytest.raises(EncodeError):
        decode_map.make_operation("jump")
    with pytest.raises(EncodeError):
        decode_map.make_operation("jump", label=Label(1), extra=Literal(0))
    with pytest.raises(KeyError):
        decode_map.make_operation("no_such_op")


def test_encode_unknown_opcode_fails() -> None:
    op = decode_map.Operation(opcode=0xFE, name="bogus")
    with pytest.raises(EncodeError):
        decode_map.encode_operation(op, Encoder())


def test_length_is_not_part_of_equality() -> None:
    decoded = _decode(bytes([0x3D, 0x0D, 0x2A]))
    built = decode_map.make_operation("jump", label=Label(42))
    assert decoded.length == 3
    assert built.length == 0
    assert decoded == built


def test_decoded_operation_is_hashable_and_read_only() -> None:
    decoded = _decode(bytes([0x3D, 0x0D, 0x2A]))
    built = decode_map.make_operation("jump", label=Label(42))
    assert hash(decoded) == hash(built)
    assert {decoded, built} == {built}
    with pytest.raises(TypeError):
        decoded.binds["label"] = Label(1)  # type: ignore[index]
    assert decoded["label"] == Label(42)


def test_operation_copies_caller_binds() -> None:
    binds = {"label": Label(3)}
    op = decode_map.Operation(opcode=61, name="jump", binds=binds)
    binds["label"] = Label(4)
    assert op["label"] == Label(3)
    assert hash(op) == hash(decode_map.make_operation("jump", label=Label(3)))
