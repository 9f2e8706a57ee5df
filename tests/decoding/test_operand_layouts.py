from __future__ import annotations

from beamcode.decoding import decode_map
from beamcode.decoding.reader import LayoutEntry, StreamCtx


def _capture_layout(data: bytes) -> tuple[LayoutEntry, ...]:
    ctx = StreamCtx(data=data, record_layout=True)
    op = decode_map.decode_operation(ctx)
    assert op.layout == ctx.snapshot_layout()
    return op.layout


def test_func_info_layout_has_offsets() -> None:
    layout = _capture_layout(bytes([0x02, 0x12, 0x22, 0x30]))
    assert [entry.key for entry in layout] == ["module", "function", "arity"]
    assert [entry.kind for entry in layout] == ["atom", "atom", "literal"]
    assert [entry.meta["offset"] for entry in layout] == [1, 2, 3]
    assert all(entry.meta["length_bytes"] == 1 for entry in layout)


def test_label_layout_records_two_byte_literal() -> None:
    (entry,) = _capture_layout(bytes([0x01, 0x08, 0x20]))
    assert entry.key == "literal"
    assert entry.meta["offset"] == 1
    assert entry.meta["length_bytes"] == 2


def test_list_operand_layout_spans_elements() -> None:
    layout = _capture_layout(bytes([0xAC, 0x17, 0x20, 0x04, 0x14]))
    (entry,) = layout
    assert entry.kind == "y-register list"
    assert entry.meta["length_bytes"] == 4


def test_layout_is_per_instruction() -> None:
    ctx = StreamCtx(data=bytes([0x01, 0x10, 0x3D, 0x15]), record_layout=True)
    decode_map.decode_operation(ctx)
    second = decode_map.decode_operation(ctx)
    (entry,) = second.layout
    assert entry.key == "label"
    assert entry.meta["offset"] == 3


def test_layout_disabled_by_default() -> None:
    ctx = StreamCtx(data=bytes([0x01, 0x10]))
    op = decode_map.decode_operation(ctx)
    assert op.layout == ()
