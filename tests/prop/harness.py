from __future__ import annotations

from typing import List

from beamcode.config import BeamcodeConfig
from beamcode.decoding import dispatcher
from beamcode.decoding import term as t
from beamcode.decoding.decode_map import Operation

_QUIET = BeamcodeConfig()


def round_trip_term(term: t.Term) -> None:
    data = t.term_to_bytes(term)
    assert t.term_from_bytes(data) == term
    # encoding is canonical: decoding never changes the byte form
    assert t.term_to_bytes(t.term_from_bytes(data)) == data


def round_trip_stream(ops: List[Operation]) -> None:
    data = dispatcher.encode_stream(ops)
    decoded = dispatcher.decode_stream(data, _QUIET)
    assert decoded == ops
    assert sum(op.length for op in decoded) == len(data)
