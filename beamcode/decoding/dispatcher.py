"""Instruction-stream driver: decode or encode a whole code buffer."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, Iterator, List, Optional, Union

from ..coding import Encoder
from ..config import BeamcodeConfig, load_config
from ..constants import INSTRUCTION_SET_VERSION
from ..errors import DecodeError, StreamDecodeError, UnsupportedVersionError
from .decode_map import Operation, decode_operation, encode_operation
from .reader import StreamCtx
from .term import Term, encode_term

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodeInfo:
    """Metadata the container reader reports alongside a code buffer."""

    version: int
    opcode_max: int = 0
    label_count: int = 0
    function_count: int = 0


def check_instruction_set_version(version: int) -> None:
    if version != INSTRUCTION_SET_VERSION:
        raise UnsupportedVersionError(version, INSTRUCTION_SET_VERSION)


def iter_operations(
    data: bytes, config: Optional[BeamcodeConfig] = None
) -> Iterator[Operation]:
    """Yield operations until `data` is exactly exhausted.

    The first failure stops iteration with a StreamDecodeError carrying the
    offset of the instruction that could not be decoded.
    """
    cfg = config if config is not None else load_config()
    ctx = StreamCtx(data=data, record_layout=cfg.record_layout)
    while not ctx.at_end():
        start = ctx.bytes_consumed()
        try:
            op = decode_operation(ctx)
        except DecodeError as exc:
            logger.debug("Decode failed at offset %d: %s", start, exc)
            raise StreamDecodeError(start, exc, opcode=data[start]) from exc
        if cfg.trace:
            logger.debug("%06x %s %r", start, op.name, op.binds)
        yield op


def decode_stream(
    data: bytes, config: Optional[BeamcodeConfig] = None
) -> List[Operation]:
    return list(iter_operations(data, config))


def decode_code(
    bytecode: bytes, info: CodeInfo, config: Optional[BeamcodeConfig] = None
) -> List[Operation]:
    check_instruction_set_version(info.version)
    logger.debug(
        "Code: version=%d opcode_max=%d labels=%d functions=%d bytes=%d",
        info.version,
        info.opcode_max,
        info.label_count,
        info.function_count,
        len(bytecode),
    )
    return decode_stream(bytecode, config)


def encode_stream(ops: Iterable[Operation]) -> bytes:
    enc = Encoder()
    for op in ops:
        encode_operation(op, enc)
    return enc.getvalue()


def encode(item: Union[Operation, Term]) -> bytes:
    enc = Encoder()
    if isinstance(item, Operation):
        encode_operation(item, enc)
    else:
        encode_term(item, enc)
    return enc.getvalue()
