"""
Decoding and encoding of BEAM compact terms and instruction records.

Bytes flow through `varint` (tiered integers) into `term` (compact terms),
are narrowed by `coerce` to the operand kinds declared in `decode_map`, and
`dispatcher` drives that over a whole code buffer.
"""

from .coerce import OperandKind  # noqa: F401
from .decode_map import (  # noqa: F401
    OPCODES,
    OPCODES_BY_NAME,
    OpcodeSpec,
    Operation,
    decode_operation,
    encode_operation,
    make_operation,
)
from .dispatcher import (  # noqa: F401
    CodeInfo,
    decode_code,
    decode_stream,
    encode,
    encode_stream,
    iter_operations,
)
from .reader import StreamCtx  # noqa: F401
from .term import (  # noqa: F401
    Atom,
    ExtendedLiteral,
    Integer,
    Label,
    List,
    Literal,
    Register,
    Term,
    XRegister,
    YRegister,
    decode_term,
    encode_term,
)

__all__ = [
    "OperandKind",
    "OPCODES",
    "OPCODES_BY_NAME",
    "OpcodeSpec",
    "Operation",
    "decode_operation",
    "encode_operation",
    "make_operation",
    "CodeInfo",
    "decode_code",
    "decode_stream",
    "encode",
    "encode_stream",
    "iter_operations",
    "StreamCtx",
    "Atom",
    "ExtendedLiteral",
    "Integer",
    "Label",
    "List",
    "Literal",
    "Register",
    "Term",
    "XRegister",
    "YRegister",
    "decode_term",
    "encode_term",
]
