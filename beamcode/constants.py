"""Shared constants for the BEAM compact term and instruction encoding.

Tag values follow the `beam_opcodes.hrl` naming used by the Erlang compiler.
"""

from enum import IntEnum


class Tag(IntEnum):
    """Primary tag stored in the low three bits of every compact term."""

    U = 0  # Literal
    I = 1  # Integer
    A = 2  # Atom
    X = 3  # X register
    Y = 4  # Y register
    F = 5  # Label
    H = 6  # Character
    Z = 7  # Extended


class ExtTag(IntEnum):
    """Sub-selector in the high nibble of a tag byte whose primary tag is Z."""

    LIST = 1
    FLOAT_REGISTER = 2
    ALLOC_LIST = 3
    EXTENDED_LITERAL = 4
    TYPED_REGISTER = 5


TAG_MASK = 0b111

# Width of the unsigned "machine word" values (literals, atoms, labels, ...).
WORD_BYTES = 8
WORD_MAX = (1 << (WORD_BYTES * 8)) - 1

# Tier 3 of the integer encoding covers 2..8 payload bytes; anything longer
# uses the extended-length tier whose prefix stores `byte_count - 9`.
MIN_NUM_BYTES = 2
MAX_INLINE_NUM_BYTES = 8
EXTENDED_LENGTH_BIAS = 9

# Deepest list-in-list nesting accepted when decoding a term.
MAX_LIST_DEPTH = 64

INSTRUCTION_SET_VERSION = 0
