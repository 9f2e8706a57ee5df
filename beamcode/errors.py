"""Exception hierarchy raised by the term and instruction codecs."""

from __future__ import annotations

from typing import Optional


class BeamcodeError(Exception):
    """Base class for every error raised by this package."""


class DecodeError(BeamcodeError):
    """A byte sequence could not be decoded into a term or operation."""


class TruncatedInputError(DecodeError):
    def __init__(self, needed: int, remaining: int, offset: int) -> None:
        super().__init__(
            f"Insufficient bytes at offset {offset}: need {needed}, "
            f"have {remaining} remaining"
        )
        self.needed = needed
        self.remaining = remaining
        self.offset = offset


class UnknownTagError(DecodeError):
    def __init__(self, tag: int) -> None:
        super().__init__(f"Unknown term tag {tag:#04x}")
        self.tag = tag


class UnsupportedTermError(DecodeError):
    """The tag is valid but the term kind it selects is not supported."""

    def __init__(self, tag: int, kind: str) -> None:
        super().__init__(f"Unsupported term kind {kind!r} (tag {tag:#04x})")
        self.tag = tag
        self.kind = kind


class UnsupportedOpcodeError(DecodeError):
    def __init__(self, opcode: int) -> None:
        super().__init__(f"No decoder registered for opcode {opcode} ({opcode:#04x})")
        self.opcode = opcode


class ValueTooLargeError(DecodeError):
    def __init__(self, byte_size: int) -> None:
        super().__init__(f"Too large unsigned value: {byte_size} bytes")
        self.byte_size = byte_size


class NestingTooDeepError(DecodeError):
    def __init__(self, depth: int) -> None:
        super().__init__(f"List nesting deeper than {depth} levels")
        self.depth = depth


class OperandTypeError(DecodeError):
    """A decoded term does not have the kind an operand position requires."""

    def __init__(self, expected: str, actual: object) -> None:
        super().__init__(f"expected a {expected}, but got {actual!r}")
        self.expected = expected
        self.actual = actual


class StreamDecodeError(DecodeError):
    """Wraps the first failure of a stream decode with the instruction offset."""

    def __init__(
        self, offset: int, cause: DecodeError, opcode: Optional[int] = None
    ) -> None:
        where = f"offset {offset}"
        if opcode is not None:
            where += f" (opcode {opcode})"
        super().__init__(f"Failed to decode instruction at {where}: {cause}")
        self.offset = offset
        self.cause = cause
        self.opcode = opcode


class UnsupportedVersionError(BeamcodeError):
    def __init__(self, version: int, supported: int) -> None:
        super().__init__(
            f"supported instruction set version is {supported}, but got {version}"
        )
        self.version = version
        self.supported = supported


class EncodeError(BeamcodeError):
    """A value cannot be represented in the compact encoding."""
