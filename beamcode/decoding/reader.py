from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from ..errors import TruncatedInputError


@dataclass(frozen=True)
class LayoutEntry:
    key: str
    kind: str
    meta: Dict[str, object]


@dataclass
class StreamCtx:
    """
    Sequential reader over a BEAM instruction stream.

    `idx` is the absolute offset of the next unread byte, so the same cursor
    can be handed from one instruction to the next without re-slicing.
    """

    data: bytes
    idx: int = 0
    record_layout: bool = False
    _layout: List[LayoutEntry] = field(default_factory=list, init=False)

    def _require(self, count: int) -> None:
        if self.idx + count > len(self.data):
            raise TruncatedInputError(count, len(self.data) - self.idx, self.idx)

    def record_operand(self, key: str, kind: str, **meta) -> None:
        if not self.record_layout:
            return
        self._layout.append(LayoutEntry(key=key, kind=kind, meta=dict(meta)))

    def read_u8(self) -> int:
        self._require(1)
        value = self.data[self.idx]
        self.idx += 1
        return value

    def read_bytes(self, count: int) -> bytes:
        self._require(count)
        chunk = bytes(self.data[self.idx : self.idx + count])
        self.idx += count
        return chunk

    def bytes_consumed(self) -> int:
        return self.idx

    def remaining(self) -> int:
        return len(self.data) - self.idx

    def at_end(self) -> bool:
        return self.idx >= len(self.data)

    def snapshot_layout(self) -> tuple[LayoutEntry, ...]:
        return tuple(self._layout)

    def clear_layout(self) -> None:
        self._layout.clear()
