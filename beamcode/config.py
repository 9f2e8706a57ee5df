from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping, Optional

_ENV_PREFIX = "BEAMCODE_"
_OFF_VALUES = frozenset({"0", "false", "off", "no", ""})


def _switch(env: Mapping[str, str], key: str) -> bool:
    """`BEAMCODE_<key>` is on when set to anything but an off value."""
    raw = env.get(_ENV_PREFIX + key)
    return raw is not None and raw.strip().casefold() not in _OFF_VALUES


@dataclass(frozen=True)
class BeamcodeConfig:
    trace: bool = False
    record_layout: bool = False


def load_config(env: Optional[Mapping[str, str]] = None) -> BeamcodeConfig:
    source = os.environ if env is None else env
    return BeamcodeConfig(
        trace=_switch(source, "TRACE"),
        record_layout=_switch(source, "RECORD_LAYOUT"),
    )


__all__ = ["BeamcodeConfig", "load_config"]
