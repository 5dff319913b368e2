import os
from enum import IntEnum
from typing import Mapping


class ColorCapability(IntEnum):
    NONE = 0
    ANSI16 = 16
    ANSI256 = 256
    TRUECOLOR = 1 << 24


def detect_color_capability(env: Mapping[str, str] | None = None) -> ColorCapability:
    """Guess how many colours the terminal understands from the environment."""
    if env is None:
        env = os.environ
    term = env.get("TERM", "")
    if "NO_COLOR" in env or term == "dumb":
        return ColorCapability.NONE
    if env.get("COLORTERM", "").lower() in ("truecolor", "24bit"):
        return ColorCapability.TRUECOLOR
    if "256color" in term:
        return ColorCapability.ANSI256
    return ColorCapability.ANSI16
