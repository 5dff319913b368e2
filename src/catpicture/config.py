from dataclasses import dataclass

from catpicture.colour import ColorMode
from catpicture.frequency import DEFAULT_CUTOFF
from catpicture.sampling import CHAR_ASPECT_CORRECTION, Rectangle
from catpicture.selector import DEFAULT_LINE_BIAS


@dataclass(frozen=True)
class Block:
    """Every drawn cell is a solid block; colour carries the picture."""


@dataclass(frozen=True)
class Char:
    """Every drawn cell uses the same literal character."""

    char: str

    def __post_init__(self):
        if len(self.char) != 1:
            raise ValueError(f"Char mode needs exactly one character, got {self.char!r}")


@dataclass(frozen=True)
class Art:
    """Pick the glyph whose shape best matches each cell."""


@dataclass(frozen=True)
class Line:
    """Draw edges as strokes over a background filled with the smooth component."""

    cutoff: float = DEFAULT_CUTOFF
    bias: float = DEFAULT_LINE_BIAS


DrawMode = Block | Char | Art | Line


@dataclass(frozen=True)
class RenderConfig:
    width: int | None = None
    height: int | None = None
    color_mode: ColorMode = ColorMode.COLOR
    draw_mode: DrawMode = Block()
    threshold: int | None = None
    crop: Rectangle | None = None
    aspect_correction: float = CHAR_ASPECT_CORRECTION
    max_dimension: int | None = None

    def __post_init__(self):
        if self.threshold is not None and not 0 <= self.threshold <= 255:
            raise ValueError(f"Threshold must be between 0 and 255, got {self.threshold}")
        if self.aspect_correction <= 0:
            raise ValueError(f"Aspect correction must be positive, got {self.aspect_correction}")
