from enum import Enum
from typing import NamedTuple

import numpy as np

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])
DEFAULT_MONOCHROME_THRESHOLD = 128


class ColorMode(Enum):
    COLOR = "color"
    GREYSCALE = "greyscale"
    MONOCHROME = "monochrome"


class Rgb(NamedTuple):
    r: int
    g: int
    b: int


class Grey(NamedTuple):
    level: int


# A cell colour: Rgb, Grey, or None for the terminal's default
Colour = Rgb | Grey | None


def luminance(rgb: np.ndarray) -> np.ndarray:
    """Perceptual luminance of an (..., 3) RGB array."""
    return np.asarray(rgb, dtype=np.float64) @ LUMA_WEIGHTS


def _to_byte(value: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(value), 0, 255).astype(np.int64)


def quantize(colours: np.ndarray, mode: ColorMode) -> list[list[Colour]]:
    """Convert (rows, cols, 3) mean colours into per-cell output colours."""
    rows, cols = colours.shape[:2]
    if mode is ColorMode.MONOCHROME:
        return [[None] * cols for _ in range(rows)]
    if mode is ColorMode.GREYSCALE:
        levels = _to_byte(luminance(colours))
        return [[Grey(int(v)) for v in row] for row in levels]
    values = _to_byte(colours)
    return [[Rgb(int(r), int(g), int(b)) for r, g, b in row] for row in values]


def effective_threshold(mode: ColorMode, threshold: int | None) -> int | None:
    if mode is ColorMode.MONOCHROME and threshold is None:
        return DEFAULT_MONOCHROME_THRESHOLD
    return threshold


def skip_mask(lum: np.ndarray, threshold: int | None) -> np.ndarray:
    """True where a cell is darker than the threshold and should be left blank."""
    if threshold is None:
        return np.zeros(np.shape(lum), dtype=bool)
    return np.asarray(lum) < threshold


def scale_to_luminance(colours: np.ndarray, target: np.ndarray) -> np.ndarray:
    """Rescale (..., 3) colours so their luminance matches `target`, keeping hue.

    Black cells have no hue to keep and become grey at the target level.
    """
    colours = np.asarray(colours, dtype=np.float64)
    target = np.clip(np.asarray(target, dtype=np.float64), 0.0, 255.0)
    lum = luminance(colours)
    grey = np.repeat(target[..., np.newaxis], 3, axis=-1)
    safe = np.where(lum > 0, lum, 1.0)
    scaled = colours * (target / safe)[..., np.newaxis]
    return np.clip(np.where((lum > 0)[..., np.newaxis], scaled, grey), 0.0, 255.0)
