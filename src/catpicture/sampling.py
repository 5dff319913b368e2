import logging
import math
from dataclasses import dataclass

import numpy as np
from PIL import Image

from catpicture.colour import luminance
from catpicture.errors import InvalidCropRectangle, InvalidOutputDimensions

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 80
# Terminal glyphs are roughly twice as tall as they are wide
CHAR_ASPECT_CORRECTION = 0.5
# Fine sub-samples per cell edge, kept for glyph matching and frequency splitting
FINE_SAMPLES = 6


@dataclass(frozen=True)
class Rectangle:
    x: int
    y: int
    w: int
    h: int


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """Read-only RGB pixels, shape (height, width, 3) uint8."""

    pixels: np.ndarray

    def __post_init__(self):
        arr = np.asarray(self.pixels)
        if arr.ndim == 2:
            arr = np.stack([arr] * 3, axis=-1)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f"Expected an (h, w, 3) or (h, w, 4) array, got shape {arr.shape}")
        arr = np.array(arr[:, :, :3], dtype=np.uint8)
        arr.flags.writeable = False
        object.__setattr__(self, "pixels", arr)

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        return cls(np.asarray(image.convert("RGB")))

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]


def validate_crop(crop: Rectangle | None, width: int, height: int) -> Rectangle:
    """Return the crop region, defaulting to the full image. Never clamps."""
    if width <= 0 or height <= 0:
        raise InvalidCropRectangle(f"Image is empty ({width}x{height})")
    if crop is None:
        return Rectangle(0, 0, width, height)
    if crop.w <= 0 or crop.h <= 0:
        raise InvalidCropRectangle(f"Crop rectangle must have positive size, got {crop.w}x{crop.h}")
    if crop.x < 0 or crop.y < 0 or crop.x + crop.w > width or crop.y + crop.h > height:
        raise InvalidCropRectangle(
            f"Crop rectangle ({crop.x}, {crop.y}, {crop.w}, {crop.h}) lies outside the {width}x{height} image"
        )
    return crop


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def resolve_dimensions(
    width: int | None,
    height: int | None,
    crop: Rectangle,
    aspect_correction: float = CHAR_ASPECT_CORRECTION,
    max_dimension: int | None = None,
) -> tuple[int, int]:
    """Work out the output grid size, deriving a missing side from the crop's aspect ratio."""
    if width is None and height is None:
        width = DEFAULT_WIDTH
    if height is None:
        height = _round_half_up(width * crop.h / crop.w * aspect_correction)
    elif width is None:
        width = _round_half_up(height * crop.w / crop.h / aspect_correction)

    if width < 1 or height < 1:
        raise InvalidOutputDimensions(f"Output size resolved to {width}x{height}")
    if max_dimension is not None and max(width, height) > max_dimension:
        raise InvalidOutputDimensions(f"Output size {width}x{height} exceeds the maximum of {max_dimension}")
    logger.debug("Output grid is %dx%d cells", width, height)
    return width, height


def _spans(length: int, count: int) -> tuple[np.ndarray, np.ndarray]:
    """Source index ranges [lo, hi) for each of `count` output samples."""
    edges = (np.arange(count + 1) * length) // count
    lo = edges[:-1]
    # Upsampling leaves empty spans; replicate the nearest pixel instead
    hi = np.maximum(edges[1:], lo + 1)
    return lo, hi


def box_sample(array: np.ndarray, crop: Rectangle, out_width: int, out_height: int) -> np.ndarray:
    """Box-filter the crop region of an (h, w) or (h, w, c) array down to (out_height, out_width[, c]).

    Every output sample is the mean of all source pixels in its span, computed
    from a summed-area table so the cost doesn't depend on the span size.
    """
    arr = np.asarray(array, dtype=np.float64)
    squeeze = arr.ndim == 2
    if squeeze:
        arr = arr[:, :, np.newaxis]

    region = arr[crop.y : crop.y + crop.h, crop.x : crop.x + crop.w]
    table = np.zeros((crop.h + 1, crop.w + 1, region.shape[2]))
    table[1:, 1:] = region.cumsum(axis=0).cumsum(axis=1)

    y0, y1 = _spans(crop.h, out_height)
    x0, x1 = _spans(crop.w, out_width)
    sums = (
        table[np.ix_(y1, x1)]
        - table[np.ix_(y0, x1)]
        - table[np.ix_(y1, x0)]
        + table[np.ix_(y0, x0)]
    )
    area = ((y1 - y0)[:, None] * (x1 - x0)[None, :])[:, :, None]
    result = sums / area
    return result[:, :, 0] if squeeze else result


@dataclass
class Samples:
    colours: np.ndarray  # (rows, cols, 3) float64 mean RGB
    fine: np.ndarray | None  # (rows * FINE_SAMPLES, cols * FINE_SAMPLES) luminance, or None


def sample_cells(
    pixels: PixelBuffer, crop: Rectangle, out_width: int, out_height: int, fine: bool = False
) -> Samples:
    colours = box_sample(pixels.pixels, crop, out_width, out_height)
    fine_field = None
    if fine:
        rgb = box_sample(pixels.pixels, crop, out_width * FINE_SAMPLES, out_height * FINE_SAMPLES)
        fine_field = luminance(rgb)
    return Samples(colours=colours, fine=fine_field)


def cell_vectors(fine: np.ndarray, size: int, samples: int = FINE_SAMPLES) -> np.ndarray:
    """Reduce each cell's samples x samples block to a flattened size x size vector.

    Returns array of shape (rows, cols, size * size).
    """
    rows = fine.shape[0] // samples
    cols = fine.shape[1] // samples
    # Resample each cell block on its own so blocks never bleed into neighbours
    cells = fine[: rows * samples, : cols * samples].reshape(rows, samples, cols, samples).transpose(0, 2, 1, 3)
    if samples % size == 0:
        step = samples // size
        reduced = cells.reshape(rows, cols, size, step, size, step).mean(axis=(3, 5))
    else:
        whole = Rectangle(0, 0, samples, samples)
        reduced = np.empty((rows, cols, size, size))
        for r in range(rows):
            for c in range(cols):
                reduced[r, c] = box_sample(cells[r, c], whole, size, size)
    return reduced.reshape(rows, cols, size * size)
