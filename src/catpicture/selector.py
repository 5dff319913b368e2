import math

import numpy as np

from catpicture.charsets import FALLING, HORIZONTAL, LINE, RISING, VERTICAL
from catpicture.errors import EmptyRepertoire
from catpicture.frequency import orientation
from catpicture.model import GlyphModel
from catpicture.sampling import FINE_SAMPLES, Rectangle, box_sample, cell_vectors

# Edge residuals are weaker than plain brightness; amplify before matching
LINE_GAIN = 2.0
DEFAULT_LINE_BIAS = 4.0


def _require_glyphs(model: GlyphModel) -> None:
    if len(model) == 0:
        raise EmptyRepertoire(f"Glyph model {model.name!r} has no glyphs")


def select_glyphs(fine: np.ndarray, model: GlyphModel, samples: int = FINE_SAMPLES) -> tuple[list[str], np.ndarray]:
    """Nearest glyph for every cell of a fine luminance field (values 0-255)."""
    _require_glyphs(model)
    vectors = cell_vectors(np.asarray(fine, dtype=np.float64) / 255.0, model.size, samples)
    return model.find_nearest_grid(vectors)


def select_glyph(sub_sample: np.ndarray, model: GlyphModel) -> tuple[str, float]:
    """Nearest glyph and its distance for a single cell's luminance sub-sample."""
    _require_glyphs(model)
    sub = np.asarray(sub_sample, dtype=np.float64) / 255.0
    vector = box_sample(sub, Rectangle(0, 0, sub.shape[1], sub.shape[0]), model.size, model.size)
    rows, scores = model.find_nearest_grid(vector.reshape(1, 1, -1))
    return rows[0], float(scores[0, 0])


def _direction_masks(angle: np.ndarray) -> dict[str, np.ndarray]:
    """Which stroke follows the edge, given the gradient direction.

    The edge runs perpendicular to the gradient: a left-to-right gradient is a
    vertical edge, a gradient pointing down-right (y grows downwards) is a
    rising diagonal.
    """
    steep = math.pi / 8
    shallow = 3 * math.pi / 8
    magnitude = np.abs(angle)
    return {
        VERTICAL: magnitude < steep,
        HORIZONTAL: magnitude > shallow,
        RISING: (angle >= steep) & (angle <= shallow),
        FALLING: (angle <= -steep) & (angle >= -shallow),
    }


def line_penalty(
    model: GlyphModel, angle: np.ndarray, coherence: np.ndarray, strength: np.ndarray, bias: float
) -> np.ndarray:
    """Negative distance offsets favouring the stroke that matches each cell's edge."""
    penalty = np.zeros(angle.shape + (len(model),))
    glyphs = model.glyphs
    for glyph, mask in _direction_masks(angle).items():
        if glyph in glyphs:
            penalty[..., glyphs.index(glyph)] = -bias * coherence * strength * mask
    return penalty


def select_line_glyphs(
    high: np.ndarray, model: GlyphModel, bias: float = DEFAULT_LINE_BIAS, samples: int = FINE_SAMPLES
) -> tuple[list[str], np.ndarray]:
    """Match the magnitude of the high-frequency residual, biased towards directional strokes.

    Only blank and stroke glyphs take part; a model without any of them is
    used whole.
    """
    _require_glyphs(model)
    strokes = model.subset(LINE)
    if len(strokes):
        model = strokes
    high = np.asarray(high, dtype=np.float64)
    magnitude = np.clip(np.abs(high) / 255.0 * LINE_GAIN, 0.0, 1.0)
    vectors = cell_vectors(magnitude, model.size, samples)
    angle, coherence = orientation(high, samples)
    strength = vectors.mean(axis=-1)
    return model.find_nearest_grid(vectors, penalty=line_penalty(model, angle, coherence, strength, bias))


def select_line_glyph(high: np.ndarray, model: GlyphModel, bias: float = DEFAULT_LINE_BIAS) -> tuple[str, float]:
    high = np.asarray(high, dtype=np.float64)
    if high.ndim != 2 or high.shape[0] != high.shape[1]:
        raise ValueError(f"Expected a square residual block, got shape {high.shape}")
    rows, scores = select_line_glyphs(high, model, bias, samples=high.shape[0])
    return rows[0], float(scores[0, 0])
