from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from catpicture.charsets import BLOCK_GLYPH
from catpicture.colour import Colour, ColorMode, effective_threshold, luminance, quantize, scale_to_luminance, skip_mask
from catpicture.config import Art, Block, Char, Line, RenderConfig
from catpicture.frequency import cell_means, cell_peaks, split_frequencies
from catpicture.model import GlyphModel
from catpicture.repertoire import default_model
from catpicture.sampling import FINE_SAMPLES, PixelBuffer, Samples, resolve_dimensions, sample_cells, validate_crop
from catpicture.selector import select_glyphs, select_line_glyphs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cell:
    glyph: str
    fg: Colour = None
    bg: Colour = None
    skip: bool = False


BLANK = Cell(" ", None, None, skip=True)


@dataclass(frozen=True)
class Grid:
    width: int
    height: int
    cells: tuple[Cell, ...]  # row-major

    def __post_init__(self):
        if len(self.cells) != self.width * self.height:
            raise ValueError(f"Grid of {self.width}x{self.height} needs {self.width * self.height} cells, got {len(self.cells)}")

    def __len__(self) -> int:
        return len(self.cells)

    def __getitem__(self, pos: tuple[int, int]) -> Cell:
        row, col = pos
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"Cell ({row}, {col}) outside {self.width}x{self.height} grid")
        return self.cells[row * self.width + col]

    def rows(self) -> list[tuple[Cell, ...]]:
        return [self.cells[r * self.width : (r + 1) * self.width] for r in range(self.height)]

    def text(self) -> str:
        """Glyphs only, one line per row."""
        return "\n".join("".join(cell.glyph for cell in row) for row in self.rows())


def _line_layers(
    samples: Samples, mode: Line, color_mode: ColorMode, model: GlyphModel
) -> tuple[list[str], list[list[Colour]], list[list[Colour]]]:
    """Glyphs from the high band; background from the low band."""
    low, high = split_frequencies(samples.fine, mode.cutoff)
    glyphs, _ = select_line_glyphs(high, model, mode.bias)
    low_level = cell_means(low, FINE_SAMPLES)
    stroke_level = low_level + cell_peaks(high, FINE_SAMPLES)
    fg = quantize(scale_to_luminance(samples.colours, stroke_level), color_mode)
    bg = quantize(scale_to_luminance(samples.colours, low_level), color_mode)
    return glyphs, fg, bg


def render(pixels: PixelBuffer, config: RenderConfig, model: GlyphModel | None = None) -> Grid:
    """Turn a pixel buffer into a grid of terminal cells.

    `model` supplies glyph signatures for Art and Line modes and defaults to
    the built-in repertoire.
    """
    crop = validate_crop(config.crop, pixels.width, pixels.height)
    width, height = resolve_dimensions(
        config.width, config.height, crop, config.aspect_correction, config.max_dimension
    )
    mode = config.draw_mode
    logger.debug("Rendering with %s in %s mode", type(mode).__name__, config.color_mode.value)

    matching = isinstance(mode, (Art, Line))
    if matching and model is None:
        model = default_model()
    samples = sample_cells(pixels, crop, width, height, fine=matching)
    threshold = effective_threshold(config.color_mode, config.threshold)
    skip = skip_mask(luminance(samples.colours), threshold)

    no_colour = [[None] * width for _ in range(height)]
    if isinstance(mode, Line):
        glyphs, fg, bg = _line_layers(samples, mode, config.color_mode, model)
    else:
        fg = quantize(samples.colours, config.color_mode)
        bg = no_colour
        if isinstance(mode, Block):
            glyphs = [BLOCK_GLYPH * width] * height
        elif isinstance(mode, Char):
            glyphs = [mode.char * width] * height
        elif isinstance(mode, Art):
            glyphs, _ = select_glyphs(samples.fine, model)
        else:
            raise TypeError(f"Unknown draw mode: {mode!r}")

    cells = []
    for r in range(height):
        for c in range(width):
            if skip[r, c]:
                cells.append(BLANK)
            else:
                cells.append(Cell(glyphs[r][c], fg[r][c], bg[r][c]))
    logger.debug("Skipped %d of %d cells", int(np.count_nonzero(skip)), width * height)
    return Grid(width=width, height=height, cells=tuple(cells))
