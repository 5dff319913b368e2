import logging
from functools import lru_cache

from catpicture.model import GlyphModel

logger = logging.getLogger(__name__)

SIGNATURE_SIZE = 3

# Approximate ink coverage of each glyph in a 3x3 grid over its cell, as drawn
# by a typical monospace font. Rows run top to bottom.
_SIGNATURES: dict[str, tuple[float, ...]] = {
    " ": (0.0, 0.0, 0.0,
          0.0, 0.0, 0.0,
          0.0, 0.0, 0.0),
    ".": (0.0, 0.0, 0.0,
          0.0, 0.0, 0.0,
          0.0, 0.4, 0.0),
    "'": (0.0, 0.4, 0.0,
          0.0, 0.0, 0.0,
          0.0, 0.0, 0.0),
    "`": (0.3, 0.1, 0.0,
          0.0, 0.0, 0.0,
          0.0, 0.0, 0.0),
    ",": (0.0, 0.0, 0.0,
          0.0, 0.0, 0.0,
          0.0, 0.4, 0.1),
    ":": (0.0, 0.0, 0.0,
          0.0, 0.35, 0.0,
          0.0, 0.35, 0.0),
    ";": (0.0, 0.0, 0.0,
          0.0, 0.35, 0.0,
          0.1, 0.45, 0.0),
    "-": (0.0, 0.0, 0.0,
          0.5, 0.5, 0.5,
          0.0, 0.0, 0.0),
    "_": (0.0, 0.0, 0.0,
          0.0, 0.0, 0.0,
          0.5, 0.5, 0.5),
    "=": (0.0, 0.0, 0.0,
          0.55, 0.55, 0.55,
          0.3, 0.3, 0.3),
    "+": (0.0, 0.3, 0.0,
          0.4, 0.7, 0.4,
          0.0, 0.3, 0.0),
    "*": (0.25, 0.45, 0.25,
          0.35, 0.7, 0.35,
          0.1, 0.2, 0.1),
    "%": (0.55, 0.2, 0.5,
          0.2, 0.55, 0.2,
          0.5, 0.2, 0.55),
    "#": (0.55, 0.7, 0.55,
          0.7, 0.8, 0.7,
          0.55, 0.7, 0.55),
    "@": (0.8, 0.9, 0.8,
          0.9, 0.95, 0.9,
          0.8, 0.9, 0.8),
    "|": (0.0, 0.6, 0.0,
          0.0, 0.6, 0.0,
          0.0, 0.6, 0.0),
    "/": (0.0, 0.0, 0.6,
          0.0, 0.6, 0.0,
          0.6, 0.0, 0.0),
    "\\": (0.6, 0.0, 0.0,
           0.0, 0.6, 0.0,
           0.0, 0.0, 0.6),
}


@lru_cache(maxsize=None)
def default_model() -> GlyphModel:
    """The built-in repertoire, built on first use and shared read-only afterwards."""
    logger.debug("Building built-in glyph repertoire (%d glyphs)", len(_SIGNATURES))
    return GlyphModel(name="builtin", size=SIGNATURE_SIZE, signatures=dict(_SIGNATURES))
