"""Build glyph signatures from a TrueType font.

Usage:
    python -m catpicture.generator /path/to/font.ttf glyphs.cpic --chars " .:-=+*#%@"
"""

import argparse

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from catpicture.charsets import ART
from catpicture.model import GlyphModel
from catpicture.repertoire import SIGNATURE_SIZE
from catpicture.sampling import Rectangle, box_sample


def render_glyph(char: str, font: ImageFont.FreeTypeFont, cell_width: int, cell_height: int) -> np.ndarray:
    """Draw one character white-on-black, returning (cell_height, cell_width) float values 0-255."""
    img = Image.new("L", (cell_width, cell_height), 0)
    draw = ImageDraw.Draw(img)
    draw.text((0, 0), char, fill=255, font=font)
    return np.asarray(img, dtype=np.float64)


def generate_glyph_model(
    font_path: str,
    characters: str = ART,
    font_size: int = 16,
    size: int = SIGNATURE_SIZE,
) -> GlyphModel:
    font = ImageFont.truetype(font_path, font_size)

    # A monospace cell: advance width of "M", full ascent to descent height
    cell_width = max(1, round(font.getlength("M")))
    ascent, descent = font.getmetrics()
    cell_height = ascent + descent
    cell = Rectangle(0, 0, cell_width, cell_height)

    raw: dict[str, np.ndarray] = {}
    for char in dict.fromkeys(characters):
        ink = render_glyph(char, font, cell_width, cell_height)
        raw[char] = box_sample(ink, cell, size, size).ravel()

    # Normalise against the densest region of any glyph so relative coverage survives
    peak = max((v.max() for v in raw.values()), default=0.0)
    signatures = {char: tuple(float(x) for x in (v / peak if peak > 0 else v)) for char, v in raw.items()}
    return GlyphModel(name=font_path, size=size, signatures=signatures)


def main():
    parser = argparse.ArgumentParser(description="Generate a glyph signature model from a font")
    parser.add_argument("font", help="Path to a TrueType/OpenType font")
    parser.add_argument("output", help="Where to write the model file")
    parser.add_argument("--chars", default=ART, help="Glyphs to include, in priority order")
    parser.add_argument("--font-size", type=int, default=16)
    parser.add_argument("--size", type=int, default=SIGNATURE_SIZE, help="Signature grid size (default: 3)")
    args = parser.parse_args()

    model = generate_glyph_model(args.font, args.chars, font_size=args.font_size, size=args.size)
    model.save(args.output)
    print(f"Wrote {len(model)} glyphs to {args.output}")


if __name__ == "__main__":
    main()
