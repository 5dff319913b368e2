import argparse
import logging
import sys
from pathlib import Path

from catpicture.colour import ColorMode
from catpicture.config import Art, Block, Char, Line, RenderConfig
from catpicture.converter import decode_image
from catpicture.encoder import encode
from catpicture.engine import render
from catpicture.errors import DecodeError
from catpicture.generator import generate_glyph_model
from catpicture.model import GlyphModel
from catpicture.sampling import Rectangle
from catpicture.terminal import ColorCapability, detect_color_capability

logger = logging.getLogger(__name__)

DRAW_MODES = ("block", "char", "art", "line")


def build_parser() -> argparse.ArgumentParser:
    # -h is the output height, so help lives on -? and --help
    parser = argparse.ArgumentParser(
        prog="catpicture", description="Show an image in the terminal as coloured text", add_help=False
    )
    parser.add_argument("-?", "--help", action="help", help="Show this message and exit")
    parser.add_argument("-w", "--width", type=int, default=None, help="Output width in columns")
    parser.add_argument("-h", "--height", type=int, default=None, help="Output height in rows")
    parser.add_argument(
        "-r", "--region", type=int, nargs=4, metavar=("X", "Y", "W", "H"), help="Only show this region of the image"
    )
    parser.add_argument("-c", "--full-color", action="store_true", help="Use 24-bit colour instead of the xterm palette")
    parser.add_argument("-g", "--grey", action="store_true", help="Force greyscale")
    parser.add_argument("-m", "--mono", action="store_true", help="No colour; dark cells become blank")
    parser.add_argument(
        "-t", "--threshold", type=int, default=None, help="Luminance (0-255) below which cells are left blank"
    )
    parser.add_argument(
        "-d",
        "--draw",
        nargs="+",
        default=["block"],
        metavar="MODE",
        help="Draw mode: block, char <c>, art or line (default: block)",
    )
    models = parser.add_mutually_exclusive_group()
    models.add_argument("--font", help="Build the art/line glyph repertoire from this font")
    models.add_argument("--glyph-model", help="Load the art/line glyph repertoire from a model file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debugging details to stderr")
    parser.add_argument("image", nargs="?", help="Image file (default: read standard input)")
    return parser


def _parse_draw_mode(parser, values: list[str]):
    """Split -d's values into a draw mode and anything left over for the image argument."""
    name = values[0].lower()
    if name not in DRAW_MODES:
        parser.error(f"unknown draw mode {values[0]!r} (choose from {', '.join(DRAW_MODES)})")
    if name == "char":
        if len(values) < 2 or len(values[1]) != 1:
            parser.error("-d char needs a single character, e.g. -d char '#'")
        return Char(values[1]), values[2:]
    mode = {"block": Block, "art": Art, "line": Line}[name]()
    return mode, values[1:]


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )

    draw_mode, leftover = _parse_draw_mode(parser, args.draw)
    if leftover:
        if args.image is not None or len(leftover) > 1:
            parser.error(f"unrecognized arguments: {' '.join(leftover)}")
        args.image = leftover[0]

    if args.mono:
        color_mode = ColorMode.MONOCHROME
    elif args.grey:
        color_mode = ColorMode.GREYSCALE
    else:
        color_mode = ColorMode.COLOR

    if args.full_color:
        capability = ColorCapability.TRUECOLOR
    else:
        capability = min(detect_color_capability(), ColorCapability.ANSI256)

    try:
        config = RenderConfig(
            width=args.width,
            height=args.height,
            color_mode=color_mode,
            draw_mode=draw_mode,
            threshold=args.threshold,
            crop=Rectangle(*args.region) if args.region else None,
        )
    except ValueError as e:
        parser.error(str(e))

    if args.image is None:
        data = sys.stdin.buffer.read()
    else:
        image_path = Path(args.image)
        if not image_path.exists():
            print(f"File not found: {image_path}", file=sys.stderr)
            return 1
        data = image_path.read_bytes()

    try:
        model = None
        if args.font:
            model = generate_glyph_model(args.font)
        elif args.glyph_model:
            model = GlyphModel.load(args.glyph_model)
        grid = render(decode_image(data), config, model)
    except (DecodeError, ValueError, OSError) as e:
        print(f"catpicture: {e}", file=sys.stderr)
        return 1

    logger.debug("Encoding %dx%d grid for %s", grid.width, grid.height, capability.name)
    sys.stdout.buffer.write(encode(grid, capability))
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
