from catpicture.colour import Colour, Grey
from catpicture.engine import Grid
from catpicture.terminal import ColorCapability

RESET = "\033[0m"

# Basic palette as most terminals draw it, SGR foreground code -> RGB
BASIC_COLOURS = {
    30: (0, 0, 0),
    31: (170, 0, 0),
    32: (0, 170, 0),
    33: (170, 85, 0),
    34: (0, 0, 170),
    35: (170, 0, 170),
    36: (0, 170, 170),
    37: (170, 170, 170),
    90: (85, 85, 85),
    91: (255, 85, 85),
    92: (85, 255, 85),
    93: (255, 255, 85),
    94: (85, 85, 255),
    95: (255, 85, 255),
    96: (85, 255, 255),
    97: (255, 255, 255),
}

# Channel levels of the xterm 6x6x6 colour cube (indices 16-231)
CUBE_LEVELS = (0, 95, 135, 175, 215, 255)


def _dist(a: tuple[int, int, int], b: tuple[int, int, int]) -> int:
    return sum((x - y) * (x - y) for x, y in zip(a, b))


def _nearest_level(value: int) -> int:
    return min(range(len(CUBE_LEVELS)), key=lambda i: abs(CUBE_LEVELS[i] - value))


def rgb_to_256(rgb: tuple[int, int, int]) -> int:
    """Closest xterm-256 index, choosing between the colour cube and the grey ramp."""
    ir, ig, ib = (_nearest_level(v) for v in rgb)
    cube_index = 16 + 36 * ir + 6 * ig + ib
    cube_rgb = (CUBE_LEVELS[ir], CUBE_LEVELS[ig], CUBE_LEVELS[ib])

    # Grey ramp 232-255 covers 8, 18, ..., 238
    average = sum(rgb) / 3
    step = min(23, max(0, round((average - 8) / 10)))
    grey_value = 8 + 10 * step
    if _dist(rgb, (grey_value,) * 3) < _dist(rgb, cube_rgb):
        return 232 + step
    return cube_index


def rgb_to_16(rgb: tuple[int, int, int]) -> int:
    """Closest basic foreground code (30-37, 90-97)."""
    return min(BASIC_COLOURS, key=lambda code: _dist(rgb, BASIC_COLOURS[code]))


def _colour_params(colour: Colour, capability: ColorCapability, background: bool) -> str:
    if colour is None:
        return "49" if background else "39"
    rgb = (colour.level,) * 3 if isinstance(colour, Grey) else tuple(colour)
    if capability is ColorCapability.TRUECOLOR:
        r, g, b = rgb
        return f"{48 if background else 38};2;{r};{g};{b}"
    if capability is ColorCapability.ANSI256:
        return f"{48 if background else 38};5;{rgb_to_256(rgb)}"
    code = rgb_to_16(rgb)
    return str(code + 10 if background else code)


def style_sequence(fg: Colour, bg: Colour, capability: ColorCapability) -> str:
    if fg is None and bg is None:
        return RESET
    return f"\033[{_colour_params(fg, capability, False)};{_colour_params(bg, capability, True)}m"


def encode(grid: Grid, capability: ColorCapability) -> bytes:
    """Serialise a grid as UTF-8 text, one line per row.

    A style sequence is written only when it differs from the one already in
    effect, and every styled row ends with a reset. Without colour support, or
    when no cell has a colour, the output is plain glyphs.
    """
    styled = capability is not ColorCapability.NONE and any(
        cell.fg is not None or cell.bg is not None for cell in grid.cells
    )
    lines = []
    for row in grid.rows():
        parts = []
        active = RESET
        for cell in row:
            if styled:
                sequence = style_sequence(cell.fg, cell.bg, capability)
                if sequence != active:
                    parts.append(sequence)
                    active = sequence
            parts.append(cell.glyph)
        if styled:
            parts.append(RESET)
        parts.append("\n")
        lines.append("".join(parts))
    return "".join(lines).encode("utf-8")
