import numpy as np

from catpicture.charsets import BLOCK_GLYPH
from catpicture.colour import ColorMode, Grey, Rgb
from catpicture.config import Block, RenderConfig
from catpicture.encoder import RESET, encode, rgb_to_16, rgb_to_256, style_sequence
from catpicture.engine import BLANK, Cell, Grid, render
from catpicture.sampling import PixelBuffer
from catpicture.terminal import ColorCapability

RED = Rgb(255, 0, 0)
BLUE = Rgb(0, 0, 255)


def make_grid(width, height, cells):
    return Grid(width=width, height=height, cells=tuple(cells))


def test_red_blocks_truecolor():
    grid = make_grid(2, 1, [Cell(BLOCK_GLYPH, RED)] * 2)
    out = encode(grid, ColorCapability.TRUECOLOR)
    assert out == f"\033[38;2;255;0;0;49m{BLOCK_GLYPH}{BLOCK_GLYPH}\033[0m\n".encode("utf-8")


def test_style_only_emitted_on_change():
    cells = [Cell("a", RED), Cell("b", RED), Cell("c", BLUE), Cell("d", BLUE), Cell("e", RED)]
    out = encode(make_grid(5, 1, cells), ColorCapability.TRUECOLOR).decode("utf-8")
    assert out.count("\033[38;2;255;0;0;49m") == 2
    assert out.count("\033[38;2;0;0;255;49m") == 1
    assert out.endswith(RESET + "\n")


def test_every_row_resets():
    grid = make_grid(2, 3, [Cell("#", RED)] * 6)
    lines = encode(grid, ColorCapability.TRUECOLOR).decode("utf-8").split("\n")
    assert lines[-1] == ""
    assert len(lines) == 4
    for line in lines[:-1]:
        assert line.startswith("\033[38;2;255;0;0;49m")
        assert line.endswith(RESET)


def test_rows_in_order():
    cells = [Cell(ch) for ch in "abcdef"]
    out = encode(make_grid(3, 2, cells), ColorCapability.TRUECOLOR)
    assert out == b"abc\ndef\n"


def test_skipped_cells_reset_to_default():
    cells = [Cell("#", RED), BLANK, Cell("#", RED)]
    out = encode(make_grid(3, 1, cells), ColorCapability.TRUECOLOR).decode("utf-8")
    assert out == "\033[38;2;255;0;0;49m#\033[0m \033[38;2;255;0;0;49m#\033[0m\n"


def test_no_colour_capability_is_plain():
    grid = make_grid(2, 1, [Cell("#", RED), Cell("#", BLUE, RED)])
    assert encode(grid, ColorCapability.NONE) == b"##\n"


def test_monochrome_render_is_plain():
    arr = np.full((4, 4, 3), 200, dtype=np.uint8)
    grid = render(PixelBuffer(arr), RenderConfig(width=4, height=2, color_mode=ColorMode.MONOCHROME, draw_mode=Block()))
    out = encode(grid, ColorCapability.TRUECOLOR)
    assert b"\033" not in out
    assert out.decode("utf-8") == (BLOCK_GLYPH * 4 + "\n") * 2


def test_background_colour():
    seq = style_sequence(RED, BLUE, ColorCapability.TRUECOLOR)
    assert seq == "\033[38;2;255;0;0;48;2;0;0;255m"


def test_grey_truecolor_uses_full_range():
    assert style_sequence(Grey(123), None, ColorCapability.TRUECOLOR) == "\033[38;2;123;123;123;49m"


def test_grey_256_uses_ramp():
    assert style_sequence(Grey(128), None, ColorCapability.ANSI256) == "\033[38;5;244;49m"
    assert style_sequence(Grey(0), None, ColorCapability.ANSI256) == "\033[38;5;16;49m"
    assert style_sequence(Grey(255), None, ColorCapability.ANSI256) == "\033[38;5;231;49m"


def test_rgb_to_256_cube():
    assert rgb_to_256((255, 0, 0)) == 196
    assert rgb_to_256((0, 0, 255)) == 21
    assert rgb_to_256((95, 135, 175)) == 16 + 36 * 1 + 6 * 2 + 3


def test_rgb_to_16_nearest():
    assert rgb_to_16((255, 80, 80)) == 91
    assert rgb_to_16((160, 0, 0)) == 31
    assert rgb_to_16((0, 0, 0)) == 30
    assert rgb_to_16((255, 255, 255)) == 97


def test_sixteen_colour_background_offset():
    assert style_sequence(RED, Rgb(0, 0, 0), ColorCapability.ANSI16) == "\033[31;40m"


def test_palette_dedupes_equal_codes():
    # Two slightly different reds map to the same basic colour
    cells = [Cell("a", Rgb(250, 80, 80)), Cell("b", Rgb(255, 90, 85))]
    out = encode(make_grid(2, 1, cells), ColorCapability.ANSI16).decode("utf-8")
    assert out == "\033[91;49mab\033[0m\n"
