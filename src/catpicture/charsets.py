# Glyphs for nearest-neighbour matching, roughly sparse to dense then strokes
ART = " .'`,:;-_=+*%#@|/\\"

# Strokes for single straight lines through a cell, keyed by the edge orientation
VERTICAL = "|"
RISING = "/"
HORIZONTAL = "-"
FALLING = "\\"
DIRECTIONAL = VERTICAL + RISING + HORIZONTAL + FALLING

# U+2588 FULL BLOCK
BLOCK_GLYPH = "█"

# Line mode only ever draws blank space or a stroke
LINE = " .-_" + DIRECTIONAL
