import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from catpicture.config import RenderConfig
from catpicture.encoder import encode
from catpicture.engine import render
from catpicture.errors import DecodeError
from catpicture.model import GlyphModel
from catpicture.sampling import PixelBuffer
from catpicture.terminal import ColorCapability


def decode_image(data: bytes) -> PixelBuffer:
    """Decode PNG/JPEG/etc. bytes into RGB pixels."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return PixelBuffer.from_image(image)
    except (UnidentifiedImageError, OSError) as e:
        raise DecodeError(f"Could not decode image: {e}") from e


def load_pixels(image: Image.Image | PixelBuffer | bytes | str | Path) -> PixelBuffer:
    if isinstance(image, PixelBuffer):
        return image
    if isinstance(image, Image.Image):
        return PixelBuffer.from_image(image)
    if isinstance(image, bytes):
        return decode_image(image)
    return decode_image(Path(image).read_bytes())


def image_to_text(
    image: Image.Image | PixelBuffer | bytes | str | Path,
    config: RenderConfig | None = None,
    capability: ColorCapability = ColorCapability.TRUECOLOR,
    model: GlyphModel | None = None,
) -> str:
    if config is None:
        config = RenderConfig()
    grid = render(load_pixels(image), config, model)
    return encode(grid, capability).decode("utf-8")
