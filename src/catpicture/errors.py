class RenderError(ValueError):
    """Base class for errors raised while rendering a picture."""


class InvalidCropRectangle(RenderError):
    pass


class InvalidOutputDimensions(RenderError):
    pass


class EmptyRepertoire(RenderError):
    """Raised when glyph matching is requested against a model with no glyphs."""


class DecodeError(Exception):
    """The input bytes could not be decoded into an image."""
