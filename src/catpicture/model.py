import logging
import struct
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import numpy as np

logger = logging.getLogger(__name__)

MAGIC = b"CPIC"
FORMAT_VERSION = 1


@dataclass(frozen=True)
class GlyphModel:
    """Candidate glyphs and their signatures.

    A signature is size x size ink coverage values in 0-1, row-major, top-left
    first. Glyph order matters: when two glyphs are equally close the one
    declared first wins. Models are read-only once built.
    """

    name: str
    size: int
    signatures: Mapping[str, tuple[float, ...]] = field(default_factory=dict)

    def __post_init__(self):
        n = self.size * self.size
        signatures = {glyph: tuple(signature) for glyph, signature in self.signatures.items()}
        for glyph, signature in signatures.items():
            if len(signature) != n:
                raise ValueError(f"Signature for {glyph!r} has {len(signature)} values, expected {n}")
        matrix = np.array(list(signatures.values()), dtype=np.float64).reshape(len(signatures), n)
        matrix.flags.writeable = False
        object.__setattr__(self, "signatures", MappingProxyType(signatures))
        object.__setattr__(self, "_glyphs", tuple(signatures))
        object.__setattr__(self, "_matrix", matrix)

    @property
    def glyphs(self) -> list[str]:
        return list(self._glyphs)

    def __len__(self) -> int:
        return len(self._glyphs)

    def subset(self, glyphs: str) -> "GlyphModel":
        """A model restricted to `glyphs`, keeping this model's order."""
        wanted = set(glyphs)
        kept = {g: s for g, s in self.signatures.items() if g in wanted}
        return GlyphModel(name=self.name, size=self.size, signatures=kept)

    def save(self, path: str | Path) -> None:
        path = Path(path)
        with path.open("wb") as f:
            f.write(MAGIC)
            f.write(struct.pack("B", FORMAT_VERSION))
            name_bytes = self.name.encode("utf-8")
            f.write(struct.pack(">H", len(name_bytes)))
            f.write(name_bytes)
            f.write(struct.pack("B", self.size))
            f.write(struct.pack(">I", len(self.signatures)))
            for glyph, signature in self.signatures.items():
                glyph_bytes = glyph.encode("utf-8")
                f.write(struct.pack("B", len(glyph_bytes)))
                f.write(glyph_bytes)
                f.write(struct.pack(f">{len(signature)}f", *signature))

    @classmethod
    def load(cls, path: str | Path) -> "GlyphModel":
        path = Path(path)
        with path.open("rb") as f:
            magic = f.read(4)
            if magic != MAGIC:
                raise ValueError(f"Not a CPIC file: {magic!r}")
            try:
                name, size, signatures = cls._read_body(f)
            except struct.error as e:
                raise ValueError(f"Truncated CPIC file {path}: {e}") from e
        logger.debug("Loaded %d glyph signatures from %s", len(signatures), path)
        return cls(name=name, size=size, signatures=signatures)

    @staticmethod
    def _read_body(f) -> tuple[str, int, dict[str, tuple[float, ...]]]:
        (version,) = struct.unpack("B", f.read(1))
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported format version: {version}")
        (name_len,) = struct.unpack(">H", f.read(2))
        name = f.read(name_len).decode("utf-8")
        (size,) = struct.unpack("B", f.read(1))
        (glyph_count,) = struct.unpack(">I", f.read(4))
        n = size * size
        signatures: dict[str, tuple[float, ...]] = {}
        for _ in range(glyph_count):
            (glyph_len,) = struct.unpack("B", f.read(1))
            glyph = f.read(glyph_len).decode("utf-8")
            signatures[glyph] = struct.unpack(f">{n}f", f.read(4 * n))
        return name, size, signatures

    def distances(self, vectors: np.ndarray) -> np.ndarray:
        """Sum of squared differences between (..., n) vectors and every signature -> (..., glyphs)."""
        vectors = np.asarray(vectors, dtype=np.float64)
        diff = vectors[..., np.newaxis, :] - self._matrix
        return (diff * diff).sum(axis=-1)

    def find_nearest(self, vector: tuple[float, ...]) -> str:
        glyphs, _ = self.find_nearest_grid(np.asarray(vector, dtype=np.float64)[np.newaxis, np.newaxis, :])
        return glyphs[0][0]

    def find_nearest_grid(self, vectors: np.ndarray, penalty: np.ndarray | None = None) -> tuple[list[str], np.ndarray]:
        """Best glyph for every cell of a (rows, cols, n) grid.

        `penalty` is added to the distances before choosing, shape (rows, cols, glyphs).
        Returns one string per row and the (rows, cols) winning distances.
        """
        dist = self.distances(vectors)
        if penalty is not None:
            dist = dist + penalty
        # argmin picks the first minimum, so ties go to the earliest glyph
        best = dist.argmin(axis=-1)
        scores = np.take_along_axis(dist, best[..., np.newaxis], axis=-1)[..., 0]
        glyph_arr = np.array(self._glyphs)
        rows = ["".join(glyph_arr[row]) for row in best]
        return rows, scores
