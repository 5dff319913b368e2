"""Split a luminance field into smooth background and fine detail.

The low band is what survives an ideal low-pass filter in the frequency
domain; the high band is the residual, so ``low + high`` reproduces the
input. Line mode draws the high band as glyph strokes over a background
coloured by the low band.
"""

import numpy as np

# Radial cutoff in cycles per fine sample. With six samples per cell this
# keeps structure that spans roughly two cells or more.
DEFAULT_CUTOFF = 0.08


def split_frequencies(field: np.ndarray, cutoff: float = DEFAULT_CUTOFF) -> tuple[np.ndarray, np.ndarray]:
    """Return (low, high) with the same shape as `field` and low + high == field.

    The field is mirrored at its borders before transforming, so the implicit
    periodic wrap of the FFT doesn't introduce a false edge along the image
    boundary.
    """
    field = np.asarray(field, dtype=np.float64)
    h, w = field.shape
    pad_h, pad_w = h // 2, w // 2
    padded = np.pad(field, ((pad_h, pad_h), (pad_w, pad_w)), mode="symmetric")

    spectrum = np.fft.rfft2(padded)
    fy = np.fft.fftfreq(padded.shape[0])[:, np.newaxis]
    fx = np.fft.rfftfreq(padded.shape[1])[np.newaxis, :]
    spectrum[np.hypot(fy, fx) > cutoff] = 0

    low = np.fft.irfft2(spectrum, s=padded.shape)[pad_h : pad_h + h, pad_w : pad_w + w]
    return low, field - low


def cell_means(field: np.ndarray, samples: int) -> np.ndarray:
    rows = field.shape[0] // samples
    cols = field.shape[1] // samples
    return field[: rows * samples, : cols * samples].reshape(rows, samples, cols, samples).mean(axis=(1, 3))


def cell_peaks(field: np.ndarray, samples: int) -> np.ndarray:
    """Signed value of largest magnitude inside each cell."""
    rows = field.shape[0] // samples
    cols = field.shape[1] // samples
    cells = field[: rows * samples, : cols * samples].reshape(rows, samples, cols, samples).transpose(0, 2, 1, 3)
    flat = cells.reshape(rows, cols, samples * samples)
    idx = np.abs(flat).argmax(axis=2)
    return np.take_along_axis(flat, idx[..., np.newaxis], axis=2)[..., 0]


def orientation(field: np.ndarray, samples: int) -> tuple[np.ndarray, np.ndarray]:
    """Dominant gradient direction and its coherence for every cell.

    Uses the structure tensor summed over each samples x samples block.
    The angle is in radians in [-pi/2, pi/2], measured from the x axis with
    y pointing down; 0 means the intensity changes left to right (a vertical
    edge). Coherence is 1 for a perfectly straight edge and 0 for isotropic
    texture or flat cells.
    """
    gy, gx = np.gradient(np.asarray(field, dtype=np.float64))
    rows = field.shape[0] // samples
    cols = field.shape[1] // samples

    def block_sum(values):
        trimmed = values[: rows * samples, : cols * samples]
        return trimmed.reshape(rows, samples, cols, samples).sum(axis=(1, 3))

    jxx = block_sum(gx * gx)
    jyy = block_sum(gy * gy)
    jxy = block_sum(gx * gy)

    angle = 0.5 * np.arctan2(2 * jxy, jxx - jyy)
    energy = jxx + jyy
    spread = np.sqrt((jxx - jyy) ** 2 + 4 * jxy**2)
    coherence = np.where(energy > 1e-12, spread / np.where(energy > 1e-12, energy, 1.0), 0.0)
    return angle, np.clip(coherence, 0.0, 1.0)
