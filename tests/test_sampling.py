import numpy as np
import pytest
from PIL import Image

from catpicture.errors import InvalidCropRectangle, InvalidOutputDimensions
from catpicture.sampling import (
    DEFAULT_WIDTH,
    FINE_SAMPLES,
    PixelBuffer,
    Rectangle,
    box_sample,
    cell_vectors,
    resolve_dimensions,
    sample_cells,
    validate_crop,
)


def test_pixel_buffer_drops_alpha():
    arr = np.zeros((2, 3, 4), dtype=np.uint8)
    arr[..., 3] = 7
    buf = PixelBuffer(arr)
    assert buf.pixels.shape == (2, 3, 3)
    assert buf.width == 3
    assert buf.height == 2


def test_pixel_buffer_expands_greyscale():
    buf = PixelBuffer(np.full((2, 2), 9, dtype=np.uint8))
    assert buf.pixels.shape == (2, 2, 3)
    assert (buf.pixels == 9).all()


def test_pixel_buffer_is_read_only():
    buf = PixelBuffer(np.zeros((2, 2, 3), dtype=np.uint8))
    with pytest.raises(ValueError):
        buf.pixels[0, 0, 0] = 1


def test_pixel_buffer_from_palette_image():
    img = Image.new("P", (4, 2))
    buf = PixelBuffer.from_image(img)
    assert buf.pixels.shape == (2, 4, 3)


def test_validate_crop_defaults_to_full_image():
    assert validate_crop(None, 10, 6) == Rectangle(0, 0, 10, 6)


def test_validate_crop_accepts_exact_fit():
    crop = Rectangle(2, 1, 8, 5)
    assert validate_crop(crop, 10, 6) is crop


@pytest.mark.parametrize(
    "crop",
    [
        Rectangle(5, 0, 6, 6),  # x + w > width
        Rectangle(0, 3, 10, 4),  # y + h > height
        Rectangle(0, 0, 0, 6),
        Rectangle(0, 0, 10, -1),
        Rectangle(-1, 0, 5, 5),
        Rectangle(20, 20, 1, 1),
    ],
)
def test_validate_crop_rejects_out_of_bounds(crop):
    with pytest.raises(InvalidCropRectangle):
        validate_crop(crop, 10, 6)


@pytest.mark.parametrize("size", [(0, 0), (0, 6), (10, 0)])
def test_validate_crop_rejects_empty_image(size):
    with pytest.raises(InvalidCropRectangle):
        validate_crop(None, *size)


def test_resolve_dimensions_both_given():
    assert resolve_dimensions(12, 34, Rectangle(0, 0, 100, 10)) == (12, 34)


def test_resolve_dimensions_from_width():
    # 200x100 image, 40 columns -> 40 * 100 / 200 * 0.5 = 10 rows
    assert resolve_dimensions(40, None, Rectangle(0, 0, 200, 100)) == (40, 10)


def test_resolve_dimensions_from_height():
    # 200x100 image, 10 rows -> 10 * 200 / 100 / 0.5 = 40 columns
    assert resolve_dimensions(None, 10, Rectangle(0, 0, 200, 100)) == (40, 10)


def test_resolve_dimensions_default_width():
    width, height = resolve_dimensions(None, None, Rectangle(0, 0, 160, 160))
    assert width == DEFAULT_WIDTH
    assert height == 40


@pytest.mark.parametrize("width,crop_w,crop_h", [(80, 640, 480), (33, 17, 91), (64, 1000, 30), (120, 3, 5)])
def test_derived_height_within_one_of_ratio(width, crop_w, crop_h):
    _, height = resolve_dimensions(width, None, Rectangle(0, 0, crop_w, crop_h))
    assert abs(height - width * crop_h / crop_w * 0.5) <= 1


def test_resolve_dimensions_uses_crop_not_image():
    assert resolve_dimensions(10, None, Rectangle(5, 5, 20, 40)) == (10, 10)


def test_resolve_dimensions_rejects_zero():
    with pytest.raises(InvalidOutputDimensions):
        resolve_dimensions(0, 5, Rectangle(0, 0, 10, 10))


def test_resolve_dimensions_rejects_vanishing_height():
    # A very wide strip collapses to zero rows
    with pytest.raises(InvalidOutputDimensions):
        resolve_dimensions(10, None, Rectangle(0, 0, 1000, 1))


def test_resolve_dimensions_max_dimension():
    with pytest.raises(InvalidOutputDimensions):
        resolve_dimensions(5000, 10, Rectangle(0, 0, 10, 10), max_dimension=1000)
    assert resolve_dimensions(5000, 10, Rectangle(0, 0, 10, 10)) == (5000, 10)


def test_box_sample_averages_blocks():
    arr = np.array(
        [
            [0, 2, 10, 10],
            [4, 6, 10, 30],
        ],
        dtype=np.float64,
    )
    result = box_sample(arr, Rectangle(0, 0, 4, 2), 2, 1)
    np.testing.assert_allclose(result, [[3.0, 15.0]])


def test_box_sample_respects_crop():
    arr = np.arange(16, dtype=np.float64).reshape(4, 4)
    result = box_sample(arr, Rectangle(2, 2, 2, 2), 1, 1)
    np.testing.assert_allclose(result, [[(10 + 11 + 14 + 15) / 4]])


def test_box_sample_upsamples_by_replication():
    arr = np.array([[0, 100], [200, 50]], dtype=np.float64)
    result = box_sample(arr, Rectangle(0, 0, 2, 2), 4, 4)
    expected = np.repeat(np.repeat(arr, 2, axis=0), 2, axis=1)
    np.testing.assert_array_equal(result, expected)


def test_box_sample_keeps_channels():
    arr = np.zeros((2, 2, 3))
    arr[..., 0] = 255
    result = box_sample(arr, Rectangle(0, 0, 2, 2), 1, 1)
    assert result.shape == (1, 1, 3)
    np.testing.assert_allclose(result[0, 0], [255, 0, 0])


def test_box_sample_uneven_spans():
    # 3 pixels into 2 samples: spans [0, 1) and [1, 3)
    arr = np.array([[3.0, 6.0, 12.0]])
    result = box_sample(arr, Rectangle(0, 0, 3, 1), 2, 1)
    np.testing.assert_allclose(result, [[3.0, 9.0]])


def test_sample_cells_fine_field_shape():
    buf = PixelBuffer(np.zeros((30, 40, 3), dtype=np.uint8))
    samples = sample_cells(buf, Rectangle(0, 0, 40, 30), 5, 3, fine=True)
    assert samples.colours.shape == (3, 5, 3)
    assert samples.fine.shape == (3 * FINE_SAMPLES, 5 * FINE_SAMPLES)


def test_sample_cells_without_fine():
    buf = PixelBuffer(np.zeros((4, 4, 3), dtype=np.uint8))
    assert sample_cells(buf, Rectangle(0, 0, 4, 4), 2, 2).fine is None


def test_cell_vectors_reduces_blocks():
    fine = np.zeros((6, 12))
    fine[:2, :2] = 1.0  # top-left third of the first cell
    vectors = cell_vectors(fine, 3, samples=6)
    assert vectors.shape == (1, 2, 9)
    np.testing.assert_allclose(vectors[0, 0], [1, 0, 0, 0, 0, 0, 0, 0, 0])
    np.testing.assert_allclose(vectors[0, 1], 0.0)


def test_cell_vectors_non_divisible_size():
    fine = np.ones((6, 6))
    vectors = cell_vectors(fine, 4, samples=6)
    assert vectors.shape == (1, 1, 16)
    np.testing.assert_allclose(vectors, 1.0)
