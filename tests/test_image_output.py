import json

import numpy as np
import pytest
from PIL import Image

from fractal_engine.core.fractal_types import Julia
from fractal_engine.core.viewport import ViewportConfig
from fractal_engine.rendering.image_output import METADATA_KEY, ImageExporter, RenderMetadata


@pytest.fixture
def image():
    rng = np.random.default_rng(7)
    return rng.integers(0, 256, size=(12, 20, 3), dtype=np.uint8)


@pytest.fixture
def metadata():
    viewport = ViewportConfig(width=20, height=12, max_iterations=64, scale=0.5,
                              center=complex(-0.75, 0.1), variant=Julia(complex(-0.4, 0.6)))
    return RenderMetadata.for_viewport(viewport, 'color1_mod', 'threads', 0.25)


def test_metadata_json_round_trip(metadata):
    restored = RenderMetadata.from_json(metadata.to_json())
    assert restored == metadata
    assert restored.to_viewport().variant == Julia(complex(-0.4, 0.6))
    assert restored.software_version
    assert restored.timestamp


@pytest.mark.parametrize("suffix", ['.png', '.tiff', '.jpg'])
def test_metadata_survives_save(tmp_path, image, metadata, suffix):
    exporter = ImageExporter()
    path = exporter.save_image(image, tmp_path / f"fractal{suffix}", metadata)

    restored = exporter.extract_metadata_from_image(path)
    assert restored == metadata
    assert restored.to_viewport() == metadata.to_viewport()


def test_png_is_lossless(tmp_path, image, metadata):
    path = ImageExporter().save_image(image, tmp_path / "fractal.png", metadata)
    with Image.open(path) as img:
        assert np.array_equal(np.asarray(img), image)
        assert METADATA_KEY in img.text


def test_jpeg_writes_companion_json(tmp_path, image, metadata):
    path = ImageExporter().save_image(image, tmp_path / "fractal.jpeg", metadata, quality=80)
    companion = tmp_path / "fractal.json"
    assert companion.exists()
    assert json.loads(companion.read_text())['palette'] == 'color1_mod'
    with Image.open(path) as img:
        assert img.size == (20, 12)


def test_save_without_metadata(tmp_path, image):
    exporter = ImageExporter()
    path = exporter.save_image(image, tmp_path / "plain.png")
    assert exporter.extract_metadata_from_image(path) is None


def test_float_images_are_scaled(tmp_path):
    data = np.zeros((4, 4, 3), dtype=np.float64)
    data[..., 0] = 1.0
    path = ImageExporter().save_image(data, tmp_path / "red.png")
    with Image.open(path) as img:
        assert np.asarray(img)[0, 0].tolist() == [255, 0, 0]


def test_unsupported_format(tmp_path, image):
    with pytest.raises(ValueError, match="Unsupported format"):
        ImageExporter().save_image(image, tmp_path / "fractal.bmp")


def test_rejects_non_rgb_array(tmp_path):
    with pytest.raises(ValueError, match="Expected RGB"):
        ImageExporter().save_image(np.zeros((4, 4), dtype=np.uint8), tmp_path / "grey.png")


def test_image_info(tmp_path, image, metadata):
    exporter = ImageExporter()
    path = exporter.save_image(image, tmp_path / "fractal.png", metadata)
    info = exporter.get_image_info(path)

    assert info['format'] == 'PNG'
    assert info['dimensions'] == (20, 12)
    assert info['fractal_metadata']['backend'] == 'threads'

    with pytest.raises(FileNotFoundError):
        exporter.get_image_info(tmp_path / "missing.png")
