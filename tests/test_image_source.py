import io
from pathlib import Path

import pytest
from PIL import Image, ImageFile

import image_source
from analyze import run_pipeline
from image_source import ANALYSIS_SIZE, load_pixel_buffer, open_image


def save_image(path: Path, mode: str, size: tuple, color) -> Path:
    Image.new(mode, size, color).save(path)
    return path


def test_rgb_image_gives_three_channel_buffer(tmp_path: Path):
    path = save_image(tmp_path / 'shot.png', 'RGB', (400, 300), (20, 40, 60))
    data = load_pixel_buffer(path)
    width, height = ANALYSIS_SIZE
    assert len(data) == width * height * 3
    assert data[:3] == bytes([20, 40, 60])


def test_transparent_image_keeps_alpha(tmp_path: Path):
    path = save_image(tmp_path / 'shot.png', 'RGBA', (400, 300), (255, 0, 0, 255))
    data = load_pixel_buffer(path)
    width, height = ANALYSIS_SIZE
    assert len(data) == width * height * 4


def test_cover_fit_crops_to_analysis_size(tmp_path: Path):
    path = save_image(tmp_path / 'tall.png', 'RGB', (1920, 5000), (255, 255, 255))
    data = load_pixel_buffer(path)
    assert len(data) == 200 * 150 * 3


def test_load_from_encoded_bytes():
    stream = io.BytesIO()
    Image.new('RGB', (40, 30), (1, 2, 3)).save(stream, format='PNG')
    data = load_pixel_buffer(stream.getvalue(), size=(4, 3))
    assert data == bytes([1, 2, 3]) * 12


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        open_image(tmp_path / 'missing.png')


def test_invalid_data_raises():
    with pytest.raises(ValueError, match="Could not open image"):
        open_image(b'not an image')


def test_oversize_image_rejected(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(image_source, 'MAX_IMAGE_DIMENSION', 100)
    path = save_image(tmp_path / 'wide.png', 'RGB', (200, 10), (0, 0, 0))
    with pytest.raises(ValueError, match="exceed maximum"):
        open_image(path)


def test_oversize_image_rejected_before_decode(monkeypatch):
    stream = io.BytesIO()
    Image.new('RGB', (200, 10), (0, 0, 0)).save(stream, format='PNG')

    decoded = []
    original_load = ImageFile.ImageFile.load

    def spy_load(self):
        decoded.append(self.size)
        return original_load(self)

    monkeypatch.setattr(ImageFile.ImageFile, 'load', spy_load)
    monkeypatch.setattr(image_source, 'MAX_IMAGE_DIMENSION', 100)
    with pytest.raises(ValueError, match="exceed maximum"):
        open_image(stream.getvalue())
    assert decoded == []


def test_truncated_image_raises_value_error():
    stream = io.BytesIO()
    Image.effect_noise((64, 64), 64).save(stream, format='PNG')
    with pytest.raises(ValueError, match="Could not open image"):
        open_image(stream.getvalue()[:200])


def test_pipeline_on_solid_blue(tmp_path: Path):
    path = save_image(tmp_path / 'blue.png', 'RGB', (400, 300), (0, 0, 255))
    result = run_pipeline(path)
    assert result.dark_percentage == 0.0
    assert result.light_percentage == 100.0
    assert result.total_colors == 1
    assert result.dominant_colors[0].rgb == (0, 0, 250)
    assert result.dominant_colors[0].percentage == 100.0


def test_pipeline_ignores_alpha_channel(tmp_path: Path):
    path = save_image(tmp_path / 'red.png', 'RGBA', (400, 300), (255, 0, 0, 255))
    result = run_pipeline(path)
    assert result.total_colors == 1
    assert result.dominant_colors[0].hex == '#fa0000'
