import json
from pathlib import Path

from PIL import Image

from batch_analyze import analyze_directory, find_images


def test_find_images_filters_extensions(tmp_path: Path):
    for name in ('a.png', 'b.JPG', 'notes.txt', 'c.webp'):
        (tmp_path / name).write_bytes(b'')
    assert [p.name for p in find_images(tmp_path)] == ['a.png', 'b.JPG', 'c.webp']


def test_analyze_directory_writes_reports(tmp_path: Path):
    source = tmp_path / 'in'
    output = tmp_path / 'out'
    source.mkdir()
    output.mkdir()
    Image.new('RGB', (400, 300), (0, 0, 0)).save(source / 'night.png')
    (source / 'broken.png').write_bytes(b'garbage')

    succeeded, failed = analyze_directory(find_images(source), output)

    assert succeeded == 1
    assert [name for name, _ in failed] == ['broken.png']
    report = json.loads((output / 'night-palette.json').read_text())
    assert report['darkPercentage'] == 100.0
    assert report['dominantColors'][0]['hex'] == '#000000'
    assert (output / 'night-palette.html').exists()
