import pytest
from PIL import Image

from src.services.meme.render.compositor import (
    compute_layouts,
    overlay_svg,
    render_meme,
    render_overlays,
)
from src.services.meme.render.captions import assign_captions
from src.services.meme.render.errors import ImageDecodeError, TemplateAssetMissing
from src.services.meme.render.layout import ZoneBounds, compute_layout

from tests.unit.meme.factories import make_template


@pytest.fixture
def templates_dir(tmp_path):
    d = tmp_path / "templates"
    d.mkdir()
    return d


def _write_base(templates_dir, filename, size=(600, 400), color=(40, 90, 160)):
    Image.new("RGB", size, color).save(templates_dir / filename)


def test_render_meme_writes_jpeg_of_template_size(templates_dir, tmp_path):
    template = make_template(2)
    _write_base(templates_dir, template.filename, size=(600, 400))
    output = tmp_path / "out" / "meme.jpg"

    result = render_meme(
        template,
        {"zone1": "top text", "zone2": "bottom text"},
        output,
        templates_dir=templates_dir,
    )

    assert result == output
    with Image.open(output) as image:
        assert image.format == "JPEG"
        assert image.size == (600, 400)

    # No staging files left behind
    assert [p.name for p in output.parent.iterdir()] == ["meme.jpg"]


def test_render_overlays_is_deterministic():
    template = make_template(2)
    base = Image.new("RGB", (500, 500), (10, 10, 10))
    captions = {"zone1": "one does not simply", "zone2": "write deterministic tests"}

    first = render_overlays(base, template, captions)
    second = render_overlays(base, template, captions)

    assert first.tobytes() == second.tobytes()


def test_render_overlays_draws_text():
    template = make_template(1)
    base = Image.new("RGB", (500, 500), (10, 10, 10))

    result = render_overlays(base, template, {"zone1": "visible"})

    assert result.mode == "RGB"
    assert result.tobytes() != base.tobytes()


def test_empty_zones_leave_image_unchanged():
    template = make_template(3)
    base = Image.new("RGB", (300, 300), (200, 30, 30))

    result = render_overlays(base, template, {"zone1": "", "zone2": "   "})

    assert result.tobytes() == base.tobytes()


def test_actual_image_size_wins_over_declared_size():
    template = make_template(1, width=1200, height=1200)
    base = Image.new("RGB", (400, 300))

    (layout,) = compute_layouts(template, {"zone1": "caption"}, *base.size)
    result = render_overlays(base, template, {"zone1": "caption"})

    assert result.size == (400, 300)
    assert layout.bounds.width == pytest.approx(0.9 * 400)
    assert layout.bounds.height < 300


def test_missing_asset_raises_and_writes_nothing(templates_dir, tmp_path):
    template = make_template(1)
    output = tmp_path / "out" / "missing.jpg"

    with pytest.raises(TemplateAssetMissing) as exc_info:
        render_meme(template, {"zone1": "hello"}, output, templates_dir=templates_dir)

    assert exc_info.value.template_id == template.template_id
    assert not output.exists()


def test_corrupt_asset_raises_decode_error(templates_dir, tmp_path):
    template = make_template(1)
    (templates_dir / template.filename).write_bytes(b"definitely not an image")
    output = tmp_path / "out" / "corrupt.jpg"

    with pytest.raises(ImageDecodeError):
        render_meme(template, {"zone1": "hello"}, output, templates_dir=templates_dir)

    assert not output.exists()


def test_overlay_svg_escapes_markup():
    template = make_template(1)
    layout = compute_layout(
        'tom & "jerry" <3', template.text_zones[0], 1000, 1000
    )

    svg = overlay_svg([layout], 1000, 1000)

    assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg" width="1000" height="1000">')
    assert "TOM &amp; &quot;JERRY&quot; &lt;3" in svg
    assert "<3" not in svg
    assert 'text-anchor="middle"' in svg
    assert 'dominant-baseline="middle"' in svg


def test_overlay_svg_one_text_element_per_line():
    template = make_template(1)
    layout = compute_layout(
        "a long caption that wraps across a few lines for sure",
        template.text_zones[0],
        300,
        1000,
    )

    svg = overlay_svg([layout], 300, 1000)

    assert svg.count("<text ") == len(layout.lines)


def test_two_line_caption_on_three_zone_template():
    template = make_template(3)
    base = Image.new("RGB", (500, 500), (10, 10, 10))

    captions = assign_captions(template, "top line\nmiddle line")
    layouts = compute_layouts(template, captions, *base.size)
    result = render_overlays(base, template, captions)

    assert captions == {"zone1": "top line", "zone2": "middle line", "zone3": ""}
    assert [layout.zone_id for layout in layouts] == ["zone1", "zone2"]

    # Nothing is drawn inside the third zone
    zone3 = ZoneBounds.from_zone(template.text_zones[2], *base.size)
    box = (
        int(zone3.x),
        int(zone3.y),
        int(zone3.x + zone3.width),
        int(zone3.y + zone3.height),
    )
    assert result.crop(box).tobytes() == base.crop(box).tobytes()
    assert result.tobytes() != base.tobytes()
