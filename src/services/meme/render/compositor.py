"""
Overlay compositor: draws laid-out captions onto a template image.

Every zone is drawn onto one transparent overlay which is then composited onto
the base image in a single step and saved as JPEG.
"""

import os
import uuid
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional
from xml.sax.saxutils import escape

from loguru import logger as log
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from common import global_config
from src.services.meme.render.errors import ImageDecodeError, TemplateAssetMissing
from src.services.meme.render.layout import RenderedLayout, compute_layout
from src.services.meme.templates.models import Template

FontType = ImageFont.FreeTypeFont | ImageFont.ImageFont

SVG_FONT_FAMILY = "Impact, Arial Black, sans-serif"

# Pillow anchors: horizontal l/m/r, vertical m (middle of the line)
_PIL_ANCHORS = {"start": "lm", "middle": "mm", "end": "rm"}


@lru_cache(maxsize=64)
def load_font(font_size: int) -> FontType:
    """First configured bold condensed face that loads, at ``font_size`` px."""
    for candidate in global_config.render.font_candidates:
        try:
            return ImageFont.truetype(candidate, font_size)
        except OSError:
            continue

    log.warning(
        f"None of the configured fonts could be loaded; using Pillow's default at {font_size}px"
    )
    return ImageFont.load_default(size=font_size)


def stroke_px(layout: RenderedLayout) -> int:
    return max(1, round(layout.stroke_width))


def compute_layouts(
    template: Template,
    captions: Mapping[str, str],
    image_width: int,
    image_height: int,
    strict: bool = False,
) -> list[RenderedLayout]:
    """Layouts for every zone with text, in template order; empty zones are skipped."""
    layouts = []
    for zone in template.text_zones:
        text = captions.get(zone.id, "")
        if not text or not text.strip():
            continue
        layouts.append(compute_layout(text, zone, image_width, image_height, strict=strict))
    return layouts


def draw_layout(draw: ImageDraw.ImageDraw, layout: RenderedLayout) -> None:
    font = load_font(layout.font_size)
    anchor = _PIL_ANCHORS[layout.text_anchor]
    for placement in layout.placements:
        draw.text(
            (placement.x, placement.y),
            placement.text,
            font=font,
            fill=global_config.render.fill_color,
            stroke_width=stroke_px(layout),
            stroke_fill=global_config.render.stroke_color,
            anchor=anchor,
        )


def render_overlays(
    base_image: Image.Image,
    template: Template,
    captions: Mapping[str, str],
    strict: Optional[bool] = None,
) -> Image.Image:
    """Return a new RGB image with every captioned zone drawn on ``base_image``.

    Zone geometry is resolved against the image's real pixel size, which wins
    over the template's nominal width/height.
    """
    if strict is None:
        strict = global_config.render.strict_zone_bounds

    width, height = base_image.size
    layouts = compute_layouts(template, captions, width, height, strict=strict)

    base = base_image.convert("RGBA")
    if not layouts:
        return base.convert("RGB")

    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    for layout in layouts:
        draw_layout(draw, layout)

    return Image.alpha_composite(base, overlay).convert("RGB")


def template_asset_path(template: Template, templates_dir: Optional[Path] = None) -> Path:
    if templates_dir is None:
        templates_dir = global_config.resolve_path(global_config.render.templates_dir)
    return Path(templates_dir) / template.filename


def load_template_image(template: Template, templates_dir: Optional[Path] = None) -> Image.Image:
    """Open and fully decode a template's backing image.

    Raises:
        TemplateAssetMissing: If the file does not exist.
        ImageDecodeError: If the file cannot be decoded as an image.
    """
    path = template_asset_path(template, templates_dir)
    if not path.is_file():
        raise TemplateAssetMissing(template.template_id, path)

    try:
        with Image.open(path) as image:
            image.load()
            return image.copy()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(path, str(e)) from e


def render_meme(
    template: Template,
    captions: Mapping[str, str],
    output_path: Path,
    templates_dir: Optional[Path] = None,
    quality: Optional[int] = None,
    strict: Optional[bool] = None,
) -> Path:
    """Render a meme to ``output_path`` as JPEG.

    The image is written to a staging file next to ``output_path`` and moved
    into place once complete, so a failed or interrupted render never leaves
    a file at ``output_path``.
    """
    if quality is None:
        quality = global_config.render.jpeg_quality

    base_image = load_template_image(template, templates_dir)
    result = render_overlays(base_image, template, captions, strict=strict)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    staging_path = output_path.with_name(f".{output_path.name}.{uuid.uuid4().hex}.part")

    try:
        result.save(staging_path, format="JPEG", quality=quality)
        os.replace(staging_path, output_path)
    finally:
        if staging_path.exists():
            staging_path.unlink()

    log.info(
        f"Rendered template '{template.template_id}' "
        f"({result.width}x{result.height}) to {output_path}"
    )
    return output_path


def _escape_svg_text(text: str) -> str:
    return escape(text, {'"': "&quot;", "'": "&apos;"})


def overlay_svg(layouts: list[RenderedLayout], image_width: int, image_height: int) -> str:
    """The same overlay as SVG markup, for clients that draw it themselves."""
    elements = []
    for layout in layouts:
        for placement in layout.placements:
            elements.append(
                f'<text x="{placement.x:g}" y="{placement.y:g}" '
                f'font-family="{SVG_FONT_FAMILY}" font-size="{layout.font_size}" '
                f'font-weight="bold" fill="{global_config.render.fill_color}" '
                f'stroke="{global_config.render.stroke_color}" '
                f'stroke-width="{layout.stroke_width:g}" '
                f'text-anchor="{layout.text_anchor}" dominant-baseline="middle">'
                f"{_escape_svg_text(placement.text)}</text>"
            )

    body = "".join(elements)
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{image_width}" height="{image_height}">{body}</svg>'
    )
