"""Create stand-in template images for catalog entries whose asset is missing.

Each placeholder has the template's declared size, a flat background and the
outline of every text zone, which makes zone geometry easy to check by eye.
"""

from pathlib import Path

from loguru import logger as log
from PIL import Image, ImageDraw

from common import global_config
from src.services.meme.render.compositor import template_asset_path
from src.services.meme.render.layout import ZoneBounds
from src.services.meme.templates.loader import TemplateLoader
from src.services.meme.templates.models import Template
from src.utils.logging_config import setup_logging

BACKGROUND = (88, 96, 112)
ZONE_OUTLINE = (255, 210, 0)


def draw_placeholder(template: Template) -> Image.Image:
    image = Image.new("RGB", (template.width, template.height), BACKGROUND)
    draw = ImageDraw.Draw(image)
    for zone in template.text_zones:
        bounds = ZoneBounds.from_zone(zone, template.width, template.height)
        draw.rectangle(
            (bounds.x, bounds.y, bounds.x + bounds.width, bounds.y + bounds.height),
            outline=ZONE_OUTLINE,
            width=3,
        )
    return image


def generate_placeholders(templates_dir: Path | None = None, overwrite: bool = False) -> list[Path]:
    """Write placeholders for every template without an asset and return their paths."""
    if templates_dir is None:
        templates_dir = global_config.resolve_path(global_config.render.templates_dir)
    templates_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for template in TemplateLoader().list_templates():
        path = template_asset_path(template, templates_dir)
        if path.exists() and not overwrite:
            continue
        draw_placeholder(template).save(path, format="JPEG", quality=90)
        log.info(f"Wrote placeholder for '{template.template_id}' to {path}")
        written.append(path)
    return written


if __name__ == "__main__":
    setup_logging()
    generate_placeholders()
