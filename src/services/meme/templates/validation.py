"""Consistency checks for the template catalog and its image assets."""

from pathlib import Path
from typing import Optional

from loguru import logger as log

from src.services.meme.render.compositor import load_template_image
from src.services.meme.render.errors import RenderError
from src.services.meme.templates.loader import TemplateLoader
from src.services.meme.templates.models import Template


class CatalogValidationError(Exception):
    """Raised when the catalog has problems and validation is strict."""


def template_problems(template: Template, templates_dir: Optional[Path] = None) -> list[str]:
    problems = []

    zone_ids = [zone.id for zone in template.text_zones]
    if not zone_ids:
        problems.append(f"{template.template_id}: no text zones")
    if len(set(zone_ids)) != len(zone_ids):
        problems.append(f"{template.template_id}: duplicate zone ids {zone_ids}")

    for zone in template.text_zones:
        if zone.x + zone.width > 100 or zone.y + zone.height > 100:
            problems.append(
                f"{template.template_id}/{zone.id}: zone extends past the image edge"
            )

    try:
        image = load_template_image(template, templates_dir)
    except RenderError as e:
        problems.append(f"{template.template_id}: {e}")
    else:
        if image.size != (template.width, template.height):
            # Not fatal: zones are percentages and rendering uses the real size
            log.warning(
                f"{template.template_id}: asset is {image.size[0]}x{image.size[1]}, "
                f"catalog declares {template.width}x{template.height}"
            )

    return problems


def validate_catalog(
    loader: Optional[TemplateLoader] = None,
    templates_dir: Optional[Path] = None,
    strict: bool = False,
) -> list[str]:
    """Check every template; returns the problems found.

    Raises:
        CatalogValidationError: In strict mode, if any problem is found.
    """
    loader = loader or TemplateLoader()
    problems = []

    seen = set()
    for template in loader.list_templates():
        if template.template_id in seen:
            problems.append(f"{template.template_id}: duplicate template id")
        seen.add(template.template_id)
        problems.extend(template_problems(template, templates_dir))

    if not loader.list_templates():
        problems.append(f"No templates loaded from {loader.templates_file}")

    if strict and problems:
        raise CatalogValidationError("; ".join(problems))
    return problems
