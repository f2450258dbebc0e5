"""
Template Routes

Lists the template catalog and previews caption layouts without rendering.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger as log
from PIL import Image, UnidentifiedImageError

from common import global_config
from src.api.routes.meme.models import (
    LinePayload,
    PreviewRequest,
    PreviewResponse,
    TemplateSummary,
    ZoneLayoutPayload,
)
from src.services.meme.render.captions import assign_captions
from src.services.meme.render.compositor import (
    compute_layouts,
    overlay_svg,
    template_asset_path,
)
from src.services.meme.render.errors import ZoneOverflow
from src.services.meme.templates.loader import TemplateLoader, get_template_loader
from src.services.meme.templates.models import Template

router = APIRouter()


def _summary(template: Template) -> TemplateSummary:
    return TemplateSummary(
        template_id=template.template_id,
        name=template.name,
        width=template.width,
        height=template.height,
        zone_ids=[zone.id for zone in template.text_zones],
        tags=template.tags,
        popularity=template.popularity,
    )


def _pixel_size(template: Template) -> tuple[int, int]:
    """Real asset size when the file is readable, else the declared size."""
    path = template_asset_path(template)
    if path.is_file():
        try:
            with Image.open(path) as image:
                return image.size
        except (UnidentifiedImageError, OSError) as e:
            log.warning(f"Unreadable asset {path} ({e}); previewing at declared size")
    return template.width, template.height


@router.get("/api/templates", response_model=List[TemplateSummary])
async def list_templates(
    q: Optional[str] = None,
    tags: Optional[List[str]] = Query(None),
    loader: TemplateLoader = Depends(get_template_loader),
) -> List[TemplateSummary]:
    """Catalog listing, optionally narrowed by a search term and/or tags."""
    templates = loader.search_templates(q) if q else loader.list_templates()
    if tags:
        matching = {t.template_id for t in templates}
        templates = [
            t for t in loader.filter_templates(include_tags=tags) if t.template_id in matching
        ]
    return [_summary(t) for t in templates]


@router.post("/api/preview", response_model=PreviewResponse)
async def preview_layout(
    payload: PreviewRequest,
    loader: TemplateLoader = Depends(get_template_loader),
) -> PreviewResponse:
    """Compute zone layouts for a caption and return them with an SVG overlay."""
    template = loader.get_template(payload.template_id)
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")

    width, height = _pixel_size(template)
    captions = assign_captions(template, payload.caption)
    try:
        layouts = compute_layouts(
            template, captions, width, height, strict=global_config.render.strict_zone_bounds
        )
    except ZoneOverflow as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return PreviewResponse(
        template_id=template.template_id,
        width=width,
        height=height,
        captions=captions,
        zones=[
            ZoneLayoutPayload(
                zone_id=layout.zone_id,
                font_size=layout.font_size,
                max_chars_per_line=layout.max_chars_per_line,
                line_height=layout.line_height,
                stroke_width=layout.stroke_width,
                text_anchor=layout.text_anchor,
                overflows_zone=layout.overflows_zone,
                lines=[LinePayload(text=p.text, x=p.x, y=p.y) for p in layout.placements],
            )
            for layout in layouts
        ],
        svg=overlay_svg(layouts, width, height),
    )
