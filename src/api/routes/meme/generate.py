"""
Meme Generation Route

Generates a caption for a prompt, renders it onto a template and stores the
result. In text-only mode no image is rendered; the response carries
presentation ideas instead.
"""

import time
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from loguru import logger as log

from src.api.limits import LimitStatus, enforce_rate_limit
from src.api.routes.meme.models import (
    GenerateMemeRequest,
    GenerateMemeResponse,
    MemePayload,
)
from src.api.routes.meme.rendering import render_meme_file
from src.db.models.memes import new_meme_id
from src.db.repository import MemeRepository, get_meme_repository
from src.services.meme.captions.generator import (
    generate_alt_text,
    generate_caption,
    generate_meme_idea,
)
from src.services.meme.render.captions import assign_captions
from src.services.meme.templates.loader import TemplateLoader, get_template_loader
from src.utils.logging_config import setup_logging

setup_logging()

router = APIRouter()

SESSION_COOKIE = "session_id"
SESSION_COOKIE_MAX_AGE = 30 * 24 * 60 * 60
TEXT_ONLY_TEMPLATE_ID = "text-only"


def _session_for(request: Request, response: Response) -> str:
    session = request.cookies.get(SESSION_COOKIE) or uuid.uuid4().hex
    response.set_cookie(
        SESSION_COOKIE,
        session,
        httponly=True,
        max_age=SESSION_COOKIE_MAX_AGE,
        samesite="lax",
    )
    return session


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


@router.post("/api/generate", response_model=GenerateMemeResponse)
async def generate_meme(
    payload: GenerateMemeRequest,
    request: Request,
    response: Response,
    limit: LimitStatus = Depends(enforce_rate_limit),
    repository: MemeRepository = Depends(get_meme_repository),
    loader: TemplateLoader = Depends(get_template_loader),
) -> GenerateMemeResponse:
    """Generate a meme (or a text-only meme idea) from a prompt."""
    start = time.perf_counter()
    session = _session_for(request, response)
    response.headers["X-RateLimit-Remaining"] = str(limit.remaining)

    template = (
        loader.get_template(payload.template_id)
        if payload.template_id
        else loader.random_template()
    )
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")

    caption = await generate_caption(
        prompt=payload.prompt, tone=payload.tone, language=payload.language
    )
    log.info(f"Caption for template '{template.template_id}': {caption!r}")

    if not payload.generate_image_mode:
        idea = await generate_meme_idea(prompt=payload.prompt, caption=caption, tone=payload.tone)
        meme = repository.insert_meme(
            session_id=session,
            template_id=TEXT_ONLY_TEMPLATE_ID,
            caption=caption,
            language=payload.language,
            tone=payload.tone.value,
            generation_time_ms=_elapsed_ms(start),
        )
        return GenerateMemeResponse(
            text_only=True,
            meme=MemePayload(id=meme.id, caption=caption, meme_idea=idea),
            generation_time_ms=_elapsed_ms(start),
        )

    meme_id = new_meme_id()
    image_url = await render_meme_file(template, assign_captions(template, caption), meme_id)
    alt_text = await generate_alt_text(caption, template.name)

    meme = repository.insert_meme(
        meme_id=meme_id,
        session_id=session,
        template_id=template.template_id,
        caption=caption,
        alt_text=alt_text,
        image_url=image_url,
        language=payload.language,
        tone=payload.tone.value,
        generation_time_ms=_elapsed_ms(start),
    )

    return GenerateMemeResponse(
        meme=MemePayload(
            id=meme.id,
            caption=caption,
            image_url=image_url,
            template_id=template.template_id,
            template_name=template.name,
            alt_text=alt_text,
        ),
        generation_time_ms=_elapsed_ms(start),
    )
