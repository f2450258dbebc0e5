"""Glue between the routes and the renderer: output paths, URLs, threadpool."""

from pathlib import Path
from typing import Iterable, Mapping

from fastapi.concurrency import run_in_threadpool
from loguru import logger as log

from common import global_config
from src.services.meme.render.compositor import render_meme
from src.services.meme.templates.models import Template


def generated_image_url(meme_id: str) -> str:
    return f"{global_config.server.generated_url_prefix}/{meme_id}.jpg"


def generated_image_path(meme_id: str) -> Path:
    return global_config.resolve_path(global_config.render.output_dir) / f"{meme_id}.jpg"


async def render_meme_file(
    template: Template, captions: Mapping[str, str], meme_id: str
) -> str:
    """Render off the event loop and return the public URL of the image.

    Render errors propagate; the app maps them to a 500 response.
    """
    await run_in_threadpool(
        render_meme, template, dict(captions), generated_image_path(meme_id)
    )
    return generated_image_url(meme_id)


def discard_rendered(meme_ids: Iterable[str]) -> None:
    """Delete images rendered for memes that will not be stored."""
    for meme_id in meme_ids:
        path = generated_image_path(meme_id)
        path.unlink(missing_ok=True)
        log.debug(f"Discarded unstored render {path}")
