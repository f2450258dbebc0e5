"""
Meme Evolution Route

Turns a stored meme's caption into mutated variants, renders each one and,
once all have rendered, records them as children of the original.
"""

import time

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger as log

from src.api.limits import enforce_rate_limit
from src.api.routes.meme.models import EvolvedMeme, EvolveMemeRequest, EvolveMemeResponse
from src.api.routes.meme.rendering import discard_rendered, render_meme_file
from src.db.models.memes import new_meme_id
from src.db.repository import MemeRepository, get_meme_repository
from src.services.meme.captions.evolution import evolution_engine
from src.services.meme.captions.models import MutationType
from src.services.meme.render.captions import assign_captions
from src.services.meme.templates.loader import TemplateLoader, get_template_loader
from src.utils.logging_config import setup_logging

setup_logging()

router = APIRouter()


@router.post(
    "/api/evolve",
    response_model=EvolveMemeResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
async def evolve_meme(
    payload: EvolveMemeRequest,
    repository: MemeRepository = Depends(get_meme_repository),
    loader: TemplateLoader = Depends(get_template_loader),
) -> EvolveMemeResponse:
    """Generate, render and store mutations of an existing meme."""
    start = time.perf_counter()

    original = repository.find_meme_by_id(payload.meme_id)
    if original is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meme not found")

    template = loader.get_template(original.template_id)
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")

    mutations = await evolution_engine.evolve_meme(
        original.caption, feedback=payload.feedback, mutation_type=payload.mutation_type
    )

    targets = [template]
    if payload.mutation_type == MutationType.TEMPLATE_SWAP:
        targets = evolution_engine.suggest_template_swaps(template, loader) or [template]

    rendered = []
    try:
        for i, mutated_caption in enumerate(mutations):
            target = targets[i % len(targets)]
            meme_id = new_meme_id()
            image_url = await render_meme_file(
                target, assign_captions(target, mutated_caption), meme_id
            )
            rendered.append((meme_id, target, mutated_caption, image_url))

        generation_time_ms = int((time.perf_counter() - start) * 1000)
        repository.insert_children(
            original,
            [
                {
                    "id": meme_id,
                    "template_id": target.template_id,
                    "caption": mutated_caption,
                    "image_url": image_url,
                    "generation_time_ms": generation_time_ms,
                }
                for meme_id, target, mutated_caption, image_url in rendered
            ],
            mutation_type=payload.mutation_type.value,
            feedback=payload.feedback,
        )
    except Exception:
        # Children are stored all together or not at all
        discard_rendered(meme_id for meme_id, *_ in rendered)
        raise

    evolved = [
        EvolvedMeme(
            id=meme_id,
            image_url=image_url,
            caption=mutated_caption,
            template_id=target.template_id,
            mutation_type=payload.mutation_type,
        )
        for meme_id, target, mutated_caption, image_url in rendered
    ]

    log.info(f"Evolved meme {original.id} into {len(evolved)} variants")
    return EvolveMemeResponse(
        mutations=evolved,
        generation_time_ms=int((time.perf_counter() - start) * 1000),
    )
