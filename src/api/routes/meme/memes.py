"""
Meme Lookup Routes

Read-only access to stored memes and their evolution trees.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.routes.meme.models import (
    EvolutionNodePayload,
    EvolutionTreeResponse,
    MemeRecord,
)
from src.db.repository import MemeRepository, get_meme_repository
from src.services.meme.captions.evolution import EvolutionNode, evolution_engine

router = APIRouter()


def _age_hours(created_at: datetime) -> float:
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return (datetime.now(timezone.utc) - created_at).total_seconds() / 3600


def _node_payload(node: EvolutionNode) -> EvolutionNodePayload:
    return EvolutionNodePayload(
        meme_id=node.meme_id,
        caption=node.caption,
        template_id=node.template_id,
        mutation_type=node.mutation_type,
        depth=node.depth,
        children=[_node_payload(child) for child in node.children],
    )


@router.get("/api/memes/{meme_id}", response_model=MemeRecord)
async def get_meme(
    meme_id: str,
    repository: MemeRepository = Depends(get_meme_repository),
) -> MemeRecord:
    meme = repository.find_meme_by_id(meme_id)
    if meme is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meme not found")

    evolutions = repository.count_children(meme.id)
    return MemeRecord(
        id=meme.id,
        parent_id=meme.parent_id,
        template_id=meme.template_id,
        caption=meme.caption,
        alt_text=meme.alt_text,
        image_url=meme.image_url,
        language=meme.language,
        tone=meme.tone,
        created_at=meme.created_at,
        generation_time_ms=meme.generation_time_ms,
        evolutions=evolutions,
        # Shares are not tracked, so fitness reflects length, evolutions and recency
        fitness=evolution_engine.calculate_fitness(
            meme.caption,
            shares=0,
            evolutions=evolutions,
            age_hours=_age_hours(meme.created_at),
        ),
    )


@router.get("/api/memes/{meme_id}/tree", response_model=EvolutionTreeResponse)
async def get_evolution_tree(
    meme_id: str,
    repository: MemeRepository = Depends(get_meme_repository),
) -> EvolutionTreeResponse:
    """The whole evolution tree the meme belongs to, plus its path from the root."""
    lineage = repository.list_lineage(meme_id)
    if not lineage:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meme not found")

    mutation_types = repository.mutation_types_for([meme.id for meme in lineage])
    roots = evolution_engine.build_evolution_tree(lineage, mutation_types)
    path = evolution_engine.get_evolution_path(roots, meme_id) or []

    return EvolutionTreeResponse(
        roots=[_node_payload(root) for root in roots],
        path=[node.meme_id for node in path],
    )
