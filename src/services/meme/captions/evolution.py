from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol

from src.services.meme.captions.generator import generate_mutations
from src.services.meme.captions.models import MutationType
from src.services.meme.templates.loader import TemplateLoader
from src.services.meme.templates.models import Template


class MemeLike(Protocol):
    id: str
    parent_id: Optional[str]
    caption: str
    template_id: str


@dataclass
class EvolutionNode:
    meme_id: str
    caption: str
    template_id: str
    mutation_type: Optional[str] = None
    depth: int = 0
    children: list["EvolutionNode"] = field(default_factory=list)


class EvolutionEngine:
    """Caption evolution: mutations, template swaps, fitness and lineage trees."""

    async def generate_variations(self, original_caption: str, count: int = 3) -> list[str]:
        return await generate_mutations(
            original_caption, mutation_type=MutationType.VARIATION, count=count
        )

    async def evolve_meme(
        self,
        caption: str,
        feedback: Optional[str] = None,
        mutation_type: MutationType = MutationType.VARIATION,
    ) -> list[str]:
        return await generate_mutations(caption, feedback=feedback, mutation_type=mutation_type)

    def suggest_template_swaps(
        self, current: Template, loader: TemplateLoader, limit: int = 3
    ) -> list[Template]:
        """Other templates sharing at least one tag, most popular first."""
        suggestions = [
            template
            for template in loader.list_templates()
            if template.template_id != current.template_id
            and set(template.tags) & set(current.tags)
        ]
        suggestions.sort(key=lambda t: t.popularity, reverse=True)
        return suggestions[:limit]

    def calculate_fitness(
        self, caption: str, shares: int, evolutions: int, age_hours: float
    ) -> int:
        """Heuristic 0-100 engagement score for a meme."""
        score = 0.0

        # Caption length sweet spot is 30-80 characters
        caption_length = len(caption)
        if 30 <= caption_length <= 80:
            score += 20
        else:
            score += max(0.0, 20 - abs(caption_length - 55) / 2)

        score += min(40, shares * 5)
        score += min(30, evolutions * 3)

        if age_hours < 24:
            score += 10 * (1 - age_hours / 24)

        return round(score)

    def build_evolution_tree(
        self,
        memes: Iterable[MemeLike],
        mutation_types: Optional[dict[str, str]] = None,
    ) -> list[EvolutionNode]:
        """Link memes to their parents; returns the roots.

        ``memes`` must list parents before their children (creation order),
        so depths are final when a child is attached. A meme whose parent is
        not in ``memes`` is dropped.
        """
        mutation_types = mutation_types or {}
        memes = list(memes)
        nodes = {
            meme.id: EvolutionNode(
                meme_id=meme.id,
                caption=meme.caption,
                template_id=meme.template_id,
                mutation_type=mutation_types.get(meme.id),
            )
            for meme in memes
        }

        roots = []
        for meme in memes:
            node = nodes[meme.id]
            if meme.parent_id:
                parent = nodes.get(meme.parent_id)
                if parent is not None:
                    parent.children.append(node)
                    node.depth = parent.depth + 1
            else:
                roots.append(node)
        return roots

    def get_evolution_path(
        self, tree: list[EvolutionNode], target_meme_id: str
    ) -> Optional[list[EvolutionNode]]:
        """Nodes from a root down to ``target_meme_id``, or None if absent."""
        for node in tree:
            if node.meme_id == target_meme_id:
                return [node]
            sub_path = self.get_evolution_path(node.children, target_meme_id)
            if sub_path is not None:
                return [node, *sub_path]
        return None


evolution_engine = EvolutionEngine()
