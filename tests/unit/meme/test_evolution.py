from dataclasses import dataclass
from typing import Optional

import pytest

from src.services.meme.captions import evolution
from src.services.meme.captions.evolution import EvolutionEngine
from src.services.meme.captions.models import MutationType
from src.services.meme.templates.loader import TemplateLoader

from tests.unit.meme.factories import make_template


@dataclass
class FakeMeme:
    id: str
    parent_id: Optional[str]
    caption: str
    template_id: str = "drake"


@pytest.fixture
def engine():
    return EvolutionEngine()


def _lineage():
    return [
        FakeMeme("root", None, "root caption"),
        FakeMeme("a", "root", "child a"),
        FakeMeme("b", "root", "child b"),
        FakeMeme("a1", "a", "grandchild"),
        FakeMeme("orphan", "missing", "parent not loaded"),
    ]


def test_build_evolution_tree(engine):
    roots = engine.build_evolution_tree(_lineage(), {"a": "variation", "a1": "tone-shift"})

    (root,) = roots
    assert root.depth == 0
    assert [c.meme_id for c in root.children] == ["a", "b"]

    child_a = root.children[0]
    assert child_a.mutation_type == "variation"
    assert child_a.children[0].meme_id == "a1"
    assert child_a.children[0].depth == 2
    assert child_a.children[0].mutation_type == "tone-shift"


def test_get_evolution_path(engine):
    roots = engine.build_evolution_tree(_lineage())

    path = engine.get_evolution_path(roots, "a1")
    assert [n.meme_id for n in path] == ["root", "a", "a1"]

    assert engine.get_evolution_path(roots, "nope") is None


@pytest.mark.parametrize(
    "caption,shares,evolutions,age_hours,expected",
    [
        ("x" * 50, 0, 0, 48, 20),
        ("x" * 50, 0, 0, 0, 30),
        ("x" * 50, 100, 100, 48, 90),
        ("x" * 5, 0, 0, 48, 0),
        ("x" * 50, 2, 1, 12, 38),
    ],
)
def test_calculate_fitness(engine, caption, shares, evolutions, age_hours, expected):
    assert engine.calculate_fitness(caption, shares, evolutions, age_hours) == expected


def test_suggest_template_swaps_shares_a_tag(engine, tmp_path):
    loader = TemplateLoader(templates_file=tmp_path / "none.json")
    current = make_template(1)
    other = make_template(2).model_copy(update={"popularity": 50})
    unrelated = make_template(3).model_copy(update={"tags": ["other"]})
    loader.templates = [current, other, unrelated]

    suggestions = engine.suggest_template_swaps(current, loader)

    assert [t.template_id for t in suggestions] == [other.template_id]


async def test_evolve_meme_passes_feedback(monkeypatch, engine):
    calls = []

    async def fake_generate_mutations(caption, feedback=None, mutation_type=None, count=None):
        calls.append((caption, feedback, mutation_type))
        return ["evolved"]

    monkeypatch.setattr(evolution, "generate_mutations", fake_generate_mutations)

    result = await engine.evolve_meme("original", "make it weirder", MutationType.FORMAT_CHANGE)

    assert result == ["evolved"]
    assert calls == [("original", "make it weirder", MutationType.FORMAT_CHANGE)]


async def test_generate_variations_without_providers(engine):
    assert await engine.generate_variations("plain caption", count=2) == ["plain caption"]
