import random
from types import SimpleNamespace

import pytest

from common import global_config
from src.services.meme.captions import generator
from src.services.meme.captions.generator import (
    FALLBACK_CAPTIONS,
    clean_caption,
    clean_mutations,
    fallback_caption,
    generate_alt_text,
    generate_caption,
    generate_meme_idea,
    generate_mutations,
)
from src.services.meme.captions.models import MutationType, Tone


class FakeInference:
    """Stands in for DSPYInference; answers are queued per model name."""

    answers: dict[str, object] = {}
    calls: list[dict] = []

    def __init__(self, pred_signature, model_name, api_key, api_base, temperature, max_tokens):
        self.pred_signature = pred_signature
        self.model_name = model_name
        self.api_key = api_key
        self.api_base = api_base

    async def run(self, **kwargs):
        FakeInference.calls.append({"model": self.model_name, "api_base": self.api_base, **kwargs})
        answer = FakeInference.answers[self.model_name]
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def fake_inference(monkeypatch):
    FakeInference.answers = {}
    FakeInference.calls = []
    monkeypatch.setattr(generator, "DSPYInference", FakeInference)
    return FakeInference


@pytest.fixture
def providers():
    openrouter, huggingface = global_config.meme_generator.providers
    return openrouter, huggingface


def test_clean_caption_strips_quotes_and_caps_length():
    assert clean_caption('  "hello there"  ', 100) == "hello there"
    assert clean_caption("abcdefghij", 4) == "abcd"
    assert clean_caption("", 10) == ""


def test_clean_mutations_strips_numbering():
    raw = '1. "first one"\n2. second one\n\n- third one'
    assert clean_mutations(raw, 5) == ["first one", "second one", "third one"]
    assert clean_mutations(["a", "b", "c"], 2) == ["a", "b"]


def test_fallback_caption_uses_tone_templates():
    rng = random.Random(7)
    caption = fallback_caption("mondays", Tone.SARCASTIC, rng)
    options = [c.format(prompt="mondays") for c in FALLBACK_CAPTIONS[Tone.SARCASTIC]]
    assert caption in options


async def test_generate_caption_falls_back_without_keys():
    caption = await generate_caption("cats", Tone.WHOLESOME)
    options = [c.format(prompt="cats") for c in FALLBACK_CAPTIONS[Tone.WHOLESOME]]
    assert caption in options


async def test_generate_caption_uses_first_provider(monkeypatch, fake_inference, providers):
    openrouter, _ = providers
    monkeypatch.setattr(global_config, "OPENROUTER_API_KEY", "test-key")
    fake_inference.answers[openrouter.model] = SimpleNamespace(caption='"Top\nBottom"')

    caption = await generate_caption("cats", Tone.FUNNY, language="fr", max_length=50)

    assert caption == "Top\nBottom"
    (call,) = fake_inference.calls
    assert call["language"] == "fr"
    assert call["max_length"] == 50


async def test_generate_caption_skips_failing_provider(monkeypatch, fake_inference, providers):
    openrouter, huggingface = providers
    monkeypatch.setattr(global_config, "OPENROUTER_API_KEY", "test-key")
    monkeypatch.setattr(global_config, "HUGGING_FACE_ACCESS_TOKEN", "hf-key")
    fake_inference.answers[openrouter.model] = RuntimeError("rate limited")
    fake_inference.answers[huggingface.model] = SimpleNamespace(caption="from hugging face")

    caption = await generate_caption("cats")

    assert caption == "from hugging face"
    assert [c["model"] for c in fake_inference.calls] == [openrouter.model, huggingface.model]
    assert fake_inference.calls[1]["api_base"] == huggingface.api_base


async def test_generate_caption_empty_answer_falls_back(monkeypatch, fake_inference, providers):
    openrouter, _ = providers
    monkeypatch.setattr(global_config, "OPENROUTER_API_KEY", "test-key")
    fake_inference.answers[openrouter.model] = SimpleNamespace(caption="   ")

    caption = await generate_caption("dogs", Tone.DARK)

    options = [c.format(prompt="dogs") for c in FALLBACK_CAPTIONS[Tone.DARK]]
    assert caption in options


async def test_generate_mutations(monkeypatch, fake_inference, providers):
    openrouter, _ = providers
    monkeypatch.setattr(global_config, "OPENROUTER_API_KEY", "test-key")
    fake_inference.answers[openrouter.model] = SimpleNamespace(
        mutations=["1. one", "2. two", "3. three", "4. four"]
    )

    mutations = await generate_mutations(
        "original", feedback="funnier", mutation_type=MutationType.TONE_SHIFT, count=3
    )

    assert mutations == ["one", "two", "three"]
    (call,) = fake_inference.calls
    assert call["feedback"] == "funnier"
    assert call["mutation_instruction"] == generator.MUTATION_INSTRUCTIONS[MutationType.TONE_SHIFT]


async def test_generate_mutations_falls_back_to_original():
    assert await generate_mutations("keep me") == ["keep me"]


async def test_generate_alt_text_fallback():
    assert await generate_alt_text("hello", "Drake") == "Meme with caption: hello"


async def test_generate_meme_idea_fallback():
    idea = await generate_meme_idea("work", "caption", Tone.FUNNY)
    assert idea.template_suggestion == "Drake Hotline Bling"
    assert "work" in idea.visual_description


async def test_generate_meme_idea_fills_missing_fields(monkeypatch, fake_inference, providers):
    openrouter, _ = providers
    monkeypatch.setattr(global_config, "OPENROUTER_API_KEY", "test-key")
    fake_inference.answers[openrouter.model] = SimpleNamespace(
        template_suggestion="Expanding Brain",
        visual_description="",
        text_placement=None,
        style_notes="Comic Sans, obviously",
    )

    idea = await generate_meme_idea("work", "caption")

    assert idea.template_suggestion == "Expanding Brain"
    assert idea.style_notes == "Comic Sans, obviously"
    assert idea.visual_description
    assert idea.text_placement
