"""
Caption source: LLM-backed caption, mutation, alt-text and meme-idea generation.

Providers from ``meme_generator.providers`` are tried in order; a provider
without an API key is skipped, and one that fails or answers empty hands over
to the next. When none answers, each generator returns a deterministic
template-based fallback, so callers always get usable text.
"""

import random
import re
from typing import Any, Callable, Optional, TypeVar

import dspy
from loguru import logger as log

from common import global_config
from src.services.meme.captions.models import MemeIdea, MutationType, Tone
from utils.llm.dspy_inference import DSPYInference

T = TypeVar("T")

_WRAPPING_QUOTES = re.compile(r"^[\"']|[\"']$")
_LIST_MARKERS = re.compile(r"^[\"'\d.\-\s]+|[\"']$")

MUTATION_INSTRUCTIONS = {
    MutationType.VARIATION: "Create variations with different wording but same humor",
    MutationType.TONE_SHIFT: "Change the tone while keeping the core message",
    MutationType.FORMAT_CHANGE: "Reformat (e.g., add emojis, change structure)",
    MutationType.TEMPLATE_SWAP: "Rewrite the caption so it suits a different meme template",
}

FALLBACK_CAPTIONS = {
    Tone.FUNNY: [
        "When {prompt} hits different",
        "POV: {prompt}",
        "Nobody:\nAbsolutely nobody:\n{prompt}:",
        "{prompt} be like",
    ],
    Tone.SARCASTIC: [
        "Oh great, {prompt}. Just what I needed.",
        "{prompt}? Shocking. Absolutely shocking.",
        "Wow, {prompt}. Never saw that coming.",
    ],
    Tone.WHOLESOME: [
        "{prompt} and that's beautiful",
        "Appreciate {prompt} today",
        "{prompt} makes everything better",
    ],
    Tone.DARK: [
        "{prompt}: A tragedy in 3 acts",
        "The {prompt} incident",
        "{prompt} (gone wrong)",
    ],
    Tone.RANDOM: [
        "{prompt}",
        "It's {prompt} time",
        "{prompt} moment",
    ],
}


class CaptionSignature(dspy.Signature):
    """You are a witty meme caption generator. Create short, punchy and hilarious captions for memes.
    Use internet slang and meme culture references when appropriate. When the meme has two
    panels, put each panel's text on its own line. Return only the caption text, no quotes or explanations."""

    prompt: str = dspy.InputField(desc="What the meme should be about")
    tone: str = dspy.InputField(desc="Requested tone of the caption")
    language: str = dspy.InputField(desc="Language the caption must be written in")
    max_length: int = dspy.InputField(desc="Maximum number of characters in the caption")
    caption: str = dspy.OutputField(desc="The caption text only")


class MutationSignature(dspy.Signature):
    """You are evolving meme captions. Generate the requested number of different mutations
    of the original caption. Return only the new captions, no numbering or explanations."""

    original_caption: str = dspy.InputField()
    mutation_instruction: str = dspy.InputField(desc="How the caption should be mutated")
    feedback: str = dspy.InputField(desc="Optional user feedback to take into account")
    count: int = dspy.InputField(desc="Number of mutations to produce")
    mutations: list[str] = dspy.OutputField(desc="One new caption per item")


class AltTextSignature(dspy.Signature):
    """Generate concise alt-text for meme images for accessibility. Describe the meme template and caption."""

    template_name: str = dspy.InputField()
    caption: str = dspy.InputField()
    alt_text: str = dspy.OutputField()


class MemeIdeaSignature(dspy.Signature):
    """You are a meme design expert. Given a meme caption and context, suggest how to visually present it as a meme."""

    prompt: str = dspy.InputField(desc="Context the meme is about")
    caption: str = dspy.InputField()
    tone: str = dspy.InputField()
    template_suggestion: str = dspy.OutputField(
        desc="Name of the meme template that would work best (e.g., Drake, Distracted Boyfriend)"
    )
    visual_description: str = dspy.OutputField(desc="What the image should show, 2-3 sentences")
    text_placement: str = dspy.OutputField(desc="Where and how to place the text")
    style_notes: str = dspy.OutputField(desc="Font, color and effect suggestions")


async def _predict_with_fallback(
    signature: type[dspy.Signature],
    accept: Callable[[Any], Optional[T]],
    temperature: float,
    max_tokens: int,
    **inputs: Any,
) -> Optional[T]:
    """Run ``signature`` against each configured provider until one gives an accepted answer."""
    for provider in global_config.meme_generator.providers:
        api_key = global_config.provider_api_key(provider.name)
        if not api_key:
            log.debug(f"Skipping provider {provider.name}: no API key configured")
            continue

        inference = DSPYInference(
            pred_signature=signature,
            model_name=provider.model,
            api_key=api_key,
            api_base=provider.api_base,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        try:
            result = await inference.run(**inputs)
        except Exception as e:
            log.warning(f"Provider {provider.name} failed ({e}); trying next provider")
            continue

        value = accept(result)
        if value:
            log.debug(f"Provider {provider.name} answered {signature.__name__}")
            return value
        log.warning(f"Provider {provider.name} returned an empty answer; trying next provider")

    return None


def clean_caption(raw: str, max_length: int) -> str:
    """Trim, cap to ``max_length`` characters and drop wrapping quotes."""
    caption = (raw or "").strip()
    if len(caption) > max_length:
        caption = caption[:max_length]
    return _WRAPPING_QUOTES.sub("", caption)


def clean_mutations(raw: list[str] | str, count: int) -> list[str]:
    """Strip numbering and quotes from LLM list output and keep at most ``count`` lines."""
    if isinstance(raw, str):
        raw = raw.split("\n")

    lines = []
    for item in raw:
        for line in str(item).split("\n"):
            cleaned = _LIST_MARKERS.sub("", line).strip()
            if cleaned:
                lines.append(cleaned)
    return lines[:count]


def fallback_caption(prompt: str, tone: Tone, rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    options = FALLBACK_CAPTIONS.get(tone, FALLBACK_CAPTIONS[Tone.RANDOM])
    return rng.choice(options).format(prompt=prompt)


async def generate_caption(
    prompt: str,
    tone: Tone = Tone.FUNNY,
    language: str = "en",
    max_length: Optional[int] = None,
) -> str:
    """Generate a caption of at most ``max_length`` characters for ``prompt``."""
    if max_length is None:
        max_length = global_config.meme_generator.max_caption_length

    caption = await _predict_with_fallback(
        CaptionSignature,
        accept=lambda result: clean_caption(result.caption, max_length),
        temperature=global_config.meme_generator.caption_temperature,
        max_tokens=global_config.default_llm.default_max_tokens,
        prompt=prompt,
        tone=tone.value,
        language=language,
        max_length=max_length,
    )
    if caption:
        return caption

    log.info("No caption provider answered; using template fallback")
    return fallback_caption(prompt, tone)


async def generate_mutations(
    original_caption: str,
    feedback: Optional[str] = None,
    mutation_type: MutationType = MutationType.VARIATION,
    count: Optional[int] = None,
) -> list[str]:
    """Generate up to ``count`` variants of a caption; falls back to the original."""
    if count is None:
        count = global_config.meme_generator.num_mutations

    mutations = await _predict_with_fallback(
        MutationSignature,
        accept=lambda result: clean_mutations(result.mutations, count),
        temperature=global_config.meme_generator.mutation_temperature,
        max_tokens=global_config.default_llm.default_max_tokens * 2,
        original_caption=original_caption,
        mutation_instruction=MUTATION_INSTRUCTIONS[mutation_type],
        feedback=feedback or "",
        count=count,
    )
    if mutations:
        return mutations

    log.info("No mutation provider answered; returning the original caption")
    return [original_caption]


async def generate_alt_text(caption: str, template_name: str) -> str:
    alt_text = await _predict_with_fallback(
        AltTextSignature,
        accept=lambda result: (result.alt_text or "").strip(),
        temperature=0.5,
        max_tokens=100,
        template_name=template_name,
        caption=caption,
    )
    return alt_text or f"Meme with caption: {caption}"


def fallback_meme_idea(prompt: str, caption: str, tone: Tone) -> MemeIdea:
    return MemeIdea(
        template_suggestion=(
            "Drake Hotline Bling" if tone == Tone.FUNNY else "Distracted Boyfriend"
        ),
        visual_description=(
            f"A {tone.value} image that represents: {prompt}. "
            f'The visual should complement the caption: "{caption}"'
        ),
        text_placement="Split the caption across top and bottom of the image",
        style_notes="Use Impact font, white text with black outline for maximum readability",
    )


def _accept_idea(result: Any) -> Optional[MemeIdea]:
    fields = {
        "template_suggestion": "Classic meme format",
        "visual_description": "A relatable image that captures the mood",
        "text_placement": "Text at top and bottom",
        "style_notes": "Bold white text with black outline",
    }
    values = {name: (getattr(result, name, "") or "").strip() for name in fields}
    if not any(values.values()):
        return None
    return MemeIdea(**{name: values[name] or default for name, default in fields.items()})


async def generate_meme_idea(prompt: str, caption: str, tone: Tone = Tone.FUNNY) -> MemeIdea:
    """Suggest how to present a caption visually, without rendering an image."""
    idea = await _predict_with_fallback(
        MemeIdeaSignature,
        accept=_accept_idea,
        temperature=global_config.meme_generator.idea_temperature,
        max_tokens=300,
        prompt=prompt,
        caption=caption,
        tone=tone.value,
    )
    return idea or fallback_meme_idea(prompt, caption, tone)
