from enum import Enum
from pydantic import BaseModel


class Tone(str, Enum):
    FUNNY = "funny"
    SARCASTIC = "sarcastic"
    WHOLESOME = "wholesome"
    DARK = "dark"
    RANDOM = "random"


class MutationType(str, Enum):
    VARIATION = "variation"
    TONE_SHIFT = "tone-shift"
    FORMAT_CHANGE = "format-change"
    TEMPLATE_SWAP = "template-swap"


class MemeIdea(BaseModel):
    """How to present a caption as a meme, for text-only generation."""

    template_suggestion: str
    visual_description: str
    text_placement: str
    style_notes: str
