from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from common import global_config
from src.services.meme.captions.models import MemeIdea, MutationType, Tone


class GenerateMemeRequest(BaseModel):
    prompt: str = Field(
        ..., min_length=1, max_length=global_config.meme_generator.max_prompt_length
    )
    language: str = "en"
    tone: Tone = Tone.FUNNY
    template_id: Optional[str] = None
    generate_image_mode: bool = Field(
        True, description="False returns a caption plus presentation ideas without an image"
    )


class MemePayload(BaseModel):
    id: str
    caption: str
    image_url: Optional[str] = None
    template_id: Optional[str] = None
    template_name: Optional[str] = None
    alt_text: Optional[str] = None
    meme_idea: Optional[MemeIdea] = None


class GenerateMemeResponse(BaseModel):
    success: bool = True
    text_only: bool = False
    meme: MemePayload
    generation_time_ms: int


class EvolveMemeRequest(BaseModel):
    meme_id: str = Field(..., min_length=1)
    feedback: Optional[str] = Field(
        None, max_length=global_config.meme_generator.max_feedback_length
    )
    mutation_type: MutationType = MutationType.VARIATION


class EvolvedMeme(BaseModel):
    id: str
    image_url: str
    caption: str
    template_id: str
    mutation_type: MutationType


class EvolveMemeResponse(BaseModel):
    success: bool = True
    mutations: List[EvolvedMeme]
    generation_time_ms: int


class MemeRecord(BaseModel):
    id: str
    parent_id: Optional[str] = None
    template_id: str
    caption: str
    alt_text: Optional[str] = None
    image_url: str
    language: str
    tone: Optional[str] = None
    created_at: datetime
    generation_time_ms: Optional[int] = None
    evolutions: int
    fitness: int


class EvolutionNodePayload(BaseModel):
    meme_id: str
    caption: str
    template_id: str
    mutation_type: Optional[str] = None
    depth: int
    children: List["EvolutionNodePayload"] = Field(default_factory=list)


EvolutionNodePayload.model_rebuild()


class EvolutionTreeResponse(BaseModel):
    roots: List[EvolutionNodePayload]
    path: List[str] = Field(description="Meme ids from the root down to the requested meme")


class TemplateSummary(BaseModel):
    template_id: str
    name: str
    width: int
    height: int
    zone_ids: List[str]
    tags: List[str]
    popularity: int


class PreviewRequest(BaseModel):
    template_id: str
    caption: str = Field(
        ..., min_length=1, max_length=global_config.meme_generator.max_prompt_length
    )


class LinePayload(BaseModel):
    text: str
    x: float
    y: float


class ZoneLayoutPayload(BaseModel):
    zone_id: str
    font_size: int
    max_chars_per_line: int
    line_height: float
    stroke_width: float
    text_anchor: str
    overflows_zone: bool
    lines: List[LinePayload]


class PreviewResponse(BaseModel):
    template_id: str
    width: int
    height: int
    captions: dict[str, str]
    zones: List[ZoneLayoutPayload]
    svg: str
