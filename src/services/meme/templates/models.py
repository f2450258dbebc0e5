from typing import List, Literal
from pydantic import BaseModel, ConfigDict, Field, model_validator

HorizontalAlign = Literal["left", "center", "right"]
VerticalAlign = Literal["top", "middle", "bottom"]


class TextZone(BaseModel):
    """A rectangular caption slot, in percent of the template's pixel size."""

    model_config = ConfigDict(frozen=True)

    id: str
    x: float = Field(ge=0, le=100)
    y: float = Field(ge=0, le=100)
    width: float = Field(gt=0, le=100)
    height: float = Field(gt=0, le=100)
    align: HorizontalAlign = "center"
    valign: VerticalAlign = "middle"
    min_font_size: int = Field(gt=0)
    max_font_size: int = Field(gt=0)

    @model_validator(mode="after")
    def check_font_range(self) -> "TextZone":
        if self.min_font_size > self.max_font_size:
            raise ValueError(
                f"Zone {self.id}: min_font_size {self.min_font_size} "
                f"exceeds max_font_size {self.max_font_size}"
            )
        return self


class Template(BaseModel):
    model_config = ConfigDict(frozen=True)

    template_id: str
    name: str
    filename: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    text_zones: List[TextZone]
    tags: List[str] = Field(default_factory=list)
    popularity: int = Field(default=1, ge=0)
