import pytest

from src.services.meme.templates.models import TextZone


@pytest.fixture
def drake_zone() -> TextZone:
    return TextZone(
        id="top",
        x=50,
        y=10,
        width=45,
        height=40,
        align="left",
        valign="middle",
        min_font_size=24,
        max_font_size=48,
    )
