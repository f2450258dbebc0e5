"""Failures raised by the text overlay renderer.

All of these propagate to the caller; the renderer never retries or falls back.
"""

from pathlib import Path


class RenderError(Exception):
    """Base class for rendering failures."""


class TemplateAssetMissing(RenderError):
    """The template's backing image file does not exist."""

    def __init__(self, template_id: str, path: Path):
        self.template_id = template_id
        self.path = path
        super().__init__(f"Template asset not found for '{template_id}': {path}")


# Name used by callers that think in terms of templates rather than assets
TemplateNotFoundError = TemplateAssetMissing


class ImageDecodeError(RenderError):
    """The template's backing image exists but cannot be decoded."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot decode image {path}: {reason}")


class ZoneOverflow(RenderError):
    """Wrapped text is taller than its zone (raised only in strict mode)."""

    def __init__(self, zone_id: str, block_height: float, zone_height: float):
        self.zone_id = zone_id
        self.block_height = block_height
        self.zone_height = zone_height
        super().__init__(
            f"Text block for zone '{zone_id}' is {block_height:.1f}px tall "
            f"but the zone is only {zone_height:.1f}px"
        )


__all__ = [
    "RenderError",
    "TemplateAssetMissing",
    "TemplateNotFoundError",
    "ImageDecodeError",
    "ZoneOverflow",
]
