from src.services.meme.templates.models import Template


def assign_captions(template: Template, caption: str) -> dict[str, str]:
    """Split one caption across a template's zones, keyed by zone id.

    One zone takes the whole caption. Two zones split on the first newline,
    the first zone falling back to the whole caption when its segment is
    empty. More zones take the non-blank lines in order; zones left without a
    line get "" and are skipped by the renderer.
    """
    zones = template.text_zones
    if not zones:
        return {}

    normalized = caption.replace("\r\n", "\n")

    if len(zones) == 1:
        return {zones[0].id: normalized}

    parts = normalized.split("\n")
    if len(zones) == 2:
        return {
            zones[0].id: parts[0] or normalized,
            zones[1].id: parts[1] if len(parts) > 1 else "",
        }

    segments = [part for part in parts if part.strip()]
    return {
        zone.id: segments[i] if i < len(segments) else ""
        for i, zone in enumerate(zones)
    }
