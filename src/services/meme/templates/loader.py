import json
import random
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from loguru import logger as log

from common import global_config
from src.services.meme.templates.models import Template


class TemplateLoader:
    def __init__(self, templates_file: Optional[Path] = None):
        if templates_file is None:
            self.templates_file = global_config.resolve_path(
                global_config.meme_generator.templates_file
            )
        else:
            self.templates_file = templates_file

        self.templates: List[Template] = []
        self._load_templates()

    def _load_templates(self):
        if not self.templates_file.exists():
            log.warning(f"Template catalog not found: {self.templates_file}")
            return

        with open(self.templates_file, "r") as f:
            data = json.load(f)
            # data is {"templates": [...]}
            self.templates = [Template(**t) for t in data.get("templates", [])]

        log.debug(f"Loaded {len(self.templates)} templates from {self.templates_file}")

    def get_template(self, template_id: str) -> Optional[Template]:
        for template in self.templates:
            if template.template_id == template_id:
                return template
        return None

    def list_templates(self) -> List[Template]:
        return self.templates

    def random_template(self, rng: Optional[random.Random] = None) -> Optional[Template]:
        """Pick a template at random, weighted by popularity."""
        if not self.templates:
            return None

        rng = rng or random.Random()
        weights = [t.popularity for t in self.templates]
        if sum(weights) <= 0:
            return rng.choice(self.templates)
        return rng.choices(self.templates, weights=weights, k=1)[0]

    def search_templates(self, query: str) -> List[Template]:
        """Templates whose name or any tag contains the query, most popular first."""
        lowered = query.lower()
        matches = [
            t for t in self.templates
            if lowered in t.name.lower() or any(lowered in tag for tag in t.tags)
        ]
        return sorted(matches, key=lambda t: t.popularity, reverse=True)

    def filter_templates(
        self,
        include_tags: Optional[List[str]] = None,
        exclude_tags: Optional[List[str]] = None,
    ) -> List[Template]:
        filtered = self.templates

        if include_tags:
            # Filter: Keep if template has ANY of the include_tags
            filtered = [
                t for t in filtered
                if set(t.tags) & set(include_tags)
            ]

        if exclude_tags:
            # Filter: Exclude if template has ANY of the exclude_tags
            filtered = [
                t for t in filtered
                if not (set(t.tags) & set(exclude_tags))
            ]

        return sorted(filtered, key=lambda t: t.popularity, reverse=True)


@lru_cache(maxsize=1)
def get_template_loader() -> TemplateLoader:
    """FastAPI dependency returning the process-wide read-only catalog."""
    return TemplateLoader()
