"""Meme routes module."""

from .generate import router as generate_router
from .evolve import router as evolve_router
from .memes import router as memes_router
from .templates import router as templates_router

__all__ = [
    "generate_router",
    "evolve_router",
    "memes_router",
    "templates_router",
]
