# To make this a package, we need to have an __init__.py file

from sqlalchemy.orm import DeclarativeBase


# These definitions have to be before the imports, because we use them in the definition of underlying models
class Base(DeclarativeBase):  # type: ignore
    pass


# Import all models so Alembic and create_all can see them
from src.db.models.memes import Evolution, Meme  # noqa: E402

__all__ = [
    "Base",
    "Meme",
    "Evolution",
]
