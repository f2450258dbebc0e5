from datetime import datetime, timezone
import uuid

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)

from src.db.models import Base


def new_meme_id() -> str:
    return uuid.uuid4().hex


class Meme(Base):
    """A generated meme: caption plus the rendered image it was drawn on."""

    __tablename__ = "memes"
    __table_args__ = (
        Index("idx_memes_session_id", "session_id"),
        Index("idx_memes_parent_id", "parent_id"),
    )

    id = Column(String(32), primary_key=True, default=new_meme_id)
    session_id = Column(String, nullable=True)
    parent_id = Column(String(32), ForeignKey("memes.id", ondelete="SET NULL"), nullable=True)
    template_id = Column(String, nullable=False)
    caption = Column(Text, nullable=False)
    alt_text = Column(Text, nullable=True)
    image_url = Column(String, nullable=False, default="")
    language = Column(String, nullable=False, default="en")
    tone = Column(String, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    generation_time_ms = Column(Integer, nullable=True)


class Evolution(Base):
    """Links a mutated meme to the meme it was evolved from."""

    __tablename__ = "evolutions"
    __table_args__ = (
        Index("idx_evolutions_parent_meme_id", "parent_meme_id"),
        Index("idx_evolutions_child_meme_id", "child_meme_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_meme_id = Column(
        String(32), ForeignKey("memes.id", ondelete="CASCADE"), nullable=False
    )
    child_meme_id = Column(
        String(32), ForeignKey("memes.id", ondelete="CASCADE"), nullable=False
    )
    mutation_type = Column(String, nullable=True)
    feedback = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
