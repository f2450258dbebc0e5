"""Typed access to stored memes and their evolutions."""

from typing import Optional, Sequence

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.db.database import get_db_session
from src.db.models import Evolution, Meme
from src.db.utils.db_transaction import db_transaction


class MemeRepository:
    def __init__(self, db: Session):
        self.db = db

    def insert_meme(
        self,
        *,
        meme_id: Optional[str] = None,
        template_id: str,
        caption: str,
        image_url: str = "",
        session_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        alt_text: Optional[str] = None,
        language: str = "en",
        tone: Optional[str] = None,
        generation_time_ms: Optional[int] = None,
    ) -> Meme:
        meme = Meme(
            session_id=session_id,
            parent_id=parent_id,
            template_id=template_id,
            caption=caption,
            alt_text=alt_text,
            image_url=image_url,
            language=language,
            tone=tone,
            generation_time_ms=generation_time_ms,
        )
        if meme_id:
            meme.id = meme_id

        with db_transaction(self.db):
            self.db.add(meme)
        self.db.refresh(meme)
        return meme

    def find_meme_by_id(self, meme_id: str) -> Optional[Meme]:
        return self.db.get(Meme, meme_id)

    def insert_evolution(
        self,
        *,
        parent_meme_id: str,
        child_meme_id: str,
        mutation_type: Optional[str] = None,
        feedback: Optional[str] = None,
    ) -> Evolution:
        evolution = Evolution(
            parent_meme_id=parent_meme_id,
            child_meme_id=child_meme_id,
            mutation_type=mutation_type,
            feedback=feedback,
        )
        with db_transaction(self.db):
            self.db.add(evolution)
        self.db.refresh(evolution)
        return evolution

    def insert_children(
        self,
        parent: Meme,
        children: Sequence[dict],
        *,
        mutation_type: Optional[str] = None,
        feedback: Optional[str] = None,
    ) -> list[Meme]:
        """Store mutated children of ``parent`` and their evolution rows in one transaction.

        Each child dict holds ``Meme`` column values; session, language and tone
        are inherited from the parent unless given.
        """
        memes = [
            Meme(
                parent_id=parent.id,
                **{
                    "session_id": parent.session_id,
                    "language": parent.language,
                    "tone": parent.tone,
                    **child,
                },
            )
            for child in children
        ]

        with db_transaction(self.db):
            self.db.add_all(memes)
            self.db.flush()
            self.db.add_all(
                Evolution(
                    parent_meme_id=parent.id,
                    child_meme_id=meme.id,
                    mutation_type=mutation_type,
                    feedback=feedback,
                )
                for meme in memes
            )

        for meme in memes:
            self.db.refresh(meme)
        return memes

    def find_root(self, meme: Meme) -> Meme:
        seen = {meme.id}
        while meme.parent_id:
            parent = self.find_meme_by_id(meme.parent_id)
            if parent is None or parent.id in seen:
                break
            seen.add(parent.id)
            meme = parent
        return meme

    def list_lineage(self, meme_id: str) -> list[Meme]:
        """Every meme in the same evolution tree as ``meme_id``, parents before children."""
        meme = self.find_meme_by_id(meme_id)
        if meme is None:
            return []

        root = self.find_root(meme)
        lineage = [root]
        frontier = [root.id]
        while frontier:
            children = self.db.scalars(
                select(Meme)
                .where(Meme.parent_id.in_(frontier))
                .order_by(Meme.created_at, Meme.id)
            ).all()
            lineage.extend(children)
            frontier = [child.id for child in children]
        return lineage

    def count_children(self, meme_id: str) -> int:
        return self.db.scalar(
            select(func.count()).select_from(Meme).where(Meme.parent_id == meme_id)
        ) or 0

    def mutation_types_for(self, child_meme_ids: Sequence[str]) -> dict[str, str]:
        if not child_meme_ids:
            return {}
        rows = self.db.scalars(
            select(Evolution).where(Evolution.child_meme_id.in_(list(child_meme_ids)))
        ).all()
        return {row.child_meme_id: row.mutation_type for row in rows if row.mutation_type}


def get_meme_repository(db: Session = Depends(get_db_session)) -> MemeRepository:
    """FastAPI dependency injecting the meme store into route handlers."""
    return MemeRepository(db)
