# store.py

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

import sqlalchemy as sa
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from errors import StorageError
from models import Post


class PostStore:
    """Persistence for Post records. No business rules live here."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _guard(self, message: str):
        try:
            yield
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise StorageError(message, details=str(exc)) from exc

    async def insert(self, post: Post) -> str:
        async with self._guard("Failed to create post"):
            self.session.add(post)
            await self.session.commit()
        return post.id

    async def find_all(self) -> List[Post]:
        # Newest first; equal timestamps keep insertion order
        stmt = (
            select(Post)
            .order_by(Post.created_at.desc(), Post.seq.asc())
            .execution_options(populate_existing=True)
        )
        async with self._guard("Failed to fetch posts"):
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

    async def find_by_id(self, post_id: str) -> Optional[Post]:
        stmt = select(Post).where(Post.id == post_id).execution_options(populate_existing=True)
        async with self._guard("Failed to fetch post"):
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

    async def update_fields(self, post_id: str, fields: Dict[str, Any], updated_at: datetime) -> bool:
        """Apply `fields` and stamp `updated_at`; return whether a record matched."""
        stamp = sa.literal(updated_at, Post.created_at.type)
        values = dict(fields)
        # never stamp earlier than created_at, even if the clock went backwards
        values["updated_at"] = sa.case((Post.created_at > stamp, Post.created_at), else_=stamp)
        stmt = sa.update(Post).where(Post.id == post_id).values(**values)
        async with self._guard("Failed to update post"):
            result = await self.session.execute(stmt, execution_options={"synchronize_session": False})
            await self.session.commit()
        return result.rowcount > 0

    async def delete(self, post_id: str) -> bool:
        stmt = sa.delete(Post).where(Post.id == post_id)
        async with self._guard("Failed to delete post"):
            result = await self.session.execute(stmt, execution_options={"synchronize_session": False})
            await self.session.commit()
        return result.rowcount > 0
