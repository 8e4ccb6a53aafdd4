# service.py

import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

import structlog

from config import get_settings
from errors import NotFoundError, ValidationError
from models import Post
from store import PostStore

logger = structlog.get_logger()

EDITABLE_FIELDS = ("title", "category", "author", "content")

# Ids are uuid4 hex; anything else cannot name a stored post
_ID_PATTERN = re.compile(r"[0-9a-f]{32}")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Any) -> Optional[str]:
    """Trimmed text, or None when the value is missing, blank or not text."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


class PostService:
    """Validates and normalizes posts and enforces the CRUD contract on top of a PostStore."""

    def __init__(self, store: PostStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock
        settings = get_settings()
        self.default_category = settings.default_category
        self.default_author = settings.default_author

    def _check_id(self, post_id: str) -> None:
        if not isinstance(post_id, str) or not _ID_PATTERN.fullmatch(post_id):
            logger.info("post_id_malformed", post_id=post_id)
            raise NotFoundError()

    async def create(self, data: Mapping[str, Any]) -> str:
        title = _clean(data.get("title"))
        content = _clean(data.get("content"))
        if not title or not content:
            logger.warning("post_rejected", reason="missing title or content")
            raise ValidationError("Title and content are required.")

        post = Post(
            title=title,
            category=_clean(data.get("category")) or self.default_category,
            author=_clean(data.get("author")) or self.default_author,
            content=content,
            created_at=self.clock(),
            updated_at=None,
        )
        post_id = await self.store.insert(post)
        logger.info("post_created", post_id=post_id, category=post.category)
        return post_id

    async def update(self, post_id: str, data: Mapping[str, Any]) -> None:
        """Apply the supplied non-blank fields; omitted or blank fields stay as they are."""
        self._check_id(post_id)
        fields: Dict[str, str] = {}
        for name in EDITABLE_FIELDS:
            value = _clean(data.get(name))
            if value is not None:
                fields[name] = value

        matched = await self.store.update_fields(post_id, fields, updated_at=self.clock())
        if not matched:
            logger.info("post_not_found", post_id=post_id, op="update")
            raise NotFoundError()
        logger.info("post_updated", post_id=post_id, fields=sorted(fields))

    async def delete(self, post_id: str) -> None:
        self._check_id(post_id)
        if not await self.store.delete(post_id):
            logger.info("post_not_found", post_id=post_id, op="delete")
            raise NotFoundError()
        logger.info("post_deleted", post_id=post_id)

    async def list(self) -> List[Post]:
        return await self.store.find_all()

    async def get_one(self, post_id: str) -> Post:
        self._check_id(post_id)
        post = await self.store.find_by_id(post_id)
        if post is None:
            raise NotFoundError()
        return post
