# controller.py

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

import httpx
import structlog

from errors import ApiError, StaleSnapshotError
from query import Post, RenderResult, ViewState, post_detail_html, render

logger = structlog.get_logger()

IDLE = "idle"
EDITING = "editing"
SUBMITTING = "submitting"

REQUIRED_MESSAGE = "Title and content are required."


# --- API Helpers --- 

class PostsApi:
    """Thin client for the posts REST API."""

    def __init__(self, http: httpx.AsyncClient, base_path: str = "/api/posts"):
        self.http = http
        self.base_path = base_path

    async def _fetch(self, method: str, url: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self.http.request(method, url, json=payload)
        except httpx.HTTPError as exc:
            raise ApiError(f"Network error: {exc}", 0) from exc
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not response.is_success:
            message = data.get("error") if isinstance(data, dict) else None
            raise ApiError(message or f"Request failed ({response.status_code})", response.status_code)
        return data

    async def list_posts(self) -> List[Post]:
        return await self._fetch("GET", self.base_path)

    async def create(self, payload: Dict[str, Any]) -> str:
        data = await self._fetch("POST", self.base_path, payload)
        return data["id"]

    async def update(self, post_id: str, payload: Dict[str, Any]) -> None:
        await self._fetch("PATCH", f"{self.base_path}/{post_id}", payload)

    async def delete(self, post_id: str) -> None:
        await self._fetch("DELETE", f"{self.base_path}/{post_id}")


# --- Controller State --- 

@dataclass
class EditSession:
    post_id: Optional[str] = None  # None while creating
    title: str = ""
    category: str = "General"
    author: str = ""
    content: str = ""
    error: Optional[str] = None


@dataclass
class Notification:
    message: str
    kind: str = "info"  # info | success | error


class Controller:
    """Maps user intents to API calls and keeps the view state in sync.

    At most one edit session and one delete confirmation exist at a time.
    Every successful mutation is followed by a full reload of the snapshot.
    """

    def __init__(self, api: PostsApi):
        self.api = api
        self.state = ViewState()
        self.phase = IDLE
        self.session: Optional[EditSession] = None
        self.pending_delete: Optional[str] = None
        self.deleting = False  # a DELETE request is in flight
        self.viewing_id: Optional[str] = None
        self.load_error: Optional[str] = None
        self.notifications: List[Notification] = []

    def notify(self, message: str, kind: str = "info") -> None:
        self.notifications.append(Notification(message, kind))

    def _find(self, post_id: str) -> Post:
        for post in self.state.snapshot:
            if post.get("id") == post_id:
                return post
        raise StaleSnapshotError(post_id)

    # --- Loading --- 

    async def load_posts(self) -> None:
        try:
            snapshot = await self.api.list_posts()
        except ApiError as exc:
            logger.warning("load_posts_failed", error=exc.message)
            self.state = replace(self.state, snapshot=[])
            self.load_error = f"Failed to load posts: {exc.message}"
            self.notify(self.load_error, "error")
            return
        self.state = replace(self.state, snapshot=list(snapshot))
        self.load_error = None

    # --- Filters --- 

    def set_search(self, query: str) -> RenderResult:
        self.state = replace(self.state, search_query=query)
        return self.view()

    def set_category(self, category: str) -> RenderResult:
        self.state = replace(self.state, active_category=category)
        return self.view()

    def view(self) -> RenderResult:
        return render(self.state)

    # --- Single post view --- 

    def open_post(self, post_id: str) -> Optional[str]:
        """Open the single-post view; returns its HTML, or None if the post is gone."""
        try:
            post = self._find(post_id)
        except StaleSnapshotError:
            logger.debug("open_post_stale", post_id=post_id)
            return None
        self.viewing_id = post_id
        return post_detail_html(post)

    def close_post(self) -> None:
        self.viewing_id = None

    # --- Editor --- 

    def start_create(self) -> EditSession:
        self.session = EditSession()
        self.phase = EDITING
        return self.session

    def start_edit(self, post_id: str) -> Optional[EditSession]:
        try:
            post = self._find(post_id)
        except StaleSnapshotError:
            logger.debug("start_edit_stale", post_id=post_id)
            return None
        self.session = EditSession(
            post_id=post_id,
            title=post.get("title") or "",
            category=post.get("category") or "General",
            author=post.get("author") or "",
            content=post.get("content") or "",
        )
        self.phase = EDITING
        return self.session

    def close_editor(self) -> None:
        self.session = None
        self.phase = IDLE

    async def submit(self) -> bool:
        session = self.session
        if session is None or self.phase != EDITING:
            return False

        title = session.title.strip()
        content = session.content.strip()
        if not title or not content:
            session.error = REQUIRED_MESSAGE
            self.notify(REQUIRED_MESSAGE, "error")
            return False

        payload = {
            "title": title,
            "category": session.category,
            "author": session.author.strip() or "Anonymous",
            "content": content,
        }
        session.error = None
        self.phase = SUBMITTING
        try:
            if session.post_id:
                await self.api.update(session.post_id, payload)
                self.notify("Post updated successfully!", "success")
            else:
                await self.api.create(payload)
                self.notify("Post published!", "success")
        except ApiError as exc:
            logger.warning("submit_failed", post_id=session.post_id, error=exc.message)
            self.notify(exc.message, "error")
            # the editor may have been closed or replaced while the request ran
            if self.session is session:
                session.error = exc.message
                self.phase = EDITING
            return False

        if self.session is session:
            self.close_editor()
        await self.load_posts()
        return True

    # --- Delete --- 

    def request_delete(self, post_id: str) -> None:
        self.pending_delete = post_id

    def cancel(self) -> None:
        self.pending_delete = None

    async def confirm(self) -> bool:
        target = self.pending_delete
        if not target or self.deleting:
            return False
        self.deleting = True
        try:
            await self.api.delete(target)
        except ApiError as exc:
            logger.warning("delete_failed", post_id=target, error=exc.message)
            self.notify(exc.message, "error")
            return False
        finally:
            self.deleting = False
            if self.pending_delete == target:
                self.pending_delete = None
        self.notify("Post deleted.", "success")
        await self.load_posts()
        return True
