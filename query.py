# query.py

import html
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

ALL_CATEGORIES = "All"
EXCERPT_LENGTH = 160

Post = Dict[str, Any]  # post as received over the wire


@dataclass(frozen=True)
class ViewState:
    """Client view state: last fetched snapshot plus the active filters."""

    snapshot: List[Post] = field(default_factory=list)
    active_category: str = ALL_CATEGORIES
    search_query: str = ""


@dataclass(frozen=True)
class RenderResult:
    posts: List[Post]
    summary: str
    empty: bool
    cards: List[str] = field(default_factory=list)  # card HTML, one per post
    categories: List[str] = field(default_factory=list)


def _matches_category(post: Post, category: str) -> bool:
    return category == ALL_CATEGORIES or post.get("category") == category


def _matches_query(post: Post, query: str) -> bool:
    if not query:
        return True
    return any(
        query in (post.get(name) or "").lower()
        for name in ("title", "content", "author")
    )


def visible_posts(state: ViewState) -> List[Post]:
    """Snapshot filtered by category and search text, in snapshot order."""
    query = state.search_query.strip().lower()
    return [
        post for post in state.snapshot
        if _matches_category(post, state.active_category) and _matches_query(post, query)
    ]


def status_summary(shown: int, total: int) -> str:
    if total == 0:
        return ""
    if shown == total:
        return f"{total} post{'' if total == 1 else 's'}"
    return f"Showing {shown} of {total} posts"


def render(state: ViewState) -> RenderResult:
    posts = visible_posts(state)
    return RenderResult(
        posts=posts,
        summary=status_summary(len(posts), len(state.snapshot)),
        empty=not posts,
        cards=[card_html(post) for post in posts],
        categories=categories(state.snapshot),
    )


def categories(snapshot: List[Post]) -> List[str]:
    """Filter pills: "All" followed by each category in first-seen order."""
    seen = [ALL_CATEGORIES]
    for post in snapshot:
        category = post.get("category")
        if category and category not in seen:
            seen.append(category)
    return seen


# --- Formatting --- 

def esc(value: Any = "") -> str:
    return html.escape(str(value), quote=True)


def excerpt(content: Optional[str], limit: int = EXCERPT_LENGTH) -> str:
    content = content or ""
    text = content[:limit].replace("\n", " ")
    return text + "…" if len(content) > limit else text


def format_date(raw: Any) -> str:
    """'Jan 5, 2026' from a datetime or ISO-8601 string; '' when absent."""
    if not raw:
        return ""
    if isinstance(raw, datetime):
        value = raw
    else:
        value = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    return f"{value:%b} {value.day}, {value.year}"


def card_html(post: Post) -> str:
    post_id = esc(post["id"])
    return (
        f'<article class="post-card" data-id="{post_id}" role="article">'
        f'<span class="card-tag">{esc(post.get("category") or "General")}</span>'
        f'<h2 class="card-title">{esc(post["title"])}</h2>'
        f'<p class="card-excerpt">{esc(excerpt(post.get("content")))}</p>'
        f'<div class="card-meta">'
        f'<span class="card-byline">By {esc(post.get("author") or "Anonymous")} · '
        f'{format_date(post.get("createdAt"))}</span>'
        f'<div class="card-actions">'
        f'<button class="icon-btn edit" data-id="{post_id}" title="Edit" aria-label="Edit post">✎</button>'
        f'<button class="icon-btn delete" data-id="{post_id}" title="Delete" aria-label="Delete post">✕</button>'
        f'</div></div></article>'
    )


def post_detail_html(post: Post) -> str:
    updated = post.get("updatedAt")
    updated_html = f"<span>✏ Updated {format_date(updated)}</span>" if updated else ""
    return (
        f'<span class="post-tag">{esc(post.get("category") or "General")}</span>'
        f'<h1>{esc(post["title"])}</h1>'
        f'<div class="post-meta">'
        f'<span>✍ {esc(post.get("author") or "Anonymous")}</span>'
        f'<span>📅 {format_date(post.get("createdAt"))}</span>'
        f'{updated_html}'
        f'</div>'
        f'<div class="post-body">{esc(post.get("content") or "")}</div>'
    )
