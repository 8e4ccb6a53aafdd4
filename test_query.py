# test_query.py

import pytest

from query import (
    ViewState,
    card_html,
    categories,
    excerpt,
    format_date,
    post_detail_html,
    render,
    status_summary,
    visible_posts,
)


def make_post(post_id, title="t", category="General", author="Anonymous", content="c", updated=None):
    return {
        "id": post_id,
        "title": title,
        "category": category,
        "author": author,
        "content": content,
        "createdAt": "2026-01-05T12:00:00+00:00",
        "updatedAt": updated,
    }


SNAPSHOT = [
    make_post("p3", title="Python tips", category="Tech", author="Ada"),
    make_post("p2", title="Trip notes", category="Travel", content="Python the snake"),
    make_post("p1", title="Welcome", category="General", author="Grace"),
]


def test_no_filters_returns_snapshot_in_order():
    state = ViewState(snapshot=SNAPSHOT)
    assert visible_posts(state) == SNAPSHOT


def test_category_filter_is_exact():
    assert [p["id"] for p in visible_posts(ViewState(SNAPSHOT, "Tech"))] == ["p3"]
    assert visible_posts(ViewState(SNAPSHOT, "tech")) == []


def test_search_matches_title_content_or_author():
    posts = [
        make_post("a", title="Hello World"),
        make_post("b", title="x", content="hello there"),
        make_post("c", title="y", author="Hello Smith"),
        make_post("d", title="z", content="nothing", author="Nobody"),
    ]
    state = ViewState(snapshot=posts, search_query="hello")
    assert [p["id"] for p in visible_posts(state)] == ["a", "b", "c"]


def test_search_is_case_insensitive_and_trimmed():
    state = ViewState(snapshot=SNAPSHOT, search_query="  PYTHON ")
    assert [p["id"] for p in visible_posts(state)] == ["p3", "p2"]


def test_category_and_search_combine():
    state = ViewState(snapshot=SNAPSHOT, active_category="Travel", search_query="python")
    assert [p["id"] for p in visible_posts(state)] == ["p2"]
    state = ViewState(snapshot=SNAPSHOT, active_category="General", search_query="python")
    assert visible_posts(state) == []


def test_missing_optional_fields_do_not_break_search():
    post = {"id": "x", "title": "Only title", "content": None}
    assert visible_posts(ViewState(snapshot=[post], search_query="only")) == [post]
    assert visible_posts(ViewState(snapshot=[post], search_query="zzz")) == []


def test_visible_posts_does_not_mutate_snapshot():
    snapshot = list(SNAPSHOT)
    state = ViewState(snapshot=snapshot, active_category="Tech", search_query="python")
    first = visible_posts(state)
    second = visible_posts(state)
    assert first == second
    assert snapshot == SNAPSHOT


@pytest.mark.parametrize("shown,total,expected", [
    (3, 3, "3 posts"),
    (1, 1, "1 post"),
    (2, 5, "Showing 2 of 5 posts"),
    (0, 4, "Showing 0 of 4 posts"),
    (0, 0, ""),
])
def test_status_summary(shown, total, expected):
    assert status_summary(shown, total) == expected


def test_render():
    result = render(ViewState(snapshot=SNAPSHOT, search_query="python"))
    assert [p["id"] for p in result.posts] == ["p3", "p2"]
    assert result.summary == "Showing 2 of 3 posts"
    assert not result.empty
    assert [card.count("post-card") for card in result.cards] == [1, 1]
    assert 'data-id="p3"' in result.cards[0]
    assert result.categories == ["All", "Tech", "Travel", "General"]

    result = render(ViewState())
    assert result.posts == []
    assert result.summary == ""
    assert result.empty
    assert result.cards == []
    assert result.categories == ["All"]


def test_categories_in_first_seen_order():
    assert categories(SNAPSHOT + [make_post("p0", category="Tech")]) == ["All", "Tech", "Travel", "General"]
    assert categories([]) == ["All"]


def test_excerpt():
    assert excerpt("line one\nline two") == "line one line two"
    long_text = "x" * 200
    assert excerpt(long_text) == "x" * 160 + "…"
    assert excerpt("x" * 160) == "x" * 160
    assert excerpt(None) == ""


def test_format_date():
    assert format_date("2026-01-05T12:00:00+00:00") == "Jan 5, 2026"
    assert format_date("2025-11-23T08:30:00Z") == "Nov 23, 2025"
    assert format_date(None) == ""


def test_card_html_escapes_fields():
    html = card_html(make_post("p9", title="<b>Bold</b>", author='O"Neil'))
    assert 'data-id="p9"' in html
    assert "&lt;b&gt;Bold&lt;/b&gt;" in html
    assert "<b>" not in html
    assert "O&quot;Neil" in html
    assert "Jan 5, 2026" in html


def test_post_detail_shows_updated_only_when_edited():
    assert "Updated" not in post_detail_html(make_post("p1"))
    html = post_detail_html(make_post("p1", updated="2026-02-01T09:00:00+00:00"))
    assert "Updated Feb 1, 2026" in html
