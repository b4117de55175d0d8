from __future__ import annotations

import re

import pytest

from app.services.slug import DEFAULT_SLUG, SLUG_MAX_LENGTH, resolve_unique_slug, slugify
from tests.fakes import InMemoryPostStore, make_post

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Как ИИ меняет продажи", "kak-ii-menyaet-prodazhi"),
        ("Чат-боты: 5 трендов 2025!", "chat-boty-5-trendov-2025"),
        ("Ёжик и щука", "yozhik-i-schuka"),
        ("GPT_4o   vs  Claude", "gpt-4o-vs-claude"),
        ("Объявление", "obyavlenie"),
    ],
)
def test_slugify_transliterates(title: str, expected: str) -> None:
    assert slugify(title) == expected


def test_slugify_is_deterministic() -> None:
    title = "Нейросети для продаж в 2025 году"
    assert slugify(title) == slugify(title)


def test_slugify_falls_back_for_untransliterable_title() -> None:
    assert slugify("🚀🤖") == DEFAULT_SLUG
    assert slugify("   ") == DEFAULT_SLUG


def test_slugify_truncates_without_trailing_hyphen() -> None:
    slug = slugify("очень длинный заголовок " * 10)

    assert len(slug) <= SLUG_MAX_LENGTH
    assert not slug.endswith("-")
    assert SLUG_PATTERN.match(slug)


@pytest.mark.asyncio
async def test_resolve_unique_slug_returns_base_when_free() -> None:
    store = InMemoryPostStore()

    assert await resolve_unique_slug(store, "ai-news") == "ai-news"


@pytest.mark.asyncio
async def test_resolve_unique_slug_appends_first_free_suffix() -> None:
    # Arrange
    store = InMemoryPostStore()
    for slug in ("ai-news", "ai-news-1", "ai-news-2"):
        store.add(make_post(slug=slug))

    # Act
    result = await resolve_unique_slug(store, "ai-news")

    # Assert
    assert result == "ai-news-3"


@pytest.mark.asyncio
async def test_resolve_unique_slug_bounds_probing() -> None:
    """Test a random suffix is used once the numbered candidates run out."""
    # Arrange
    store = InMemoryPostStore()
    store.add(make_post(slug="ai-news"))
    for suffix in range(1, 4):
        store.add(make_post(slug=f"ai-news-{suffix}"))

    # Act
    result = await resolve_unique_slug(store, "ai-news", max_attempts=3)

    # Assert
    assert len(store.slug_checks) == 3
    assert re.fullmatch(r"ai-news-[0-9a-f]{6}", result)
    assert result not in {"ai-news", "ai-news-1", "ai-news-2", "ai-news-3"}
