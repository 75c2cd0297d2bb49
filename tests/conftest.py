"""Shared test fixtures."""

from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from blogplan.config import (
    Config,
    ContentConfig,
    PagesConfig,
    SiteConfig,
    WatchConfig,
)
from blogplan.core.content import ContentNode
from blogplan.core.types import PostType, URLPath

WriteContent = Callable[..., Path]


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration with tmp_path content directories.

    Creates both source directories and returns a Config instance suitable
    for testing.
    """
    blog_dir = tmp_path / "content" / "blog"
    glossary_dir = tmp_path / "content" / "glossary"
    blog_dir.mkdir(parents=True, exist_ok=True)
    glossary_dir.mkdir(parents=True, exist_ok=True)

    return Config(
        site=SiteConfig(title="Test Blog", author="Tester"),
        content=ContentConfig(sources={"blog": blog_dir, "glossary": glossary_dir}),
        pages=PagesConfig(),
        watch=WatchConfig(),
    )


@pytest.fixture
def write_content() -> WriteContent:
    """Return a helper that writes a markdown file with frontmatter."""

    def write(path: Path, body: str = "Content.", **metadata: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = ["---", *(f"{key}: {value}" for key, value in metadata.items()), "---", "", body]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return write


def make_posts(count: int) -> list[ContentNode]:
    """Build count posts, newest first, one day apart."""
    newest = datetime(2024, 12, 31)
    return [
        ContentNode(
            slug=URLPath(f"/post-{i}/"),
            title=f"Post {i}",
            date=newest - timedelta(days=i),
        )
        for i in range(count)
    ]


def make_term(name: str) -> ContentNode:
    """Build an undated glossary term."""
    return ContentNode(
        slug=URLPath(f"/{name}/"),
        title=name.capitalize(),
        post_type=PostType.GLOSSARY,
    )
