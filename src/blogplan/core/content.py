"""Content ingestion from markdown sources.

Reads markdown files with YAML frontmatter from the configured source
directories and turns each one into an immutable ContentNode. Nodes are
returned date-descending, the order the page planner works in.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any, TypedDict

import frontmatter
import yaml

from blogplan.core.types import BLOG_PREFIX, GLOSSARY_PREFIX, PostType, URLPath

logger = logging.getLogger(__name__)

GLOSSARY_TAG = "glossary"
POST_TYPE_KEY = "postType"

_INDEX_ROUTE = re.compile(rf"^{BLOG_PREFIX}/\d+/?$")


class ContentError(Exception):
    """Raised when source content cannot be ingested."""


class ContentNodeDict(TypedDict):
    """Dictionary representation of a content node."""

    slug: str
    title: str
    date: str | None
    postType: str


@dataclass(frozen=True)
class ContentNode:
    """One sourced content item.

    Slugs are unique across a corpus. The loader enforces this; nodes built
    by hand must keep it themselves.
    """

    slug: URLPath
    title: str
    date: datetime | None = None
    post_type: PostType = PostType.POST
    description: str | None = None
    source_path: Path | None = None

    @property
    def is_glossary_term(self) -> bool:
        return self.post_type is PostType.GLOSSARY

    def to_dict(self) -> ContentNodeDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "slug": self.slug,
            "title": self.title,
            "date": self.date.isoformat() if self.date is not None else None,
            "postType": self.post_type.value,
        }


def classify(tag: object, glossary_tag: str = GLOSSARY_TAG) -> PostType:
    """Resolve a frontmatter classification tag.

    Only an exact match of the glossary tag makes a glossary term; a missing
    or any other tag is an ordinary post.
    """
    if tag == glossary_tag:
        return PostType.GLOSSARY
    return PostType.POST


def slug_from_path(relative: Path) -> URLPath:
    """Derive a URL slug from a source file path.

    The suffix is dropped, a trailing "index" segment collapses into its
    directory and the result is wrapped in slashes.

    Args:
        relative: File path relative to its source directory
                  (e.g., "hello-world/index.md")

    Returns:
        Slug such as "/hello-world/", or "/" for a top-level index
    """
    parts = list(relative.with_suffix("").parts)
    if parts and parts[-1] == "index":
        parts.pop()
    if not parts:
        return URLPath("/")
    return URLPath("/" + "/".join(parts) + "/")


def parse_date(value: object) -> datetime | None:
    """Normalize a frontmatter date to a naive UTC datetime.

    Raises:
        ValueError: If the value is not a date, datetime or ISO 8601 string
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(UTC).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        return parse_date(datetime.fromisoformat(value.strip()))
    raise ValueError(f"unsupported date value: {value!r}")


def sort_by_date(nodes: Iterable[ContentNode]) -> list[ContentNode]:
    """Sort nodes newest first, undated nodes last.

    The sort is stable, so nodes sharing a date keep their relative order.
    """
    items = list(nodes)
    dated = [node for node in items if node.date is not None]
    undated = [node for node in items if node.date is None]
    return sorted(dated, key=lambda node: node.date, reverse=True) + undated


class ContentLoader:
    """Loads content nodes from markdown source directories.

    Any defect in a source file aborts the whole load with ContentError,
    so a page plan is never built from a partial corpus.
    """

    def __init__(
        self,
        source_dirs: Iterable[Path],
        *,
        glossary_tag: str = GLOSSARY_TAG,
        pattern: str = "*.md",
    ) -> None:
        """Initialize loader.

        Args:
            source_dirs: Directories scanned recursively for markdown files
            glossary_tag: postType value that marks a glossary term
            pattern: File name pattern of markdown sources
        """
        self._source_dirs = list(source_dirs)
        self._glossary_tag = glossary_tag
        self._pattern = pattern

    @property
    def source_dirs(self) -> list[Path]:
        return list(self._source_dirs)

    def load(self) -> list[ContentNode]:
        """Load all nodes, newest first.

        Returns:
            Content nodes sorted by date descending

        Raises:
            ContentError: If a file cannot be read or parsed, a post has no
                date, two files resolve to the same slug, or a node would
                take a route already planned for another page
        """
        nodes: list[ContentNode] = []
        seen: dict[str, Path] = {}

        for source_dir in self._source_dirs:
            if not source_dir.is_dir():
                logger.warning(f"Content directory not found, skipping: {source_dir}")
                continue

            for file_path in sorted(source_dir.rglob(self._pattern)):
                if not file_path.is_file():
                    continue
                node = self.load_node(source_dir, file_path)
                if node.slug in seen:
                    raise ContentError(
                        f"Duplicate slug {node.slug}: {seen[node.slug]} and {file_path}",
                    )
                seen[node.slug] = file_path
                nodes.append(node)

        self._check_routes(nodes, seen)
        logger.debug(f"Loaded {len(nodes)} content nodes from {len(self._source_dirs)} directories")
        return sort_by_date(nodes)

    def _check_routes(self, nodes: list[ContentNode], sources: dict[str, Path]) -> None:
        """Reject nodes whose page route another page already claims.

        Post pages live at their slug and glossary term pages at
        GLOSSARY_PREFIX + slug. Index pages own "/" and BLOG_PREFIX/<n>.
        """
        routes: dict[str, Path] = {}
        for node in nodes:
            source = sources[node.slug]
            if node.is_glossary_term:
                route = f"{GLOSSARY_PREFIX}{node.slug}"
            else:
                route = node.slug
                if route == "/" or _INDEX_ROUTE.match(route):
                    raise ContentError(f"{source}: slug {route} is reserved for index pages")

            if route in routes:
                raise ContentError(f"Route {route} claimed by both {routes[route]} and {source}")
            routes[route] = source

    def load_node(self, source_dir: Path, file_path: Path) -> ContentNode:
        """Load a single markdown file.

        Args:
            source_dir: Source directory the file belongs to
            file_path: Markdown file inside source_dir

        Returns:
            ContentNode for the file

        Raises:
            ContentError: If the file is unreadable or its frontmatter is invalid
        """
        relative = file_path.relative_to(source_dir)
        metadata = self._read_metadata(file_path)

        slug = slug_from_path(relative)
        post_type = classify(metadata.get(POST_TYPE_KEY), self._glossary_tag)

        title = metadata.get("title")
        if title is None:
            title = slug.strip("/").rsplit("/", 1)[-1] or "index"
        elif not isinstance(title, str):
            raise ContentError(f"{file_path}: title must be a string")

        description = metadata.get("description")
        if description is not None and not isinstance(description, str):
            raise ContentError(f"{file_path}: description must be a string")

        try:
            node_date = parse_date(metadata.get("date"))
        except ValueError as e:
            raise ContentError(f"{file_path}: invalid date: {e}") from e

        if node_date is None and post_type is PostType.POST:
            raise ContentError(f"{file_path}: post has no date")

        return ContentNode(
            slug=slug,
            title=title,
            date=node_date,
            post_type=post_type,
            description=description,
            source_path=relative,
        )

    def _read_metadata(self, file_path: Path) -> dict[str, Any]:
        """Read and validate the frontmatter of a file."""
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ContentError(f"Failed to read {file_path}: {e}") from e

        try:
            post = frontmatter.loads(text)
        except (yaml.YAMLError, ValueError, TypeError) as e:
            raise ContentError(f"{file_path}: invalid frontmatter: {e}") from e

        if not isinstance(post.metadata, dict):
            raise ContentError(f"{file_path}: frontmatter must be a mapping")
        return dict(post.metadata)
