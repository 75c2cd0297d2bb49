"""Page plan generator.

Turns a flat list of content nodes into the routable pages of the site:
one page per post with previous/next navigation, one page per glossary
term and paginated index pages. The plan only describes pages; rendering
them is left to the caller.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TypedDict

from blogplan.core.content import ContentNode, sort_by_date
from blogplan.core.types import BLOG_PREFIX, GLOSSARY_PREFIX, PostType, TemplateKind, URLPath

logger = logging.getLogger(__name__)

POSTS_PER_PAGE = 10


class PostContext(TypedDict):
    """Template parameters of a post page."""

    slug: str
    previous: ContentNode | None
    next: ContentNode | None


class GlossaryTermContext(TypedDict):
    """Template parameters of a glossary term page."""

    slug: str


class IndexContext(TypedDict):
    """Template parameters of a paginated index page."""

    limit: int
    skip: int
    numPages: int
    currentPage: int


PageContext = PostContext | GlossaryTermContext | IndexContext


class PageDescriptorDict(TypedDict):
    """Dictionary representation of a page descriptor."""

    path: str
    template: str
    context: dict[str, object]


@dataclass(frozen=True)
class PageDescriptor:
    """One planned output page."""

    path: URLPath
    template: TemplateKind
    context: PageContext

    def to_dict(self) -> PageDescriptorDict:
        """Convert to dictionary for JSON serialization."""
        context: dict[str, object] = {}
        for key, value in self.context.items():
            context[key] = value.to_dict() if isinstance(value, ContentNode) else value
        return {
            "path": self.path,
            "template": self.template.value,
            "context": context,
        }


@dataclass
class PagePlan:
    """All pages planned in one generation pass.

    Pages are ordered post pages first, then glossary term pages, then
    index pages.
    """

    posts: list[ContentNode] = field(default_factory=list)
    glossary_terms: list[ContentNode] = field(default_factory=list)
    pages: list[PageDescriptor] = field(default_factory=list)
    _path_index: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._path_index = {}
        for i, page in enumerate(self.pages):
            self._path_index.setdefault(page.path, i)

    def pages_of(self, template: TemplateKind) -> list[PageDescriptor]:
        """Get pages rendered with the given template."""
        return [page for page in self.pages if page.template is template]

    def get_page(self, path: str) -> PageDescriptor | None:
        """Get page by path.

        Args:
            path: Page path (e.g., "/blog/2" or "blog/2")

        Returns:
            PageDescriptor if planned, None otherwise
        """
        normalized = path if path.startswith("/") else f"/{path}"
        idx = self._path_index.get(normalized)
        if idx is None:
            return None
        return self.pages[idx]

    def to_dict(self) -> dict[str, list[PageDescriptorDict]]:
        """Convert to dictionary for JSON serialization."""
        return {"pages": [page.to_dict() for page in self.pages]}


def partition(nodes: Iterable[ContentNode]) -> tuple[list[ContentNode], list[ContentNode]]:
    """Split nodes into posts and glossary terms, keeping input order.

    Returns:
        Tuple of (posts, glossary_terms)
    """
    posts: list[ContentNode] = []
    glossary_terms: list[ContentNode] = []
    for node in nodes:
        if node.post_type is PostType.GLOSSARY:
            glossary_terms.append(node)
        else:
            posts.append(node)
    return posts, glossary_terms


def index_path(page_number: int) -> URLPath:
    """Route of a 1-based index page number."""
    if page_number == 1:
        return URLPath("/")
    return URLPath(f"{BLOG_PREFIX}/{page_number}")


class PagePlanner:
    """Plans the pages of one site build.

    Posts are ordered newest first before navigation is computed. The sort
    is stable, so input that already arrives date-descending is planned
    exactly as given. Slugs, titles and dates are not re-validated here;
    the content loader is responsible for them.
    """

    def __init__(self, *, posts_per_page: int = POSTS_PER_PAGE) -> None:
        """Initialize planner.

        Args:
            posts_per_page: Number of posts listed on each index page

        Raises:
            ValueError: If posts_per_page is less than 1
        """
        if posts_per_page < 1:
            raise ValueError("posts_per_page must be at least 1")
        self._posts_per_page = posts_per_page

    @property
    def posts_per_page(self) -> int:
        return self._posts_per_page

    def plan(self, nodes: Iterable[ContentNode]) -> PagePlan:
        """Plan all pages for the given nodes.

        Args:
            nodes: Content nodes of the whole site

        Returns:
            PagePlan with post, glossary term and index pages
        """
        posts, glossary_terms = partition(nodes)
        posts = sort_by_date(posts)

        pages = [
            *self._post_pages(posts),
            *self._glossary_pages(glossary_terms),
            *self._index_pages(len(posts)),
        ]
        logger.debug(
            f"Planned {len(pages)} pages: {len(posts)} posts, "
            f"{len(glossary_terms)} glossary terms",
        )
        return PagePlan(posts=posts, glossary_terms=glossary_terms, pages=pages)

    def num_pages(self, post_count: int) -> int:
        """Number of index pages needed for post_count posts."""
        return math.ceil(post_count / self._posts_per_page)

    def _post_pages(self, posts: list[ContentNode]) -> list[PageDescriptor]:
        pages: list[PageDescriptor] = []
        last = len(posts) - 1
        for i, post in enumerate(posts):
            # Newest first: the chronologically next post sits one index lower
            previous = posts[i + 1] if i < last else None
            next_ = posts[i - 1] if i > 0 else None
            context: PostContext = {"slug": post.slug, "previous": previous, "next": next_}
            pages.append(PageDescriptor(path=post.slug, template=TemplateKind.POST, context=context))
        return pages

    def _glossary_pages(self, terms: list[ContentNode]) -> list[PageDescriptor]:
        pages: list[PageDescriptor] = []
        for term in terms:
            context: GlossaryTermContext = {"slug": term.slug}
            pages.append(
                PageDescriptor(
                    path=URLPath(f"{GLOSSARY_PREFIX}{term.slug}"),
                    template=TemplateKind.GLOSSARY_TERM,
                    context=context,
                ),
            )
        return pages

    def _index_pages(self, post_count: int) -> list[PageDescriptor]:
        num_pages = self.num_pages(post_count)
        pages: list[PageDescriptor] = []
        for i in range(num_pages):
            context: IndexContext = {
                "limit": self._posts_per_page,
                "skip": i * self._posts_per_page,
                "numPages": num_pages,
                "currentPage": i + 1,
            }
            pages.append(
                PageDescriptor(path=index_path(i + 1), template=TemplateKind.INDEX, context=context),
            )
        return pages


def plan_pages(
    nodes: Iterable[ContentNode],
    *,
    posts_per_page: int = POSTS_PER_PAGE,
) -> PagePlan:
    """Plan all pages for the given nodes with a one-off planner."""
    return PagePlanner(posts_per_page=posts_per_page).plan(nodes)
