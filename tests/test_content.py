"""Tests for content ingestion."""

from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest
from blogplan.core.content import (
    ContentError,
    ContentLoader,
    ContentNode,
    classify,
    parse_date,
    slug_from_path,
    sort_by_date,
)
from blogplan.core.planner import plan_pages
from blogplan.core.types import PostType, URLPath

from tests.conftest import WriteContent


class TestSlugFromPath:
    """Tests for slug_from_path()."""

    @pytest.mark.parametrize(
        ("relative", "expected"),
        [
            ("hello-world/index.md", "/hello-world/"),
            ("hello-world.md", "/hello-world/"),
            ("notes/foo.md", "/notes/foo/"),
            ("index.md", "/"),
            ("2019/nested/index.md", "/2019/nested/"),
        ],
    )
    def test__derives_slug(self, relative: str, expected: str) -> None:
        """Strip suffix and trailing index, wrap in slashes."""
        assert slug_from_path(Path(relative)) == expected


class TestClassify:
    """Tests for classify()."""

    def test__glossary_tag__is_glossary(self) -> None:
        assert classify("glossary") is PostType.GLOSSARY

    @pytest.mark.parametrize("tag", [None, "post", "Glossary", "", 1])
    def test__other_tags__are_posts(self, tag: object) -> None:
        """Anything but an exact match is a post."""
        assert classify(tag) is PostType.POST

    def test__custom_tag(self) -> None:
        """Glossary tag is configurable."""
        assert classify("term", "term") is PostType.GLOSSARY
        assert classify("glossary", "term") is PostType.POST


class TestParseDate:
    """Tests for parse_date()."""

    def test__none__returns_none(self) -> None:
        assert parse_date(None) is None

    def test__date__midnight(self) -> None:
        assert parse_date(date(2020, 3, 4)) == datetime(2020, 3, 4)

    def test__aware_datetime__converted_to_naive_utc(self) -> None:
        """Aware datetimes are normalized to naive UTC."""
        value = datetime(2020, 3, 4, 12, 0, tzinfo=timezone(timedelta(hours=2)))

        assert parse_date(value) == datetime(2020, 3, 4, 10, 0)

    def test__iso_string(self) -> None:
        assert parse_date("2021-07-08T09:10:11") == datetime(2021, 7, 8, 9, 10, 11)
        assert parse_date("2021-07-08") == datetime(2021, 7, 8)

    @pytest.mark.parametrize("value", ["yesterday", 20200101, ["2020-01-01"]])
    def test__invalid__raises(self, value: object) -> None:
        with pytest.raises(ValueError):
            parse_date(value)


class TestSortByDate:
    """Tests for sort_by_date()."""

    def test__newest_first_undated_last(self) -> None:
        """Sort descending by date and keep undated nodes at the end."""
        undated = ContentNode(slug=URLPath("/u/"), title="U", post_type=PostType.GLOSSARY)
        old = ContentNode(slug=URLPath("/o/"), title="O", date=datetime(2019, 1, 1))
        new = ContentNode(slug=URLPath("/n/"), title="N", date=datetime(2022, 1, 1))

        assert sort_by_date([undated, old, new]) == [new, old, undated]


class TestContentLoader:
    """Tests for ContentLoader.load()."""

    def test__missing_dir__returns_empty(self, tmp_path: Path) -> None:
        """Skip source directories that don't exist."""
        loader = ContentLoader([tmp_path / "nonexistent"])

        assert loader.load() == []

    def test__loads_posts_and_terms(self, tmp_path: Path, write_content: WriteContent) -> None:
        """Load posts and glossary terms from several directories."""
        blog = tmp_path / "blog"
        glossary = tmp_path / "glossary"
        write_content(blog / "first" / "index.md", title="First", date="2020-01-01")
        write_content(blog / "second.md", title="Second", date="2021-06-15", description="Hi")
        write_content(glossary / "closure.md", title="Closure", postType="glossary")

        nodes = ContentLoader([blog, glossary]).load()

        assert [n.slug for n in nodes] == ["/second/", "/first/", "/closure/"]
        second, first, closure = nodes
        assert second.title == "Second"
        assert second.date == datetime(2021, 6, 15)
        assert second.description == "Hi"
        assert second.post_type is PostType.POST
        assert first.source_path == Path("first/index.md")
        assert closure.post_type is PostType.GLOSSARY
        assert closure.date is None

    def test__title_defaults_to_slug(self, tmp_path: Path, write_content: WriteContent) -> None:
        """Use the last slug segment when the title is missing."""
        write_content(tmp_path / "untitled-post.md", date="2020-01-01")

        nodes = ContentLoader([tmp_path]).load()

        assert nodes[0].title == "untitled-post"

    def test__custom_glossary_tag(self, tmp_path: Path, write_content: WriteContent) -> None:
        """Classify with the configured glossary tag."""
        write_content(tmp_path / "term.md", title="Term", postType="definition")

        nodes = ContentLoader([tmp_path], glossary_tag="definition").load()

        assert nodes[0].post_type is PostType.GLOSSARY

    def test__ignores_non_markdown(self, tmp_path: Path, write_content: WriteContent) -> None:
        """Only markdown files become nodes."""
        write_content(tmp_path / "post.md", title="Post", date="2020-01-01")
        (tmp_path / "image.png").write_bytes(b"\x89PNG")

        nodes = ContentLoader([tmp_path]).load()

        assert [n.slug for n in nodes] == ["/post/"]

    def test__post_without_date__raises(self, tmp_path: Path, write_content: WriteContent) -> None:
        """Posts must carry a date."""
        write_content(tmp_path / "post.md", title="Post")

        with pytest.raises(ContentError, match="no date"):
            ContentLoader([tmp_path]).load()

    def test__invalid_date__raises(self, tmp_path: Path, write_content: WriteContent) -> None:
        write_content(tmp_path / "post.md", title="Post", date="someday")

        with pytest.raises(ContentError, match="invalid date"):
            ContentLoader([tmp_path]).load()

    def test__invalid_yaml__raises(self, tmp_path: Path) -> None:
        """Broken frontmatter aborts the load."""
        (tmp_path / "post.md").write_text("---\ntitle: [unclosed\n---\n\nBody\n")

        with pytest.raises(ContentError, match="invalid frontmatter"):
            ContentLoader([tmp_path]).load()

    def test__non_string_title__raises(self, tmp_path: Path) -> None:
        (tmp_path / "post.md").write_text("---\ntitle: [a, b]\ndate: 2020-01-01\n---\n")

        with pytest.raises(ContentError, match="title must be a string"):
            ContentLoader([tmp_path]).load()

    def test__duplicate_slug__raises(self, tmp_path: Path, write_content: WriteContent) -> None:
        """Two files resolving to the same slug abort the load."""
        write_content(tmp_path / "a" / "same.md", title="One", date="2020-01-01")
        write_content(tmp_path / "b" / "a" / "same.md", title="Two", date="2020-01-02")

        with pytest.raises(ContentError, match="Duplicate slug /a/same/"):
            ContentLoader([tmp_path, tmp_path / "b"]).load()

    def test__top_level_index_post__raises(
        self, tmp_path: Path, write_content: WriteContent
    ) -> None:
        """A post at the site root would shadow the first index page."""
        write_content(tmp_path / "blog" / "index.md", title="Home", date="2020-01-01")

        with pytest.raises(ContentError, match="slug / is reserved for index pages"):
            ContentLoader([tmp_path / "blog"]).load()

    @pytest.mark.parametrize("relative", ["blog/2.md", "blog/12/index.md"])
    def test__index_route_post__raises(
        self, tmp_path: Path, write_content: WriteContent, relative: str
    ) -> None:
        """Posts may not take paginated index routes."""
        write_content(tmp_path / relative, title="Page", date="2020-01-01")

        with pytest.raises(ContentError, match="reserved for index pages"):
            ContentLoader([tmp_path]).load()

    def test__post_shadowing_glossary_term__raises(
        self, tmp_path: Path, write_content: WriteContent
    ) -> None:
        """A post slug equal to a glossary term route aborts the load."""
        blog = tmp_path / "blog"
        glossary = tmp_path / "glossary"
        write_content(blog / "glossary" / "foo.md", title="Foo post", date="2020-01-01")
        write_content(glossary / "foo.md", title="Foo", postType="glossary")

        with pytest.raises(ContentError, match="Route /glossary/foo/ claimed by both"):
            ContentLoader([blog, glossary]).load()

    def test__loaded_content__plans_unique_paths(
        self, tmp_path: Path, write_content: WriteContent
    ) -> None:
        """Nodes accepted by the loader never plan the same path twice."""
        blog = tmp_path / "blog"
        glossary = tmp_path / "glossary"
        for i in range(12):
            write_content(blog / f"post-{i}.md", title=f"Post {i}", date=f"2020-01-{i + 1:02d}")
        write_content(blog / "blog" / "notes.md", title="Notes", date="2020-02-01")
        write_content(glossary / "foo.md", title="Foo", postType="glossary")
        write_content(glossary / "index.md", title="All terms", postType="glossary")

        plan = plan_pages(ContentLoader([blog, glossary]).load())

        paths = [page.path for page in plan.pages]
        assert len(paths) == len(set(paths))
        assert "/glossary/" in paths
        assert "/blog/notes/" in paths

    def test__node__to_dict(self) -> None:
        """Serialize a node for JSON output."""
        node = ContentNode(slug=URLPath("/a/"), title="A", date=datetime(2020, 1, 2, 3, 4))

        assert node.to_dict() == {
            "slug": "/a/",
            "title": "A",
            "date": "2020-01-02T03:04:00",
            "postType": "post",
        }
