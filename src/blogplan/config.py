"""Configuration management for Blogplan.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Self

from blogplan.core.content import GLOSSARY_TAG
from blogplan.core.planner import POSTS_PER_PAGE

CONFIG_FILENAME = "blogplan.toml"


def _default_sources() -> dict[str, Path]:
    return {
        "blog": Path("content/blog"),
        "glossary": Path("content/glossary"),
    }


@dataclass
class SiteConfig:
    """Site metadata handed to templates alongside the page plan."""

    title: str = "Big Bright Pixels"
    author: str = ""
    description: str = ""
    site_url: str = ""
    twitter: str | None = None
    github: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "title": self.title,
            "author": self.author,
            "description": self.description,
            "siteUrl": self.site_url,
            "social": {"twitter": self.twitter, "github": self.github},
        }


@dataclass
class ContentConfig:
    """Content source configuration."""

    sources: dict[str, Path] = field(default_factory=_default_sources)


@dataclass
class PagesConfig:
    """Page planning configuration."""

    posts_per_page: int = POSTS_PER_PAGE
    glossary_tag: str = GLOSSARY_TAG


@dataclass
class WatchConfig:
    """Rebuild-on-change configuration."""

    patterns: list[str] = field(default_factory=lambda: ["**/*.md"])


@dataclass
class Config:
    """Application configuration."""

    site: SiteConfig
    content: ContentConfig
    pages: PagesConfig
    watch: WatchConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for blogplan.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> Self:
        """Create config with all defaults."""
        return cls(
            site=SiteConfig(),
            content=ContentConfig(),
            pages=PagesConfig(),
            watch=WatchConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> Self:
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {path}: {e}") from e

        config_dir = path.parent

        return cls(
            site=cls._parse_site(data.get("site")),
            content=cls._parse_content(data.get("content"), config_dir),
            pages=cls._parse_pages(data.get("pages")),
            watch=cls._parse_watch(data.get("watch")),
            config_path=path,
        )

    @classmethod
    def _parse_site(cls, data: object) -> SiteConfig:
        """Parse site configuration section.

        Args:
            data: Raw site section data

        Returns:
            SiteConfig instance
        """
        if data is None:
            return SiteConfig()

        if not isinstance(data, dict):
            raise ValueError("site section must be a dictionary")

        defaults = SiteConfig()
        values: dict[str, str] = {}
        for key in ("title", "author", "description", "site_url"):
            value = data.get(key, getattr(defaults, key))
            if not isinstance(value, str):
                raise ValueError(f"site.{key} must be a string")
            values[key] = value

        social: dict[str, str | None] = {}
        for key in ("twitter", "github"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"site.{key} must be a string")
            social[key] = value

        return SiteConfig(**values, **social)

    @classmethod
    def _parse_content(cls, data: object, config_dir: Path) -> ContentConfig:
        """Parse content configuration section.

        Args:
            data: Raw content section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            ContentConfig instance
        """
        if data is None:
            return ContentConfig(
                sources={name: config_dir / path for name, path in _default_sources().items()},
            )

        if not isinstance(data, dict):
            raise ValueError("content section must be a dictionary")

        sources_raw = data.get("sources")
        if sources_raw is None:
            return ContentConfig(
                sources={name: config_dir / path for name, path in _default_sources().items()},
            )

        if not isinstance(sources_raw, dict):
            raise ValueError("content.sources must be a table")

        sources: dict[str, Path] = {}
        for name, source_dir in sources_raw.items():
            if not isinstance(source_dir, str):
                raise ValueError(f"content.sources.{name} must be a string")
            sources[name] = config_dir / source_dir

        return ContentConfig(sources=sources)

    @classmethod
    def _parse_pages(cls, data: object) -> PagesConfig:
        """Parse pages configuration section.

        Args:
            data: Raw pages section data

        Returns:
            PagesConfig instance
        """
        if data is None:
            return PagesConfig()

        if not isinstance(data, dict):
            raise ValueError("pages section must be a dictionary")

        posts_per_page = data.get("posts_per_page", POSTS_PER_PAGE)
        if not isinstance(posts_per_page, int) or isinstance(posts_per_page, bool):
            raise ValueError("pages.posts_per_page must be an integer")
        if posts_per_page < 1:
            raise ValueError("pages.posts_per_page must be at least 1")

        glossary_tag = data.get("glossary_tag", GLOSSARY_TAG)
        if not isinstance(glossary_tag, str):
            raise ValueError("pages.glossary_tag must be a string")

        return PagesConfig(posts_per_page=posts_per_page, glossary_tag=glossary_tag)

    @classmethod
    def _parse_watch(cls, data: object) -> WatchConfig:
        """Parse watch configuration section.

        Args:
            data: Raw watch section data

        Returns:
            WatchConfig instance
        """
        if data is None:
            return WatchConfig()

        if not isinstance(data, dict):
            raise ValueError("watch section must be a dictionary")

        patterns_raw = data.get("patterns")
        if patterns_raw is None:
            return WatchConfig()

        if not isinstance(patterns_raw, list):
            raise ValueError("watch.patterns must be a list")
        patterns: list[str] = []
        for item in patterns_raw:
            if not isinstance(item, str):
                raise ValueError("watch.patterns items must be strings")
            patterns.append(item)

        return WatchConfig(patterns=patterns)

    @property
    def source_dirs(self) -> list[Path]:
        """Content source directories in configuration order."""
        return list(self.content.sources.values())

    def with_overrides(
        self,
        *,
        posts_per_page: int | None = None,
        glossary_tag: str | None = None,
    ) -> Self:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            posts_per_page: Override pages.posts_per_page
            glossary_tag: Override pages.glossary_tag

        Returns:
            New Config instance with overrides applied
        """
        pages = self.pages
        if posts_per_page is not None or glossary_tag is not None:
            pages = replace(
                self.pages,
                posts_per_page=posts_per_page if posts_per_page is not None else self.pages.posts_per_page,
                glossary_tag=glossary_tag if glossary_tag is not None else self.pages.glossary_tag,
            )

        return replace(self, pages=pages)
