"""CLI interface for Blogplan.

Command-line tool for planning the pages of a markdown blog.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from blogplan.config import Config
from blogplan.core.content import ContentError, ContentLoader
from blogplan.core.planner import PagePlan, PagePlanner
from blogplan.core.types import TemplateKind

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Path to configuration file (default: auto-discover blogplan.toml)",
)
output_option = click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Write the page plan JSON to this file (default: stdout)",
)
posts_per_page_option = click.option(
    "--posts-per-page",
    type=click.IntRange(min=1),
    default=None,
    help="Posts listed on each index page (overrides config)",
)
glossary_tag_option = click.option(
    "--glossary-tag",
    default=None,
    help="postType value marking glossary terms (overrides config)",
)
verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (debug logging)",
)


@click.group()
def cli() -> None:
    """Blogplan - page planning for a markdown blog."""


@cli.command()
@config_option
@output_option
@posts_per_page_option
@glossary_tag_option
@verbose_option
def plan(
    config_path: Path | None,
    output: Path | None,
    posts_per_page: int | None,
    glossary_tag: str | None,
    verbose: bool,
) -> None:
    """Plan all pages and write them as JSON."""
    _configure_logging(verbose)

    try:
        config = Config.load(config_path).with_overrides(
            posts_per_page=posts_per_page,
            glossary_tag=glossary_tag,
        )
        page_plan = _build_plan(config)
    except (ContentError, ValueError, FileNotFoundError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    _write_plan(page_plan, config, output)
    _print_summary(page_plan)


@cli.command()
@config_option
@output_option
@posts_per_page_option
@glossary_tag_option
@verbose_option
def watch(
    config_path: Path | None,
    output: Path | None,
    posts_per_page: int | None,
    glossary_tag: str | None,
    verbose: bool,
) -> None:
    """Plan all pages, then re-plan whenever content changes."""
    from blogplan.live import PlanWatcher

    _configure_logging(verbose)

    try:
        config = Config.load(config_path).with_overrides(
            posts_per_page=posts_per_page,
            glossary_tag=glossary_tag,
        )
    except (ValueError, FileNotFoundError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    def on_plan(page_plan: PagePlan) -> None:
        _write_plan(page_plan, config, output)
        _print_summary(page_plan)

    watcher = PlanWatcher(
        ContentLoader(config.source_dirs, glossary_tag=config.pages.glossary_tag),
        PagePlanner(posts_per_page=config.pages.posts_per_page),
        on_plan,
        watch_patterns=config.watch.patterns,
    )

    for source_dir in config.source_dirs:
        click.echo(f"Watching: {source_dir}", err=True)

    watcher.replan()
    try:
        asyncio.run(watcher.run())
    except KeyboardInterrupt:
        click.echo("Stopped.", err=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _build_plan(config: Config) -> PagePlan:
    """Load content and plan pages for a configuration.

    Raises:
        ContentError: If any content source is invalid
    """
    loader = ContentLoader(config.source_dirs, glossary_tag=config.pages.glossary_tag)
    planner = PagePlanner(posts_per_page=config.pages.posts_per_page)
    return planner.plan(loader.load())


def _write_plan(page_plan: PagePlan, config: Config, output: Path | None) -> None:
    data = {"site": config.site.to_dict(), **page_plan.to_dict()}
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if output is None:
        click.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")


def _print_summary(page_plan: PagePlan) -> None:
    click.echo(
        click.style(f"Planned {len(page_plan.pages)} pages", fg="green", bold=True),
        err=True,
    )
    click.echo(f"Posts: {len(page_plan.pages_of(TemplateKind.POST))}", err=True)
    click.echo(f"Glossary terms: {len(page_plan.pages_of(TemplateKind.GLOSSARY_TERM))}", err=True)
    click.echo(f"Index pages: {len(page_plan.pages_of(TemplateKind.INDEX))}", err=True)
