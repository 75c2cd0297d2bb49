"""Rebuild-on-change for development mode.

Monitors the content source directories and re-plans the whole site
whenever a matching markdown file changes.
"""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from watchfiles import Change, awatch

from blogplan.core.content import ContentError, ContentLoader
from blogplan.core.planner import PagePlan, PagePlanner

logger = logging.getLogger(__name__)

PlanCallback = Callable[[PagePlan], None]


class PlanWatcher:
    """Watches content sources and re-plans pages on change.

    Every relevant change triggers a full load and plan; there is no
    incremental mode. A failed re-plan is logged and the previous plan
    remains the last one handed to the callback.
    """

    def __init__(
        self,
        loader: ContentLoader,
        planner: PagePlanner,
        on_plan: PlanCallback,
        watch_patterns: list[str] | None = None,
    ) -> None:
        """Initialize the watcher.

        Args:
            loader: ContentLoader for the watched source directories
            planner: PagePlanner used for every re-plan
            on_plan: Called with each successfully built plan
            watch_patterns: Glob patterns to watch (default: ["**/*.md"])
        """
        self._loader = loader
        self._planner = planner
        self._on_plan = on_plan
        self._watch_patterns = watch_patterns or ["**/*.md"]

    async def run(self) -> None:
        """Watch for file changes and re-plan until cancelled.

        Re-plans run in a worker thread so the event loop keeps receiving
        change events while content is read.
        """
        watched = [d for d in self._loader.source_dirs if d.is_dir()]
        if not watched:
            logger.warning("No content directories to watch")
            return

        async for changes in awatch(*watched):
            changed = self._relevant_changes(changes)
            if not changed:
                continue
            logger.info(f"Content changed: {', '.join(str(p) for p in changed)}")
            await asyncio.to_thread(self.replan)

    def replan(self) -> PagePlan | None:
        """Load all content and plan the site.

        Returns:
            The new PagePlan, or None if loading failed
        """
        try:
            nodes = self._loader.load()
        except ContentError:
            logger.exception("Re-plan failed, keeping previous plan")
            return None

        plan = self._planner.plan(nodes)
        logger.info(f"Planned {len(plan.pages)} pages")
        self._on_plan(plan)
        return plan

    def _relevant_changes(self, changes: set[tuple[Change, str]]) -> list[Path]:
        """Filter watcher changes down to matching content files.

        Deletions count, since a removed post changes navigation and
        pagination.
        """
        return sorted(
            {Path(path_str) for _, path_str in changes if self._matches_patterns(Path(path_str))},
        )

    def _matches_patterns(self, path: Path) -> bool:
        """Check if a path matches any watch pattern.

        Args:
            path: Path to check

        Returns:
            True if path is inside a source directory and matches a pattern
        """
        for source_dir in self._loader.source_dirs:
            try:
                relative = path.resolve().relative_to(source_dir.resolve())
            except ValueError:
                continue

            for pattern in self._watch_patterns:
                if relative.match(pattern):
                    return True
                # "**/" also covers files at the top of the source directory
                if pattern.startswith("**/") and relative.match(pattern[3:]):
                    return True
        return False
