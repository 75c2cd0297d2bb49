"""Rebuild-on-change support for development mode."""

from blogplan.live.watch import PlanWatcher

__all__ = ["PlanWatcher"]
