"""Use cases: migrations and merges that orchestrate the services."""

from reorg.application.use_cases.reorg_planner import ReorgPlanner

__all__ = ["ReorgPlanner"]
