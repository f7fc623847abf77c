"""Planners used as the bulk generation collaborator."""

from .cp_sat_planner import CPSatPlanner

__all__ = [
    "CPSatPlanner",
]
