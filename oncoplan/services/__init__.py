"""
Orchestration services over the decision core.
"""
from .planning import DrugDoses, PlanningService

__all__ = ["DrugDoses", "PlanningService"]
