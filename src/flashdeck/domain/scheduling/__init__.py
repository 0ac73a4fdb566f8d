# Domain Scheduling Package
from .models import MemoryState, Rating, State, initial, is_due, is_new
from .parameters import DEFAULT_PARAMETERS, ParameterSet
from .scheduler import Outcome, commit, format_interval, project

__all__ = [
    "MemoryState",
    "Rating",
    "State",
    "initial",
    "is_due",
    "is_new",
    "ParameterSet",
    "DEFAULT_PARAMETERS",
    "Outcome",
    "project",
    "commit",
    "format_interval",
]
