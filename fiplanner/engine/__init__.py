from .aggregate import projection_to_frame, summarize_by_phase
from .effective import get_effective_household
from .limits import LimitTable
from .monte_carlo import run_monte_carlo, run_monte_carlo_from_settings
from .rates import real_return
from .simulator import ProjectionContext, ProjectionState, initial_state, run_projection, step_year
from .validation import validate

__all__ = [
    "LimitTable",
    "ProjectionContext",
    "ProjectionState",
    "get_effective_household",
    "initial_state",
    "projection_to_frame",
    "real_return",
    "run_monte_carlo",
    "run_monte_carlo_from_settings",
    "run_projection",
    "step_year",
    "summarize_by_phase",
    "validate",
]
