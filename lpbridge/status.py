"""
Solve outcomes shared by all solver engines
"""
from enum import Enum
from typing import NamedTuple


class SolveStatus(Enum):
    """Status of a usable solution"""
    OPTIMAL = 'optimal'
    SUBOPTIMAL = 'suboptimal'


class Outcome(Enum):
    """
    Engine-independent outcome of a solve call.

    ``OPTIMAL`` and ``SUBOPTIMAL`` form the success tier and yield a
    :class:`~lpbridge.results.SolveResult`; every other member is a failure
    and is raised as the matching :class:`~lpbridge.errors.SolveError`.
    """
    OPTIMAL = 'optimal'
    SUBOPTIMAL = 'suboptimal'
    INFEASIBLE = 'infeasible'
    UNBOUNDED = 'unbounded'
    DEGENERATE = 'degenerate'
    NUMERICAL_FAILURE = 'numerical_failure'
    USER_ABORT = 'user_abort'
    TIMEOUT = 'timeout'
    BRANCH_CUT_FAIL = 'branch_cut_fail'
    BRANCH_CUT_BREAK = 'branch_cut_break'
    FEASIBLE_FOUND = 'feasible_found'
    NO_FEASIBLE_FOUND = 'no_feasible_found'
    NO_MEMORY = 'no_memory'
    PRESOLVED = 'presolved'

    @property
    def is_success(self) -> bool:
        return self in (Outcome.OPTIMAL, Outcome.SUBOPTIMAL)


class UnexpectedOutcome(NamedTuple):
    """A raw engine code that matches no known outcome."""
    backend: str
    code: int
