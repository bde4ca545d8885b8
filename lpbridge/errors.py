"""
Exception hierarchy for lpbridge
"""
from .status import Outcome


class LPError(Exception):
    """Base class for every error raised by lpbridge."""


class ValidationError(LPError, ValueError):
    """Invalid arguments detected before anything reaches the solver engine."""


class UnsupportedOperationError(LPError):
    """The requested operation is not supported (e.g. shrinking the column count)."""


class OptionError(LPError):
    """A model option failed while the model was being constructed."""


class BackendUnavailableError(LPError, RuntimeError):
    """The native library of a solver engine could not be loaded."""


class ModelClosedError(LPError, RuntimeError):
    """The model has been freed and its engine problem released."""


class StaleResultError(LPError, RuntimeError):
    """The model was mutated after the result was produced."""


class ContextError(LPError):
    """Base class for errors reported by a cancellation context."""

    message = "context error"

    def __init__(self, message=None):
        super().__init__(message or self.message)


class Canceled(ContextError):
    message = "context canceled"


class DeadlineExceeded(ContextError):
    message = "context deadline exceeded"


class SolveError(LPError):
    """
    A failure-tier outcome reported by the solver engine.

    Attributes
    ----------
    outcome : Outcome
        The outcome that produced this error
    """

    outcome = None
    message = "solve failed"

    def __init__(self, message=None):
        super().__init__(message or self.message)


class ModelInfeasibleError(SolveError):
    outcome = Outcome.INFEASIBLE
    message = "model is infeasible"


class ModelUnboundedError(SolveError):
    outcome = Outcome.UNBOUNDED
    message = "model is unbounded"


class ModelDegenerateError(SolveError):
    outcome = Outcome.DEGENERATE
    message = "model is degenerate"


class NumericalFailureError(SolveError):
    outcome = Outcome.NUMERICAL_FAILURE
    message = "numerical failure while solving"


class UserAbortError(SolveError):
    outcome = Outcome.USER_ABORT
    message = "aborted by user abort function"


class SolveTimeoutError(SolveError):
    outcome = Outcome.TIMEOUT
    message = "timeout occurred before any integer solution could be found"


class BranchCutFailError(SolveError):
    outcome = Outcome.BRANCH_CUT_FAIL
    message = "branch-and-cut failure"


class BranchCutBreakError(SolveError):
    outcome = Outcome.BRANCH_CUT_BREAK
    message = "branch-and-cut stopped at breakpoint"


class FeasibleFoundError(SolveError):
    outcome = Outcome.FEASIBLE_FOUND
    message = "feasible but non-integer solution found"


class NoFeasibleFoundError(SolveError):
    outcome = Outcome.NO_FEASIBLE_FOUND
    message = "no feasible solution found"


class OutOfMemoryError(SolveError):
    outcome = Outcome.NO_MEMORY
    message = "ran out of memory while solving"


class PresolvedError(SolveError):
    outcome = Outcome.PRESOLVED
    message = "model was presolved"


SOLVE_ERRORS = {
    cls.outcome: cls
    for cls in (
        ModelInfeasibleError, ModelUnboundedError, ModelDegenerateError,
        NumericalFailureError, UserAbortError, SolveTimeoutError,
        BranchCutFailError, BranchCutBreakError, FeasibleFoundError,
        NoFeasibleFoundError, OutOfMemoryError, PresolvedError,
    )
}


class ContractViolation(RuntimeError):
    """
    The solver engine returned an outcome code outside its documented set.

    This is not an :class:`LPError`: it means the engine changed its
    contract, not that the model has a problem, and it should not be
    handled like an ordinary solve failure.
    """

    def __init__(self, backend: str, code: int):
        self.backend = backend
        self.code = code
        super().__init__(f"unrecognized {backend} outcome code: {code}")
