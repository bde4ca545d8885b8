"""
lpbridge Python Package

LP/MIP modeling layer over native solver engines (GLPK, lp_solve) reached through ctypes.
"""

from .bounds import Bound, BoundType, decode_bounds, encode_bounds
from .context import CancelContext
from .errors import (
    LPError, ValidationError, UnsupportedOperationError, OptionError,
    BackendUnavailableError, ModelClosedError, StaleResultError,
    ContextError, Canceled, DeadlineExceeded,
    SolveError, ModelInfeasibleError, ModelUnboundedError, ModelDegenerateError,
    NumericalFailureError, UserAbortError, SolveTimeoutError, BranchCutFailError,
    BranchCutBreakError, FeasibleFoundError, NoFeasibleFoundError, OutOfMemoryError,
    PresolvedError, ContractViolation,
)
from .log import Logger, NoopLogger, StandardLogger
from .model import Direction, Model
from .options import with_backend, with_logger, with_parameters, with_presolve, with_verbose
from .parameters import Method, Parameters
from .results import Solution, SolveResult
from .solver import solve
from .status import Outcome, SolveStatus
from .variable import Variable, VariableType

__version__ = "0.1.0"

__all__ = [
    'Model',
    'Direction',
    'Variable',
    'VariableType',
    'solve',
    'Parameters',
    'Method',
    'SolveResult',
    'Solution',
    'SolveStatus',
    'Outcome',
    'CancelContext',
    '__version__',
    # Bounds
    'Bound',
    'BoundType',
    'encode_bounds',
    'decode_bounds',
    # Options
    'with_backend',
    'with_logger',
    'with_parameters',
    'with_presolve',
    'with_verbose',
    # Logging
    'Logger',
    'NoopLogger',
    'StandardLogger',
    # Errors
    'LPError',
    'ValidationError',
    'UnsupportedOperationError',
    'OptionError',
    'BackendUnavailableError',
    'ModelClosedError',
    'StaleResultError',
    'ContextError',
    'Canceled',
    'DeadlineExceeded',
    'SolveError',
    'ModelInfeasibleError',
    'ModelUnboundedError',
    'ModelDegenerateError',
    'NumericalFailureError',
    'UserAbortError',
    'SolveTimeoutError',
    'BranchCutFailError',
    'BranchCutBreakError',
    'FeasibleFoundError',
    'NoFeasibleFoundError',
    'OutOfMemoryError',
    'PresolvedError',
    'ContractViolation',
]
