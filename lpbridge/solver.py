"""
High-level solver interface for lpbridge
"""
import logging
from typing import Optional, Union

import numpy as np
from scipy import sparse

from .errors import SOLVE_ERRORS, ContractViolation
from .model import Direction, Model
from .options import with_backend, with_parameters
from .parameters import Parameters
from .results import Solution
from .status import SolveStatus, UnexpectedOutcome

logger = logging.getLogger(__name__)


def interpret_outcome(outcome) -> SolveStatus:
    """
    Translate an engine outcome into a status or an exception.

    Returns
    -------
    SolveStatus
        For the success tier (OPTIMAL, SUBOPTIMAL)

    Raises
    ------
    SolveError
        The subclass registered for a failure-tier outcome
    ContractViolation
        For an :class:`~lpbridge.status.UnexpectedOutcome`
    """
    if isinstance(outcome, UnexpectedOutcome):
        logger.error("%s returned undocumented code %d", outcome.backend, outcome.code)
        raise ContractViolation(outcome.backend, outcome.code)
    if outcome.is_success:
        return SolveStatus(outcome.value)
    raise SOLVE_ERRORS[outcome]()


def solve(
    A: Union[np.ndarray, sparse.spmatrix],
    AL: np.ndarray,
    AU: np.ndarray,
    l: np.ndarray,
    u: np.ndarray,
    c: np.ndarray,
    integrality: Optional[np.ndarray] = None,
    direction: Union[Direction, str] = Direction.MINIMIZE,
    parameters: Optional[Parameters] = None,
    backend: Optional[str] = None,
) -> Solution:
    """
    Convenience function to solve an LP/MIP in one call.

    The problem is:
        minimize or maximize    c'*x
        subject to              AL <= A*x <= AU
                                l <= x <= u
                                x_j integer where integrality[j] is non-zero

    Parameters
    ----------
    A : np.ndarray or scipy.sparse matrix
        Constraint matrix (m x n)
    AL : np.ndarray
        Lower bounds for constraints (length m)
    AU : np.ndarray
        Upper bounds for constraints (length m)
    l : np.ndarray
        Lower bounds for variables (length n)
    u : np.ndarray
        Upper bounds for variables (length n)
    c : np.ndarray
        Objective coefficients (length n)
    integrality : np.ndarray, optional
        Marks integer variables (length n)
    direction : Direction, optional
        Optimization direction (default: MINIMIZE)
    parameters : Parameters, optional
        Solver parameters. If None, default parameters are used.
    backend : str, optional
        Solver engine name. If None, the default engine is used.

    Returns
    -------
    Solution
        Status, method, objective value and primal solution vector

    Examples
    --------
    >>> import numpy as np
    >>> import lpbridge
    >>>
    >>> A = np.array([[1.0, 2.0], [3.0, 1.0]])
    >>> AL = np.array([-np.inf, -np.inf])
    >>> AU = np.array([10.0, 12.0])
    >>> l = np.array([0.0, 0.0])
    >>> u = np.array([np.inf, np.inf])
    >>> c = np.array([-3.0, -5.0])
    >>>
    >>> solution = lpbridge.solve(A, AL, AU, l, u, c)
    >>> print(f"Objective: {solution.objective_value}")
    """
    options = []
    if parameters is not None:
        options.append(with_parameters(parameters))
    if backend is not None:
        options.append(with_backend(backend))

    with Model.from_arrays(A, AL, AU, l, u, c, integrality, *options, direction=direction) as model:
        return model.solve().solution()
