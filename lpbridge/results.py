"""
Results class for lpbridge solves
"""
from typing import Any, Dict, NamedTuple

import numpy as np

from .errors import ValidationError
from .parameters import Method
from .status import SolveStatus
from .variable import Variable


class Solution(NamedTuple):
    """Detached copy of a solution, independent of the model's lifetime."""
    status: SolveStatus
    method: Method
    objective_value: float
    x: np.ndarray


class SolveResult:
    """
    Solution of a successful solve.

    Values are read from the solver engine on every call, so a result is
    only valid while the model is unchanged: after another
    ``add_variable``, ``add_constraint`` or ``solve`` every accessor raises
    :class:`~lpbridge.errors.StaleResultError`. Use :meth:`solution` to
    keep the values around.

    Attributes
    ----------
    status : SolveStatus
        OPTIMAL, or SUBOPTIMAL when the engine stopped early with a
        feasible solution
    method : Method
        Strategy the model dispatched to (SIMPLEX or BRANCH_CUT)

    Methods
    -------
    is_optimal()
        Check if solution is optimal
    to_dict()
        Convert results to dictionary
    """

    def __init__(self, model, status: SolveStatus, method: Method, revision: int):
        self._model = model
        self._revision = revision
        self.status = status
        self.method = method

    def is_optimal(self) -> bool:
        """Check if solution is optimal"""
        return self.status == SolveStatus.OPTIMAL

    def is_valid(self) -> bool:
        """Check if the model is unchanged since this result was produced"""
        return self._model.is_valid() and self._model._revision == self._revision

    def _column(self, variable: Variable) -> int:
        if not isinstance(variable, Variable) or variable.model is not self._model:
            raise ValidationError(f"{variable!r} does not belong to the solved model")
        return variable.column

    def primal_value(self, variable: Variable) -> float:
        """Value of ``variable`` in the solution"""
        with self._model._lock:
            self._model._check_result(self._revision)
            return self._model._engine.primal_value(self._column(variable), self.method)

    def value(self, variable: Variable) -> float:
        """Shorthand for :meth:`primal_value`"""
        return self.primal_value(variable)

    def dual_value(self, variable: Variable) -> float:
        """
        Dual value (reduced cost) of ``variable``.

        Raises
        ------
        UnsupportedOperationError
            If the engine has no dual values for this kind of solution
            (GLPK branch-and-cut)
        """
        with self._model._lock:
            self._model._check_result(self._revision)
            return self._model._engine.dual_value(self._column(variable), self.method)

    def objective_value(self) -> float:
        """
        Value of the objective function.

        Only optimal if :attr:`status` is OPTIMAL.
        """
        with self._model._lock:
            self._model._check_result(self._revision)
            return self._model._engine.objective_value(self.method)

    def values(self) -> np.ndarray:
        """Primal values of all variables, indexed like ``model.variables``"""
        with self._model._lock:
            self._model._check_result(self._revision)
            engine = self._model._engine
            return np.array(
                [engine.primal_value(col, self.method) for col in range(1, engine.column_count() + 1)],
                dtype=np.float64,
            )

    def solution(self) -> Solution:
        with self._model._lock:
            return Solution(self.status, self.method, self.objective_value(), self.values())

    def __repr__(self):
        return (f"SolveResult(status='{self.status.value}', "
                f"method='{self.method.value}', "
                f"valid={self.is_valid()})")

    def __str__(self):
        lines = [
            "lpbridge Solve Result",
            "=" * 50,
            f"Status:          {self.status.value}",
            f"Method:          {self.method.value}",
        ]
        if self.is_valid():
            x = self.values()
            lines.append(f"Objective:       {self.objective_value():.6e}")
            lines.append(f"Variables:       {len(x)}")
            if len(x):
                lines.append(f"||x||:           {np.linalg.norm(x):.6e}")
        else:
            lines.append("(model changed since this solve)")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert results to dictionary"""
        solution = self.solution()
        return {
            'status': solution.status.value,
            'method': solution.method.value,
            'objective_value': solution.objective_value,
            'x': solution.x.tolist(),
        }
