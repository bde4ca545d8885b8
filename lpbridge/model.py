"""
Model class for lpbridge
"""
import logging
import math
import threading
from enum import Enum
from typing import List, Optional, Sequence, Set, Union

import numpy as np
from scipy import sparse

from .bounds import Bound, BoundType, encode_bounds
from .errors import (
    ModelClosedError, OptionError, StaleResultError, UnsupportedOperationError,
    UserAbortError, ValidationError,
)
from .log import NoopLogger
from .matrix import SparseMatrix, _ensure_contiguous_float64
from .parameters import Method, Parameters
from .registry import registry
from .variable import Variable, VariableType

logger = logging.getLogger(__name__)

_BINARY_BOUND = Bound(BoundType.DOUBLE, 0.0, 1.0)


class Direction(Enum):
    """Optimization direction of the objective function"""
    MINIMIZE = 'minimize'
    MAXIMIZE = 'maximize'


class Model:
    """
    LP/MIP model backed by a native solver engine.

    The model represents a problem of the form:
        minimize or maximize    c'*x
        subject to              lower_i <= a_i'*x <= upper_i
                                l <= x <= u
                                x_j integer for integer/binary variables

    Variables and constraints are added incrementally; the constraint
    coefficients are collected host-side and handed to the engine right
    before each solve.

    Parameters
    ----------
    name : str, optional
        Problem name
    direction : Direction or str, optional
        ``Direction.MINIMIZE`` (default) or ``Direction.MAXIMIZE``
    *options
        Functional options from :mod:`lpbridge.options`, applied in order

    Notes
    -----
    Every operation takes the model's lock; :meth:`solve` holds it for the
    whole native call, so a model is safe to share between threads but
    never solves twice at once. Separate models solve in parallel.

    The native problem is released by :meth:`free` or on leaving a ``with``
    block. Garbage collection frees it too, but at an unspecified time.

    Examples
    --------
    >>> from lpbridge import Model, Direction
    >>>
    >>> with Model("example", Direction.MAXIMIZE) as model:
    ...     x = model.add_variable("x", lower=0, upper=4)
    ...     y = model.add_variable("y", lower=0, coefficient=2.0)
    ...     model.add_constraint(-float('inf'), 10, [x, y], [1.0, 2.0])
    ...     result = model.solve()
    ...     print(result.value(x), result.objective_value())
    """

    def __init__(self, name: str = "", direction: Union[Direction, str] = Direction.MINIMIZE, *options):
        self._lock = threading.RLock()
        self._engine = None
        self._freed = True
        self._engine_class = None
        self.logger = NoopLogger()
        self.parameters = Parameters()

        direction = Direction(direction)

        # options configure the host side only; the engine does not exist yet
        for option in options:
            try:
                option(self)
            except Exception as exc:
                raise OptionError(f"applying model option: {exc}") from exc

        if self._engine_class is None:
            from .backends import default_engine_class
            self._engine_class = default_engine_class()

        self._attach(self._engine_class())
        try:
            self._engine.check_name(name)
            self._engine.set_name(name)
            self._engine.set_maximize(direction == Direction.MAXIMIZE)
        except Exception:
            self.free()
            raise
        logger.debug("created %r", self)

    def _attach(self, engine):
        self._engine = engine
        self._freed = False
        self._variables: List[Variable] = []
        self._kinds: List[VariableType] = []
        self._names: Set[str] = set()
        self._matrix = SparseMatrix()
        self._constraint_count = 0
        self._revision = 0

    def _check_open(self):
        if self._freed:
            raise ModelClosedError("model has been freed")

    # problem

    @property
    def backend(self) -> str:
        """Name of the solver engine"""
        return self._engine_class.name

    @property
    def name(self) -> str:
        with self._lock:
            self._check_open()
            return self._engine.get_name()

    @property
    def direction(self) -> Direction:
        with self._lock:
            self._check_open()
            return Direction.MAXIMIZE if self._engine.is_maximize() else Direction.MINIMIZE

    def set_direction(self, direction: Union[Direction, str]) -> None:
        direction = Direction(direction)
        with self._lock:
            self._check_open()
            self._engine.set_maximize(direction == Direction.MAXIMIZE)

    @property
    def variable_count(self) -> int:
        """Number of variables (engine columns)"""
        with self._lock:
            self._check_open()
            return self._engine.column_count()

    @property
    def constraint_count(self) -> int:
        """Number of constraints stored; dropped unconstrained rows are not counted"""
        with self._lock:
            self._check_open()
            return self._constraint_count

    @property
    def variables(self) -> List[Variable]:
        with self._lock:
            self._check_open()
            return list(self._variables)

    def is_valid(self) -> bool:
        """Check if model is valid (not freed)"""
        return not self._freed

    # variables

    def _pick_name(self, name: str, index: int, pending: Set[str] = frozenset()) -> str:
        """Validate a user name or generate ``V<index>``; the caller reserves it."""
        if name:
            if name in self._names or name in pending:
                raise ValidationError(f"variable name {name!r} is already in use")
        else:
            name = candidate = f"V{index}"
            suffix = 1
            while candidate in self._names or candidate in pending:
                candidate = f"{name}_{suffix}"
                suffix += 1
            name = candidate
        self._engine.check_name(name)
        return name

    def _setup_column(self, col: int, name: str, kind: VariableType, coefficient: float, bound: Bound):
        self._engine.set_column_name(col, name)
        self._engine.set_column_type(col, kind)
        self._engine.set_column_bounds(col, _BINARY_BOUND if kind == VariableType.BINARY else bound)
        self._engine.set_objective_coefficient(col, coefficient)
        self._kinds.append(kind)
        variable = Variable(self, col - 1)
        self._variables.append(variable)
        return variable

    def add_variable(
        self,
        name: str = "",
        type: Union[VariableType, str] = VariableType.CONTINUOUS,
        coefficient: float = 1.0,
        lower: float = -math.inf,
        upper: float = math.inf,
    ) -> Variable:
        """
        Add a variable to the model.

        Parameters
        ----------
        name : str, optional
            Variable name, unique within the model. An empty name is
            replaced by ``V<index>`` (with a suffix if that is taken).
        type : VariableType, optional
            Variable kind (default: CONTINUOUS)
        coefficient : float, optional
            Objective coefficient (default: 1.0)
        lower, upper : float, optional
            Bounds (default: unbounded). Ignored for binary variables,
            which are always bounded by ``[0, 1]``.

        Returns
        -------
        Variable
            The new variable, with ``index == variable_count - 1``

        Raises
        ------
        ValidationError
            If ``name`` is already used by another variable of the model
        """
        kind = VariableType(type)
        bound = encode_bounds(lower, upper)
        coefficient = float(coefficient)
        with self._lock:
            self._check_open()
            index = self._engine.column_count()
            name = self._pick_name(name, index)
            col = self._engine.add_columns(1)
            self._names.add(name)
            variable = self._setup_column(col, name, kind, coefficient, bound)
            self._revision += 1
            return variable

    def add_binary_variable(self, name: str = "") -> Variable:
        """Add a variable restricted to 0 or 1, with objective coefficient 1."""
        return self.add_variable(name, VariableType.BINARY, 1.0, 0.0, 1.0)

    def add_integer_variable(self, name: str = "") -> Variable:
        """Add an unbounded integer variable with objective coefficient 1."""
        return self.add_variable(name, VariableType.INTEGER)

    def add_variables(
        self,
        count: int,
        name_prefix: str = "",
        type: Union[VariableType, str] = VariableType.CONTINUOUS,
        coefficient: float = 1.0,
        lower: float = -math.inf,
        upper: float = math.inf,
    ) -> List[Variable]:
        """
        Add ``count`` identical variables at once.

        Variables are named ``<name_prefix><index>``, or get generated names
        when ``name_prefix`` is empty.
        """
        if count < 0:
            raise UnsupportedOperationError("reducing the number of variables is not supported")
        kind = VariableType(type)
        bound = encode_bounds(lower, upper)
        coefficient = float(coefficient)
        with self._lock:
            self._check_open()
            first_index = self._engine.column_count()
            names: List[str] = []
            pending: Set[str] = set()
            for i in range(count):
                name = self._pick_name(f"{name_prefix}{first_index + i}" if name_prefix else "",
                                       first_index + i, pending)
                names.append(name)
                pending.add(name)
            first = self._engine.add_columns(count)
            self._names.update(pending)
            variables = [
                self._setup_column(first + i, names[i], kind, coefficient, bound)
                for i in range(count)
            ]
            self._revision += 1
            return variables

    def _check_variables(self, variables: Sequence[Variable]):
        count = len(self._kinds)
        for variable in variables:
            if not isinstance(variable, Variable):
                raise ValidationError(f"expected Variable, got {type(variable).__name__}")
            if variable.model is not self or not 0 <= variable.index < count:
                raise ValidationError(f"{variable!r} does not belong to this model")

    @staticmethod
    def _check_lengths(variables, coefficients):
        if len(variables) != len(coefficients):
            raise ValidationError(
                f"inconsistent number of variables and coefficients: "
                f"{len(variables)} != {len(coefficients)}"
            )

    def set_objective_function(self, coefficients: Sequence[float], variables: Sequence[Variable]) -> None:
        """
        Set the objective coefficients of ``variables``.

        Both sequences are validated before anything changes; variables not
        listed keep their current coefficient.
        """
        self._check_lengths(variables, coefficients)
        coefficients = [float(c) for c in coefficients]
        with self._lock:
            self._check_open()
            self._check_variables(variables)
            for variable, coefficient in zip(variables, coefficients):
                self._engine.set_objective_coefficient(variable.column, coefficient)

    # constraints

    def add_constraint(
        self,
        lower: float,
        upper: float,
        variables: Sequence[Variable],
        coefficients: Sequence[float],
    ) -> None:
        """
        Add the constraint ``lower <= sum(coefficients[k] * variables[k]) <= upper``.

        Pass an infinity for an unbounded side. A constraint unbounded on
        both sides is stored as an inert row by engines that support free
        rows and dropped by the others.

        Raises
        ------
        ValidationError
            If the sequences differ in length, a bound is NaN, or a variable
            belongs to another model. Nothing is changed in that case.
        """
        self._check_lengths(variables, coefficients)
        bound = encode_bounds(lower, upper)
        coefficients = [float(c) for c in coefficients]
        with self._lock:
            self._check_open()
            self._check_variables(variables)
            rows = self._engine.add_row(bound)
            columns = [v.column for v in variables]
            for row in rows:
                self._matrix.append_row(row, columns, coefficients)
            if rows:
                self._constraint_count += 1
            else:
                logger.debug("dropped unconstrained row on %s", self.backend)
            self._revision += 1

    def constraint_matrix(self) -> sparse.csr_matrix:
        """
        Return the constraint coefficients as a CSR matrix (rows x variables).

        Rows are the engine's rows, so on engines that split a two-sided
        constraint into two rows there are more rows than constraints.
        """
        with self._lock:
            self._check_open()
            return self._matrix.to_csr(self._engine.row_count(), self._engine.column_count())

    # variable attributes, called through Variable

    def _column_name(self, variable: Variable) -> str:
        with self._lock:
            self._check_open()
            return self._engine.column_name(variable.column)

    def _column_type(self, variable: Variable) -> VariableType:
        with self._lock:
            self._check_open()
            return self._kinds[variable.index]

    def _set_column_type(self, variable: Variable, kind: VariableType) -> None:
        with self._lock:
            self._check_open()
            self._engine.set_column_type(variable.column, kind)
            if kind == VariableType.BINARY:
                self._engine.set_column_bounds(variable.column, _BINARY_BOUND)
            self._kinds[variable.index] = kind

    def _column_bounds(self, variable: Variable):
        with self._lock:
            self._check_open()
            if self._kinds[variable.index] == VariableType.BINARY:
                return 0.0, 1.0
            return self._engine.column_bounds(variable.column)

    def _set_column_bounds(self, variable: Variable, lower: float, upper: float) -> None:
        bound = encode_bounds(lower, upper)
        with self._lock:
            self._check_open()
            if self._kinds[variable.index] == VariableType.BINARY:
                logger.debug("ignoring bounds for binary variable %d", variable.index)
                return
            self._engine.set_column_bounds(variable.column, bound)

    def _objective_coefficient(self, variable: Variable) -> float:
        with self._lock:
            self._check_open()
            return self._engine.objective_coefficient(variable.column)

    def _set_objective_coefficient(self, variable: Variable, coefficient: float) -> None:
        coefficient = float(coefficient)
        with self._lock:
            self._check_open()
            self._engine.set_objective_coefficient(variable.column, coefficient)

    # solving

    def _resolve_method(self, method: Optional[Method]) -> Method:
        method = Method(method) if method is not None else self.parameters.method
        if method == Method.AUTO:
            if any(kind != VariableType.CONTINUOUS for kind in self._kinds):
                return Method.BRANCH_CUT
            return Method.SIMPLEX
        return method

    def solve(self, method: Optional[Method] = None) -> 'SolveResult':
        """
        Solve the model.

        Parameters
        ----------
        method : Method, optional
            Overrides ``parameters.method`` for this call. The lp_solve
            engine always chooses on its own.

        Returns
        -------
        SolveResult
            Optimal or suboptimal solution, valid until the model changes

        Raises
        ------
        SolveError
            The subclass matching the failure (infeasible, unbounded, ...)
        ContractViolation
            The engine returned an undocumented outcome code
        """
        from .results import SolveResult
        from .solver import interpret_outcome

        with self._lock:
            self._check_open()
            if method is not None and not self._engine.selects_method:
                logger.debug("%s chooses its own method, ignoring %s", self.backend, method)
            method = self._resolve_method(method)
            self._engine.load_matrix(*self._matrix.triplets())
            logger.debug("solving %r with %s", self, method.value)

            with registry.registered(self) as log_handle:
                outcome = self._engine.solve(method, self.parameters, log_handle=log_handle)
            self._revision += 1

            logger.debug("%r finished: %s", self, outcome)
            status = interpret_outcome(outcome)
            return SolveResult(self, status, method, self._revision)

    def solve_with_context(self, ctx, method: Optional[Method] = None) -> 'SolveResult':
        """
        Solve the model, stopping early when ``ctx`` is cancelled or expires.

        The engine polls the context at its own cadence. If it stops with a
        solution already found the result is SUBOPTIMAL; otherwise the
        context's error (:class:`~lpbridge.errors.Canceled` or
        :class:`~lpbridge.errors.DeadlineExceeded`) is raised.

        Parameters
        ----------
        ctx : CancelContext
            Cancellation context
        method : Method, optional
            As for :meth:`solve`
        """
        error = ctx.error()
        if error is not None:
            raise error

        with self._lock:
            self._check_open()
            with registry.registered(ctx) as abort_handle:
                self._engine.set_abort_handle(abort_handle)
                try:
                    return self.solve(method)
                except UserAbortError as exc:
                    error = ctx.error()
                    if error is None:
                        raise
                    raise type(error)(str(error)) from exc
                finally:
                    self._engine.set_abort_handle(None)

    def _check_result(self, revision: int) -> None:
        self._check_open()
        if revision != self._revision:
            raise StaleResultError("model was modified after this result was produced")

    # lifecycle

    def clone(self) -> 'Model':
        """
        Deep copy of the model, engine problem included.

        Variables of the clone are new objects with the same indices; use
        :attr:`variables` of the clone to address them.
        """
        with self._lock:
            self._check_open()
            other = object.__new__(Model)
            other._lock = threading.RLock()
            other._engine_class = self._engine_class
            other.logger = self.logger
            other.parameters = self.parameters.copy()
            other._attach(self._engine.copy())
            other._kinds = list(self._kinds)
            other._names = set(self._names)
            other._matrix = self._matrix.copy()
            other._constraint_count = self._constraint_count
            other._variables = [Variable(other, i) for i in range(len(self._kinds))]
            return other

    @staticmethod
    def from_arrays(
        A: Union[np.ndarray, sparse.spmatrix],
        AL: np.ndarray,
        AU: np.ndarray,
        l: np.ndarray,
        u: np.ndarray,
        c: np.ndarray,
        integrality: Optional[np.ndarray] = None,
        *options,
        name: str = "",
        direction: Union[Direction, str] = Direction.MINIMIZE,
    ) -> 'Model':
        """
        Create model from constraint matrix and bounds arrays.

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
            Non-zero entries mark integer variables (length n)
        *options
            Model options
        name : str, optional
            Problem name
        direction : Direction, optional
            Optimization direction (default: MINIMIZE)

        Returns
        -------
        Model
            Model with one variable per column of ``A`` and one constraint
            per row
        """
        if sparse.issparse(A):
            A = sparse.csr_matrix(A)
        elif isinstance(A, np.ndarray):
            A = sparse.csr_matrix(A)
        else:
            raise TypeError("A must be a numpy array or scipy sparse matrix")
        m, n = A.shape

        AL = _ensure_contiguous_float64(AL)
        AU = _ensure_contiguous_float64(AU)
        l = _ensure_contiguous_float64(l)
        u = _ensure_contiguous_float64(u)
        c = _ensure_contiguous_float64(c)
        if integrality is None:
            integrality = np.zeros(n, dtype=bool)
        else:
            integrality = np.asarray(integrality).astype(bool)

        if len(AL) != m or len(AU) != m:
            raise ValidationError(f"AL and AU must have length {m} (number of constraints)")
        if len(l) != n or len(u) != n or len(c) != n or len(integrality) != n:
            raise ValidationError(f"l, u, c and integrality must have length {n} (number of variables)")

        model = Model(name, direction, *options)
        try:
            variables = [
                model.add_variable(
                    type=VariableType.INTEGER if integrality[j] else VariableType.CONTINUOUS,
                    coefficient=c[j], lower=l[j], upper=u[j],
                )
                for j in range(n)
            ]
            for i in range(m):
                start, end = A.indptr[i], A.indptr[i + 1]
                model.add_constraint(
                    AL[i], AU[i],
                    [variables[j] for j in A.indices[start:end]],
                    A.data[start:end],
                )
        except Exception:
            model.free()
            raise
        return model

    def free(self):
        """
        Free the model and release the native problem.

        After calling this method, the model cannot be used anymore.
        Calling it again has no effect.
        """
        with self._lock:
            if not self._freed:
                self._engine.destroy()
                self._freed = True
                logger.debug("freed model")

    def __del__(self):
        """Destructor - release the native problem if free() was never called"""
        if not getattr(self, '_freed', True):
            self.free()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - automatically free model"""
        self.free()
        return False

    def __repr__(self):
        if self._freed:
            return "<lpbridge.Model (freed)>"
        return (f"<lpbridge.Model backend={self._engine_class.name} "
                f"variables={len(self._kinds)} constraints={self._constraint_count}>")
