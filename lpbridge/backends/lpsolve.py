"""
lp_solve 5.5 solver engine (``liblpsolve55``) reached through ctypes

lp_solve has a single ``solve`` entry point that picks simplex or
branch-and-bound itself, native abort and log callbacks, and reports
results in a flat index space: 0 is the objective, ``1..Nrows`` are the
rows, and column ``j`` lives at ``Nrows + j``.

The presolver is never enabled: it deletes columns, which would shift the
flat addressing underneath the model's variables.
"""
import logging
import math
from ctypes import CFUNCTYPE, POINTER, c_char_p, c_double, c_int, c_ubyte, c_void_p

from ..bounds import Bound, BoundType
from ..callbacks import forward_message, should_abort
from ..status import Outcome, UnexpectedOutcome
from ..variable import VariableType
from .base import Engine, NativeLibrary, decode_name, encode_name

logger = logging.getLogger(__name__)

# lp_lib.h
FALSE = 0
TRUE = 1

LE = 1
GE = 2
EQ = 3

NEUTRAL = 0
NORMAL = 4

INFINITY = 1e30

_OUTCOMES = {
    -2: Outcome.NO_MEMORY,          # NOMEMORY
    0: Outcome.OPTIMAL,             # OPTIMAL
    1: Outcome.SUBOPTIMAL,          # SUBOPTIMAL
    2: Outcome.INFEASIBLE,          # INFEASIBLE
    3: Outcome.UNBOUNDED,           # UNBOUNDED
    4: Outcome.DEGENERATE,          # DEGENERATE
    5: Outcome.NUMERICAL_FAILURE,   # NUMFAILURE
    6: Outcome.USER_ABORT,          # USERABORT
    7: Outcome.TIMEOUT,             # TIMEOUT
    9: Outcome.PRESOLVED,           # PRESOLVED
    10: Outcome.BRANCH_CUT_FAIL,    # PROCFAIL
    11: Outcome.BRANCH_CUT_BREAK,   # PROCBREAK
    12: Outcome.FEASIBLE_FOUND,     # FEASFOUND
    13: Outcome.NO_FEASIBLE_FOUND,  # NOFEASFOUND
}

LOG_FUNC = CFUNCTYPE(None, c_void_p, c_void_p, c_char_p)
ABORT_FUNC = CFUNCTYPE(c_int, c_void_p, c_void_p)


def _set_function_prototypes(dll):
    P = c_void_p
    signatures = {
        'make_lp': (P, [c_int, c_int]),
        'delete_lp': (None, [P]),
        'copy_lp': (P, [P]),
        'set_lp_name': (c_ubyte, [P, c_char_p]),
        'get_lp_name': (c_char_p, [P]),
        'set_sense': (None, [P, c_ubyte]),
        'is_maxim': (c_ubyte, [P]),
        'get_Ncolumns': (c_int, [P]),
        'get_Nrows': (c_int, [P]),
        'add_columnex': (c_ubyte, [P, c_int, POINTER(c_double), POINTER(c_int)]),
        'add_constraintex': (c_ubyte, [P, c_int, POINTER(c_double), POINTER(c_int), c_int, c_double]),
        'set_col_name': (c_ubyte, [P, c_int, c_char_p]),
        'get_col_name': (c_char_p, [P, c_int]),
        'set_int': (c_ubyte, [P, c_int, c_ubyte]),
        'set_binary': (c_ubyte, [P, c_int, c_ubyte]),
        'set_unbounded': (c_ubyte, [P, c_int]),
        'set_bounds': (c_ubyte, [P, c_int, c_double, c_double]),
        'get_lowbo': (c_double, [P, c_int]),
        'get_upbo': (c_double, [P, c_int]),
        'set_obj': (c_ubyte, [P, c_int, c_double]),
        'get_mat': (c_double, [P, c_int, c_int]),
        'set_mat': (c_ubyte, [P, c_int, c_int, c_double]),
        'set_constr_type': (c_ubyte, [P, c_int, c_int]),
        'set_rh': (c_ubyte, [P, c_int, c_double]),
        'set_verbose': (None, [P, c_int]),
        'set_outputfile': (c_ubyte, [P, c_char_p]),
        'put_logfunc': (None, [P, LOG_FUNC, c_void_p]),
        'put_abortfunc': (None, [P, ABORT_FUNC, c_void_p]),
        'solve': (c_int, [P]),
        'get_objective': (c_double, [P]),
        'get_var_primalresult': (c_double, [P, c_int]),
        'get_var_dualresult': (c_double, [P, c_int]),
    }
    for name, (restype, argtypes) in signatures.items():
        func = getattr(dll, name)
        func.restype = restype
        func.argtypes = argtypes


library = NativeLibrary(
    env_var='LPBRIDGE_LPSOLVE_LIBRARY',
    names=('lpsolve55',),
    sonames=('liblpsolve55.so', 'liblpsolve55.dylib', 'lpsolve55.dll'),
    prototypes=_set_function_prototypes,
)


@LOG_FUNC
def _log_trampoline(lp, handle, text):
    forward_message(handle, text)


@ABORT_FUNC
def _abort_trampoline(lp, handle):
    return TRUE if should_abort(handle) else FALSE


def _restore_infinity(value: float) -> float:
    return value if abs(value) < INFINITY else math.copysign(math.inf, value)


class LpSolveEngine(Engine):
    """
    Problem object (``lprec``) of lp_solve.

    A constraint bounded on both sides becomes two rows (``>= lower`` and
    ``<= upper``) sharing the same coefficients; a constraint bounded on
    neither side is dropped.
    """

    name = 'lpsolve'
    supports_free_rows = False
    selects_method = False
    library = library

    @classmethod
    def available(cls) -> bool:
        return library.available()

    @classmethod
    def ensure_available(cls) -> None:
        library.load()

    def __init__(self, _lp=None):
        self._lib = library.load()
        self._lp = _lp if _lp is not None else self._lib.make_lp(0, 0)
        if not self._lp:
            raise MemoryError("lp_solve could not allocate a problem")
        # keep lp_solve's report functions off the process stdout
        self._lib.set_outputfile(self._lp, b"")
        self._lib.set_verbose(self._lp, NEUTRAL)

    def destroy(self) -> None:
        if self._lp is not None:
            self._lib.delete_lp(self._lp)
            self._lp = None

    def copy(self) -> 'LpSolveEngine':
        lp = self._lib.copy_lp(self._lp)
        if not lp:
            raise MemoryError("lp_solve could not copy the problem")
        return LpSolveEngine(_lp=lp)

    def set_name(self, name: str) -> None:
        self._lib.set_lp_name(self._lp, encode_name(name))

    def get_name(self) -> str:
        return decode_name(self._lib.get_lp_name(self._lp))

    def set_maximize(self, maximize: bool) -> None:
        self._lib.set_sense(self._lp, TRUE if maximize else FALSE)

    def is_maximize(self) -> bool:
        return bool(self._lib.is_maxim(self._lp))

    # columns

    def column_count(self) -> int:
        return self._lib.get_Ncolumns(self._lp)

    def _add_columns(self, count: int) -> int:
        first = self.column_count() + 1
        for _ in range(count):
            if not self._lib.add_columnex(self._lp, 0, None, None):
                raise MemoryError("lp_solve could not add a column")
        return first

    def set_column_name(self, col: int, name: str) -> None:
        self._lib.set_col_name(self._lp, col, encode_name(name))

    def column_name(self, col: int) -> str:
        return decode_name(self._lib.get_col_name(self._lp, col))

    def set_column_type(self, col: int, kind: VariableType) -> None:
        if kind == VariableType.BINARY:
            self._lib.set_binary(self._lp, col, TRUE)
        else:
            self._lib.set_int(self._lp, col, TRUE if kind == VariableType.INTEGER else FALSE)

    def set_column_bounds(self, col: int, bound: Bound) -> None:
        if bound.type == BoundType.FREE:
            self._lib.set_unbounded(self._lp, col)
        elif bound.type == BoundType.UPPER:
            self._lib.set_bounds(self._lp, col, -INFINITY, bound.upper)
        elif bound.type == BoundType.LOWER:
            self._lib.set_bounds(self._lp, col, bound.lower, INFINITY)
        else:
            self._lib.set_bounds(self._lp, col, bound.lower, bound.upper)

    def column_bounds(self, col: int):
        return (
            _restore_infinity(self._lib.get_lowbo(self._lp, col)),
            _restore_infinity(self._lib.get_upbo(self._lp, col)),
        )

    def set_objective_coefficient(self, col: int, value: float) -> None:
        self._lib.set_obj(self._lp, col, value)

    def objective_coefficient(self, col: int) -> float:
        return self._lib.get_mat(self._lp, 0, col)

    # rows

    def row_count(self) -> int:
        return self._lib.get_Nrows(self._lp)

    def _add_rows(self, count: int) -> int:
        first = self.row_count() + 1
        for _ in range(count):
            if not self._lib.add_constraintex(self._lp, 0, None, None, GE, -INFINITY):
                raise MemoryError("lp_solve could not add a row")
        return first

    def set_row_bounds(self, row: int, bound: Bound) -> None:
        if bound.type == BoundType.LOWER:
            kind, rhs = GE, bound.lower
        elif bound.type == BoundType.UPPER:
            kind, rhs = LE, bound.upper
        elif bound.type == BoundType.FIXED:
            kind, rhs = EQ, bound.lower
        elif bound.type == BoundType.FREE:
            kind, rhs = GE, -INFINITY
        else:
            raise ValueError("lp_solve rows take one side only; use add_row() for DOUBLE bounds")
        self._lib.set_constr_type(self._lp, row, kind)
        self._lib.set_rh(self._lp, row, rhs)

    def add_row(self, bound: Bound):
        if bound.type == BoundType.DOUBLE:
            upper = self.add_rows(1)
            self.set_row_bounds(upper, Bound(BoundType.UPPER, 0.0, bound.upper))
            lower = self.add_rows(1)
            self.set_row_bounds(lower, Bound(BoundType.LOWER, bound.lower, 0.0))
            return (upper, lower)
        return super().add_row(bound)

    def load_matrix(self, ia, ja, ar) -> None:
        # rows never lose coefficients, so setting every coalesced entry replaces the matrix
        for row, col, value in zip(ia[1:].tolist(), ja[1:].tolist(), ar[1:].tolist()):
            self._lib.set_mat(self._lp, row, col, value)

    # solving

    def set_abort_handle(self, handle) -> None:
        if handle is None:
            self._lib.put_abortfunc(self._lp, ABORT_FUNC(), None)
        else:
            self._lib.put_abortfunc(self._lp, _abort_trampoline, handle)

    def solve(self, method, parameters, *, log_handle=None):
        self._lib.set_verbose(self._lp, NORMAL if parameters.verbose else NEUTRAL)
        if log_handle is not None:
            self._lib.put_logfunc(self._lp, _log_trampoline, log_handle)
        try:
            ret = self._lib.solve(self._lp)
        finally:
            if log_handle is not None:
                self._lib.put_logfunc(self._lp, LOG_FUNC(), None)
        return _OUTCOMES.get(ret) or UnexpectedOutcome('lpsolve', ret)

    # results

    def _result_index(self, col: int) -> int:
        return self.row_count() + col

    def primal_value(self, col: int, method) -> float:
        return self._lib.get_var_primalresult(self._lp, self._result_index(col))

    def dual_value(self, col: int, method) -> float:
        return self._lib.get_var_dualresult(self._lp, self._result_index(col))

    def objective_value(self, method) -> float:
        return self._lib.get_objective(self._lp)
