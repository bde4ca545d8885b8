"""
GLPK solver engine (``libglpk``) reached through ctypes

GLPK loads the constraint matrix from triplets, supports the five bound
types natively and has separate simplex (``glp_simplex``) and
branch-and-cut (``glp_intopt``) entry points. Results are addressed by
column number.

The abort poll only exists in branch-and-cut (``glp_ios_terminate`` from the
search callback); a running simplex cannot be interrupted.
"""
import ctypes
import logging
from ctypes import CFUNCTYPE, POINTER, byref, c_char_p, c_double, c_int, c_void_p

from ..bounds import Bound, BoundType, decode_bounds
from ..callbacks import forward_message, should_abort
from ..errors import UnsupportedOperationError, ValidationError
from ..parameters import Method
from ..status import Outcome, UnexpectedOutcome
from ..variable import VariableType
from .base import Engine, NativeLibrary, as_pointer, decode_name, encode_name

logger = logging.getLogger(__name__)

# glpk.h
GLP_MIN = 1
GLP_MAX = 2

GLP_CV = 1
GLP_IV = 2
GLP_BV = 3

GLP_FR = 1
GLP_LO = 2
GLP_UP = 3
GLP_DB = 4
GLP_FX = 5

GLP_UNDEF = 1
GLP_FEAS = 2
GLP_INFEAS = 3
GLP_NOFEAS = 4
GLP_OPT = 5
GLP_UNBND = 6

GLP_ON = 1
GLP_OFF = 0

GLP_MSG_OFF = 0
GLP_MSG_ON = 2

GLP_EBADB = 0x01
GLP_ESING = 0x02
GLP_ECOND = 0x03
GLP_EBOUND = 0x04
GLP_EFAIL = 0x05
GLP_EITLIM = 0x08
GLP_ETMLIM = 0x09
GLP_ENOPFS = 0x0A
GLP_ENODFS = 0x0B
GLP_EROOT = 0x0C
GLP_ESTOP = 0x0D
GLP_EMIPGAP = 0x0E

MAX_NAME_LENGTH = 255

_BOUND_TYPES = {
    BoundType.FREE: GLP_FR,
    BoundType.LOWER: GLP_LO,
    BoundType.UPPER: GLP_UP,
    BoundType.DOUBLE: GLP_DB,
    BoundType.FIXED: GLP_FX,
}
_GLP_BOUND_TYPES = {v: k for k, v in _BOUND_TYPES.items()}

_KINDS = {
    VariableType.CONTINUOUS: GLP_CV,
    VariableType.INTEGER: GLP_IV,
    VariableType.BINARY: GLP_BV,
}

# glp_simplex return codes other than 0
_SIMPLEX_ERRORS = {
    GLP_EBADB: Outcome.NUMERICAL_FAILURE,
    GLP_ESING: Outcome.NUMERICAL_FAILURE,
    GLP_ECOND: Outcome.NUMERICAL_FAILURE,
    GLP_EBOUND: Outcome.INFEASIBLE,
    GLP_EFAIL: Outcome.NUMERICAL_FAILURE,
    GLP_EITLIM: Outcome.TIMEOUT,
    GLP_ETMLIM: Outcome.TIMEOUT,
    GLP_ENOPFS: Outcome.INFEASIBLE,
    GLP_ENODFS: Outcome.UNBOUNDED,
}

# glp_get_status after a successful glp_simplex
_SIMPLEX_STATUS = {
    GLP_OPT: Outcome.OPTIMAL,
    GLP_FEAS: Outcome.SUBOPTIMAL,
    GLP_INFEAS: Outcome.INFEASIBLE,
    GLP_NOFEAS: Outcome.INFEASIBLE,
    GLP_UNBND: Outcome.UNBOUNDED,
    GLP_UNDEF: Outcome.NUMERICAL_FAILURE,
}

# glp_intopt return codes that cannot leave an integer solution behind
_INTOPT_ERRORS = {
    GLP_EBOUND: Outcome.INFEASIBLE,
    GLP_ENOPFS: Outcome.INFEASIBLE,
    GLP_ENODFS: Outcome.UNBOUNDED,
    GLP_EROOT: Outcome.BRANCH_CUT_FAIL,
    GLP_EFAIL: Outcome.BRANCH_CUT_FAIL,
}

# glp_intopt return codes that stop the search early; an integer feasible
# solution found before the stop makes the outcome SUBOPTIMAL
_INTOPT_STOPS = {
    GLP_ESTOP: Outcome.USER_ABORT,
    GLP_ETMLIM: Outcome.TIMEOUT,
    GLP_EMIPGAP: Outcome.NO_FEASIBLE_FOUND,
}

_MIP_STATUS = {
    GLP_OPT: Outcome.OPTIMAL,
    GLP_FEAS: Outcome.SUBOPTIMAL,
    GLP_NOFEAS: Outcome.INFEASIBLE,
    GLP_UNDEF: Outcome.NO_FEASIBLE_FOUND,
}


class SimplexControl(ctypes.Structure):
    """``glp_smcp``; only the leading members are used, the rest is reserved space."""
    _fields_ = [
        ('msg_lev', c_int),
        ('meth', c_int),
        ('pricing', c_int),
        ('r_test', c_int),
        ('tol_bnd', c_double),
        ('tol_dj', c_double),
        ('tol_piv', c_double),
        ('obj_ll', c_double),
        ('obj_ul', c_double),
        ('it_lim', c_int),
        ('tm_lim', c_int),
        ('out_frq', c_int),
        ('out_dly', c_int),
        ('presolve', c_int),
        ('_reserved', c_double * 48),
    ]


SEARCH_CALLBACK = CFUNCTYPE(None, c_void_p, c_void_p)
TERMINAL_HOOK = CFUNCTYPE(c_int, c_void_p, c_char_p)


class IntegerControl(ctypes.Structure):
    """``glp_iocp``; only the leading members are used, the rest is reserved space."""
    _fields_ = [
        ('msg_lev', c_int),
        ('br_tech', c_int),
        ('bt_tech', c_int),
        ('tol_int', c_double),
        ('tol_obj', c_double),
        ('tm_lim', c_int),
        ('out_frq', c_int),
        ('out_dly', c_int),
        ('cb_func', SEARCH_CALLBACK),
        ('cb_info', c_void_p),
        ('cb_size', c_int),
        ('pp_tech', c_int),
        ('mip_gap', c_double),
        ('mir_cuts', c_int),
        ('gmi_cuts', c_int),
        ('cov_cuts', c_int),
        ('clq_cuts', c_int),
        ('presolve', c_int),
        ('_reserved', c_double * 48),
    ]


def _set_function_prototypes(dll):
    P = c_void_p
    signatures = {
        'glp_create_prob': (P, []),
        'glp_delete_prob': (None, [P]),
        'glp_copy_prob': (None, [P, P, c_int]),
        'glp_set_prob_name': (None, [P, c_char_p]),
        'glp_get_prob_name': (c_char_p, [P]),
        'glp_set_obj_dir': (None, [P, c_int]),
        'glp_get_obj_dir': (c_int, [P]),
        'glp_add_rows': (c_int, [P, c_int]),
        'glp_add_cols': (c_int, [P, c_int]),
        'glp_get_num_rows': (c_int, [P]),
        'glp_get_num_cols': (c_int, [P]),
        'glp_set_col_name': (None, [P, c_int, c_char_p]),
        'glp_get_col_name': (c_char_p, [P, c_int]),
        'glp_set_col_kind': (None, [P, c_int, c_int]),
        'glp_set_col_bnds': (None, [P, c_int, c_int, c_double, c_double]),
        'glp_set_row_bnds': (None, [P, c_int, c_int, c_double, c_double]),
        'glp_get_col_type': (c_int, [P, c_int]),
        'glp_get_col_lb': (c_double, [P, c_int]),
        'glp_get_col_ub': (c_double, [P, c_int]),
        'glp_set_obj_coef': (None, [P, c_int, c_double]),
        'glp_get_obj_coef': (c_double, [P, c_int]),
        'glp_load_matrix': (None, [P, c_int, POINTER(c_int), POINTER(c_int), POINTER(c_double)]),
        'glp_init_smcp': (None, [POINTER(SimplexControl)]),
        'glp_simplex': (c_int, [P, POINTER(SimplexControl)]),
        'glp_init_iocp': (None, [POINTER(IntegerControl)]),
        'glp_intopt': (c_int, [P, POINTER(IntegerControl)]),
        'glp_get_status': (c_int, [P]),
        'glp_mip_status': (c_int, [P]),
        'glp_get_obj_val': (c_double, [P]),
        'glp_mip_obj_val': (c_double, [P]),
        'glp_get_col_prim': (c_double, [P, c_int]),
        'glp_get_col_dual': (c_double, [P, c_int]),
        'glp_mip_col_val': (c_double, [P, c_int]),
        'glp_ios_terminate': (None, [c_void_p]),
        'glp_term_hook': (None, [TERMINAL_HOOK, c_void_p]),
    }
    for name, (restype, argtypes) in signatures.items():
        func = getattr(dll, name)
        func.restype = restype
        func.argtypes = argtypes


library = NativeLibrary(
    env_var='LPBRIDGE_GLPK_LIBRARY',
    names=('glpk',),
    sonames=('libglpk.so.40', 'libglpk.so.36', 'libglpk.so', 'libglpk.dylib', 'glpk.dll'),
    prototypes=_set_function_prototypes,
)


@TERMINAL_HOOK
def _terminal_trampoline(info, text):
    forward_message(info, text)
    return 1  # suppress GLPK's own stdout output


@SEARCH_CALLBACK
def _search_trampoline(tree, info):
    if should_abort(info):
        library.load().glp_ios_terminate(tree)


class GLPKEngine(Engine):
    """Problem object (``glp_prob``) of the GNU Linear Programming Kit."""

    name = 'glpk'
    supports_free_rows = True
    selects_method = True
    library = library

    @classmethod
    def available(cls) -> bool:
        return library.available()

    @classmethod
    def ensure_available(cls) -> None:
        library.load()

    def __init__(self, _prob=None):
        self._lib = library.load()
        self._prob = _prob if _prob is not None else self._lib.glp_create_prob()
        self._abort_handle = None

    def destroy(self) -> None:
        if self._prob is not None:
            self._lib.glp_delete_prob(self._prob)
            self._prob = None

    def copy(self) -> 'GLPKEngine':
        prob = self._lib.glp_create_prob()
        self._lib.glp_copy_prob(prob, self._prob, GLP_ON)
        return GLPKEngine(_prob=prob)

    def set_name(self, name: str) -> None:
        self._lib.glp_set_prob_name(self._prob, self._checked_name(name))

    def get_name(self) -> str:
        return decode_name(self._lib.glp_get_prob_name(self._prob))

    def set_maximize(self, maximize: bool) -> None:
        self._lib.glp_set_obj_dir(self._prob, GLP_MAX if maximize else GLP_MIN)

    def is_maximize(self) -> bool:
        return self._lib.glp_get_obj_dir(self._prob) == GLP_MAX

    def check_name(self, name: str) -> None:
        self._checked_name(name)

    @staticmethod
    def _checked_name(name: str) -> bytes:
        # longer names are a fatal error inside GLPK
        raw = encode_name(name)
        if len(raw) > MAX_NAME_LENGTH:
            raise ValidationError(f"GLPK names are limited to {MAX_NAME_LENGTH} bytes: {name[:40]!r}...")
        return raw

    # columns

    def column_count(self) -> int:
        return self._lib.glp_get_num_cols(self._prob)

    def _add_columns(self, count: int) -> int:
        if count == 0:
            return self.column_count() + 1
        return self._lib.glp_add_cols(self._prob, count)

    def set_column_name(self, col: int, name: str) -> None:
        self._lib.glp_set_col_name(self._prob, col, self._checked_name(name))

    def column_name(self, col: int) -> str:
        return decode_name(self._lib.glp_get_col_name(self._prob, col))

    def set_column_type(self, col: int, kind: VariableType) -> None:
        self._lib.glp_set_col_kind(self._prob, col, _KINDS[kind])

    def set_column_bounds(self, col: int, bound: Bound) -> None:
        self._lib.glp_set_col_bnds(self._prob, col, _BOUND_TYPES[bound.type], bound.lower, bound.upper)

    def column_bounds(self, col: int):
        bound_type = _GLP_BOUND_TYPES[self._lib.glp_get_col_type(self._prob, col)]
        return decode_bounds(
            bound_type,
            self._lib.glp_get_col_lb(self._prob, col),
            self._lib.glp_get_col_ub(self._prob, col),
        )

    def set_objective_coefficient(self, col: int, value: float) -> None:
        self._lib.glp_set_obj_coef(self._prob, col, value)

    def objective_coefficient(self, col: int) -> float:
        return self._lib.glp_get_obj_coef(self._prob, col)

    # rows

    def row_count(self) -> int:
        return self._lib.glp_get_num_rows(self._prob)

    def _add_rows(self, count: int) -> int:
        if count == 0:
            return self.row_count() + 1
        return self._lib.glp_add_rows(self._prob, count)

    def set_row_bounds(self, row: int, bound: Bound) -> None:
        self._lib.glp_set_row_bnds(self._prob, row, _BOUND_TYPES[bound.type], bound.lower, bound.upper)

    def load_matrix(self, ia, ja, ar) -> None:
        self._lib.glp_load_matrix(
            self._prob, len(ar) - 1,
            as_pointer(ia, c_int), as_pointer(ja, c_int), as_pointer(ar, c_double),
        )

    # solving

    def set_abort_handle(self, handle) -> None:
        self._abort_handle = handle

    def solve(self, method, parameters, *, log_handle=None):
        if log_handle is not None:
            self._lib.glp_term_hook(_terminal_trampoline, log_handle)
        try:
            if method == Method.SIMPLEX:
                return self._simplex(parameters, parameters.presolve)
            return self._branch_cut(parameters)
        finally:
            if log_handle is not None:
                self._lib.glp_term_hook(TERMINAL_HOOK(), None)

    def _simplex(self, parameters, presolve):
        parm = SimplexControl()
        self._lib.glp_init_smcp(byref(parm))
        parm.msg_lev = GLP_MSG_ON if parameters.verbose else GLP_MSG_OFF
        parm.presolve = GLP_ON if presolve else GLP_OFF

        ret = self._lib.glp_simplex(self._prob, byref(parm))
        if ret != 0:
            return _SIMPLEX_ERRORS.get(ret) or UnexpectedOutcome('glpk', ret)

        status = self._lib.glp_get_status(self._prob)
        return _SIMPLEX_STATUS.get(status) or UnexpectedOutcome('glpk', status)

    def _branch_cut(self, parameters):
        if not parameters.presolve:
            # without the presolver glp_intopt starts from an optimal LP basis
            relaxed = self._simplex(parameters, False)
            if relaxed != Outcome.OPTIMAL:
                logger.debug("LP relaxation ended with %s", relaxed)
                return relaxed

        parm = IntegerControl()
        self._lib.glp_init_iocp(byref(parm))
        parm.msg_lev = GLP_MSG_ON if parameters.verbose else GLP_MSG_OFF
        parm.presolve = GLP_ON if parameters.presolve else GLP_OFF
        if self._abort_handle is not None:
            parm.cb_func = _search_trampoline
            parm.cb_info = self._abort_handle

        ret = self._lib.glp_intopt(self._prob, byref(parm))
        status = self._lib.glp_mip_status(self._prob)

        if ret == 0:
            return _MIP_STATUS.get(status) or UnexpectedOutcome('glpk', status)
        if ret in _INTOPT_STOPS:
            return Outcome.SUBOPTIMAL if status == GLP_FEAS else _INTOPT_STOPS[ret]
        return _INTOPT_ERRORS.get(ret) or UnexpectedOutcome('glpk', ret)

    # results

    def primal_value(self, col: int, method) -> float:
        if method == Method.BRANCH_CUT:
            return self._lib.glp_mip_col_val(self._prob, col)
        return self._lib.glp_get_col_prim(self._prob, col)

    def dual_value(self, col: int, method) -> float:
        if method == Method.BRANCH_CUT:
            raise UnsupportedOperationError("GLPK has no dual values for branch-and-cut solutions")
        return self._lib.glp_get_col_dual(self._prob, col)

    def objective_value(self, method) -> float:
        if method == Method.BRANCH_CUT:
            return self._lib.glp_mip_obj_val(self._prob)
        return self._lib.glp_get_obj_val(self._prob)
