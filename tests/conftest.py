"""
Shared fixtures: an in-memory solver engine and the native backends
"""
import numpy as np
import pytest
from scipy import sparse
from scipy.optimize import Bounds, LinearConstraint, milp

from lpbridge import Direction, Model, with_backend
from lpbridge.backends import ENGINES
from lpbridge.backends.base import Engine
from lpbridge.bounds import BoundType, decode_bounds
from lpbridge.callbacks import forward_message, should_abort
from lpbridge.parameters import Method
from lpbridge.status import Outcome
from lpbridge.variable import VariableType

_MILP_OUTCOMES = {0: Outcome.OPTIMAL, 2: Outcome.INFEASIBLE, 3: Outcome.UNBOUNDED}


class FakeEngine(Engine):
    """
    Engine keeping the problem in Python lists and solving it with
    :func:`scipy.optimize.milp`.

    ``script`` holds outcomes returned (in order) instead of solving;
    ``on_solve`` is called at the start of every solve.
    """

    name = 'fake'
    supports_free_rows = True
    selects_method = True

    @classmethod
    def available(cls):
        return True

    def __init__(self):
        self.prob_name = ""
        self.maximize = False
        self.columns = []
        self.rows = []
        self.triplets = (np.zeros(1, np.int32), np.zeros(1, np.int32), np.zeros(1))
        self.abort_handle = None
        self.destroyed = False
        self.script = []
        self.on_solve = None
        self.solve_calls = []
        self.x = None
        self.objective = None

    def destroy(self):
        assert not self.destroyed, "destroy() called twice"
        self.destroyed = True

    def copy(self):
        other = FakeEngine()
        other.prob_name = self.prob_name
        other.maximize = self.maximize
        other.columns = [dict(c) for c in self.columns]
        other.rows = list(self.rows)
        return other

    def set_name(self, name):
        self.prob_name = name

    def get_name(self):
        return self.prob_name

    def set_maximize(self, maximize):
        self.maximize = maximize

    def is_maximize(self):
        return self.maximize

    def column_count(self):
        return len(self.columns)

    def _add_columns(self, count):
        first = len(self.columns) + 1
        for _ in range(count):
            self.columns.append({'name': '', 'kind': VariableType.CONTINUOUS,
                                 'bound': (BoundType.FIXED, 0.0, 0.0), 'obj': 0.0})
        return first

    def set_column_name(self, col, name):
        self.columns[col - 1]['name'] = name

    def column_name(self, col):
        return self.columns[col - 1]['name']

    def set_column_type(self, col, kind):
        self.columns[col - 1]['kind'] = kind

    def set_column_bounds(self, col, bound):
        self.columns[col - 1]['bound'] = tuple(bound)

    def column_bounds(self, col):
        return decode_bounds(*self.columns[col - 1]['bound'])

    def set_objective_coefficient(self, col, value):
        self.columns[col - 1]['obj'] = value

    def objective_coefficient(self, col):
        return self.columns[col - 1]['obj']

    def row_count(self):
        return len(self.rows)

    def _add_rows(self, count):
        first = len(self.rows) + 1
        self.rows.extend([(BoundType.FREE, 0.0, 0.0)] * count)
        return first

    def set_row_bounds(self, row, bound):
        self.rows[row - 1] = tuple(bound)

    def load_matrix(self, ia, ja, ar):
        assert ia[0] == 0 and ja[0] == 0
        self.triplets = (ia.copy(), ja.copy(), ar.copy())

    def set_abort_handle(self, handle):
        self.abort_handle = handle

    def solve(self, method, parameters, *, log_handle=None):
        self.solve_calls.append(method)
        if parameters.verbose:
            forward_message(log_handle, b"fake engine: solving\n")
        if self.on_solve is not None:
            self.on_solve()
        if self.abort_handle is not None and should_abort(self.abort_handle):
            return Outcome.USER_ABORT
        if self.script:
            return self.script.pop(0)
        return self._milp(method)

    def _milp(self, method):
        n, m = len(self.columns), len(self.rows)
        c = np.array([col['obj'] for col in self.columns])
        if self.maximize:
            c = -c
        col_bounds = np.array([decode_bounds(*col['bound']) for col in self.columns]).reshape(n, 2)
        integrality = np.array([
            0 if col['kind'] == VariableType.CONTINUOUS or method == Method.SIMPLEX else 1
            for col in self.columns
        ])
        ia, ja, ar = self.triplets
        constraints = []
        if m:
            A = sparse.coo_matrix((ar[1:], (ia[1:] - 1, ja[1:] - 1)), shape=(m, n))
            row_bounds = np.array([decode_bounds(*row) for row in self.rows])
            constraints = [LinearConstraint(A, row_bounds[:, 0], row_bounds[:, 1])]

        res = milp(c, constraints=constraints or None, integrality=integrality,
                   bounds=Bounds(col_bounds[:, 0], col_bounds[:, 1]))
        outcome = _MILP_OUTCOMES.get(res.status, Outcome.NUMERICAL_FAILURE)
        if outcome == Outcome.OPTIMAL:
            self.x = res.x
            self.objective = -res.fun if self.maximize else res.fun
        return outcome

    def primal_value(self, col, method):
        return float(self.x[col - 1])

    def dual_value(self, col, method):
        return 0.0

    def objective_value(self, method):
        return float(self.objective)


class RecordingLogger:
    def __init__(self):
        self.messages = []

    def print(self, *values):
        self.messages.append(" ".join(str(v) for v in values))


@pytest.fixture
def fake_model():
    model = Model("test", Direction.MINIMIZE, with_backend(FakeEngine))
    yield model
    model.free()


@pytest.fixture(params=sorted(ENGINES))
def backend(request):
    """Name of each native engine whose library can be loaded"""
    if not ENGINES[request.param].available():
        pytest.skip(f"{request.param} shared library not available")
    return request.param


def build_lp(*options):
    """maximize x1 + 2*x2 - x3; optimum (5, 4, 0) with objective 13"""
    model = Model("lp", Direction.MAXIMIZE, *options)
    x1 = model.add_variable("x1", VariableType.CONTINUOUS, 1, 0, np.inf)
    x2 = model.add_variable("x2", VariableType.CONTINUOUS, 2, 0, np.inf)
    x3 = model.add_variable("x3", VariableType.CONTINUOUS, -1, 0, np.inf)
    model.add_constraint(0, 14, [x1, x2, x3], [2, 1, 1])
    model.add_constraint(0, 28, [x1, x2, x3], [4, 2, 3])
    model.add_constraint(0, 30, [x1, x2, x3], [2, 5, 5])
    return model, [x1, x2, x3]


def build_mip(*options):
    """Optimum (40, 10.5, 19.5, 3) with objective 122.5"""
    model = Model("mip", Direction.MAXIMIZE, *options)
    x1 = model.add_variable("x1", VariableType.CONTINUOUS, 1, 0, 40)
    x2 = model.add_variable("x2", VariableType.CONTINUOUS, 2, 0, np.inf)
    x3 = model.add_variable("x3", VariableType.CONTINUOUS, 3, 0, np.inf)
    x4 = model.add_variable("x4", VariableType.INTEGER, 1, 2, 3)
    model.add_constraint(0, 20, [x1, x2, x3, x4], [-1, 1, 1, 10])
    model.add_constraint(0, 30, [x1, x2, x3], [1, -3, 1])
    model.add_constraint(0, 0, [x2, x4], [1, -3.5])
    return model, [x1, x2, x3, x4]
