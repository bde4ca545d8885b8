"""
Tests for solve dispatch, outcome translation, results and cancellation (in-memory engine)
"""
import threading
import time

import numpy as np
import pytest

import lpbridge
from conftest import FakeEngine, build_lp, build_mip
from lpbridge import (
    CancelContext, Canceled, ContractViolation, DeadlineExceeded, LPError, Method,
    ModelInfeasibleError, Outcome, SolveError, SolveStatus, StaleResultError,
    UserAbortError, ValidationError, VariableType, with_backend,
)
from lpbridge.errors import SOLVE_ERRORS
from lpbridge.registry import registry
from lpbridge.status import UnexpectedOutcome

delta = 1e-7


@pytest.fixture
def lp():
    model, variables = build_lp(with_backend(FakeEngine))
    yield model, variables
    model.free()


@pytest.fixture
def mip():
    model, variables = build_mip(with_backend(FakeEngine))
    yield model, variables
    model.free()


def test_solve_lp(lp):
    model, variables = lp
    res = model.solve()
    assert res.status == SolveStatus.OPTIMAL
    assert res.is_optimal()
    assert res.method == Method.SIMPLEX
    assert res.objective_value() == pytest.approx(13.0, abs=delta)
    for expected, x in zip([5, 4, 0], variables):
        assert res.value(x) == pytest.approx(expected, abs=delta)
        assert res.primal_value(x) == res.value(x)
    np.testing.assert_allclose(res.values(), [5, 4, 0], atol=delta)


def test_solve_mip(mip):
    model, variables = mip
    res = model.solve()
    assert res.status == SolveStatus.OPTIMAL
    assert res.method == Method.BRANCH_CUT
    assert res.objective_value() == pytest.approx(122.5, abs=delta)
    for expected, x in zip([40, 10.5, 19.5, 3], variables):
        assert res.value(x) == pytest.approx(expected, abs=delta)


def test_auto_method_follows_variable_kinds(lp):
    model, variables = lp
    engine = model._engine
    model.solve()
    variables[0].set_type(VariableType.BINARY)
    model.solve()
    assert engine.solve_calls == [Method.SIMPLEX, Method.BRANCH_CUT]


def test_explicit_method_overrides_parameters(mip):
    model, _ = mip
    model.parameters.method = Method.BRANCH_CUT
    res = model.solve(Method.SIMPLEX)
    assert res.method == Method.SIMPLEX
    assert model._engine.solve_calls == [Method.SIMPLEX]


def test_matrix_is_loaded_only_at_solve(lp):
    model, _ = lp
    ia, ja, ar = model._engine.triplets
    assert len(ar) == 1
    model.solve()
    ia, ja, ar = model._engine.triplets
    assert len(ar) == 10
    assert ia[0] == 0 and ja[0] == 0


@pytest.mark.parametrize("outcome", sorted(SOLVE_ERRORS, key=lambda o: o.value))
def test_failure_outcomes_raise(lp, outcome):
    model, _ = lp
    model._engine.script = [outcome]
    with pytest.raises(SOLVE_ERRORS[outcome]) as excinfo:
        model.solve()
    assert excinfo.value.outcome == outcome
    assert isinstance(excinfo.value, SolveError)


def test_error_messages():
    assert str(ModelInfeasibleError()) == "model is infeasible"
    assert str(SOLVE_ERRORS[Outcome.BRANCH_CUT_BREAK]()) == "branch-and-cut stopped at breakpoint"


def test_suboptimal_is_success(lp):
    model, _ = lp
    model._engine.script = [Outcome.SUBOPTIMAL]
    res = model.solve()
    assert res.status == SolveStatus.SUBOPTIMAL
    assert not res.is_optimal()


def test_unexpected_outcome_is_contract_violation(lp):
    model, _ = lp
    model._engine.script = [UnexpectedOutcome('fake', 99)]
    with pytest.raises(ContractViolation) as excinfo:
        model.solve()
    assert not isinstance(excinfo.value, LPError)
    assert excinfo.value.code == 99
    assert "99" in str(excinfo.value)


def test_result_goes_stale_after_mutation(lp):
    model, variables = lp
    res = model.solve()
    assert res.is_valid()
    model.add_variable()
    assert not res.is_valid()
    with pytest.raises(StaleResultError):
        res.value(variables[0])
    with pytest.raises(StaleResultError):
        res.objective_value()


def test_result_goes_stale_after_new_constraint_and_solve(lp):
    model, variables = lp
    first = model.solve()
    second = model.solve()
    with pytest.raises(StaleResultError):
        first.values()
    assert second.is_valid()
    model.add_constraint(0, 100, variables, [1, 1, 1])
    with pytest.raises(StaleResultError):
        second.dual_value(variables[0])


def test_result_rejects_foreign_variable(lp):
    model, _ = lp
    res = model.solve()
    with lpbridge.Model("other", "minimize", with_backend(FakeEngine)) as other:
        foreign = other.add_variable()
        with pytest.raises(ValidationError):
            res.value(foreign)


def test_result_summaries(lp):
    model, _ = lp
    res = model.solve()
    d = res.to_dict()
    assert d['status'] == 'optimal'
    assert d['method'] == 'simplex'
    assert d['objective_value'] == pytest.approx(13.0, abs=delta)
    assert len(d['x']) == 3
    assert "optimal" in str(res)
    assert "optimal" in repr(res)
    solution = res.solution()
    model.add_variable()
    # the detached solution survives model changes
    assert solution.objective_value == pytest.approx(13.0, abs=delta)


def test_solve_does_not_leak_handles(lp):
    model, _ = lp
    before = len(registry)
    model.solve()
    model.solve_with_context(CancelContext())
    assert len(registry) == before


def test_solve_with_live_context(lp):
    model, _ = lp
    res = model.solve_with_context(CancelContext.with_timeout(60.0))
    assert res.status == SolveStatus.OPTIMAL
    assert model._engine.abort_handle is None


def test_cancelled_context_skips_engine(lp):
    model, _ = lp
    ctx = CancelContext()
    ctx.cancel()
    with pytest.raises(Canceled):
        model.solve_with_context(ctx)
    assert model._engine.solve_calls == []


def test_expired_deadline_skips_engine(lp):
    model, _ = lp
    ctx = CancelContext.with_timeout(-1.0)
    with pytest.raises(DeadlineExceeded):
        model.solve_with_context(ctx)
    assert model._engine.solve_calls == []


def test_cancel_during_solve(lp):
    model, _ = lp
    ctx = CancelContext()
    model._engine.on_solve = ctx.cancel
    before = len(registry)
    with pytest.raises(Canceled) as excinfo:
        model.solve_with_context(ctx)
    assert isinstance(excinfo.value.__cause__, UserAbortError)
    assert model._engine.abort_handle is None
    assert len(registry) == before


def test_deadline_during_solve(lp):
    model, _ = lp
    ctx = CancelContext.with_timeout(0.05)
    model._engine.on_solve = lambda: time.sleep(0.1)
    with pytest.raises(DeadlineExceeded):
        model.solve_with_context(ctx)


def test_user_abort_without_context(lp):
    model, _ = lp
    model._engine.script = [Outcome.USER_ABORT]
    with pytest.raises(UserAbortError, match="aborted by user abort function"):
        model.solve()


def test_solves_on_one_model_are_serialized(lp):
    model, _ = lp
    state = {'active': 0, 'max': 0}
    guard = threading.Lock()

    def on_solve():
        with guard:
            state['active'] += 1
            state['max'] = max(state['max'], state['active'])
        time.sleep(0.02)
        with guard:
            state['active'] -= 1

    model._engine.on_solve = on_solve
    threads = [threading.Thread(target=model.solve) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert state['max'] == 1
    assert len(model._engine.solve_calls) == 4


def test_solve_convenience():
    A = np.array([[2.0, 1.0, 1.0], [4.0, 2.0, 3.0], [2.0, 5.0, 5.0]])
    solution = lpbridge.solve(
        A, np.zeros(3), np.array([14.0, 28.0, 30.0]),
        np.zeros(3), np.full(3, np.inf), np.array([1.0, 2.0, -1.0]),
        direction="maximize", backend=FakeEngine,
    )
    assert solution.status == SolveStatus.OPTIMAL
    assert solution.objective_value == pytest.approx(13.0, abs=delta)
    np.testing.assert_allclose(solution.x, [5, 4, 0], atol=delta)
