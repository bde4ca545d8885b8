"""
Tests for cancellation contexts
"""
import time

import pytest

from lpbridge import CancelContext, Canceled, DeadlineExceeded


def test_live_context():
    ctx = CancelContext()
    assert ctx.error() is None
    assert not ctx.done
    assert ctx.remaining() is None


def test_cancel():
    ctx = CancelContext()
    ctx.cancel()
    assert isinstance(ctx.error(), Canceled)
    assert str(ctx.error()) == "context canceled"
    assert ctx.done


def test_cancel_is_sticky():
    ctx = CancelContext.with_timeout(-1.0)
    assert isinstance(ctx.error(), DeadlineExceeded)
    ctx.cancel()
    assert isinstance(ctx.error(), DeadlineExceeded)


def test_expired_deadline():
    ctx = CancelContext.with_deadline(time.monotonic() - 1.0)
    error = ctx.error()
    assert isinstance(error, DeadlineExceeded)
    assert str(error) == "context deadline exceeded"
    assert ctx.remaining() == 0.0


def test_future_deadline():
    ctx = CancelContext.with_timeout(60.0)
    assert ctx.error() is None
    assert 0.0 < ctx.remaining() <= 60.0


def test_child_follows_parent():
    parent = CancelContext()
    child = parent.child()
    grandchild = child.child()
    parent.cancel()
    assert isinstance(child.error(), Canceled)
    assert isinstance(grandchild.error(), Canceled)


def test_child_of_done_parent_is_done():
    parent = CancelContext()
    parent.cancel()
    assert parent.child().done


def test_child_cancel_does_not_affect_parent():
    parent = CancelContext()
    child = parent.child()
    child.cancel()
    assert child.done
    assert not parent.done


def test_child_inherits_earlier_deadline():
    parent = CancelContext.with_timeout(-1.0)
    child = CancelContext.with_timeout(60.0, parent=parent)
    assert isinstance(child.error(), DeadlineExceeded)


def test_errors_are_lp_errors():
    from lpbridge import ContextError, LPError
    assert issubclass(Canceled, ContextError)
    assert issubclass(DeadlineExceeded, LPError)
    with pytest.raises(ContextError):
        raise DeadlineExceeded()


def test_finished_children_are_released():
    root = CancelContext()
    cancelled = [root.child() for _ in range(100)]
    expired = [CancelContext.with_timeout(-1.0, parent=root) for _ in range(100)]
    live = root.child()
    assert len(root._children) == 201

    for ctx in cancelled:
        ctx.cancel()
    for ctx in expired:
        assert isinstance(ctx.error(), DeadlineExceeded)

    assert root._children == [live]
    assert not root.done
    root.cancel()
    assert isinstance(live.error(), Canceled)
    assert root._children == []
