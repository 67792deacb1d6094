"""Tests for CancellationTokenSource and CancellationToken."""
from pingproc.core.cancellation import CancellationTokenSource


def test_cancel_runs_callbacks_once():
    source = CancellationTokenSource()
    calls = []
    source.token.register(lambda: calls.append("a"))
    source.cancel()
    source.cancel()
    assert calls == ["a"]
    assert source.cancelled is True


def test_register_after_cancel_runs_immediately():
    source = CancellationTokenSource()
    source.cancel()
    calls = []
    source.token.register(lambda: calls.append("late"))
    assert calls == ["late"]


def test_unregistered_callback_does_not_run():
    source = CancellationTokenSource()
    calls = []
    reg_id = source.token.register(lambda: calls.append("x"))
    source.token.unregister(reg_id)
    source.cancel()
    assert calls == []


def test_failing_callback_does_not_stop_others():
    source = CancellationTokenSource()
    calls = []

    def explode():
        raise RuntimeError("boom")

    source.token.register(explode)
    source.token.register(lambda: calls.append("after"))
    source.cancel()
    assert calls == ["after"]


def test_linked_source_follows_parent():
    parent = CancellationTokenSource()
    child = CancellationTokenSource(linked_to=parent.token)
    parent.cancel()
    assert child.cancelled is True


def test_child_cancel_does_not_reach_parent():
    parent = CancellationTokenSource()
    child = CancellationTokenSource(linked_to=parent.token)
    child.cancel()
    assert parent.cancelled is False


def test_closed_child_is_detached():
    parent = CancellationTokenSource()
    child = CancellationTokenSource(linked_to=parent.token)
    child.close()
    parent.cancel()
    assert child.cancelled is False


def test_wait_times_out():
    assert CancellationTokenSource().token.wait(0.01) is False
