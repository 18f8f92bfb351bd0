import pytest

from hekeys.core.errors import LifecycleError
from hekeys.core.lifecycle import KeyLifecycle, KeyState


def test_full_custody_sequence():
    lifecycle = KeyLifecycle()
    for operation in ("generate", "publish", "purge", "load", "activate"):
        lifecycle.advance(operation)

    assert lifecycle.ready
    assert lifecycle.history == [
        KeyState.UNINITIALIZED,
        KeyState.GENERATED,
        KeyState.SERIALIZED,
        KeyState.PURGED,
        KeyState.LOADED,
        KeyState.READY,
    ]


@pytest.mark.parametrize("path, final", [
    (["generate", "activate"], KeyState.READY),
    (["generate", "publish", "activate"], KeyState.READY),
    (["load", "activate"], KeyState.READY),
    (["generate", "publish", "purge"], KeyState.PURGED),
])
def test_driver_paths(path, final):
    lifecycle = KeyLifecycle()
    for operation in path:
        lifecycle.advance(operation)
    assert lifecycle.state is final


@pytest.mark.parametrize("path, bad", [
    ([], "publish"),
    ([], "purge"),
    ([], "activate"),
    (["generate"], "generate"),
    (["generate"], "load"),
    (["generate", "publish", "purge"], "activate"),
    (["load", "activate"], "load"),
])
def test_forbidden_transitions(path, bad):
    lifecycle = KeyLifecycle()
    for operation in path:
        lifecycle.advance(operation)

    state = lifecycle.state
    with pytest.raises(LifecycleError, match=bad):
        lifecycle.advance(bad)
    assert lifecycle.state is state


def test_failed_step_does_not_advance():
    lifecycle = KeyLifecycle()

    def fail():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        lifecycle.step("generate", fail)
    assert lifecycle.state is KeyState.UNINITIALIZED

    assert lifecycle.step("generate", lambda x: x * 2, 21) == 42
    assert lifecycle.state is KeyState.GENERATED


def test_step_checks_before_running():
    lifecycle = KeyLifecycle()
    calls = []
    with pytest.raises(LifecycleError):
        lifecycle.step("purge", calls.append, "ran")
    assert calls == []
