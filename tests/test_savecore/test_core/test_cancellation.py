import threading

import pytest

from savecore.core.cancellation import CancellationToken


def test_token_starts_uncancelled():
    token = CancellationToken()
    assert not token.is_cancelled
    token.raise_if_cancelled(lambda: RuntimeError("should not raise"))


def test_cancel_raises_from_factory():
    token = CancellationToken()
    token.cancel()

    assert token.is_cancelled
    with pytest.raises(RuntimeError, match="stopped"):
        token.raise_if_cancelled(lambda: RuntimeError("stopped"))


def test_wait_returns_when_cancelled_from_another_thread():
    token = CancellationToken()
    threading.Timer(0.05, token.cancel).start()

    assert token.wait(timeout=2.0)


def test_wait_times_out():
    assert not CancellationToken().wait(timeout=0.01)
