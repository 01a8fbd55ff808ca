"""Tests for SignalManager (PyDispatcher wrapper)."""

import logging

import pytest

from http_request.core import signals
from http_request.core.signals import SignalManager, resolve_signal


class Sender:
    pass


@pytest.fixture
def manager():
    manager = SignalManager(Sender())
    yield manager
    manager.disconnect_all()


class TestResolveSignal:

    @pytest.mark.parametrize("name", signals.ALL_SIGNALS)
    def test_known(self, name):
        assert resolve_signal(name) == name

    def test_fail_alias(self):
        assert resolve_signal("fail") == signals.error

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown signal"):
            resolve_signal("progress")


class TestSendCatchLog:

    def test_receiver_gets_declared_arguments(self, manager):
        received = []
        manager.connect(lambda chunk: received.append(chunk), signals.chunk)
        manager.send_catch_log(signals.chunk, chunk=b"data")
        assert received == [b"data"]

    def test_request_argument_is_sender(self, manager):
        received = []
        manager.connect(lambda request: received.append(request), signals.abort)
        manager.send_catch_log(signals.abort)
        assert received == [manager.sender]

    def test_responses_returned(self, manager):
        manager.connect(lambda state: state.upper(), signals.state)
        responses = manager.send_catch_log(signals.state, state="pending")
        assert [result for _, result in responses] == ["PENDING"]

    def test_exception_caught_and_logged(self, manager, caplog):
        def broken(data):
            raise RuntimeError("observer bug")

        received = []
        manager.connect(broken, signals.data)
        manager.connect(lambda data: received.append(data), signals.data)

        with caplog.at_level(logging.ERROR, logger="http_request.core.signals"):
            responses = manager.send_catch_log(signals.data, data=1)

        assert received == [1]
        assert isinstance(responses[0][1], RuntimeError)
        assert "Error caught on signal handler" in caplog.text

    def test_other_sender_not_notified(self, manager):
        other = SignalManager(Sender())
        received = []
        other.connect(lambda state: received.append(state), signals.state)
        try:
            manager.send_catch_log(signals.state, state="pending")
        finally:
            other.disconnect_all()
        assert received == []

    def test_closure_kept_alive(self, manager):
        """Receivers are held strongly."""
        received = []

        def subscribe():
            manager.connect(lambda state: received.append(state), signals.state)

        subscribe()
        manager.send_catch_log(signals.state, state="pending")
        assert received == ["pending"]


class TestDisconnect:

    def test_disconnect(self, manager):
        received = []

        def receiver(state):
            received.append(state)

        manager.connect(receiver, signals.state)
        manager.disconnect(receiver, signals.state)
        manager.send_catch_log(signals.state, state="pending")
        assert received == []

    def test_disconnect_unknown_receiver(self, manager):
        manager.disconnect(lambda state: None, signals.state)

    def test_disconnect_all(self, manager):
        received = []
        manager.connect(lambda state: received.append(state), signals.state)
        manager.connect(lambda chunk: received.append(chunk), signals.chunk)

        manager.disconnect_all()
        manager.send_catch_log(signals.state, state="pending")
        manager.send_catch_log(signals.chunk, chunk=b"x")

        assert received == []
