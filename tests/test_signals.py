"""Tests for Signal"""

import threading
from unittest.mock import Mock

from share_keeper.utils.signals import Signal


class TestSignal:
    """Test observer signals."""

    def test_emit_without_receivers(self):
        Signal("empty").emit("anything")

    def test_emit_passes_arguments(self):
        signal = Signal("args")
        receiver = Mock()
        signal.connect(receiver)

        signal.emit("a", 1)

        receiver.assert_called_once_with("a", 1)

    def test_disconnect(self):
        signal = Signal("disconnect")
        receiver = Mock()
        signal.connect(receiver)

        assert signal.disconnect(receiver) is True
        assert signal.disconnect(receiver) is False
        signal.emit()
        receiver.assert_not_called()

    def test_failing_receiver_does_not_stop_others(self):
        signal = Signal("failing")
        first = Mock(side_effect=RuntimeError("broken receiver"))
        second = Mock()
        signal.connect(first)
        signal.connect(second)

        signal.emit()

        first.assert_called_once()
        second.assert_called_once()

    def test_receiver_may_disconnect_itself(self):
        signal = Signal("once")
        calls = []

        def once():
            calls.append(1)
            signal.disconnect(once)

        signal.connect(once)
        signal.emit()
        signal.emit()

        assert calls == [1]

    def test_concurrent_connect_and_emit(self):
        signal = Signal("busy")
        count = Mock()
        signal.connect(count)

        def connect_many():
            for _ in range(200):
                signal.connect(lambda: None)

        def emit_many():
            for _ in range(200):
                signal.emit()

        threads = [threading.Thread(target=connect_many), threading.Thread(target=emit_many)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert count.call_count == 200
        assert signal.receivers == 201
