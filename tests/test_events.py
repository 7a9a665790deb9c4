"""
Tests for scan events and the console printer.
"""

from netsnmp.events import ConsoleEventPrinter, EventEmitter, EventType


class TestEventEmitter:

    def test_subscribe_all_and_filtered(self):
        emitter = EventEmitter()
        everything, found_only = [], []
        emitter.subscribe(everything.append)
        emitter.subscribe(found_only.append, EventType.HOST_FOUND)

        emitter.host_found("10.0.0.1", "sw1", "FOC1")
        emitter.host_failed("10.0.0.2", "socket closed")

        assert [e.event_type for e in found_only] == [EventType.HOST_FOUND]
        assert EventType.HOST_FAILED in [e.event_type for e in everything]
        assert EventType.STATS_UPDATED in [e.event_type for e in everything]

    def test_unsubscribe(self):
        emitter = EventEmitter()
        seen = []
        emitter.subscribe(seen.append)
        emitter.unsubscribe(seen.append)
        emitter.log("hello")
        assert seen == []

    def test_listener_error_does_not_propagate(self):
        emitter = EventEmitter()
        seen = []

        def broken(event):
            raise RuntimeError("listener bug")

        emitter.subscribe(broken)
        emitter.subscribe(seen.append)
        emitter.spec_rejected("10.0.0.0/16", "Invalid network format")

        assert len(seen) == 1
        assert seen[0].target == "10.0.0.0/16"

    def test_stats_per_pass(self):
        emitter = EventEmitter()
        emitter.pass_started("hosts", candidates=4)
        emitter.host_found("10.0.0.1", "sw1", "")
        emitter.host_failed("10.0.0.2", "boom")
        emitter.host_not_found()

        stats = emitter.stats
        assert stats.attempted == 3
        assert stats.found == 1
        assert stats.failed == 1
        assert stats.not_found == 1
        assert stats.progress == 0.75

        emitter.pass_started("neighbors", candidates=1)
        assert emitter.stats.attempted == 0
        assert emitter.stats.current_pass == "neighbors"


class TestConsoleEventPrinter:

    def test_prints_host_found(self, capsys):
        emitter = EventEmitter()
        emitter.subscribe(ConsoleEventPrinter(color=False).handle_event)

        emitter.host_found("10.0.0.1", "core-sw", "FOC1")

        out = capsys.readouterr().out
        assert "OK: 10.0.0.1 core-sw (FOC1)" in out

    def test_stats_are_silent(self, capsys):
        emitter = EventEmitter()
        emitter.subscribe(ConsoleEventPrinter(color=False).handle_event, EventType.STATS_UPDATED)
        emitter.pass_started("hosts", 3)
        assert capsys.readouterr().out == ""

    def test_long_errors_truncated(self, capsys):
        emitter = EventEmitter()
        emitter.subscribe(ConsoleEventPrinter(color=False).handle_event)
        emitter.host_failed("10.0.0.2", "x" * 100)
        out = capsys.readouterr().out
        assert "FAILED: 10.0.0.2 - " + "x" * 57 + "..." in out
