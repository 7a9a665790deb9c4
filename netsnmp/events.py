"""
NetSnmp - Scan Event System.

Structured events emitted by the discovery engine. Consumers are the CLI
(ConsoleEventPrinter) or any UI that wants live progress.

Event Flow:
    scan_started -> pass_started(hosts) -> spec_rejected* ->
    host_found/host_failed* -> pass_complete(hosts) ->
    pass_started(neighbors) -> neighbors_found* -> pass_complete(neighbors)
    -> scan_complete

NotFound (a host that simply does not speak SNMP) is not an event; it is
the expected outcome for most addresses and is only counted.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Scan event types."""
    # Scan lifecycle
    SCAN_STARTED = "scan_started"
    SCAN_COMPLETE = "scan_complete"

    # Pass lifecycle (hosts / neighbors)
    PASS_STARTED = "pass_started"
    PASS_COMPLETE = "pass_complete"

    # Per-target results
    SPEC_REJECTED = "spec_rejected"
    HOST_FOUND = "host_found"
    HOST_FAILED = "host_failed"
    NEIGHBORS_FOUND = "neighbors_found"

    # Aggregated updates
    STATS_UPDATED = "stats_updated"

    # Log messages
    LOG_MESSAGE = "log_message"


class LogLevel(str, Enum):
    """Log message severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass
class ScanStats:
    """Running counters for the current pass."""
    attempted: int = 0
    found: int = 0
    failed: int = 0
    neighbors: int = 0
    candidates: int = 0

    current_pass: str = ""
    status: str = "Ready"

    @property
    def not_found(self) -> int:
        return max(self.attempted - self.found - self.failed, 0)

    @property
    def progress(self) -> float:
        """Fraction of candidates processed, 0.0 to 1.0."""
        if self.candidates == 0:
            return 0.0
        return min(self.attempted / self.candidates, 1.0)


@dataclass
class ScanEvent:
    """
    Event emitted by the discovery engine.

    All events have a type, timestamp, and event-specific data.
    """
    event_type: EventType
    timestamp: datetime = field(default_factory=datetime.now)
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return self.data.get("message", "")

    @property
    def target(self) -> str:
        return self.data.get("target", "")


EventCallback = Callable[[ScanEvent], None]


class EventEmitter:
    """
    Event emitter for the discovery engine.

    Usage:
        emitter = EventEmitter()
        emitter.subscribe(printer.handle_event)
        emitter.subscribe(stats_handler, EventType.STATS_UPDATED)
    """

    def __init__(self):
        self._listeners: List[Tuple[EventCallback, Optional[EventType]]] = []
        self._stats = ScanStats()

    @property
    def stats(self) -> ScanStats:
        return self._stats

    def reset_stats(self) -> None:
        self._stats = ScanStats()

    def subscribe(
        self,
        callback: EventCallback,
        event_type: Optional[EventType] = None
    ) -> None:
        """
        Subscribe to events.

        Args:
            callback: Function to call with ScanEvent
            event_type: If specified, only receive this event type
        """
        self._listeners.append((callback, event_type))

    def unsubscribe(self, callback: EventCallback) -> None:
        """Remove a callback from listeners."""
        self._listeners = [
            (cb, et) for cb, et in self._listeners if cb != callback
        ]

    def clear(self) -> None:
        """Remove all listeners."""
        self._listeners.clear()

    def emit(self, event_type: EventType, **data) -> ScanEvent:
        """
        Emit an event to all subscribed listeners.

        A listener that raises is logged and skipped; the scan goes on.

        Returns:
            The emitted event
        """
        event = ScanEvent(event_type=event_type, timestamp=datetime.now(), data=data)

        for callback, filter_type in self._listeners:
            if filter_type is None or filter_type == event_type:
                try:
                    callback(event)
                except Exception as e:
                    logger.error(f"Event listener error: {e}")

        return event

    # =========================================================================
    # Convenience methods for common events
    # =========================================================================

    def scan_started(self, networks: List[str], communities: int, workers: int, mode: str) -> None:
        """Emit scan started event and reset stats."""
        self.reset_stats()
        self._stats.status = "Starting"
        self.emit(
            EventType.SCAN_STARTED,
            networks=list(networks),
            community_count=communities,
            workers=workers,
            mode=mode,
        )

    def scan_complete(self, hosts: int, neighbors: int, duration_seconds: float) -> None:
        self._stats.status = "Complete"
        self.emit(
            EventType.SCAN_COMPLETE,
            hosts=hosts,
            neighbors=neighbors,
            duration_seconds=duration_seconds,
        )

    def pass_started(self, kind: str, candidates: int) -> None:
        """Emit pass started event; counters restart for every pass."""
        self._stats.attempted = 0
        self._stats.found = 0
        self._stats.failed = 0
        self._stats.candidates = candidates
        self._stats.current_pass = kind
        self._stats.status = f"Scanning {kind}"

        self.emit(EventType.PASS_STARTED, kind=kind, candidates=candidates)
        self._emit_stats_update()

    def pass_complete(
        self,
        kind: str,
        attempted: int,
        succeeded: int,
        failed: int,
        duration_seconds: float,
    ) -> None:
        self._stats.status = f"{kind.capitalize()} complete"
        self.emit(
            EventType.PASS_COMPLETE,
            kind=kind,
            attempted=attempted,
            succeeded=succeeded,
            failed=failed,
            not_found=max(attempted - succeeded - failed, 0),
            duration_seconds=duration_seconds,
        )
        self._emit_stats_update()

    def spec_rejected(self, spec: str, error: str) -> None:
        self.emit(EventType.SPEC_REJECTED, target=spec, error=error)

    def host_found(self, address: str, hostname: str, serial_number: str) -> None:
        self._stats.attempted += 1
        self._stats.found += 1
        self.emit(
            EventType.HOST_FOUND,
            target=address,
            hostname=hostname,
            serial_number=serial_number,
        )
        self._emit_stats_update()

    def host_failed(self, address: str, error: str) -> None:
        """Emit host failed event (task error, not a silent host)."""
        self._stats.attempted += 1
        self._stats.failed += 1
        self.emit(EventType.HOST_FAILED, target=address, error=error)
        self._emit_stats_update()

    def host_not_found(self) -> None:
        """Count a silent host without emitting a per-host event."""
        self._stats.attempted += 1

    def neighbors_found(self, switch: str, protocol: str, count: int) -> None:
        self._stats.neighbors += count
        self.emit(
            EventType.NEIGHBORS_FOUND,
            target=switch,
            protocol=protocol,
            count=count,
        )
        self._emit_stats_update()

    def log(self, message: str, level: LogLevel = LogLevel.INFO, target: str = "") -> None:
        """Emit a log message for UIs."""
        self.emit(EventType.LOG_MESSAGE, message=message, level=level.value, target=target)

    def _emit_stats_update(self) -> None:
        self.emit(
            EventType.STATS_UPDATED,
            attempted=self._stats.attempted,
            found=self._stats.found,
            failed=self._stats.failed,
            not_found=self._stats.not_found,
            neighbors=self._stats.neighbors,
            candidates=self._stats.candidates,
            progress=self._stats.progress,
            current_pass=self._stats.current_pass,
            status=self._stats.status,
        )


# =========================================================================
# Console Event Printer (for CLI)
# =========================================================================

class ConsoleEventPrinter:
    """
    Prints scan events to the console.

    Usage:
        printer = ConsoleEventPrinter(verbose=True, color=True)
        emitter.subscribe(printer.handle_event)
    """

    # ANSI color codes
    COLORS = {
        "reset": "\033[0m",
        "bold": "\033[1m",
        "dim": "\033[2m",
        "red": "\033[31m",
        "green": "\033[32m",
        "yellow": "\033[33m",
        "blue": "\033[34m",
        "cyan": "\033[36m",
    }

    def __init__(self, verbose: bool = False, color: bool = True, show_timestamps: bool = False):
        self.verbose = verbose
        self.color = color
        self.show_timestamps = show_timestamps

    def _c(self, text: str, *colors: str) -> str:
        if not self.color:
            return text
        codes = "".join(self.COLORS.get(c, "") for c in colors)
        return f"{codes}{text}{self.COLORS['reset']}"

    def _timestamp(self, event: ScanEvent) -> str:
        if not self.show_timestamps:
            return ""
        return f"[{event.timestamp.strftime('%H:%M:%S')}] "

    def handle_event(self, event: ScanEvent) -> None:
        """Handle and print a scan event."""
        handler = getattr(self, f"_handle_{event.event_type.value}", None)
        if handler:
            handler(event)
        elif self.verbose:
            print(f"{self._timestamp(event)}[{event.event_type.value}] {event.data}")

    def _handle_scan_started(self, event: ScanEvent) -> None:
        data = event.data
        print()
        print(self._c("=" * 60, "cyan", "bold"))
        print(self._c("NETWORK SCAN STARTED", "cyan", "bold"))
        print(self._c("=" * 60, "cyan", "bold"))
        print(f"Networks: {', '.join(data['networks'])}")
        print(f"Communities: {data['community_count']}  Workers: {data['workers']}  "
              f"Mode: {data['mode']}")
        print()

    def _handle_scan_complete(self, event: ScanEvent) -> None:
        data = event.data
        print()
        print(self._c("#" * 60, "green", "bold"))
        print(self._c("SCAN COMPLETE", "green", "bold"))
        print(self._c("#" * 60, "green", "bold"))
        print(f"Hosts: {self._c(str(data['hosts']), 'green')}")
        print(f"Neighbors: {self._c(str(data['neighbors']), 'green')}")
        print(f"Duration: {data['duration_seconds']:.1f}s")
        print()

    def _handle_pass_started(self, event: ScanEvent) -> None:
        data = event.data
        print(self._c(
            f"Scanning {data['kind']}: {data['candidates']} candidates", "blue", "bold"
        ))

    def _handle_pass_complete(self, event: ScanEvent) -> None:
        data = event.data
        print(f"  {data['kind'].capitalize()} pass: "
              f"{self._c(str(data['succeeded']), 'green')} found, "
              f"{self._c(str(data['failed']), 'red')} failed, "
              f"{data['not_found']} no answer "
              f"({data['duration_seconds']:.1f}s)")

    def _handle_spec_rejected(self, event: ScanEvent) -> None:
        data = event.data
        status = self._c("INVALID", "yellow", "bold")
        print(f"{self._timestamp(event)}  {status}: {data['error']}")

    def _handle_host_found(self, event: ScanEvent) -> None:
        data = event.data
        status = self._c("OK", "green", "bold")
        serial = data.get('serial_number') or "no serial"
        print(f"{self._timestamp(event)}  {status}: {data['target']} "
              f"{data['hostname']} ({serial})")

    def _handle_host_failed(self, event: ScanEvent) -> None:
        data = event.data
        status = self._c("FAILED", "red", "bold")
        error = data.get('error', 'Unknown error')
        if len(error) > 60:
            error = error[:57] + "..."
        print(f"{self._timestamp(event)}  {status}: {data['target']} - {error}")

    def _handle_neighbors_found(self, event: ScanEvent) -> None:
        data = event.data
        status = self._c(data['protocol'].upper(), "cyan", "bold")
        print(f"{self._timestamp(event)}  {status}: {data['target']} "
              f"({data['count']} neighbors)")

    def _handle_log_message(self, event: ScanEvent) -> None:
        data = event.data
        level = data.get('level', 'info')
        message = data.get('message', '')

        level_colors = {
            'debug': ('dim',),
            'info': (),
            'warning': ('yellow',),
            'error': ('red',),
            'success': ('green',),
        }
        if level == 'debug' and not self.verbose:
            return
        prefix = f"[{level.upper()}] " if self.verbose else ""
        print(f"{self._timestamp(event)}{prefix}{self._c(message, *level_colors.get(level, ()))}")

    def _handle_stats_updated(self, event: ScanEvent) -> None:
        """Stats updates are silent in the CLI."""
        pass
