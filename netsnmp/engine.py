"""
NetSnmp - Concurrent Discovery Engine.

Orchestrates the two discovery passes:

- Host pass: expand network specs, optionally filter to live addresses
  with ICMP, then probe every candidate over SNMP for its identity.
- Neighbor pass: walk the CDP/LLDP tables of switch-like hosts.

Every fan-out goes through one WorkerPool bounded by scan_workers.
Individual failures never abort a pass; records reach the sink as soon
as their task completes. Only invalid input (no communities, a
non-positive worker cap or timeout, an unknown protocol, nothing but
malformed specs) is fatal, and it is raised before any task starts.

Usage:
    engine = DiscoveryEngine(ScanConfig(networks=("10.0.0.0/24",)))
    engine.events.subscribe(ConsoleEventPrinter().handle_event)

    hosts = await engine.discover_hosts()
    neighbors = await engine.discover_neighbors(hosts.records)
"""

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .config import ScanConfig
from .events import EventEmitter, LogLevel
from .exceptions import ConfigError, TransportError
from .liveness import LivenessProbe, PingProbe
from .models import BatchResult, HostRecord, NeighborProtocol, NeighborRecord
from .oids import SYSTEM
from .ranges import expand_all
from .sink import CollectingSink, ResultSink
from .snmp.neighbors import NeighborTableDecoder
from .snmp.parsers import parse_value
from .snmp.probe import OidSet, SnmpProbe
from .snmp.transport import PysnmpTransport, Transport
from .workers import WorkOutcome, WorkerPool

logger = logging.getLogger(__name__)


CandidateFilter = Callable[[HostRecord], bool]
ConnectivityAttempt = Tuple[str, Optional[str], Optional[str]]


def is_switch_candidate(host: HostRecord) -> bool:
    """
    Default neighbor-pass heuristic: hosts that reported a serial number.

    Access points, printers and servers rarely expose a chassis serial
    through the queried OIDs; switches do.
    """
    return bool(host.serial_number)


class DiscoveryEngine:
    """
    Host and neighbor discovery over a bounded worker pool.

    Attributes:
        config: Validated, immutable scan settings
        transport: SNMP transport shared by the probe and the decoder
        liveness: ICMP probe, or None when unavailable
        sink: Destination for every discovered record
        events: Event emitter for CLI/GUI progress
    """

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        transport: Optional[Transport] = None,
        liveness: Optional[LivenessProbe] = None,
        sink: Optional[ResultSink] = None,
        events: Optional[EventEmitter] = None,
        oid_set: Optional[OidSet] = None,
        candidate_filter: CandidateFilter = is_switch_candidate,
    ):
        """
        Initialize discovery engine.

        Raises:
            ConfigError: if the configuration cannot run a scan
        """
        self.config = (config or ScanConfig()).validate()
        self.transport = transport or PysnmpTransport()
        self.liveness = liveness
        if self.liveness is None and self.config.scan_mode == 'icmp':
            ping = PingProbe()
            if ping.available:
                self.liveness = ping
        self.sink = sink or CollectingSink()
        self.events = events or EventEmitter()
        self.candidate_filter = candidate_filter

        retries = self.config.snmp_retries
        if oid_set is None:
            oid_set = OidSet.full() if self.config.collect_details else OidSet()
        self.probe = SnmpProbe(self.transport, oid_set, retries)
        self.decoder = NeighborTableDecoder(self.transport, retries)

    def _pool(self) -> WorkerPool:
        return WorkerPool(self.config.scan_workers, delay=self.config.scan_delay / 1000)

    def _log(self, message: str, level: LogLevel = LogLevel.INFO, target: str = "") -> None:
        """Log and mirror to the event stream."""
        logger.log(getattr(logging, level.value.upper(), logging.INFO), message)
        self.events.log(message, level, target)

    # =========================================================================
    # Host pass
    # =========================================================================

    async def filter_alive(self, addresses: Sequence[str]) -> List[str]:
        """
        Keep the addresses that answer ICMP, in input order.

        Without a usable liveness probe, or with scan_mode "snmp", every
        address is a candidate.
        """
        if self.config.scan_mode != 'icmp':
            return list(addresses)
        if self.liveness is None:
            self._log("ping not available; querying every address over SNMP", LogLevel.WARNING)
            return list(addresses)

        timeout_ms = self.config.ping_timeout_ms

        async def _check(address: str) -> bool:
            return await self.liveness.is_alive(address, timeout_ms)

        outcomes = await self._pool().run(addresses, _check)
        alive = {o.item for o in outcomes if o.ok and o.result}
        logger.info(f"{len(alive)} of {len(addresses)} addresses answered ping")
        return [a for a in addresses if a in alive]

    async def discover_hosts(self, networks: Optional[Iterable[str]] = None) -> BatchResult:
        """
        Run the host pass.

        Args:
            networks: Network specs; defaults to config.networks

        Returns:
            BatchResult whose records are HostRecords

        Raises:
            ConfigError: no networks given
            ParseError: every spec is malformed
        """
        specs = list(networks) if networks is not None else list(self.config.networks)
        if not specs:
            raise ConfigError("No networks to scan")

        result = BatchResult(kind="hosts", started_at=datetime.now())

        addresses, errors = expand_all(specs)
        for error in errors:
            result.invalid_specs.append(error.spec)
            self.events.spec_rejected(error.spec, str(error))
        if errors and len(errors) == len(specs):
            raise errors[0]

        candidates = await self.filter_alive(addresses)
        self.events.pass_started("hosts", len(candidates))
        logger.info(
            f"Scanning {len(candidates)} candidates with {self.config.scan_workers} workers"
        )

        def _collect(outcome: WorkOutcome) -> None:
            result.attempted += 1
            if not outcome.ok:
                result.failed += 1
                self.events.host_failed(outcome.item, f"{type(outcome.error).__name__}: {outcome.error}")
                return

            record = outcome.result
            if record is None:
                self.events.host_not_found()
                return

            result.succeeded += 1
            result.records.append(record)
            self.sink.add_host(record)
            self.events.host_found(record.address, record.hostname, record.serial_number)

        async def _probe(address: str) -> Optional[HostRecord]:
            return await self.probe.query(
                address, self.config.communities, self.config.snmp_timeout
            )

        await self._pool().run(candidates, _probe, on_outcome=_collect)

        result.completed_at = datetime.now()
        self.events.pass_complete(
            "hosts", result.attempted, result.succeeded, result.failed,
            result.duration_seconds or 0.0,
        )
        logger.info(
            f"Host pass complete: {result.succeeded} found, {result.failed} failed, "
            f"{result.not_found} no answer"
        )
        return result

    # =========================================================================
    # Neighbor pass
    # =========================================================================

    def _credentials_for(self, host: HostRecord) -> List[str]:
        """Configured communities, the one that answered the host probe first."""
        communities = list(self.config.communities)
        if host.community and host.community in communities:
            communities.remove(host.community)
            communities.insert(0, host.community)
        elif host.community:
            communities.insert(0, host.community)
        return communities

    async def neighbors_of(
        self,
        host: HostRecord,
        protocols: Sequence[NeighborProtocol],
    ) -> List[NeighborRecord]:
        """
        Neighbors of one switch.

        Protocols are tried in order, and for each protocol every
        community in order; the first non-empty table wins.
        """
        for protocol in protocols:
            for community in self._credentials_for(host):
                records = await self.decoder.decode(
                    host.address, community, protocol, self.config.snmp_timeout
                )
                if records:
                    return records
        logger.debug(f"No neighbors found on {host.address}")
        return []

    async def discover_neighbors(
        self,
        hosts: Iterable[HostRecord],
        protocols: Optional[Iterable[str]] = None,
    ) -> BatchResult:
        """
        Run the neighbor pass over the switch-like hosts.

        Args:
            hosts: Host records, typically from discover_hosts()
            protocols: Protocols in priority order; defaults to config

        Returns:
            BatchResult whose records are NeighborRecords. succeeded
            counts switches with at least one neighbor.

        Raises:
            ConfigError: unknown or empty protocol list
        """
        try:
            selected = tuple(
                NeighborProtocol.parse(p)
                for p in (protocols if protocols is not None else self.config.discovery_protocols)
            )
        except ValueError as e:
            raise ConfigError(str(e)) from None
        if not selected:
            raise ConfigError("No discovery protocols selected")

        candidates = [h for h in hosts if self.candidate_filter(h)]
        result = BatchResult(kind="neighbors", started_at=datetime.now())
        self.events.pass_started("neighbors", len(candidates))

        def _collect(outcome: WorkOutcome) -> None:
            result.attempted += 1
            host = outcome.item
            if not outcome.ok:
                result.failed += 1
                self.events.host_failed(host.address, f"{type(outcome.error).__name__}: {outcome.error}")
                return

            records = outcome.result or []
            if not records:
                self.events.host_not_found()
                return

            result.succeeded += 1
            for record in records:
                result.records.append(record)
                self.sink.add_neighbor(record)
            self.events.neighbors_found(host.address, records[0].protocol.value, len(records))

        async def _walk(host: HostRecord) -> List[NeighborRecord]:
            return await self.neighbors_of(host, selected)

        await self._pool().run(candidates, _walk, on_outcome=_collect)

        result.completed_at = datetime.now()
        self.events.pass_complete(
            "neighbors", result.attempted, result.succeeded, result.failed,
            result.duration_seconds or 0.0,
        )
        logger.info(
            f"Neighbor pass complete: {len(result.records)} neighbors from "
            f"{result.succeeded} of {len(candidates)} switches"
        )
        return result

    # =========================================================================
    # Combined scan / diagnostics
    # =========================================================================

    async def scan(self, networks: Optional[Iterable[str]] = None) -> Tuple[BatchResult, BatchResult]:
        """Host pass followed by the neighbor pass over its records."""
        specs = list(networks) if networks is not None else list(self.config.networks)
        started = datetime.now()
        self.events.scan_started(
            specs, len(self.config.communities), self.config.scan_workers, self.config.scan_mode
        )

        hosts = await self.discover_hosts(specs)
        neighbors = await self.discover_neighbors(hosts.records)

        self.events.scan_complete(
            len(hosts.records), len(neighbors.records),
            (datetime.now() - started).total_seconds(),
        )
        return hosts, neighbors

    async def test_connectivity(self, address: str) -> List[ConnectivityAttempt]:
        """
        Try sysName.0 with each community until one answers.

        Returns:
            (community, sysName or None, failure reason or None) for
            every community tried
        """
        attempts: List[ConnectivityAttempt] = []
        for community in self.config.communities:
            try:
                values = await self.transport.get_many(
                    address, community, [SYSTEM.SYS_NAME],
                    self.config.snmp_timeout, self.config.snmp_retries,
                )
            except TransportError as e:
                logger.debug(f"Transport error on {address} with '{community}': {e}")
                attempts.append((community, None, str(e)))
                continue

            if not values:
                attempts.append((community, None, "no response (timeout)"))
                continue

            hostname = parse_value(values[0])
            if not hostname:
                attempts.append((community, None, "agent answered without sysName"))
                continue

            attempts.append((community, hostname, None))
            break
        return attempts
