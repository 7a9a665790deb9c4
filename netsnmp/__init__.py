"""
NetSnmp - SNMP Network Inventory Scanner.

Discovers live hosts across IP ranges, identifies them over SNMPv2c
(hostname, serial number, optionally MAC and sysDescr) and walks switch
CDP/LLDP tables to map their neighbors.

Architecture:
    netsnmp/
    ├── ranges.py      # Network spec expansion (single, range, /24)
    ├── models.py      # HostRecord, NeighborRecord, BatchResult
    ├── oids.py        # SNMP OID constants
    ├── workers.py     # Bounded worker pool
    ├── liveness.py    # ICMP ping probe
    ├── engine.py      # Host and neighbor discovery passes
    ├── sink.py        # Result sinks
    ├── events.py      # Progress events + console printer
    ├── config.py      # ScanConfig, YAML loader
    ├── cli.py         # CLI interface
    └── snmp/
        ├── transport.py  # Async GET / GETBULK walk
        ├── parsers.py    # Value decoding
        ├── probe.py      # Multi-community host probe
        └── neighbors.py  # CDP/LLDP table decoder

Quick Start:
    import asyncio
    from netsnmp import DiscoveryEngine, ScanConfig

    engine = DiscoveryEngine(ScanConfig(networks=("10.0.0.0/24",),
                                        communities=("public",)))
    hosts, neighbors = asyncio.run(engine.scan())
"""

__version__ = "1.0.0"

from .config import ScanConfig, load_config
from .engine import DiscoveryEngine, is_switch_candidate
from .events import ConsoleEventPrinter, EventEmitter, EventType
from .exceptions import ConfigError, NetSnmpError, ParseError, TransportError
from .models import BatchResult, HostRecord, NeighborProtocol, NeighborRecord
from .ranges import AddressRange, expand, expand_all
from .sink import CallbackSink, CollectingSink, ResultSink
from .workers import WorkerPool


__all__ = [
    '__version__',
    # Engine
    'DiscoveryEngine',
    'is_switch_candidate',
    'WorkerPool',
    # Config
    'ScanConfig',
    'load_config',
    # Models
    'HostRecord',
    'NeighborRecord',
    'NeighborProtocol',
    'BatchResult',
    # Ranges
    'AddressRange',
    'expand',
    'expand_all',
    # Sinks
    'ResultSink',
    'CollectingSink',
    'CallbackSink',
    # Events
    'EventEmitter',
    'EventType',
    'ConsoleEventPrinter',
    # Exceptions
    'NetSnmpError',
    'ParseError',
    'ConfigError',
    'TransportError',
]
