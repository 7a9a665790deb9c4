"""
NetSnmp - Data Models.

Records produced by the scan engine. HostRecord and NeighborRecord are
immutable and handed to the result sink exactly once. BatchResult
summarises one pass (host or neighbor) for the CLI.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Union
import json


UNKNOWN_ADDRESS = "unknown"


class NeighborProtocol(str, Enum):
    """Neighbor discovery protocol."""
    CDP = "cdp"
    LLDP = "lldp"

    @classmethod
    def parse(cls, value: Union[str, 'NeighborProtocol']) -> 'NeighborProtocol':
        """Accept 'cdp', 'CDP' or an enum member."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown discovery protocol: '{value}'") from None


@dataclass(frozen=True)
class HostRecord:
    """
    SNMP identity of one host.

    A record only exists for a successful probe, so hostname is never
    empty. serial_number uses "" as the "not found" sentinel.
    """
    address: str
    hostname: str
    serial_number: str = ""
    mac_address: Optional[str] = None
    description: Optional[str] = None
    community: Optional[str] = None              # Credential that answered
    discovered_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (community omitted)."""
        d = asdict(self)
        d.pop('community')
        d['discovered_at'] = self.discovered_at.isoformat()
        return d


@dataclass(frozen=True)
class NeighborRecord:
    """
    One CDP/LLDP neighbor seen by a switch.

    neighbor_address is UNKNOWN_ADDRESS when the table exposes no
    management address (common with LLDP). That means "topology known,
    address unknown", not a parse failure.
    """
    neighbor_address: str
    neighbor_hostname: str
    platform: str = ""
    local_port: str = ""                         # Port label reported for the link
    source_switch: str = ""
    protocol: NeighborProtocol = NeighborProtocol.CDP
    discovered_at: datetime = field(default_factory=datetime.now)
    index: Optional[str] = None                  # OID index key, for debugging

    @property
    def has_address(self) -> bool:
        return self.neighbor_address != UNKNOWN_ADDRESS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d = asdict(self)
        d['protocol'] = self.protocol.value
        d['discovered_at'] = self.discovered_at.isoformat()
        return d


Record = Union[HostRecord, NeighborRecord]


@dataclass
class BatchResult:
    """
    Outcome of a host or neighbor discovery pass.

    A pass that ran to completion without a single success is
    'exhausted'. That is a normal result, not an error; the CLI uses it
    to print troubleshooting guidance.
    """
    kind: str = "hosts"                          # "hosts" or "neighbors"
    records: List[Record] = field(default_factory=list)

    # Statistics
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0                              # Task/transport errors
    invalid_specs: List[str] = field(default_factory=list)

    # Timing
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def exhausted(self) -> bool:
        """True when the pass completed with zero successes."""
        return self.succeeded == 0

    @property
    def not_found(self) -> int:
        """Candidates that simply did not answer."""
        return max(self.attempted - self.succeeded - self.failed, 0)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'kind': self.kind,
            'records': [r.to_dict() for r in self.records],
            'attempted': self.attempted,
            'succeeded': self.succeeded,
            'failed': self.failed,
            'not_found': self.not_found,
            'exhausted': self.exhausted,
            'invalid_specs': self.invalid_specs,
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'duration_seconds': self.duration_seconds,
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
