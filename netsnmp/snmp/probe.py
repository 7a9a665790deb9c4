"""
NetSnmp - SNMP Host Probe.

Resolves a host's identity (sysName, serial number, optionally MAC and
sysDescr) with one GET per community string.

All OIDs for a community go out in a single request: one packet per
community, never one per OID. Communities are tried in configured
order and the first one that returns a hostname wins; the remaining
ones are never sent.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from ..exceptions import TransportError
from ..models import HostRecord
from ..oids import SYSTEM, SERIAL, INTERFACES
from .parsers import VarBind, parse_response, decode_mac
from .transport import Transport, DEFAULT_RETRIES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OidSet:
    """
    OIDs requested from every host.

    serials are candidates in priority order. mac and description are
    optional extras appended to the same request.
    """
    hostname: str = SYSTEM.SYS_NAME
    serials: Tuple[str, ...] = SERIAL.DEFAULT_CANDIDATES
    mac: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def full(cls) -> 'OidSet':
        """Hostname, serials, first-interface MAC and sysDescr."""
        return cls(mac=INTERFACES.FIRST_PHYS_ADDRESS, description=SYSTEM.SYS_DESCR)

    def request(self) -> List[str]:
        """OIDs in request order: hostname, serials, mac, description."""
        oids = [self.hostname, *self.serials]
        if self.mac:
            oids.append(self.mac)
        if self.description:
            oids.append(self.description)
        return oids


def extract_record(address: str, oid_set: OidSet, bindings: Sequence[VarBind],
                   community: Optional[str] = None) -> Optional[HostRecord]:
    """
    Build a HostRecord from a response aligned with oid_set.request().

    Returns None when the hostname position is absent or empty.
    """
    hostname_binding = bindings[0]
    hostname = hostname_binding.value
    if not hostname:
        return None

    pos = 1
    serial = ""
    for binding in bindings[pos:pos + len(oid_set.serials)]:
        # First candidate the agent has wins, even if it is empty
        if binding.present:
            serial = binding.value
            break
    pos += len(oid_set.serials)

    mac = None
    if oid_set.mac:
        mac = decode_mac(bindings[pos].raw) if bindings[pos].present else None
        pos += 1

    description = None
    if oid_set.description:
        description = bindings[pos].value or None

    return HostRecord(
        address=address,
        hostname=hostname,
        serial_number=serial,
        mac_address=mac,
        description=description,
        community=community,
        discovered_at=datetime.now(),
    )


@dataclass
class SnmpProbe:
    """
    Multi-community identity probe for single hosts.

    Attributes:
        transport: Transport used for the GETs
        oid_set: OIDs requested from each host
        retries: transport-level retries per attempt (no backoff)
    """
    transport: Transport
    oid_set: OidSet = field(default_factory=OidSet)
    retries: int = DEFAULT_RETRIES

    async def query(
        self,
        address: str,
        credentials: Sequence[str],
        timeout: float,
        oid_set: Optional[OidSet] = None,
    ) -> Optional[HostRecord]:
        """
        Probe one host.

        Args:
            address: Host IP address
            credentials: Community strings in trial order
            timeout: Per-attempt timeout in seconds
            oid_set: Override the probe's OID set

        Returns:
            HostRecord from the first community that yields a hostname,
            or None when every community fails (no SNMP service, wrong
            communities). None is the expected outcome for most
            addresses and is only logged at DEBUG.
        """
        oid_set = oid_set or self.oid_set
        oids = oid_set.request()

        for community in credentials:
            logger.debug(f"Probing {address} with community '{community}'")
            try:
                values = await self.transport.get_many(
                    address, community, oids, timeout, self.retries
                )
            except TransportError as e:
                logger.debug(f"Transport error on {address} with '{community}': {e}")
                continue

            if not values:
                continue

            record = extract_record(address, oid_set, parse_response(oids, values), community)
            if record:
                logger.debug(f"Success for {address}: {record.hostname}")
                return record

        logger.debug(f"No valid SNMP response from {address}")
        return None
