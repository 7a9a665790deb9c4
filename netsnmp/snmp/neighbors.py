"""
NetSnmp - CDP/LLDP Neighbor Table Decoder.

Reassembles per-neighbor records from a single table walk.

A walk returns one row per (column, neighbor). Rows describing the same
neighbor share an index key:

    CDP:  cdpCacheEntry.<column>.<ifIndex>.<deviceIndex>
          key = (ifIndex, deviceIndex)
    LLDP: lldpRemEntry.<column>.<timeMark>.<localPort>.<remIndex>
          lldpRemManAddrEntry.<column>.<timeMark>.<localPort>.<remIndex>.<subtype>.<len>.<addr>
          key = (localPort, remIndex)

Fragments are collected per key and a record is emitted only when the
mandatory fragments are present:

    CDP:  address and device-id
    LLDP: system name (address falls back to "unknown")

One walk per protocol covers the whole table. Record order is not
defined.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..exceptions import TransportError
from ..models import NeighborProtocol, NeighborRecord, UNKNOWN_ADDRESS
from ..oids import CDP, LLDP, split_index
from .parsers import VarBind, parse_walk, decode_ip, decode_port_id
from .transport import Transport, DEFAULT_RETRIES

logger = logging.getLogger(__name__)

IndexKey = Tuple[int, int]

# Walk roots, one request per protocol
WALK_ROOTS = {
    NeighborProtocol.CDP: CDP.CACHE_ENTRY,
    NeighborProtocol.LLDP: LLDP.REMOTE_SYSTEMS_DATA,
}

# lldpRemTable columns of interest, matched by OID prefix
LLDP_COLUMNS = (
    (LLDP.REM_SYS_NAME, 'hostname'),
    (LLDP.REM_SYS_DESC, 'description'),
    (LLDP.REM_PORT_ID_SUBTYPE, 'port_subtype'),
    (LLDP.REM_PORT_ID, 'port'),
)


@dataclass
class NeighborFragments:
    """Partial data collected for one index key."""
    address: Optional[str] = None
    hostname: Optional[str] = None
    platform: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    port: Optional[str] = None
    port_subtype: Optional[int] = None
    port_raw: Any = None


def _first_line(text: Optional[str]) -> Optional[str]:
    if not text:
        return text
    return text.splitlines()[0].strip()


def _subtype(binding: VarBind) -> Optional[int]:
    try:
        return int(binding.value)
    except (TypeError, ValueError):
        return None


# =============================================================================
# CDP
# =============================================================================

def collect_cdp(bindings: Iterable[VarBind]) -> Dict[IndexKey, NeighborFragments]:
    """Group cdpCacheEntry rows by (ifIndex, deviceIndex)."""
    fragments: Dict[IndexKey, NeighborFragments] = {}

    for binding in bindings:
        suffix = binding.suffix(CDP.CACHE_ENTRY)
        if suffix is None:
            continue
        try:
            parts = split_index(suffix)
        except ValueError:
            continue
        if len(parts) != 3:
            continue

        column, key = parts[0], (parts[1], parts[2])

        if column == CDP.COLUMN_ADDRESS:
            address = decode_ip(binding.raw)
            if not address:
                logger.debug(f"Undecodable CDP address at {binding.oid}: {binding.raw!r}")
                continue
            fragments.setdefault(key, NeighborFragments()).address = address
        elif column == CDP.COLUMN_DEVICE_ID:
            if binding.value:
                fragments.setdefault(key, NeighborFragments()).hostname = binding.value
        elif column == CDP.COLUMN_PLATFORM:
            fragments.setdefault(key, NeighborFragments()).platform = binding.value
        elif column == CDP.COLUMN_VERSION:
            fragments.setdefault(key, NeighborFragments()).version = _first_line(binding.value)
        elif column == CDP.COLUMN_DEVICE_PORT:
            fragments.setdefault(key, NeighborFragments()).port = binding.value

    return fragments


# =============================================================================
# LLDP
# =============================================================================

def _lldp_management_address(parts: Tuple[int, ...]) -> Tuple[Optional[IndexKey], Optional[str]]:
    """
    Decode a lldpRemManAddrEntry index.

    parts: column, timeMark, localPort, remIndex, subtype, length, octets...
    Only IPv4 (subtype 1, length 4) is decoded.
    """
    if len(parts) < 6:
        return None, None
    key = (parts[2], parts[3])
    subtype, length, octets = parts[4], parts[5], parts[6:]
    if subtype != LLDP.ADDR_FAMILY_IPV4 or length != 4 or len(octets) != 4:
        return key, None
    if not all(0 <= o <= 255 for o in octets):
        return key, None
    return key, '.'.join(str(o) for o in octets)


def collect_lldp(bindings: Iterable[VarBind]) -> Dict[IndexKey, NeighborFragments]:
    """Group LLDP remote-systems rows by (localPort, remIndex)."""
    fragments: Dict[IndexKey, NeighborFragments] = {}

    for binding in bindings:
        suffix = binding.suffix(LLDP.REM_MAN_ADDR_ENTRY)
        if suffix is not None:
            try:
                key, address = _lldp_management_address(split_index(suffix))
            except ValueError:
                continue
            if key is None:
                continue
            entry = fragments.setdefault(key, NeighborFragments())
            if address and not entry.address:
                entry.address = address
            continue

        for root, field_name in LLDP_COLUMNS:
            suffix = binding.suffix(root)
            if suffix is None:
                continue
            try:
                parts = split_index(suffix)
            except ValueError:
                break
            if len(parts) != 3:
                break

            # parts: timeMark, localPort, remIndex
            entry = fragments.setdefault((parts[1], parts[2]), NeighborFragments())
            if field_name == 'hostname':
                entry.hostname = binding.value or None
            elif field_name == 'description':
                entry.description = _first_line(binding.value)
            elif field_name == 'port_subtype':
                entry.port_subtype = _subtype(binding)
            else:
                # Decoded once the subtype is known
                entry.port_raw = binding.raw
            break

    return fragments


# =============================================================================
# Record Assembly
# =============================================================================

def build_records(
    fragments: Dict[IndexKey, NeighborFragments],
    switch: str,
    protocol: NeighborProtocol,
    discovered_at: Optional[datetime] = None,
) -> List[NeighborRecord]:
    """Emit one NeighborRecord per key with its mandatory fragments."""
    discovered_at = discovered_at or datetime.now()
    records: List[NeighborRecord] = []

    for key, data in fragments.items():
        if not data.hostname:
            continue

        if protocol == NeighborProtocol.CDP:
            if not data.address:
                continue
            address = data.address
            platform = data.platform or data.version or ""
            port = data.port
        else:
            address = data.address or UNKNOWN_ADDRESS
            platform = data.description or ""
            port = None
            if data.port_raw is not None:
                port = decode_port_id(data.port_subtype, data.port_raw)

        records.append(NeighborRecord(
            neighbor_address=address,
            neighbor_hostname=data.hostname,
            platform=platform,
            local_port=port or "",
            source_switch=switch,
            protocol=protocol,
            discovered_at=discovered_at,
            index=f"{key[0]}.{key[1]}",
        ))

    return records


def decode_walk(
    rows: Iterable[Tuple[Any, Any]],
    switch: str,
    protocol: Union[NeighborProtocol, str],
    discovered_at: Optional[datetime] = None,
) -> List[NeighborRecord]:
    """
    Decode raw walk rows into neighbor records.

    Pure function: rows are (oid, value) pairs as returned by
    Transport.walk or parsed from net-snmp text output.
    """
    protocol = NeighborProtocol.parse(protocol)
    bindings = parse_walk(rows)

    if protocol == NeighborProtocol.CDP:
        fragments = collect_cdp(bindings)
    else:
        fragments = collect_lldp(bindings)

    return build_records(fragments, switch, protocol, discovered_at)


class NeighborTableDecoder:
    """
    Walks a switch's CDP or LLDP table and decodes the neighbors.

    Usage:
        decoder = NeighborTableDecoder(PysnmpTransport())
        neighbors = await decoder.decode("10.0.0.1", "public", "cdp", timeout=2)
    """

    def __init__(self, transport: Transport, retries: int = DEFAULT_RETRIES):
        self.transport = transport
        self.retries = retries

    async def decode(
        self,
        switch: str,
        credential: str,
        protocol: Union[NeighborProtocol, str],
        timeout: float,
    ) -> List[NeighborRecord]:
        """
        Walk and decode one neighbor table.

        Returns:
            Neighbor records; an empty list means no neighbors were
            found (no answer, protocol disabled, wrong community).
        """
        protocol = NeighborProtocol.parse(protocol)
        root = WALK_ROOTS[protocol]

        try:
            rows = await self.transport.walk(switch, credential, root, timeout, self.retries)
        except TransportError as e:
            logger.debug(f"{protocol.value.upper()} walk failed on {switch}: {e}")
            return []

        if not rows:
            logger.debug(f"No {protocol.value.upper()} data from {switch} with '{credential}'")
            return []

        records = decode_walk(rows, switch, protocol)
        logger.debug(
            f"{protocol.value.upper()} on {switch}: {len(rows)} rows, {len(records)} neighbors"
        )
        return records
