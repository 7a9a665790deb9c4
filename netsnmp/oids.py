"""
NetSnmp - SNMP OID Constants.

Numeric OIDs used by the host probe and the neighbor decoders.
Numeric form only; the scanner never loads MIB modules.

Organization:
- SNMPv2-MIB: sysName / sysDescr for host identity
- IF-MIB: ifPhysAddress for the host MAC
- ENTITY-MIB and vendor MIBs: serial number candidates
- CISCO-CDP-MIB: cdpCacheTable
- LLDP-MIB: lldpRemTable and lldpRemManAddrTable
"""

from typing import Optional, Tuple


# =============================================================================
# SNMPv2-MIB - System Group
# =============================================================================

class SYSTEM:
    """SNMPv2-MIB system scalars (already carry the .0 instance)."""
    SYS_DESCR = "1.3.6.1.2.1.1.1.0"
    SYS_NAME = "1.3.6.1.2.1.1.5.0"


# =============================================================================
# IF-MIB
# =============================================================================

class INTERFACES:
    """IF-MIB columns. Append an ifIndex for GET."""
    IF_PHYS_ADDRESS = "1.3.6.1.2.1.2.2.1.6"      # MAC (binary)

    # First interface is the usual management MAC on small devices
    FIRST_PHYS_ADDRESS = "1.3.6.1.2.1.2.2.1.6.1"


# =============================================================================
# Serial Number Candidates
# =============================================================================

class SERIAL:
    """
    Serial number OIDs, in trial order.

    The probe asks for all of them in one GET and keeps the first one
    the agent actually has.
    """
    ENT_PHYSICAL_SERIAL = "1.3.6.1.2.1.47.1.1.1.1.11.1"   # entPhysicalSerialNum.1
    CISCO_CHASSIS_SERIAL = "1.3.6.1.4.1.9.3.6.3.0"        # OLD-CISCO-CHASSIS chassisId
    JUNIPER_CHASSIS_SERIAL = "1.3.6.1.4.1.2636.3.1.3.0"   # jnxBoxSerialNo

    DEFAULT_CANDIDATES = (
        ENT_PHYSICAL_SERIAL,
        CISCO_CHASSIS_SERIAL,
        JUNIPER_CHASSIS_SERIAL,
    )


# =============================================================================
# CISCO-CDP-MIB - Cisco Discovery Protocol
# =============================================================================

class CDP:
    """
    CISCO-CDP-MIB cache table.

    Walking CACHE_ENTRY returns every column in one pass. Each OID is
    CACHE_ENTRY.<column>.<cdpCacheIfIndex>.<cdpCacheDeviceIndex>.
    """
    CACHE_TABLE = "1.3.6.1.4.1.9.9.23.1.2.1"
    CACHE_ENTRY = "1.3.6.1.4.1.9.9.23.1.2.1.1"

    # Column numbers within cdpCacheEntry
    COLUMN_ADDRESS = 4          # IPv4 address (binary, hex encoded by agents)
    COLUMN_VERSION = 5          # Software version string
    COLUMN_DEVICE_ID = 6        # Neighbor hostname
    COLUMN_DEVICE_PORT = 7      # Remote port name
    COLUMN_PLATFORM = 8         # Hardware platform (e.g. "cisco WS-C3750")


# =============================================================================
# LLDP-MIB - Link Layer Discovery Protocol
# =============================================================================

class LLDP:
    """
    LLDP-MIB remote systems data.

    Walking REMOTE_SYSTEMS_DATA covers both lldpRemTable and
    lldpRemManAddrTable. lldpRemTable index is
    timeMark.localPortNum.remIndex; the management address table
    appends addrSubtype.addrLen.<address octets> to that.
    """
    REMOTE_SYSTEMS_DATA = "1.0.8802.1.1.2.1.4"

    REMOTE_TABLE = "1.0.8802.1.1.2.1.4.1"
    REMOTE_ENTRY = "1.0.8802.1.1.2.1.4.1.1"
    REM_PORT_ID_SUBTYPE = "1.0.8802.1.1.2.1.4.1.1.6"    # LldpPortIdSubtype
    REM_PORT_ID = "1.0.8802.1.1.2.1.4.1.1.7"
    REM_SYS_NAME = "1.0.8802.1.1.2.1.4.1.1.9"
    REM_SYS_DESC = "1.0.8802.1.1.2.1.4.1.1.10"

    REM_MAN_ADDR_TABLE = "1.0.8802.1.1.2.1.4.2"
    REM_MAN_ADDR_ENTRY = "1.0.8802.1.1.2.1.4.2.1"

    # IANA address family for the management address subtype
    ADDR_FAMILY_IPV4 = 1

    # LldpPortIdSubtype values; everything else is text
    PORT_SUBTYPE_MAC = 3
    PORT_SUBTYPE_NETWORK = 4


# =============================================================================
# Helper Functions
# =============================================================================

def normalize_oid(oid: str) -> str:
    """Strip whitespace and the leading dot some tools print."""
    return str(oid).strip().lstrip('.')


def extract_index_from_oid(oid: str, base_oid: str) -> Optional[str]:
    """
    Extract the index portion of an OID below base_oid.

    Example:
        oid = "1.3.6.1.4.1.9.9.23.1.2.1.1.6.10.1"
        base = "1.3.6.1.4.1.9.9.23.1.2.1.1.6"
        returns "10.1"

    Returns None when oid is not below base_oid.
    """
    oid = normalize_oid(oid)
    base_oid = normalize_oid(base_oid)
    if oid.startswith(base_oid + "."):
        return oid[len(base_oid) + 1:]
    return None


def split_index(suffix: str) -> Tuple[int, ...]:
    """
    Split a dotted index suffix into integers.

    Raises ValueError on non-numeric components.
    """
    return tuple(int(part) for part in suffix.split('.') if part != '')
