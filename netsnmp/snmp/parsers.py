"""
NetSnmp - SNMP Value Parsers.

The one place that deals with how agents and transports render values.
Everything above this module works on VarBind objects whose value is
either clean text or None ("the agent does not have this object").

Handles:
- "No Such Object/Instance" markers (pysnmp exception values or text)
- Quote stripping (net-snmp prints strings quoted)
- IPv4 addresses encoded as 4 (or 5, with family byte) raw or hex octets
- MAC address decoding
- net-snmp text output lines ("OID = value")
"""

import binascii
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from pysnmp.proto.rfc1902 import IpAddress, OctetString
from pysnmp.proto.rfc1905 import EndOfMibView, NoSuchInstance, NoSuchObject

from ..oids import LLDP, extract_index_from_oid, normalize_oid


# Text renderings of absent values (lowercase, matched as prefixes)
NO_SUCH_MARKERS = (
    'no such object',
    'no such instance',
    'no more variables left',
    'nosuchobject',
    'nosuchinstance',
    'endofmibview',
)

_ABSENT_TYPES = (NoSuchObject, NoSuchInstance, EndOfMibView)
_HEX_PREFIXES = ('0x', 'hex-string:', 'hex:')
_HEX_RE = re.compile(r'^[0-9a-fA-F]+$')
_TYPE_TAG_RE = re.compile(
    r'^(STRING|Hex-STRING|INTEGER|OID|IpAddress|Network Address|Timeticks|'
    r'Gauge32|Counter32|Counter64|BITS|OCTET STRING):\s*(.*)$',
    re.IGNORECASE,
)


@dataclass(frozen=True)
class VarBind:
    """
    One typed (oid, value) pair.

    value is None when the agent reported the object as absent.
    raw keeps the transport's untouched value for binary decoding.
    """
    oid: str
    value: Optional[str]
    raw: Any = None

    @property
    def present(self) -> bool:
        return self.value is not None

    def suffix(self, base_oid: str) -> Optional[str]:
        """Index below base_oid, or None if this OID is outside it."""
        return extract_index_from_oid(self.oid, base_oid)


# =============================================================================
# Absent Values / Text Cleanup
# =============================================================================

def is_no_such(value: Any) -> bool:
    """True for None, pysnmp exception values and their text forms."""
    if value is None:
        return True
    if isinstance(value, _ABSENT_TYPES):
        return True
    if isinstance(value, (str, bytes)):
        text = value.decode('latin-1') if isinstance(value, bytes) else value
        return text.strip().strip('"').strip().lower().startswith(NO_SUCH_MARKERS)
    return False


def strip_quotes(text: str) -> str:
    """Remove surrounding whitespace and one pair of quote characters."""
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ('"', "'"):
        text = text[1:-1]
    return text.strip()


def _octets_to_text(octets: bytes) -> str:
    """UTF-8 text when the octets are printable, otherwise a 0x hex rendering."""
    try:
        text = octets.replace(b'\x00', b'').decode('utf-8')
    except UnicodeDecodeError:
        return '0x' + octets.hex()
    if all(c.isprintable() or c in '\r\n\t' for c in text):
        return text
    return '0x' + octets.hex()


def decode_string(value: Any) -> str:
    """
    Safely convert an SNMP value to text.

    Handles pysnmp OctetString/DisplayString, bytes and plain strings.
    Octet values are decoded from their raw bytes, so text that merely
    looks like hex stays as it is; binary octets come back as "0x...".
    """
    if isinstance(value, OctetString) and not isinstance(value, IpAddress):
        value = value.asOctets()

    if isinstance(value, (bytes, bytearray)):
        result = _octets_to_text(bytes(value))
    elif hasattr(value, 'prettyPrint'):
        result = value.prettyPrint()
    else:
        result = str(value)

    return result.replace('\x00', '').strip()


def parse_value(value: Any) -> Optional[str]:
    """Decoded, unquoted text or None for an absent value."""
    if is_no_such(value):
        return None
    return strip_quotes(decode_string(value))


# =============================================================================
# VarBind Construction
# =============================================================================

def parse_varbind(oid: Any, value: Any) -> VarBind:
    """Build a VarBind from a transport (oid, value) pair."""
    return VarBind(oid=normalize_oid(str(oid)), value=parse_value(value), raw=value)


def parse_response(oids: Sequence[str], values: Optional[Sequence[Any]]) -> List[VarBind]:
    """
    Align a GET response with the request.

    Position i of the result always corresponds to oids[i]. A short or
    missing response leaves the remaining positions absent.
    """
    values = list(values or [])
    bindings = []
    for i, oid in enumerate(oids):
        raw = values[i] if i < len(values) else None
        bindings.append(parse_varbind(oid, raw))
    return bindings


def parse_walk(rows: Iterable[Tuple[Any, Any]]) -> List[VarBind]:
    """Convert walk rows to VarBinds, dropping absent values."""
    bindings = []
    for oid, value in rows:
        binding = parse_varbind(oid, value)
        if binding.present:
            bindings.append(binding)
    return bindings


def parse_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Split one line of net-snmp output into (oid, value).

    Accepts "OID = TYPE: value", "OID = value" (-OQ) and "OID value"
    forms. Returns None for blank lines.
    """
    line = line.strip()
    if not line:
        return None

    if ' = ' in line:
        oid, _, value = line.partition(' = ')
    else:
        oid, _, value = line.partition(' ')

    value = value.strip()
    # Drop a "STRING: " style type tag, keep the hex marker
    tag = _TYPE_TAG_RE.match(value)
    if tag:
        if tag.group(1).lower() == 'hex-string':
            value = 'Hex-STRING:' + tag.group(2)
        else:
            value = tag.group(2)

    return normalize_oid(oid), value


def parse_text_output(text: str) -> List[Tuple[str, str]]:
    """Split multi-line net-snmp output into (oid, value) rows."""
    rows = []
    for line in text.splitlines():
        parsed = parse_line(line)
        if parsed:
            rows.append(parsed)
    return rows


# =============================================================================
# IP Address Decoding
# =============================================================================

def is_valid_ipv4(ip: str) -> bool:
    """Check if string is a dotted-quad IPv4 address."""
    if not ip:
        return False
    parts = ip.split('.')
    if len(parts) != 4:
        return False
    try:
        return all(0 <= int(p) <= 255 for p in parts)
    except ValueError:
        return False


def hex_to_octets(text: str) -> Optional[bytes]:
    """
    Parse a hex rendering into bytes.

    Accepts "0xC0A80101", "C0 A8 01 01", "c0:a8:01:01" and
    "Hex-STRING: C0 A8 01 01". Returns None if the text is not hex.
    """
    text = strip_quotes(text)
    lowered = text.lower()
    for prefix in _HEX_PREFIXES:
        if lowered.startswith(prefix):
            text = text[len(prefix):]
            break

    digits = re.sub(r'[\s:\-]', '', text)
    if not digits or len(digits) % 2 or not _HEX_RE.match(digits):
        return None
    return binascii.unhexlify(digits)


def decode_ip(value: Any) -> Optional[str]:
    """
    Decode an IPv4 address value.

    Handles two octet layouts:
    - 4 bytes: direct IPv4 address
    - 5 bytes: address family byte + IPv4 address

    Examples:
        >>> decode_ip(b'\\xc0\\xa8\\x01\\x01')
        '192.168.1.1'
        >>> decode_ip("0xC0A80101")
        '192.168.1.1'

    Returns None when the value is absent or not an IPv4 address.
    """
    if is_no_such(value):
        return None

    if hasattr(value, 'asOctets'):
        octets = value.asOctets()
    elif isinstance(value, (bytes, bytearray)):
        octets = bytes(value)
    else:
        text = strip_quotes(str(value))
        if is_valid_ipv4(text):
            return text
        octets = hex_to_octets(text)
        if octets is None:
            return None

    if len(octets) == 5:
        octets = octets[1:]
    if len(octets) != 4:
        return None
    return '.'.join(str(b) for b in octets)


# =============================================================================
# MAC Address Decoding
# =============================================================================

def normalize_mac(mac: str) -> Optional[str]:
    """
    Normalize a MAC to lowercase colon-separated form.

    Handles aa:bb:cc:dd:ee:ff, aa-bb-.., aabb.ccdd.eeff, aabbccddeeff and
    net-snmp's unpadded "0:1b:2c:..." output.
    """
    text = strip_quotes(mac)
    parts = re.split(r'[:\-\s]', text)
    if len(parts) == 6 and all(1 <= len(p) <= 2 for p in parts):
        text = ''.join(p.zfill(2) for p in parts)

    clean = text.replace('.', '').lower()
    if clean.startswith('0x'):
        clean = clean[2:]

    if len(clean) == 12 and all(c in '0123456789abcdef' for c in clean):
        return ':'.join(clean[i:i + 2] for i in range(0, 12, 2))
    return None


def decode_mac(value: Any) -> Optional[str]:
    """
    Decode an ifPhysAddress-style value.

    Returns None for absent values, empty addresses and anything that is
    not 6 octets.
    """
    if is_no_such(value):
        return None

    if hasattr(value, 'asOctets'):
        octets = value.asOctets()
    elif isinstance(value, (bytes, bytearray)):
        octets = bytes(value)
    else:
        text = strip_quotes(str(value))
        if not text:
            return None
        mac = normalize_mac(text)
        if mac:
            return mac
        octets = hex_to_octets(text)
        if octets is None:
            return None

    if len(octets) != 6:
        return None
    return ':'.join(f'{b:02x}' for b in octets)


def decode_port_id(subtype: Optional[int], value: Any) -> str:
    """
    Decode an LLDP port ID according to its LldpPortIdSubtype.

    3 (MAC address) and 4 (network address) are binary; every other
    subtype, and a missing subtype, is read as text. A binary value
    that does not decode falls back to its text rendering.
    """
    if subtype == LLDP.PORT_SUBTYPE_MAC:
        mac = decode_mac(value)
        if mac:
            return mac
    elif subtype == LLDP.PORT_SUBTYPE_NETWORK:
        # Network address carries a leading IANA family byte
        address = decode_ip(value)
        if address:
            return address
    return parse_value(value) or ""
