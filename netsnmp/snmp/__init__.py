"""
NetSnmp - SNMP Layer.

Components:
- transport: pysnmp GET / GETBULK walk behind the Transport protocol
- parsers: value decoding (No Such markers, quotes, hex IPs, MACs)
- probe: multi-community host identity probe
- neighbors: CDP/LLDP neighbor table decoder
"""

from .transport import Transport, PysnmpTransport, WalkResult
from .parsers import (
    VarBind,
    is_no_such,
    strip_quotes,
    decode_string,
    decode_ip,
    decode_mac,
    decode_port_id,
    parse_value,
    parse_varbind,
    parse_response,
    parse_walk,
    parse_line,
    parse_text_output,
    is_valid_ipv4,
)
from .probe import SnmpProbe, OidSet, extract_record
from .neighbors import NeighborTableDecoder, decode_walk


__all__ = [
    # Transport
    'Transport',
    'PysnmpTransport',
    'WalkResult',
    # Parsers
    'VarBind',
    'is_no_such',
    'strip_quotes',
    'decode_string',
    'decode_ip',
    'decode_mac',
    'parse_value',
    'parse_varbind',
    'parse_response',
    'parse_walk',
    'parse_line',
    'parse_text_output',
    'is_valid_ipv4',
    # Probe / decoder
    'SnmpProbe',
    'OidSet',
    'extract_record',
    'NeighborTableDecoder',
    'decode_walk',
]
