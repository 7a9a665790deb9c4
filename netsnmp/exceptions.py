"""
NetSnmp - Exceptions.

Only malformed *input* is fatal. Per-host outcomes (no answer, wrong
community) are not exceptions: the probe returns None and the neighbor
decoder returns an empty list.
"""

from typing import Optional


class NetSnmpError(Exception):
    """Base exception for scanner operations."""
    pass


class ParseError(NetSnmpError, ValueError):
    """Raised when a network spec cannot be expanded."""

    def __init__(self, spec: str, reason: str = ""):
        self.spec = spec
        self.reason = reason
        message = f"Invalid network format: '{spec}'"
        if reason:
            message = f"{message}. {reason}"
        super().__init__(message)


class ConfigError(NetSnmpError, ValueError):
    """Raised when scan configuration is invalid."""
    pass


class TransportError(NetSnmpError):
    """
    Raised by a transport for failures that are not a plain timeout.

    Examples: SNMP error-status in the reply, malformed response,
    exception inside the SNMP engine. Callers treat it like a no-answer
    for control flow but log it separately.
    """

    def __init__(self, message: str, address: Optional[str] = None):
        self.address = address
        super().__init__(message)
