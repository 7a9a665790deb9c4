"""
NetSnmp - Address Range Expansion.

Turns network specs into concrete IPv4 addresses.

Supported forms:
    192.168.1.10        single address
    10.0.0.50-100       inclusive last-octet range (1-254)
    192.168.1.0/24      the 254 host addresses of a /24

Only /24 is supported for CIDR. Wider or narrower masks are rejected
rather than approximated.

Usage:
    from netsnmp.ranges import expand

    hosts = expand("10.0.0.50-100")
    len(hosts)        # 51
    list(hosts)[0]    # "10.0.0.50"
"""

import logging
import re
from collections.abc import Sequence
from typing import Iterable, Iterator, List, Optional, Tuple

from .exceptions import ParseError

logger = logging.getLogger(__name__)

MIN_HOST_OCTET = 1
MAX_HOST_OCTET = 254

_SINGLE_RE = re.compile(r'^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$')
_RANGE_RE = re.compile(r'^(\d{1,3}\.\d{1,3}\.\d{1,3})\.(\d+)-(\d+)$')
_CIDR_BASE_RE = re.compile(r'^(\d{1,3}\.\d{1,3}\.\d{1,3})\.0$')


class AddressRange(Sequence):
    """
    Re-iterable sequence of addresses sharing a /24 prefix.

    Nothing is materialised: len() and indexing are computed, and the
    range can be iterated any number of times.
    """

    __slots__ = ('spec', 'prefix', 'start', 'end', '_single')

    def __init__(self, spec: str, prefix: str, start: int, end: int, single: Optional[str] = None):
        self.spec = spec
        self.prefix = prefix
        self.start = start
        self.end = end
        self._single = single

    def __len__(self) -> int:
        if self._single is not None:
            return 1
        return self.end - self.start + 1

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]
        if index < 0:
            index += len(self)
        if not 0 <= index < len(self):
            raise IndexError("address index out of range")
        if self._single is not None:
            return self._single
        return f"{self.prefix}.{self.start + index}"

    def __iter__(self) -> Iterator[str]:
        if self._single is not None:
            yield self._single
            return
        for octet in range(self.start, self.end + 1):
            yield f"{self.prefix}.{octet}"

    def __repr__(self) -> str:
        return f"AddressRange({self.spec!r}, {len(self)} addresses)"


def _check_prefix(spec: str, prefix: str) -> None:
    if any(int(octet) > 255 for octet in prefix.split('.')):
        raise ParseError(spec, "Octets must be 0-255.")


def expand(spec: str) -> AddressRange:
    """
    Expand one network spec.

    Raises:
        ParseError: malformed or unsupported network spec
    """
    if spec is None:
        raise ParseError("", "Empty network spec.")
    text = str(spec).strip()
    if not text:
        raise ParseError(text, "Empty network spec.")

    # CIDR notation (only /24 ending in .0)
    if '/' in text:
        base, _, mask = text.partition('/')
        match = _CIDR_BASE_RE.match(base)
        if mask != '24' or not match:
            raise ParseError(
                text,
                "Only /24 subnets ending in .0 are supported."
            )
        prefix = match.group(1)
        _check_prefix(text, prefix)
        return AddressRange(text, prefix, MIN_HOST_OCTET, MAX_HOST_OCTET)

    # Last-octet range
    match = _RANGE_RE.match(text)
    if match:
        prefix = match.group(1)
        start, end = int(match.group(2)), int(match.group(3))
        if (start < MIN_HOST_OCTET or end < MIN_HOST_OCTET
                or start > MAX_HOST_OCTET or end > MAX_HOST_OCTET or start > end):
            raise ParseError(text, "Octets must be 1-254 and start <= end.")
        _check_prefix(text, prefix)
        return AddressRange(text, prefix, start, end)

    # Single address
    match = _SINGLE_RE.match(text)
    if match:
        if any(int(octet) > 255 for octet in match.groups()):
            raise ParseError(text, "Octets must be 0-255.")
        prefix = '.'.join(match.groups()[:3])
        last = int(match.group(4))
        return AddressRange(text, prefix, last, last, single=text)

    raise ParseError(text)


def expand_all(specs: Iterable[str]) -> Tuple[List[str], List[ParseError]]:
    """
    Expand several specs, concatenated in spec order.

    A malformed spec is logged and skipped; its siblings still expand.

    Returns:
        (addresses, errors)
    """
    addresses: List[str] = []
    errors: List[ParseError] = []

    for spec in specs:
        try:
            hosts = expand(spec)
        except ParseError as e:
            logger.error(str(e))
            errors.append(e)
            continue
        logger.debug(f"Expanded '{spec}' to {len(hosts)} addresses")
        addresses.extend(hosts)

    return addresses, errors
