"""
NetSnmp - SNMP Transport.

Async SNMPv2c GET and GETBULK walk over pysnmp's asyncio API.

The rest of the scanner depends only on the Transport protocol below:

    get_many(address, community, oids, timeout, retries)
        -> list aligned with oids, or None when the host did not answer
    walk(address, community, root, timeout, retries)
        -> list of (oid, value) rows under root, [] when nothing answered

Timeouts are "no answer" and return None / []. Anything else that goes
wrong (error-status in the reply, engine exceptions) raises
TransportError so callers can log it separately.

Usage:
    transport = PysnmpTransport()
    values = await transport.get_many("192.168.1.1", "public",
                                      ["1.3.6.1.2.1.1.5.0"], timeout=2)
    rows = await transport.walk("192.168.1.1", "public",
                                "1.3.6.1.4.1.9.9.23.1.2.1.1", timeout=2)
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from pysnmp.hlapi.v3arch.asyncio import (
    bulk_cmd, get_cmd,
    SnmpEngine, CommunityData,
    UdpTransportTarget, ContextData,
    ObjectType, ObjectIdentity,
)

from ..exceptions import TransportError
from ..oids import normalize_oid

logger = logging.getLogger(__name__)

# Type aliases
WalkResult = List[Tuple[str, Any]]

DEFAULT_PORT = 161
DEFAULT_RETRIES = 1


class Transport(Protocol):
    """Logical SNMP operations the scanner needs."""

    async def get_many(
        self,
        address: str,
        community: str,
        oids: Sequence[str],
        timeout: float,
        retries: int = DEFAULT_RETRIES,
    ) -> Optional[List[Any]]:
        ...

    async def walk(
        self,
        address: str,
        community: str,
        root: str,
        timeout: float,
        retries: int = DEFAULT_RETRIES,
    ) -> WalkResult:
        ...


def _is_timeout(error_indication: Any) -> bool:
    text = str(error_indication).lower()
    return 'timeout' in text or 'timed out' in text or 'no snmp response' in text


class PysnmpTransport:
    """
    Transport backed by pysnmp.

    One SnmpEngine is shared by every request issued through this
    transport; pysnmp multiplexes concurrent requests on it.

    Attributes:
        engine: pysnmp SnmpEngine instance
        port: UDP port of the agents
        bulk_size: max-repetitions for GETBULK
        max_iterations: safety limit for walk iterations
    """

    def __init__(
        self,
        engine: Optional[SnmpEngine] = None,
        port: int = DEFAULT_PORT,
        bulk_size: int = 25,
        max_iterations: int = 1500,
    ):
        self.engine = engine or SnmpEngine()
        self.port = port
        self.bulk_size = bulk_size
        self.max_iterations = max_iterations

    @staticmethod
    def _auth(community: str) -> CommunityData:
        # mpModel=1 is SNMPv2c
        return CommunityData(community, mpModel=1)

    async def _target(self, address: str, timeout: float, retries: int) -> UdpTransportTarget:
        return await UdpTransportTarget.create(
            (address, self.port),
            timeout=timeout,
            retries=retries,
        )

    async def get_many(
        self,
        address: str,
        community: str,
        oids: Sequence[str],
        timeout: float,
        retries: int = DEFAULT_RETRIES,
    ) -> Optional[List[Any]]:
        """
        Get several OIDs in a single request.

        Returns:
            Values in request order (pysnmp NoSuchObject/NoSuchInstance
            values are passed through for the parser), or None when the
            host did not answer.

        Raises:
            TransportError: error-status in the reply or engine failure
        """
        object_types = [ObjectType(ObjectIdentity(oid)) for oid in oids]

        try:
            transport = await self._target(address, timeout, retries)
            error_indication, error_status, error_index, var_binds = await asyncio.wait_for(
                get_cmd(
                    self.engine,
                    self._auth(community),
                    transport,
                    ContextData(),
                    *object_types
                ),
                # Allow every retry plus some slack for the network
                timeout=timeout * (retries + 1) + 2
            )
        except asyncio.TimeoutError:
            logger.debug(f"GET timed out on {address}")
            return None
        except Exception as e:
            raise TransportError(f"GET failed on {address}: {type(e).__name__}: {e}", address) from e

        if error_indication:
            if _is_timeout(error_indication):
                logger.debug(f"No answer from {address}: {error_indication}")
                return None
            raise TransportError(f"GET error on {address}: {error_indication}", address)

        if error_status:
            raise TransportError(
                f"GET status error on {address}: {error_status.prettyPrint()} "
                f"at index {error_index}",
                address,
            )

        return [vb[1] for vb in var_binds]

    async def walk(
        self,
        address: str,
        community: str,
        root: str,
        timeout: float,
        retries: int = DEFAULT_RETRIES,
    ) -> WalkResult:
        """
        Walk everything under root using GETBULK.

        Stops when the agent leaves the subtree, returns fewer rows than
        requested, or max_iterations is reached.

        Returns:
            List of (oid_string, value) tuples; [] when nothing answered

        Raises:
            TransportError: the first request failed for a reason other
                than a timeout
        """
        base_oid = normalize_oid(root)
        auth = self._auth(community)
        results: WalkResult = []
        last_oid: Any = ObjectIdentity(base_oid)

        logger.debug(f"Walking {base_oid} on {address}")
        start_time = datetime.now()
        iteration = 0

        for iteration in range(self.max_iterations):
            try:
                transport = await self._target(address, timeout, retries)
                error_indication, error_status, error_index, var_binds = await asyncio.wait_for(
                    bulk_cmd(
                        self.engine,
                        auth,
                        transport,
                        ContextData(),
                        0,  # non-repeaters
                        self.bulk_size,  # max-repetitions
                        ObjectType(last_oid),
                        lexicographicMode=False
                    ),
                    timeout=timeout * (retries + 1) + 2
                )
            except asyncio.TimeoutError:
                logger.debug(f"Walk of {base_oid} timed out on {address}")
                break
            except Exception as e:
                if iteration == 0:
                    raise TransportError(
                        f"Walk failed on {address}: {type(e).__name__}: {e}", address
                    ) from e
                logger.debug(f"Walk of {base_oid} aborted on {address}: {e}")
                break

            if error_indication:
                if iteration == 0 and not _is_timeout(error_indication):
                    raise TransportError(f"Walk error on {address}: {error_indication}", address)
                logger.debug(f"Walk of {base_oid} ended on {address}: {error_indication}")
                break

            if error_status:
                if iteration == 0:
                    raise TransportError(
                        f"Walk status error on {address}: {error_status.prettyPrint()}", address
                    )
                break

            if not var_binds:
                break

            in_table = False
            for var_bind in var_binds:
                # pysnmp 7 returns flat var binds for bulk_cmd
                oid_obj, value = var_bind[0], var_bind[1]
                oid_str = str(oid_obj)
                if oid_str.startswith(base_oid + "."):
                    results.append((oid_str, value))
                    last_oid = ObjectIdentity(oid_str)
                    in_table = True

            if not in_table or len(var_binds) < self.bulk_size:
                break

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.debug(
            f"Walk of {base_oid} on {address}: {len(results)} rows in {elapsed:.2f}s "
            f"({iteration + 1} requests)"
        )
        return results
