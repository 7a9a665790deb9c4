"""
NetSnmp - Scan Configuration.

ScanConfig is an immutable value built once (from YAML, a dict or CLI
overrides) and never mutated while a batch runs.

YAML example:

    networks: 10.0.0.0/24 10.0.1.10-50 192.168.5.20
    communities: [public, private]
    ping_timeout: 1          # seconds
    snmp_timeout: 2          # seconds
    snmp_retries: 1
    scan_workers: 25
    scan_delay: 20           # milliseconds between launches
    discovery_protocols: cdp lldp
    scan_mode: icmp          # "icmp" (ping first) or "snmp" (query directly)
    collect_details: false   # also ask for the first-interface MAC and sysDescr

List fields accept either a YAML list or a space-separated string.
"subnets" is accepted as an alias of "networks".
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .exceptions import ConfigError
from .models import NeighborProtocol

logger = logging.getLogger(__name__)

COMMUNITIES_ENV = 'NETSNMP_COMMUNITIES'
SCAN_MODES = ('icmp', 'snmp')

_LIST_FIELDS = ('networks', 'communities', 'discovery_protocols')
_KEY_ALIASES = {'subnets': 'networks'}


def _as_tuple(value: Any) -> Tuple[str, ...]:
    """Normalize a list field: YAML list, tuple or space/comma separated string."""
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(part for part in value.replace(',', ' ').split() if part)
    return tuple(str(v).strip() for v in value if str(v).strip())


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ('true', 'yes', 'on', '1'):
        return True
    if text in ('false', 'no', 'off', '0', ''):
        return False
    raise ValueError(text)


@dataclass(frozen=True)
class ScanConfig:
    """Scanner settings; timeouts in seconds, scan_delay in milliseconds."""
    networks: Tuple[str, ...] = ("192.168.1.0/24",)
    communities: Tuple[str, ...] = ("public",)
    ping_timeout: float = 1
    snmp_timeout: float = 2
    snmp_retries: int = 1
    scan_workers: int = 25
    scan_delay: int = 20
    discovery_protocols: Tuple[str, ...] = ("cdp", "lldp")
    scan_mode: str = "icmp"
    collect_details: bool = False

    @property
    def protocols(self) -> Tuple[NeighborProtocol, ...]:
        return tuple(NeighborProtocol.parse(p) for p in self.discovery_protocols)

    @property
    def ping_timeout_ms(self) -> int:
        return int(self.ping_timeout * 1000)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ScanConfig':
        """
        Build a config from a mapping, ignoring unknown keys.

        Raises:
            ConfigError: if a value has the wrong type
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}

        for key, value in (data or {}).items():
            key = _KEY_ALIASES.get(str(key).lower(), str(key).lower())
            if key not in known:
                logger.debug(f"Ignoring unknown config key '{key}'")
                continue
            if value is None:
                continue
            values[key] = value

        return cls()._coerced(values)

    def with_overrides(self, **overrides: Any) -> 'ScanConfig':
        """Copy with non-None overrides applied (CLI flags)."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return self._coerced(values)

    def _coerced(self, values: Dict[str, Any]) -> 'ScanConfig':
        converted: Dict[str, Any] = {}
        for key, value in values.items():
            try:
                if key in _LIST_FIELDS:
                    converted[key] = _as_tuple(value)
                elif key in ('scan_workers', 'snmp_retries', 'scan_delay'):
                    converted[key] = int(value)
                elif key in ('ping_timeout', 'snmp_timeout'):
                    converted[key] = float(value)
                elif key == 'collect_details':
                    converted[key] = _as_bool(value)
                elif key == 'scan_mode':
                    converted[key] = str(value).strip().lower()
                else:
                    converted[key] = value
            except (TypeError, ValueError):
                raise ConfigError(f"Invalid value for '{key}': {value!r}") from None
        return replace(self, **converted)

    def validate(self) -> 'ScanConfig':
        """
        Reject settings no scan can run with.

        Raises:
            ConfigError: on the first invalid setting
        """
        if not self.communities:
            raise ConfigError("At least one SNMP community string is required")
        if self.scan_workers <= 0:
            raise ConfigError(f"scan_workers must be positive, got {self.scan_workers}")
        if self.snmp_timeout <= 0:
            raise ConfigError(f"snmp_timeout must be positive, got {self.snmp_timeout}")
        if self.ping_timeout <= 0:
            raise ConfigError(f"ping_timeout must be positive, got {self.ping_timeout}")
        if self.snmp_retries < 0:
            raise ConfigError(f"snmp_retries cannot be negative, got {self.snmp_retries}")
        if self.scan_delay < 0:
            raise ConfigError(f"scan_delay cannot be negative, got {self.scan_delay}")
        if self.scan_mode not in SCAN_MODES:
            raise ConfigError(
                f"Unknown scan_mode '{self.scan_mode}' (expected one of {', '.join(SCAN_MODES)})"
            )
        for protocol in self.discovery_protocols:
            try:
                NeighborProtocol.parse(protocol)
            except ValueError as e:
                raise ConfigError(str(e)) from None
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view with the communities masked."""
        return {
            'networks': list(self.networks),
            'communities': ['*' * len(c) for c in self.communities],
            'ping_timeout': self.ping_timeout,
            'snmp_timeout': self.snmp_timeout,
            'snmp_retries': self.snmp_retries,
            'scan_workers': self.scan_workers,
            'scan_delay': self.scan_delay,
            'discovery_protocols': list(self.discovery_protocols),
            'scan_mode': self.scan_mode,
            'collect_details': self.collect_details,
        }


def communities_from_env() -> Optional[Tuple[str, ...]]:
    """Community strings from NETSNMP_COMMUNITIES, if set."""
    raw = os.environ.get(COMMUNITIES_ENV, '')
    communities = _as_tuple(raw)
    return communities or None


def load_config(path: Optional[Union[str, Path]] = None) -> ScanConfig:
    """
    Load and validate configuration.

    Defaults, then the YAML file (if given), then NETSNMP_COMMUNITIES.

    Raises:
        ConfigError: missing file, malformed YAML or invalid settings
    """
    data: Dict[str, Any] = {}

    if path:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from None
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        logger.debug(f"Loaded config from {path}")

    config = ScanConfig.from_dict(data)

    env_communities = communities_from_env()
    if env_communities:
        logger.debug(f"Using communities from {COMMUNITIES_ENV}")
        config = config.with_overrides(communities=env_communities)

    return config.validate()
