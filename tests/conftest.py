import pytest

from netsnmp.config import ScanConfig


@pytest.fixture
def snmp_config():
    """Config that skips ICMP and launches tasks without delay."""
    return ScanConfig(
        networks=("10.0.0.1-10",),
        communities=("public", "private"),
        scan_mode="snmp",
        scan_delay=0,
        scan_workers=5,
    )
