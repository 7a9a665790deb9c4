#!/usr/bin/env python3
"""
NetSnmp - Command Line Interface.

Usage:
    # Scan the configured networks, then walk CDP/LLDP on switches
    netsnmp scan --config netsnmp.yaml

    # Scan given networks, SNMP only (ICMP blocked)
    netsnmp scan 10.0.0.0/24 10.0.1.10-50 --mode snmp -c public -c private

    # Neighbor tables of known switches
    netsnmp neighbors 10.0.0.1 10.0.0.2 -c private
    netsnmp neighbors --hosts scan.json

    # Which community answers on a host
    netsnmp test 10.0.0.1 -c public -c private
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import ScanConfig, load_config
from .engine import DiscoveryEngine
from .events import ConsoleEventPrinter, EventEmitter
from .exceptions import ConfigError, ParseError
from .models import BatchResult, HostRecord

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2


def setup_logging(level: str = "WARNING") -> None:
    """Configure logging with optional colors."""
    use_color = sys.platform != 'win32' or 'WT_SESSION' in os.environ

    class ColorFormatter(logging.Formatter):
        COLORS = {
            'DEBUG': '\033[36m',    # Cyan
            'INFO': '\033[32m',     # Green
            'WARNING': '\033[33m',  # Yellow
            'ERROR': '\033[31m',    # Red
            'CRITICAL': '\033[35m', # Magenta
        }
        RESET = '\033[0m'

        def format(self, record):
            if use_color:
                color = self.COLORS.get(record.levelname, self.RESET)
                record.levelname = f"{color}{record.levelname:8}{self.RESET}"
            else:
                record.levelname = f"{record.levelname:8}"
            return super().format(record)

    log_level = getattr(logging, level.upper(), logging.WARNING)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColorFormatter(
        '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    root = logging.getLogger('netsnmp')
    root.setLevel(log_level)
    root.handlers = [handler]
    root.propagate = False


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        '--config',
        type=Path,
        help='YAML config file (communities also from NETSNMP_COMMUNITIES)'
    )
    common.add_argument(
        '-c', '--community',
        action='append',
        dest='communities',
        help='SNMP community string, repeat for fallbacks (overrides config)'
    )
    common.add_argument(
        '-t', '--timeout',
        type=float,
        help='SNMP timeout in seconds'
    )
    common.add_argument(
        '--retries',
        type=int,
        help='SNMP retries per attempt'
    )
    common.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output with debug logging'
    )
    common.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colored output'
    )
    common.add_argument(
        '--timestamps',
        action='store_true',
        help='Show timestamps on events'
    )

    parser = argparse.ArgumentParser(
        prog='netsnmp',
        description='SNMP network inventory scanner',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Network formats:
  192.168.1.10            single address
  192.168.1.10-50         last-octet range (1-254)
  192.168.1.0/24          whole /24 (.1 to .254)

Examples:
  netsnmp scan 192.168.1.0/24 -c public
  netsnmp scan --config netsnmp.yaml --mode snmp -o inventory.json
  netsnmp neighbors 192.168.1.1 --protocol lldp
  netsnmp test 192.168.1.1 -c public -c private
        """
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Scan command
    scan_parser = subparsers.add_parser(
        'scan',
        parents=[common],
        help='Discover hosts, then switch neighbors'
    )
    scan_parser.add_argument(
        'networks',
        nargs='*',
        help='Networks to scan (default: from config)'
    )
    scan_parser.add_argument(
        '--mode',
        choices=['icmp', 'snmp'],
        help='icmp: ping first; snmp: query every address directly'
    )
    scan_parser.add_argument(
        '-w', '--workers',
        type=int,
        help='Parallel workers'
    )
    scan_parser.add_argument(
        '--delay',
        type=int,
        help='Delay between task launches in milliseconds'
    )
    scan_parser.add_argument(
        '-p', '--protocol',
        action='append',
        dest='protocols',
        choices=['cdp', 'lldp'],
        help='Neighbor protocol in priority order (repeatable)'
    )
    scan_parser.add_argument(
        '--details',
        action='store_true',
        default=None,
        help='Also collect the first-interface MAC and sysDescr'
    )
    scan_parser.add_argument(
        '--hosts-only',
        action='store_true',
        help='Skip the neighbor pass'
    )
    scan_parser.add_argument(
        '-o', '--output',
        type=Path,
        help='Write results as JSON'
    )

    # Neighbors command
    neighbors_parser = subparsers.add_parser(
        'neighbors',
        parents=[common],
        help='Walk CDP/LLDP tables of given switches'
    )
    neighbors_parser.add_argument(
        'targets',
        nargs='*',
        help='Switch IP addresses'
    )
    neighbors_parser.add_argument(
        '--hosts',
        type=Path,
        help='JSON output of a previous scan; every host in it is walked'
    )
    neighbors_parser.add_argument(
        '-w', '--workers',
        type=int,
        help='Parallel workers'
    )
    neighbors_parser.add_argument(
        '-p', '--protocol',
        action='append',
        dest='protocols',
        choices=['cdp', 'lldp'],
        help='Neighbor protocol in priority order (repeatable)'
    )
    neighbors_parser.add_argument(
        '-o', '--output',
        type=Path,
        help='Write results as JSON'
    )

    # Test command
    test_parser = subparsers.add_parser(
        'test',
        parents=[common],
        help='Test SNMP connectivity to one host'
    )
    test_parser.add_argument('target', help='IP address')

    return parser


def build_config(args: argparse.Namespace) -> ScanConfig:
    """Config file and environment, then command line overrides."""
    config = load_config(getattr(args, 'config', None))
    return config.with_overrides(
        networks=getattr(args, 'networks', None) or None,
        communities=args.communities,
        snmp_timeout=args.timeout,
        snmp_retries=args.retries,
        scan_mode=getattr(args, 'mode', None),
        scan_workers=getattr(args, 'workers', None),
        scan_delay=getattr(args, 'delay', None),
        discovery_protocols=getattr(args, 'protocols', None),
        collect_details=getattr(args, 'details', None),
    ).validate()


def print_troubleshooting(result: BatchResult, config: ScanConfig) -> None:
    """Guidance after a pass that found nothing."""
    print()
    if result.kind == "hosts":
        print("No SNMP devices found.")
        print("Troubleshooting:")
        print("  - Check network connectivity to the target ranges")
        print(f"  - Verify the community strings ({len(config.communities)} configured)")
        print("  - Check firewalls and ACLs allow SNMP (UDP 161) from this host")
        if config.scan_mode == 'icmp':
            print("  - If ICMP is blocked, retry with --mode snmp")
        print("  - Run 'netsnmp test <ip>' against a known device")
    else:
        print("No neighbors found.")
        print("Troubleshooting:")
        print("  - Verify CDP/LLDP is enabled on the switches")
        print("  - Check the community has read access to the neighbor tables")
        print("  - Try the other protocol with --protocol cdp / --protocol lldp")
    print()


def write_output(path: Path, *results: BatchResult) -> None:
    data = {result.kind: result.to_dict() for result in results}
    with open(path, 'w') as f:
        json.dump(data, f, indent=2)
    print(f"Results saved to: {path}")


def load_hosts(path: Path) -> List[HostRecord]:
    """
    Host records from a JSON file written by 'scan -o'.

    Scan output leaves communities out; a hand-written file may add a
    "community" key per host to have that community tried first.

    Raises:
        ConfigError: unreadable file or unexpected layout
    """
    try:
        with open(path) as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read hosts file {path}: {e.strerror or e}") from None
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in hosts file {path}: {e}") from None

    try:
        records = data.get('hosts', {}).get('records', [])
        return [
            HostRecord(
                address=r['address'],
                hostname=r.get('hostname') or r['address'],
                serial_number=r.get('serial_number') or "",
                community=r.get('community') or None,
            )
            for r in records
        ]
    except (AttributeError, KeyError, TypeError) as e:
        raise ConfigError(f"Unexpected layout in hosts file {path}: {e!r}") from None


def _make_engine(args: argparse.Namespace, config: ScanConfig, **kwargs) -> DiscoveryEngine:
    emitter = EventEmitter()
    printer = ConsoleEventPrinter(
        verbose=args.verbose,
        color=not args.no_color,
        show_timestamps=args.timestamps,
    )
    emitter.subscribe(printer.handle_event)
    return DiscoveryEngine(config, events=emitter, **kwargs)


async def cmd_scan(args: argparse.Namespace, config: ScanConfig) -> int:
    """Host pass, then neighbor pass unless --hosts-only."""
    engine = _make_engine(args, config)

    if args.hosts_only:
        hosts = await engine.discover_hosts()
        results = [hosts]
    else:
        hosts, neighbors = await engine.scan()
        results = [hosts, neighbors]

    if args.output:
        write_output(args.output, *results)

    if hosts.exhausted:
        print_troubleshooting(hosts, config)
        return EXIT_NOT_FOUND
    return EXIT_OK


async def cmd_neighbors(args: argparse.Namespace, config: ScanConfig) -> int:
    """Neighbor pass over explicit targets and/or hosts from a scan file."""
    hosts = [HostRecord(address=t, hostname=t) for t in args.targets]
    if args.hosts:
        hosts.extend(load_hosts(args.hosts))

    if not hosts:
        print("ERROR: no switches given (use targets or --hosts)")
        return EXIT_USAGE

    # Explicit targets are switches by definition
    engine = _make_engine(args, config, candidate_filter=lambda host: True)
    result = await engine.discover_neighbors(hosts)

    if args.output:
        write_output(args.output, result)

    for record in result.records:
        print(f"  {record.source_switch:<15} {record.local_port:<20} "
              f"{record.neighbor_hostname:<30} {record.neighbor_address:<15} "
              f"{record.platform}")

    if result.exhausted:
        print_troubleshooting(result, config)
        return EXIT_NOT_FOUND
    return EXIT_OK


async def cmd_test(args: argparse.Namespace, config: ScanConfig) -> int:
    """Try each community against one host, stopping at the first answer."""
    print(f"Testing SNMP to: {args.target}")
    print(f"Communities: {len(config.communities)}  Timeout: {config.snmp_timeout}s")
    print()

    engine = DiscoveryEngine(config.with_overrides(scan_mode='snmp'))
    attempts = await engine.test_connectivity(args.target)

    for community, hostname, reason in attempts:
        masked = community[:2] + '*' * max(len(community) - 2, 0)
        if hostname:
            print(f"  '{masked}': OK  sysName = {hostname}")
        else:
            print(f"  '{masked}': FAILED  {reason}")

    print()
    if attempts and attempts[-1][1]:
        print("SNMP connectivity successful.")
        return EXIT_OK
    print("All SNMP attempts failed.")
    return EXIT_NOT_FOUND


COMMANDS = {
    'scan': cmd_scan,
    'neighbors': cmd_neighbors,
    'test': cmd_test,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    setup_logging('DEBUG' if args.verbose else 'WARNING')

    try:
        config = build_config(args)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        return asyncio.run(COMMANDS[args.command](args, config))
    except (ConfigError, ParseError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE
    except KeyboardInterrupt:
        print("\nInterrupted")
        return EXIT_NOT_FOUND


if __name__ == '__main__':
    sys.exit(main())
