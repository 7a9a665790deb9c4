"""
Tests for the command line front end.
"""

import json

import pytest

from netsnmp.cli import (
    EXIT_NOT_FOUND,
    EXIT_OK,
    EXIT_USAGE,
    build_config,
    create_parser,
    load_hosts,
    main,
    print_troubleshooting,
)
from netsnmp.config import COMMUNITIES_ENV, ScanConfig
from netsnmp.engine import DiscoveryEngine
from netsnmp.exceptions import ConfigError
from netsnmp.models import BatchResult
from netsnmp.oids import CDP

from tests.fakes import FakeTransport, cdp_rows, host_response


@pytest.fixture(autouse=True)
def no_env_communities(monkeypatch):
    monkeypatch.delenv(COMMUNITIES_ENV, raising=False)


@pytest.fixture
def fake_engine(monkeypatch):
    """Route every engine the CLI builds through one FakeTransport."""
    transport = FakeTransport()

    def factory(config, **kwargs):
        return DiscoveryEngine(config, transport=transport, **kwargs)

    monkeypatch.setattr("netsnmp.cli.DiscoveryEngine", factory)
    return transport


def write_hosts(path, *records):
    path.write_text(json.dumps({"hosts": {"records": list(records)}}))
    return path

class TestParser:

    def test_scan_arguments(self):
        args = create_parser().parse_args([
            "scan", "10.0.0.0/24", "10.0.1.5",
            "-c", "public", "-c", "private",
            "--mode", "snmp", "-w", "10", "-p", "lldp",
        ])
        config = build_config(args)

        assert config.networks == ("10.0.0.0/24", "10.0.1.5")
        assert config.communities == ("public", "private")
        assert config.scan_mode == "snmp"
        assert config.scan_workers == 10
        assert config.discovery_protocols == ("lldp",)

    def test_scan_without_networks_uses_config(self, tmp_path):
        path = tmp_path / "netsnmp.yaml"
        path.write_text("networks: 172.16.0.1-20\n")
        args = create_parser().parse_args(["scan", "--config", str(path)])
        assert build_config(args).networks == ("172.16.0.1-20",)

    def test_details_flag(self):
        args = create_parser().parse_args(["scan", "10.0.0.1", "--details"])
        assert build_config(args).collect_details is True

    def test_details_default_comes_from_config(self, tmp_path):
        path = tmp_path / "netsnmp.yaml"
        path.write_text("collect_details: yes\n")
        args = create_parser().parse_args(["scan", "10.0.0.1", "--config", str(path)])
        assert build_config(args).collect_details is True
        assert build_config(create_parser().parse_args(["scan", "10.0.0.1"])).collect_details is False

    def test_invalid_mode_rejected(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["scan", "--mode", "arp"])


class TestMain:

    def test_no_command(self, capsys):
        assert main([]) == EXIT_USAGE

    def test_invalid_config_exits_with_usage(self, capsys):
        assert main(["scan", "10.0.0.1", "-w", "0"]) == EXIT_USAGE
        assert "scan_workers" in capsys.readouterr().err


class TestHelpers:

    def test_troubleshooting_for_hosts(self, capsys):
        print_troubleshooting(BatchResult(kind="hosts"), ScanConfig())
        out = capsys.readouterr().out
        assert "No SNMP devices found" in out
        assert "--mode snmp" in out

    def test_troubleshooting_for_neighbors(self, capsys):
        print_troubleshooting(BatchResult(kind="neighbors"), ScanConfig())
        assert "CDP/LLDP" in capsys.readouterr().out

    def test_load_hosts(self, tmp_path):
        path = tmp_path / "scan.json"
        path.write_text(json.dumps({
            "hosts": {"records": [
                {"address": "10.0.0.1", "hostname": "core", "serial_number": "FOC1"},
                {"address": "10.0.0.5", "hostname": "printer", "serial_number": ""},
            ]}
        }))
        hosts = load_hosts(path)
        assert [h.address for h in hosts] == ["10.0.0.1", "10.0.0.5"]
        assert hosts[0].serial_number == "FOC1"

    def test_load_hosts_keeps_community(self, tmp_path):
        path = write_hosts(tmp_path / "hosts.json",
                           {"address": "10.0.0.1", "hostname": "core", "community": "private"})
        assert load_hosts(path)[0].community == "private"

    def test_load_hosts_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_hosts(tmp_path / "nope.json")

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"hosts": {"records": [{"hostname": "x"}]}}'])
    def test_load_hosts_bad_content(self, tmp_path, content):
        path = tmp_path / "hosts.json"
        path.write_text(content)
        with pytest.raises(ConfigError):
            load_hosts(path)


class TestNeighborsCommand:

    def test_missing_hosts_file_exits_with_usage(self, tmp_path, capsys, fake_engine):
        code = main(["neighbors", "--hosts", str(tmp_path / "nonexistent.json")])
        assert code == EXIT_USAGE
        assert "nonexistent.json" in capsys.readouterr().err
        assert fake_engine.walk_calls == []

    def test_malformed_hosts_file_exits_with_usage(self, tmp_path, capsys, fake_engine):
        path = tmp_path / "hosts.json"
        path.write_text("{not json")
        assert main(["neighbors", "--hosts", str(path)]) == EXIT_USAGE
        assert "Invalid JSON" in capsys.readouterr().err

    def test_hosts_without_serial_are_walked(self, tmp_path, capsys, fake_engine):
        path = write_hosts(tmp_path / "hosts.json",
                           {"address": "10.0.0.5", "hostname": "printer", "serial_number": ""})

        code = main(["neighbors", "--hosts", str(path), "-c", "public", "-p", "cdp"])

        assert code == EXIT_NOT_FOUND
        assert [c[0] for c in fake_engine.walk_calls] == ["10.0.0.5"]

    def test_file_community_is_tried_first(self, tmp_path, capsys, fake_engine):
        fake_engine.walks[("10.0.0.1", "private", CDP.CACHE_ENTRY)] = cdp_rows(1, 1, "0x0A000005", "AP-1")
        path = write_hosts(tmp_path / "hosts.json",
                           {"address": "10.0.0.1", "hostname": "core", "community": "private"})

        code = main(["neighbors", "--hosts", str(path), "-c", "public", "-c", "private", "-p", "cdp"])

        assert code == EXIT_OK
        assert fake_engine.walk_calls == [("10.0.0.1", "private", CDP.CACHE_ENTRY)]
        assert "AP-1" in capsys.readouterr().out


class TestTestCommand:

    def test_failure_reasons_are_printed(self, capsys, fake_engine):
        fake_engine.errors.add(("10.0.0.1", "public"))

        code = main(["test", "10.0.0.1", "-c", "public", "-c", "private"])

        out = capsys.readouterr().out
        assert code == EXIT_NOT_FOUND
        assert "genErr" in out
        assert "no response (timeout)" in out

    def test_success(self, capsys, fake_engine):
        fake_engine.responses[("10.0.0.1", "public")] = host_response("core")
        assert main(["test", "10.0.0.1", "-c", "public"]) == EXIT_OK
        assert "sysName = core" in capsys.readouterr().out
