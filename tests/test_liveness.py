"""
Tests for the ping liveness probe.
"""

import asyncio
import sys

import pytest

from netsnmp.liveness import PingProbe


class TestPingCommand:

    def test_posix_command(self):
        probe = PingProbe(ping_path="/bin/ping")
        probe._windows = False
        assert probe.build_command("10.0.0.1", 1000) == [
            "/bin/ping", "-c", "1", "-W", "1", "-q", "10.0.0.1"
        ]

    def test_timeout_rounds_up_to_seconds(self):
        probe = PingProbe(ping_path="/bin/ping")
        probe._windows = False
        assert probe.build_command("10.0.0.1", 1500)[4] == "2"
        assert probe.build_command("10.0.0.1", 200)[4] == "1"

    def test_windows_command(self):
        probe = PingProbe(ping_path="ping.exe")
        probe._windows = True
        assert probe.build_command("10.0.0.1", 750) == [
            "ping.exe", "-n", "1", "-w", "750", "10.0.0.1"
        ]


class TestPingProbe:

    def test_missing_binary(self, monkeypatch):
        monkeypatch.setattr("netsnmp.liveness.shutil.which", lambda name: None)
        probe = PingProbe()
        assert not probe.available
        with pytest.raises(RuntimeError):
            asyncio.run(probe.is_alive("10.0.0.1", 1000))

    @pytest.mark.skipif(sys.platform == "win32", reason="shell script stand-ins")
    def test_exit_status_decides(self, tmp_path):
        # Stand-in ping executables: exit 0 = reply, exit 1 = no reply
        up = tmp_path / "ping-up"
        up.write_text("#!/bin/sh\nexit 0\n")
        up.chmod(0o755)
        down = tmp_path / "ping-down"
        down.write_text("#!/bin/sh\nexit 1\n")
        down.chmod(0o755)

        assert asyncio.run(PingProbe(ping_path=str(up)).is_alive("10.0.0.1", 1000)) is True
        assert asyncio.run(PingProbe(ping_path=str(down)).is_alive("10.0.0.1", 1000)) is False
