"""
Tests for result sinks.
"""

import threading

from netsnmp.models import HostRecord, NeighborProtocol, NeighborRecord
from netsnmp.sink import CallbackSink, CollectingSink


def host(i):
    return HostRecord(address=f"10.0.0.{i}", hostname=f"h{i}")


class TestCollectingSink:

    def test_collects_and_copies(self):
        sink = CollectingSink()
        sink.add_host(host(1))
        sink.add_neighbor(NeighborRecord("10.0.0.9", "ap-9", protocol=NeighborProtocol.LLDP))

        hosts = sink.hosts
        hosts.clear()

        assert len(sink.hosts) == 1
        assert sink.neighbors[0].neighbor_hostname == "ap-9"

    def test_concurrent_appends(self):
        sink = CollectingSink()

        def add_many(offset):
            for i in range(200):
                sink.add_host(host(offset + i))

        threads = [threading.Thread(target=add_many, args=(n * 1000,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(sink.hosts) == 800

    def test_clear(self):
        sink = CollectingSink()
        sink.add_host(host(1))
        sink.clear()
        assert sink.hosts == []


class TestCallbackSink:

    def test_forwards_records(self):
        seen = []
        sink = CallbackSink(on_host=seen.append)
        sink.add_host(host(2))
        sink.add_neighbor(NeighborRecord("10.0.0.9", "ap-9"))
        assert [r.address for r in seen] == ["10.0.0.2"]
