"""Tests for numeric metrics and the server id."""

from collections import namedtuple

import pytest
from continuous_monitor.system import identity
from continuous_monitor.system import metrics as metrics_module
from continuous_monitor.system.identity import generate_server_id, read_machine_id
from continuous_monitor.system.metrics import MetricsData, collect_metrics

Partition = namedtuple("Partition", "device mountpoint fstype opts")
DiskUsage = namedtuple("DiskUsage", "total used free percent")
VirtualMemory = namedtuple("VirtualMemory", "total available percent used free")
DiskIO = namedtuple("DiskIO", "read_count write_count read_bytes write_bytes")
NetIO = namedtuple("NetIO", "bytes_sent bytes_recv packets_sent packets_recv")

MB = 1024 * 1024


@pytest.fixture
def fake_psutil(monkeypatch):
    """Replace the psutil calls with a fixed host."""
    psutil = metrics_module.psutil
    net_samples = iter(
        [
            NetIO(bytes_sent=1000, bytes_recv=5000, packets_sent=1, packets_recv=1),
            NetIO(bytes_sent=1000 + 2048, bytes_recv=5000 + 10240, packets_sent=2, packets_recv=3),
        ]
    )
    partitions = [
        Partition("/dev/sda1", "/", "ext4", "rw"),
        Partition("/dev/sda1", "/var/lib/docker", "ext4", "rw"),
        Partition("/dev/sdb1", "/data", "ext4", "rw"),
        Partition("/dev/sdc1", "/broken", "ext4", "rw"),
    ]
    usage = {
        "/": DiskUsage(total=100, used=30, free=70, percent=30.0),
        "/data": DiskUsage(total=300, used=60, free=240, percent=20.0),
    }

    def disk_usage(path):
        if path not in usage:
            raise PermissionError(path)
        return usage[path]

    monkeypatch.setattr(psutil, "cpu_percent", lambda interval=None: 12.34)
    monkeypatch.setattr(
        psutil,
        "virtual_memory",
        lambda: VirtualMemory(total=8000, available=2000, percent=75.0, used=5500, free=500),
    )
    monkeypatch.setattr(psutil, "disk_partitions", lambda all=False: partitions)
    monkeypatch.setattr(psutil, "disk_usage", disk_usage)
    monkeypatch.setattr(
        psutil,
        "disk_io_counters",
        lambda: DiskIO(read_count=1, write_count=1, read_bytes=150 * MB, write_bytes=MB // 2),
    )
    monkeypatch.setattr(psutil, "net_io_counters", lambda: next(net_samples))


class TestCollectMetrics:
    """Tests for collect_metrics."""

    def test_numeric_sample(self, fake_psutil):
        """Every metric is derived from psutil and rounded."""
        sleeps = []
        sample = collect_metrics(server_id="web-01-abcd1234", sleep=sleeps.append)

        assert sample.server_id == "web-01-abcd1234"
        assert sample.cpu_usage == 12.3
        assert sample.memory_usage == 75.0
        assert sample.io_read == 150.0
        assert sample.io_write == 0.5
        assert sample.network_in == 10.0
        assert sample.network_out == 2.0
        assert sleeps == [metrics_module.NETWORK_SAMPLE_SECONDS]
        assert sample.timestamp > 1_600_000_000_000

    def test_disk_usage_spans_devices_once(self, fake_psutil):
        """Bind mounts count once; unreadable mounts are skipped."""
        # (30 + 60) used of (100 + 300)
        assert collect_metrics(server_id="x", sleep=lambda s: None).disk_usage == 22.5

    def test_missing_io_counters(self, fake_psutil, monkeypatch):
        """Hosts without disk counters report zero IO."""
        monkeypatch.setattr(metrics_module.psutil, "disk_io_counters", lambda: None)
        sample = collect_metrics(server_id="x", sleep=lambda s: None)
        assert (sample.io_read, sample.io_write) == (0.0, 0.0)

    def test_to_dict_keys(self):
        """Serialized keys use the published camelCase names."""
        data = MetricsData(server_id="h-1", timestamp=1, cpu_usage=1.5).to_dict()
        assert list(data) == [
            "serverId",
            "timestamp",
            "cpuUsage",
            "memoryUsage",
            "diskUsage",
            "ioRead",
            "ioWrite",
            "networkIn",
            "networkOut",
        ]
        assert data["cpuUsage"] == 1.5


class TestServerId:
    """Tests for the server id."""

    def test_hostname_and_machine_id_prefix(self):
        """Only the first 8 characters of the machine id are used."""
        assert generate_server_id("web-01", "0123456789abcdef") == "web-01-01234567"

    def test_short_machine_id(self):
        """A short machine id is used as is."""
        assert generate_server_id("web-01", "abc") == "web-01-abc"

    def test_reads_first_available_file(self, tmp_path):
        """The first non-empty machine id file wins."""
        empty = tmp_path / "empty"
        empty.write_text("\n")
        real = tmp_path / "machine-id"
        real.write_text("deadbeefcafe\n")
        assert read_machine_id([tmp_path / "missing", empty, real]) == "deadbeefcafe"

    def test_unknown_without_machine_id(self, tmp_path, monkeypatch):
        """No machine id file gives the unknown sentinel."""
        monkeypatch.setattr(identity.socket, "gethostname", lambda: "db-02")
        assert read_machine_id([tmp_path / "missing"]) == "unknown"
        assert generate_server_id(machine_id="unknown") == "db-02-unknown"
