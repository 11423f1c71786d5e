"""System metrics — psutil calls patched to fixed values."""

from types import SimpleNamespace

import psutil

from control_system.infrastructure.system_metrics import SystemMetrics


def test_collect_maps_psutil_readings(monkeypatch):
    """Readings are copied into SystemState with derived percent and uptime."""
    monkeypatch.setattr(psutil, "cpu_percent", lambda interval=None: 37.5)
    monkeypatch.setattr(psutil, "cpu_count", lambda: 8)
    monkeypatch.setattr(
        psutil, "virtual_memory", lambda: SimpleNamespace(used=4_000, total=16_000),
    )
    monkeypatch.setattr(psutil, "boot_time", lambda: 1_000.0)
    monkeypatch.setattr("time.time", lambda: 4_661.0)

    state = SystemMetrics().collect()

    assert state.cpu_usage == 37.5
    assert state.cpu_count == 8
    assert state.memory_used == 4_000
    assert state.memory_percent == 25.0
    assert state.uptime_secs == 3_661
    assert state.uptime_formatted() == "1h 1m"


def test_zero_total_memory_gives_zero_percent(monkeypatch):
    """Zero total memory does not divide by zero."""
    monkeypatch.setattr(
        psutil, "virtual_memory", lambda: SimpleNamespace(used=0, total=0),
    )
    assert SystemMetrics().collect().memory_percent == 0.0
