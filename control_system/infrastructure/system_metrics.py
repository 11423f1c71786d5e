"""Host metrics collector backed by psutil.

Samples CPU, memory and uptime on demand. The first cpu_percent() call
only primes psutil's counters, so the collector primes once at construction.
"""

import platform
import socket
import time

import psutil

from control_system.core.system_models import SystemState


class SystemMetrics:
    def __init__(self):
        psutil.cpu_percent(interval=None)  # prime (first call returns 0)
        self._hostname = socket.gethostname() or "unknown"
        self._os_name = platform.system() or "unknown"
        self._cpu_count = psutil.cpu_count() or 0

    def collect(self) -> SystemState:
        mem = psutil.virtual_memory()
        memory_percent = mem.used / mem.total * 100.0 if mem.total else 0.0
        return SystemState(
            cpu_usage=psutil.cpu_percent(interval=None),
            memory_used=mem.used,
            memory_total=mem.total,
            memory_percent=memory_percent,
            uptime_secs=max(0, int(time.time() - psutil.boot_time())),
            hostname=self._hostname,
            os_name=self._os_name,
            cpu_count=self._cpu_count,
        )
