"""Host metrics snapshot published by the system sampler. Not persisted."""

from pydantic import BaseModel


class SystemState(BaseModel):
    cpu_usage: float = 0.0
    memory_used: int = 0
    memory_total: int = 0
    memory_percent: float = 0.0
    uptime_secs: int = 0
    hostname: str = "unknown"
    os_name: str = "unknown"
    cpu_count: int = 0

    def uptime_formatted(self) -> str:
        days, rest = divmod(self.uptime_secs, 86400)
        hours, rest = divmod(rest, 3600)
        mins = rest // 60
        if days > 0:
            return f"{days}d {hours}h {mins}m"
        if hours > 0:
            return f"{hours}h {mins}m"
        return f"{mins}m"
