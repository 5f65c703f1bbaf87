"""Pydantic models for the published snapshot document.

Document layout:
    {
      "hostname": "...",
      "ip_address": "...",
      "timestamp": "2024-05-01T12:00:00+02:00",
      "system_metrics": {"cpu_info": "...", "memory_info": "...",
                         "swap_info": "...", "threadinfo": ""},
      "logs": {"dmesg": "..."}
    }
"""

from pydantic import BaseModel, Field


class SystemMetrics(BaseModel):
    """Resource usage summary lines, passed through verbatim."""

    cpu_info: str = Field("", description="CPU summary line from top")
    memory_info: str = Field("", description="Memory summary line from top")
    swap_info: str = Field("", description="Swap summary line from top")
    threadinfo: str = Field("", description="Reserved, always empty")


class LogsBlock(BaseModel):
    """Kernel log lines observed since the previous checkpoint."""

    dmesg: str = Field("", description="New entries joined by newlines")


class Snapshot(BaseModel):
    """One cycle's published document."""

    hostname: str = Field(..., description="Host name")
    ip_address: str = Field("", description="Primary IP address, empty if unknown")
    timestamp: str = Field(..., description="ISO-8601 time with UTC offset")
    system_metrics: SystemMetrics = Field(default_factory=SystemMetrics)
    logs: LogsBlock = Field(default_factory=LogsBlock)

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON; string fields are escaped by the encoder."""
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_json(cls, data: str) -> "Snapshot":
        return cls.model_validate_json(data)
