from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Literal

EntityKind = Literal["host", "guest"]

POWERED_ON = "poweredOn"
POWERED_OFF = "poweredOff"

_SIZING_ATTRS = (
    "memory_mb",
    "provisioned_gb",
    "used_gb",
    "cpu_total_mhz",
    "cpu_usage_mhz",
    "memory_total_mb",
    "memory_usage_mb",
)


@dataclass(frozen=True)
class MonitoredEntity:
    """Snapshot of one host or guest taken at the start of a collection cycle.

    Attributes:
        name: Display name as reported by the inventory
        kind: "host" for hypervisors, "guest" for virtual machines
        power_state: poweredOn, poweredOff or any other upstream state string
        cpu_count: Number of vCPUs (guest) or physical cores (host)
        parent_host_name: Host running the guest (guests only)
        memory_mb: Configured guest memory
        provisioned_gb: Provisioned guest storage
        used_gb: Committed guest storage
        cpu_total_mhz: Host CPU capacity
        cpu_usage_mhz: Host CPU in use
        memory_total_mb: Host memory capacity
        memory_usage_mb: Host memory in use
    """

    name: str
    kind: EntityKind
    power_state: str = POWERED_ON
    cpu_count: int = 0
    parent_host_name: str | None = None
    memory_mb: float = 0.0
    provisioned_gb: float = 0.0
    used_gb: float = 0.0
    cpu_total_mhz: int = 0
    cpu_usage_mhz: int = 0
    memory_total_mb: float = 0.0
    memory_usage_mb: float = 0.0

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("name must not be empty")
        if self.kind not in ("host", "guest"):
            raise ValueError(f"kind must be 'host' or 'guest' (got {self.kind!r})")
        if self.kind == "guest" and not self.parent_host_name:
            raise ValueError(f"guest {self.name!r} requires parent_host_name")
        if self.cpu_count < 0:
            raise ValueError(f"cpu_count must be >= 0, got {self.cpu_count}")
        for attr in _SIZING_ATTRS:
            value = getattr(self, attr)
            if not math.isfinite(value):
                raise ValueError(f"{attr} must be finite, got {value}")

    @property
    def is_guest(self) -> bool:
        return self.parent_host_name is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MonitoredEntity:
        """Build an entity from a plain mapping (snapshot files, fixtures)."""
        return cls(
            name=str(data["name"]),
            kind=data["kind"],
            power_state=str(data.get("power_state", POWERED_ON)),
            cpu_count=int(data.get("cpu_count", 0)),
            parent_host_name=data.get("parent_host_name"),
            memory_mb=float(data.get("memory_mb", 0.0)),
            provisioned_gb=float(data.get("provisioned_gb", 0.0)),
            used_gb=float(data.get("used_gb", 0.0)),
            cpu_total_mhz=int(data.get("cpu_total_mhz", 0)),
            cpu_usage_mhz=int(data.get("cpu_usage_mhz", 0)),
            memory_total_mb=float(data.get("memory_total_mb", 0.0)),
            memory_usage_mb=float(data.get("memory_usage_mb", 0.0)),
        )


@dataclass(frozen=True)
class RawSample:
    """One realtime counter reading, verbatim from the counter source."""

    identifier: str
    value: int | float
