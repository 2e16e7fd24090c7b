"""Identity (tag set and sizing fields) for an entity's first line record."""

from __future__ import annotations

from dataclasses import dataclass

from core.contracts import MonitoredEntity

GUEST_MEASUREMENT = "vmware_guest"
HOST_MEASUREMENT = "vmware_esxi"


@dataclass(frozen=True)
class IdentityBlock:
    """Measurement, tags and static fields identifying one entity.

    Attributes:
        measurement: vmware_guest or vmware_esxi
        tags: Ordered (key, value) tag pairs
        fields: Ordered (key, value) sizing fields
    """

    measurement: str
    tags: tuple[tuple[str, str], ...]
    fields: tuple[tuple[str, int | float], ...]

    @property
    def host(self) -> str:
        return dict(self.tags)["host"]


def normalize_name(name: str) -> str:
    """Replace spaces with underscores for use as a tag value."""
    return name.replace(" ", "_")


def _whole(value: float) -> int:
    return int(round(value, 0))


def encode_identity(entity: MonitoredEntity) -> IdentityBlock:
    """Build the identity block for an entity that passed the filter."""
    host = normalize_name(entity.name)

    if entity.is_guest:
        assert entity.parent_host_name is not None
        return IdentityBlock(
            measurement=GUEST_MEASUREMENT,
            tags=(("host", host), ("esxi_host", normalize_name(entity.parent_host_name))),
            fields=(
                ("cpu_NumCpu", int(entity.cpu_count)),
                ("mem_MemorySizeMB", _whole(entity.memory_mb)),
                ("storage_ProvisionedGB", round(entity.provisioned_gb, 2)),
                ("storage_UsedGB", round(entity.used_gb, 2)),
            ),
        )

    # MHz figures are passed through as reported; memory is rounded.
    return IdentityBlock(
        measurement=HOST_MEASUREMENT,
        tags=(("host", host),),
        fields=(
            ("cpu_NumCpu", int(entity.cpu_count)),
            ("cpu_CpuTotalMhz", entity.cpu_total_mhz),
            ("cpu_CpuUsageMhz", entity.cpu_usage_mhz),
            ("mem_MemoryTotalMB", _whole(entity.memory_total_mb)),
            ("mem_MemoryUsageMB", _whole(entity.memory_usage_mb)),
        ),
    )
