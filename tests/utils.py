from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from collector.errors import SessionError, TransportError
from core.contracts import MonitoredEntity, RawSample


def make_host(name: str = "esx01", **overrides: Any) -> MonitoredEntity:
    attrs: dict[str, Any] = {
        "name": name,
        "kind": "host",
        "power_state": "poweredOn",
        "cpu_count": 8,
        "cpu_total_mhz": 20000,
        "cpu_usage_mhz": 4000,
        "memory_total_mb": 65536,
        "memory_usage_mb": 16384,
    }
    attrs.update(overrides)
    return MonitoredEntity(**attrs)


def make_guest(name: str = "web01", **overrides: Any) -> MonitoredEntity:
    attrs: dict[str, Any] = {
        "name": name,
        "kind": "guest",
        "power_state": "poweredOn",
        "parent_host_name": "esx01",
        "cpu_count": 2,
        "memory_mb": 4096,
        "provisioned_gb": 60.4567,
        "used_gb": 21.3,
    }
    attrs.update(overrides)
    return MonitoredEntity(**attrs)


def sentinel_flood(count: int) -> list[RawSample]:
    return [RawSample(f"cpu.counter{i}.latest", 1) for i in range(count)]


class FakeSession:
    def __init__(self) -> None:
        self.released = False


class FakeSessionFactory:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sessions: list[FakeSession] = []

    @contextmanager
    def __call__(self) -> Iterator[FakeSession]:
        if self.fail:
            raise SessionError("login refused")
        session = FakeSession()
        self.sessions.append(session)
        try:
            yield session
        finally:
            session.released = True


class ListInventory:
    def __init__(self, entities: Sequence[MonitoredEntity]) -> None:
        self.entities = list(entities)

    def list_entities(self, session: Any) -> list[MonitoredEntity]:
        return list(self.entities)


class ScriptedCounters:
    """Returns one scripted read per fetch; the last read repeats."""

    def __init__(self, reads: dict[str, list[list[RawSample]]]) -> None:
        self.reads = reads
        self.calls: list[str] = []

    def fetch(self, session: Any, entity: MonitoredEntity) -> list[RawSample]:
        index = self.calls.count(entity.name)
        self.calls.append(entity.name)
        reads = self.reads.get(entity.name, [[]])
        return list(reads[min(index, len(reads) - 1)])


class RecordingTransport:
    def __init__(self, fail_on: int | None = None) -> None:
        self.payloads: list[str] = []
        self.fail_on = fail_on
        self.closed = False

    def send(self, payload: str) -> None:
        if self.fail_on is not None and len(self.payloads) == self.fail_on:
            raise TransportError("write rejected with HTTP 500", status_code=500)
        self.payloads.append(payload)

    def close(self) -> None:
        self.closed = True
