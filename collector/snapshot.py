"""File-backed session, inventory and counter source.

A snapshot is a YAML document captured from (or written to look like) one
collection cycle::

    entities:
      - name: esx01
        kind: host
        cpu_count: 8
        cpu_total_mhz: 20000
        samples:
          cpu.usage.average: 12.5
      - name: web 01
        kind: guest
        parent_host_name: esx01
        reads:              # consumed one per fetch; the last one repeats
          - {cpu.ready.summation: 1, ...}
          - {cpu.ready.summation: 40}

``samples`` may also be a list of ``{identifier, value}`` mappings when the
same identifier appears more than once.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from collector.errors import SessionError
from core.contracts import MonitoredEntity, RawSample

logger = logging.getLogger(__name__)

_SAMPLE_KEYS = ("samples", "reads")


@dataclass
class SnapshotSession:
    """Loaded snapshot; stands in for a live management-plane session."""

    path: Path
    entities: list[MonitoredEntity] = field(default_factory=list)
    reads: dict[str, list[list[RawSample]]] = field(default_factory=dict)
    _fetch_counts: dict[str, int] = field(default_factory=dict, init=False, repr=False)
    closed: bool = False

    def next_read(self, entity_name: str) -> list[RawSample]:
        if self.closed:
            raise SessionError(f"session for {self.path} is closed")
        reads = self.reads.get(entity_name)
        if not reads:
            return []
        index = self._fetch_counts.get(entity_name, 0)
        self._fetch_counts[entity_name] = index + 1
        return list(reads[min(index, len(reads) - 1)])


def _parse_samples(raw: Any, where: str) -> list[RawSample]:
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        return [RawSample(str(key), value) for key, value in raw.items()]
    if isinstance(raw, Sequence) and not isinstance(raw, str):
        samples = []
        for item in raw:
            if not isinstance(item, Mapping) or "identifier" not in item or "value" not in item:
                raise SessionError(f"{where}: sample entries need identifier and value")
            samples.append(RawSample(str(item["identifier"]), item["value"]))
        return samples
    raise SessionError(f"{where}: samples must be a mapping or a list")


def load_snapshot(path: str | Path) -> SnapshotSession:
    """Parse a snapshot file.

    Raises:
        SessionError: If the file is missing, unreadable or malformed
    """
    import yaml  # lazy import

    snapshot_path = Path(path)
    try:
        data = yaml.safe_load(snapshot_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SessionError(f"cannot read snapshot {snapshot_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise SessionError(f"malformed snapshot {snapshot_path}: {exc}") from exc

    if not isinstance(data, Mapping) or not isinstance(data.get("entities"), list):
        raise SessionError(f"snapshot {snapshot_path} has no 'entities' list")

    session = SnapshotSession(path=snapshot_path)
    for index, item in enumerate(data["entities"]):
        where = f"{snapshot_path}:entities[{index}]"
        if not isinstance(item, Mapping):
            raise SessionError(f"{where}: entity must be a mapping")
        attrs = {key: value for key, value in item.items() if key not in _SAMPLE_KEYS}
        try:
            entity = MonitoredEntity.from_dict(attrs)
        except (KeyError, TypeError, ValueError) as exc:
            raise SessionError(f"{where}: invalid entity: {exc}") from exc

        if "reads" in item:
            reads = [_parse_samples(read, where) for read in item["reads"] or []]
        else:
            reads = [_parse_samples(item.get("samples"), where)]

        session.entities.append(entity)
        session.reads[entity.name] = reads

    return session


class SnapshotSessionFactory:
    """Opens a :class:`SnapshotSession` for the duration of one cycle."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    @contextmanager
    def __call__(self) -> Iterator[SnapshotSession]:
        session = load_snapshot(self.path)
        logger.debug(
            "collector.session_opened",
            extra={"snapshot": str(self.path), "entities": len(session.entities)},
        )
        try:
            yield session
        finally:
            session.closed = True
            logger.debug("collector.session_released", extra={"snapshot": str(self.path)})


class SnapshotInventory:
    def list_entities(self, session: SnapshotSession) -> list[MonitoredEntity]:
        return list(session.entities)


class SnapshotCounters:
    def fetch(self, session: SnapshotSession, entity: MonitoredEntity) -> list[RawSample]:
        return session.next_read(entity.name)
