"""Tests for the file-backed session, inventory and counter source."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml  # type: ignore[import-untyped]

from collector.errors import SessionError
from collector.snapshot import (
    SnapshotCounters,
    SnapshotInventory,
    SnapshotSessionFactory,
    load_snapshot,
)
from core.contracts import RawSample


def write_snapshot(path: Path, data: object) -> Path:
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def snapshot_file(tmp_path: Path) -> Path:
    return write_snapshot(
        tmp_path / "snapshot.yaml",
        {
            "entities": [
                {
                    "name": "esx01",
                    "kind": "host",
                    "cpu_count": 8,
                    "cpu_total_mhz": 20000,
                    "samples": {"cpu.usage.average": 12.5, "mem.usage.average": 30},
                },
                {
                    "name": "web 01",
                    "kind": "guest",
                    "parent_host_name": "esx01",
                    "samples": [
                        {"identifier": "disk.read.average", "value": 1.5},
                        {"identifier": "disk.read.average", "value": 2.5},
                    ],
                },
                {
                    "name": "flaky",
                    "kind": "host",
                    "reads": [{"cpu.a": 1}, {"cpu.a": 2}],
                },
            ]
        },
    )


class TestLoadSnapshot:
    """Tests for load_snapshot()."""

    def test_parses_entities_in_order(self, snapshot_file: Path) -> None:
        session = load_snapshot(snapshot_file)

        assert [entity.name for entity in session.entities] == ["esx01", "web 01", "flaky"]
        assert session.entities[0].cpu_total_mhz == 20000
        assert session.entities[1].parent_host_name == "esx01"

    def test_mapping_and_list_samples(self, snapshot_file: Path) -> None:
        session = load_snapshot(snapshot_file)

        assert session.next_read("esx01") == [
            RawSample("cpu.usage.average", 12.5),
            RawSample("mem.usage.average", 30),
        ]
        assert [s.value for s in session.next_read("web 01")] == [1.5, 2.5]

    def test_reads_consumed_in_order_last_repeats(self, snapshot_file: Path) -> None:
        session = load_snapshot(snapshot_file)

        assert session.next_read("flaky") == [RawSample("cpu.a", 1)]
        assert session.next_read("flaky") == [RawSample("cpu.a", 2)]
        assert session.next_read("flaky") == [RawSample("cpu.a", 2)]

    def test_missing_file_raises_session_error(self, tmp_path: Path) -> None:
        with pytest.raises(SessionError, match="cannot read"):
            load_snapshot(tmp_path / "absent.yaml")

    def test_malformed_yaml_raises_session_error(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("entities: [unclosed", encoding="utf-8")

        with pytest.raises(SessionError, match="malformed"):
            load_snapshot(path)

    def test_missing_entities_list(self, tmp_path: Path) -> None:
        path = write_snapshot(tmp_path / "empty.yaml", {"hosts": []})

        with pytest.raises(SessionError, match="entities"):
            load_snapshot(path)

    def test_invalid_entity_raises_session_error(self, tmp_path: Path) -> None:
        path = write_snapshot(
            tmp_path / "orphan.yaml", {"entities": [{"name": "vm", "kind": "guest"}]}
        )

        with pytest.raises(SessionError, match="invalid entity"):
            load_snapshot(path)


class TestSnapshotSessionFactory:
    """Tests for session scoping."""

    def test_session_closed_after_cycle(self, snapshot_file: Path) -> None:
        factory = SnapshotSessionFactory(snapshot_file)

        with factory() as session:
            entities = SnapshotInventory().list_entities(session)
            samples = SnapshotCounters().fetch(session, entities[0])

        assert len(samples) == 2
        assert session.closed
        with pytest.raises(SessionError, match="closed"):
            session.next_read("esx01")

    def test_session_closed_on_error(self, snapshot_file: Path) -> None:
        factory = SnapshotSessionFactory(snapshot_file)

        with pytest.raises(RuntimeError), factory() as session:
            raise RuntimeError("boom")

        assert session.closed


def test_non_finite_sizing_raises_session_error(tmp_path: Path) -> None:
    path = tmp_path / "nan.yaml"
    path.write_text(
        "entities:\n  - name: esx01\n    kind: host\n    memory_total_mb: .nan\n",
        encoding="utf-8",
    )

    with pytest.raises(SessionError, match="memory_total_mb"):
        load_snapshot(path)
