"""Grouping of flat counter identifiers into per-namespace field sets."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from collector.errors import InvalidIdentifierError
from collector.trust import TrustEvaluator
from core.contracts import RawSample

FieldValue = int | float
NamespaceGroup = dict[str, FieldValue]

CPU_USAGE_IDENTIFIER = "cpu.usage.average"
CORES_SUFFIX = "_cores"

_FIELD_NAME_TABLE = str.maketrans({" ": "_", "[": "_", "]": "_"})

logger = logging.getLogger(__name__)


def split_identifier(identifier: str) -> tuple[str, str]:
    """Split ``namespace.field.name`` on the first dot only.

    Raises:
        InvalidIdentifierError: If either side of the first dot is missing
    """
    namespace, sep, field_name = identifier.partition(".")
    if not sep or not namespace or not field_name:
        raise InvalidIdentifierError(f"identifier has no namespace delimiter: {identifier!r}")
    return namespace, field_name


def normalize_field_name(field_name: str) -> str:
    """Replace space and square brackets with underscores; dots are kept."""
    return field_name.translate(_FIELD_NAME_TABLE)


def normalize_value(value: float) -> FieldValue:
    """Round fractional values to 5 places; floor integral ones to int."""
    if isinstance(value, float) and not value.is_integer():
        if not math.isfinite(value):
            raise ValueError(f"value must be finite, got {value}")
        return round(value, 5)
    return math.floor(value)


class MetricAggregator:
    """Single-pass aggregation of one entity's samples for one attempt.

    Namespaces and fields keep first-seen order. A repeated field keeps its
    original position and takes the latest value.
    """

    def __init__(self, cpu_count: int, trust: TrustEvaluator | None = None) -> None:
        """Initialize aggregator.

        Args:
            cpu_count: Entity CPU count, used for the derived ``_cores`` field
            trust: Evaluator fed with every raw value (fresh one if None)
        """
        self.cpu_count = cpu_count
        self.trust = trust or TrustEvaluator()
        self._groups: dict[str, NamespaceGroup] = {}
        self.skipped = 0

    def add(self, sample: RawSample) -> None:
        self.trust.observe(sample.value)

        try:
            namespace, raw_field = split_identifier(sample.identifier)
            value = normalize_value(sample.value)
        except (InvalidIdentifierError, ValueError, TypeError) as exc:
            self.skipped += 1
            logger.debug(
                "collector.sample_skipped",
                extra={"identifier": sample.identifier, "error": str(exc)},
            )
            return

        field_name = normalize_field_name(raw_field)
        group = self._groups.setdefault(namespace, {})
        group[field_name] = value

        if sample.identifier == CPU_USAGE_IDENTIFIER:
            group[field_name + CORES_SUFFIX] = round(sample.value * self.cpu_count, 3)

    def aggregate(self, samples: Iterable[RawSample]) -> dict[str, NamespaceGroup]:
        for sample in samples:
            self.add(sample)
        return self.groups

    @property
    def groups(self) -> dict[str, NamespaceGroup]:
        """Non-empty namespace groups in first-seen order."""
        return {namespace: dict(fields) for namespace, fields in self._groups.items() if fields}
