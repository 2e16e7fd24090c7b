"""Per-entity pipeline and its bounded retry controller."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from collector.aggregation import MetricAggregator
from collector.filter import should_collect
from collector.identity import encode_identity
from collector.lineproto import encode_record
from collector.trust import DEFAULT_SENTINEL_VALUE, DEFAULT_TRUST_THRESHOLD, TrustEvaluator
from core.contracts import MonitoredEntity, RawSample

logger = logging.getLogger(__name__)

# One initial attempt plus exactly one retry.
MAX_ATTEMPTS = 2


@dataclass(frozen=True)
class Trusted:
    """Finished record for an entity whose sample set passed the trust check."""

    entity: str
    record: str


@dataclass(frozen=True)
class Untrusted:
    """Attempt discarded because too many sentinel values were observed."""

    entity: str
    sentinel_count: int


@dataclass(frozen=True)
class Skipped:
    """Entity filtered out before any fetch."""

    entity: str
    reason: str


AttemptResult = Trusted | Untrusted | Skipped

FetchFn = Callable[[MonitoredEntity], Sequence[RawSample]]


class EntityPipeline:
    """Filter, fetch, aggregate, trust-check and encode one entity."""

    def __init__(
        self,
        fetch: FetchFn,
        trust_threshold: int = DEFAULT_TRUST_THRESHOLD,
        sentinel_value: float = DEFAULT_SENTINEL_VALUE,
    ) -> None:
        self._fetch = fetch
        self.trust_threshold = trust_threshold
        self.sentinel_value = sentinel_value

    def attempt(self, entity: MonitoredEntity) -> AttemptResult:
        if not should_collect(entity):
            return Skipped(entity=entity.name, reason=entity.power_state)

        samples = self._fetch(entity)

        trust = TrustEvaluator(self.trust_threshold, self.sentinel_value)
        aggregator = MetricAggregator(entity.cpu_count, trust)
        groups = aggregator.aggregate(samples)

        if not trust.trusted:
            return Untrusted(entity=entity.name, sentinel_count=trust.sentinel_count)

        return Trusted(entity=entity.name, record=encode_record(encode_identity(entity), groups))


class RetryController:
    """Runs the pipeline at most twice per entity.

    A second untrusted attempt is final: the entity is left out of this cycle
    and only a debug event records it.
    """

    def __init__(self, pipeline: EntityPipeline, max_attempts: int = MAX_ATTEMPTS) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.pipeline = pipeline
        self.max_attempts = max_attempts

    def collect(self, entity: MonitoredEntity) -> AttemptResult:
        result: AttemptResult | None = None
        for attempt in range(1, self.max_attempts + 1):
            result = self.pipeline.attempt(entity)
            if not isinstance(result, Untrusted):
                return result
            logger.debug(
                "collector.untrusted_attempt",
                extra={
                    "entity": entity.name,
                    "attempt": attempt,
                    "sentinel_count": result.sentinel_count,
                },
            )

        logger.debug(
            "collector.entity_discarded",
            extra={"entity": entity.name, "attempts": self.max_attempts},
        )
        assert result is not None
        return result


def build_retry_controller(
    fetch: FetchFn,
    trust_threshold: int = DEFAULT_TRUST_THRESHOLD,
    sentinel_value: float = DEFAULT_SENTINEL_VALUE,
) -> RetryController:
    return RetryController(EntityPipeline(fetch, trust_threshold, sentinel_value))
