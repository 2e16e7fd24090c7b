"""One collection cycle: session, enumeration, per-entity pipeline, delivery."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from collector.errors import SessionError, TransportError
from collector.pipeline import RetryController, Skipped, Trusted, build_retry_controller
from collector.ports import CounterSource, InventorySource, SessionFactory, Transport
from collector.trust import DEFAULT_SENTINEL_VALUE, DEFAULT_TRUST_THRESHOLD
from core.contracts import MonitoredEntity

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Entity names per outcome for one cycle, each list in enumeration order."""

    emitted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    discarded: list[str] = field(default_factory=list)
    duration_s: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "emitted": len(self.emitted),
            "skipped": len(self.skipped),
            "discarded": len(self.discarded),
            "duration_s": round(self.duration_s, 3),
        }


class CollectionRunner:
    """Runs entities through the retry controller one at a time.

    Session and transport failures end the cycle: each is logged once and
    re-raised. Records already delivered are not retracted.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        inventory: InventorySource,
        counters: CounterSource,
        transport: Transport,
        trust_threshold: int = DEFAULT_TRUST_THRESHOLD,
        sentinel_value: float = DEFAULT_SENTINEL_VALUE,
    ) -> None:
        """Initialize runner.

        Args:
            session_factory: Opens the management-plane session per cycle
            inventory: Enumerates entities through the session
            counters: Fetches realtime samples through the session
            transport: Receives each finished entity record
            trust_threshold: Sentinel values tolerated per attempt
            sentinel_value: Value that marks a suspect sample
        """
        self.session_factory = session_factory
        self.inventory = inventory
        self.counters = counters
        self.transport = transport
        self.trust_threshold = trust_threshold
        self.sentinel_value = sentinel_value

    def run_cycle(self) -> RunSummary:
        summary = RunSummary()
        started = time.monotonic()

        try:
            with self.session_factory() as session:
                controller = build_retry_controller(
                    lambda entity: self.counters.fetch(session, entity),
                    self.trust_threshold,
                    self.sentinel_value,
                )
                for entity in self.inventory.list_entities(session):
                    self._collect_one(controller, entity, summary)
        except SessionError as exc:
            logger.error("collector.session_failed", extra={"error": str(exc)})
            raise
        except TransportError as exc:
            logger.error(
                "collector.transport_failed",
                extra={"error": str(exc), "status_code": exc.status_code},
            )
            raise

        summary.duration_s = time.monotonic() - started
        logger.info("collector.cycle_complete", extra=summary.to_dict())
        return summary

    def _collect_one(
        self, controller: RetryController, entity: MonitoredEntity, summary: RunSummary
    ) -> None:
        try:
            result = controller.collect(entity)
        except (SessionError, TransportError):
            raise
        except Exception:
            logger.exception("collector.entity_failed", extra={"entity": entity.name})
            summary.discarded.append(entity.name)
            return

        if isinstance(result, Trusted):
            self.transport.send(result.record)
            summary.emitted.append(result.entity)
            logger.debug("collector.entity_emitted", extra={"entity": result.entity})
        elif isinstance(result, Skipped):
            summary.skipped.append(result.entity)
        else:
            summary.discarded.append(result.entity)
