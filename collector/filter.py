"""Entity eligibility checks."""

from __future__ import annotations

import logging

from core.contracts import POWERED_OFF, MonitoredEntity

logger = logging.getLogger(__name__)


def should_collect(entity: MonitoredEntity) -> bool:
    """Return False for powered-off entities; unknown states are collected."""
    if entity.power_state == POWERED_OFF:
        logger.debug(
            "collector.entity_skipped",
            extra={"entity": entity.name, "power_state": entity.power_state},
        )
        return False
    return True
