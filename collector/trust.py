"""Sentinel-count heuristic for detecting corrupt counter reads.

A failed realtime query upstream tends to come back as a flood of ``1`` values
instead of real data. Each attempt gets a fresh evaluator; once more than
``threshold`` sentinel values are observed the whole sample set is untrusted.
"""

from __future__ import annotations

DEFAULT_TRUST_THRESHOLD = 20
DEFAULT_SENTINEL_VALUE = 1


class TrustEvaluator:
    """Counts sentinel values seen during one pipeline attempt."""

    def __init__(
        self,
        threshold: int = DEFAULT_TRUST_THRESHOLD,
        sentinel: float = DEFAULT_SENTINEL_VALUE,
    ) -> None:
        if threshold < 0:
            raise ValueError(f"threshold must be >= 0, got {threshold}")
        self.threshold = threshold
        self.sentinel = sentinel
        self._remaining = threshold

    def observe(self, value: float) -> None:
        if value == self.sentinel:
            self._remaining -= 1

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def sentinel_count(self) -> int:
        return self.threshold - self._remaining

    @property
    def trusted(self) -> bool:
        return self._remaining >= 0
