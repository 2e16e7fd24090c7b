"""Tests for the sentinel-count trust heuristic."""

from __future__ import annotations

import pytest

from collector.trust import TrustEvaluator


def feed(evaluator: TrustEvaluator, values: list[float]) -> TrustEvaluator:
    for value in values:
        evaluator.observe(value)
    return evaluator


class TestTrustEvaluator:
    """Tests for TrustEvaluator."""

    def test_starts_at_threshold(self) -> None:
        evaluator = TrustEvaluator()

        assert evaluator.remaining == 20
        assert evaluator.trusted

    @pytest.mark.parametrize("values", [[], [0, 2, 3.5, 100], [0.999, 1.001] * 50])
    def test_no_sentinels_is_trusted(self, values: list[float]) -> None:
        evaluator = feed(TrustEvaluator(), values)

        assert evaluator.trusted
        assert evaluator.sentinel_count == 0

    def test_threshold_sentinels_still_trusted(self) -> None:
        evaluator = feed(TrustEvaluator(), [1] * 20)

        assert evaluator.remaining == 0
        assert evaluator.trusted

    @pytest.mark.parametrize("count", [21, 25, 200])
    def test_more_than_threshold_is_untrusted(self, count: int) -> None:
        evaluator = feed(TrustEvaluator(), [1] * count + [5] * 10)

        assert not evaluator.trusted
        assert evaluator.sentinel_count == count

    def test_float_one_counts_as_sentinel(self) -> None:
        evaluator = feed(TrustEvaluator(threshold=0), [1.0])

        assert not evaluator.trusted

    def test_custom_threshold_and_sentinel(self) -> None:
        evaluator = feed(TrustEvaluator(threshold=2, sentinel=-1), [-1, -1, 1, 1, 1])

        assert evaluator.trusted
        evaluator.observe(-1)
        assert not evaluator.trusted

    def test_rejects_negative_threshold(self) -> None:
        with pytest.raises(ValueError, match="threshold"):
            TrustEvaluator(threshold=-1)
