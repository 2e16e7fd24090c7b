"""Realtime vSphere counter collection and line-protocol encoding."""

from collector.aggregation import MetricAggregator, normalize_field_name, split_identifier
from collector.errors import CollectorError, SessionError, TransportError
from collector.identity import IdentityBlock, encode_identity
from collector.lineproto import encode_record
from collector.pipeline import EntityPipeline, RetryController, Skipped, Trusted, Untrusted
from collector.runner import CollectionRunner, RunSummary
from collector.trust import TrustEvaluator

__all__ = [
    "CollectionRunner",
    "CollectorError",
    "EntityPipeline",
    "IdentityBlock",
    "MetricAggregator",
    "RetryController",
    "RunSummary",
    "SessionError",
    "Skipped",
    "TransportError",
    "TrustEvaluator",
    "Trusted",
    "Untrusted",
    "encode_identity",
    "encode_record",
    "normalize_field_name",
    "split_identifier",
]
