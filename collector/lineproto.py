"""InfluxDB line-protocol encoding of one entity's record."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from collector.aggregation import FieldValue, NamespaceGroup
from collector.identity import IdentityBlock

MEASUREMENT_PREFIX = "vmware_"

# The ingestion side expects a space before every newline.
LINE_TERMINATOR = " \n"


def format_value(value: FieldValue) -> str:
    """Render a field value unquoted; whole floats drop the trailing ``.0``."""
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(int(value))


def _join_fields(fields: Iterable[tuple[str, FieldValue]]) -> str:
    return ",".join(f"{key}={format_value(value)}" for key, value in fields)


def _join_tags(tags: Iterable[tuple[str, str]]) -> str:
    return ",".join(f"{key}={value}" for key, value in tags)


def encode_identity_line(identity: IdentityBlock) -> str:
    tags = _join_tags(identity.tags)
    return f"{identity.measurement},{tags} {_join_fields(identity.fields)}{LINE_TERMINATOR}"


def encode_namespace_line(host: str, namespace: str, fields: NamespaceGroup) -> str:
    measurement = MEASUREMENT_PREFIX + namespace
    return f"{measurement},host={host} {_join_fields(fields.items())}{LINE_TERMINATOR}"


def encode_record(identity: IdentityBlock, groups: Mapping[str, NamespaceGroup]) -> str:
    """Encode the identity line followed by one line per non-empty namespace.

    Args:
        identity: Identity block for the entity
        groups: Namespace groups in emission order

    Returns:
        Text blob with one newline-terminated line per measurement
    """
    lines = [encode_identity_line(identity)]
    for namespace, fields in groups.items():
        if not fields:
            continue
        lines.append(encode_namespace_line(identity.host, namespace, fields))
    return "".join(lines)
