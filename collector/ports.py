"""Port interfaces for the collaborators around the collection pipeline.

The pipeline depends only on these protocols. The snapshot source and the
transports in this package are the bundled implementations.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

from core.contracts import MonitoredEntity, RawSample


class SessionFactory(Protocol):
    """Opens a management-plane session for the length of one cycle.

    Raises:
        SessionError: If the session cannot be established
    """

    def __call__(self) -> AbstractContextManager[Any]: ...


@runtime_checkable
class InventorySource(Protocol):
    def list_entities(self, session: Any) -> Iterable[MonitoredEntity]:
        """Enumerate hosts and guests visible through ``session``."""
        ...


@runtime_checkable
class CounterSource(Protocol):
    def fetch(self, session: Any, entity: MonitoredEntity) -> Sequence[RawSample]:
        """Return the latest realtime sample set for one entity.

        Implementations may be non-reentrant; callers invoke them one entity
        at a time.
        """
        ...


@runtime_checkable
class Transport(Protocol):
    def send(self, payload: str) -> None:
        """Deliver one entity's encoded record.

        Raises:
            TransportError: If the payload was not accepted
        """
        ...

    def close(self) -> None:
        """Release any connection held by the transport."""
        ...
