"""In-memory delivery queue shared by every endpoint on the simulated link.

Each registered endpoint owns a FIFO mailbox of linearized frames. The
queue treats buffers as opaque bytes and never inspects them.

Usage::

    with DeliveryQueue() as queue:
        queue.register(1)
        queue.register(2)
        queue.enqueue(1, 2, frame_bytes)
        data = queue.dequeue(2)

The queue is not thread-safe; one caller drives it at a time.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Hashable

from ..errors import RoutingError

logger = logging.getLogger(__name__)


class DeliveryQueue:
    """Registry of endpoints, each with its own FIFO mailbox."""

    def __init__(
        self, log: logging.Logger | logging.LoggerAdapter | None = None
    ) -> None:
        self._log = log or logger
        self._mailboxes: dict[Hashable, deque[bytes]] = {}
        self._log.info("Delivery queue initialized")

    def __enter__(self) -> DeliveryQueue:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def endpoints(self) -> list[Hashable]:
        """Registered endpoint ids, in registration order."""
        return list(self._mailboxes)

    def is_registered(self, endpoint_id: Hashable) -> bool:
        return endpoint_id in self._mailboxes

    def register(self, endpoint_id: Hashable) -> None:
        """Create an empty mailbox for ``endpoint_id``.

        Registering an id twice leaves its existing mailbox untouched.
        """
        if endpoint_id in self._mailboxes:
            self._log.debug("Endpoint %s already registered", endpoint_id)
            return
        self._mailboxes[endpoint_id] = deque()
        self._log.info("Endpoint %s registered", endpoint_id)

    def enqueue(
        self,
        source_id: Hashable,
        destination_id: Hashable,
        data: bytes | bytearray,
    ) -> None:
        """Append ``data`` to the tail of the destination's mailbox.

        ``source_id`` is only used for logging.

        Raises:
            RoutingError: If ``destination_id`` is not registered.
        """
        mailbox = self._mailboxes.get(destination_id)
        if mailbox is None:
            self._log.warning(
                "Dropping %d bytes from %s: destination %s not registered",
                len(data),
                source_id,
                destination_id,
            )
            raise RoutingError(destination_id)
        mailbox.append(bytes(data))
        self._log.info(
            "Queued %d bytes from %s to %s", len(data), source_id, destination_id
        )

    def dequeue(self, endpoint_id: Hashable) -> bytes | None:
        """Remove and return the oldest buffer in the endpoint's mailbox.

        Returns:
            The buffer, or ``None`` if the mailbox is empty. A zero-length
            buffer that was enqueued comes back as ``b""``.

        Raises:
            RoutingError: If ``endpoint_id`` is not registered.
        """
        mailbox = self._mailboxes.get(endpoint_id)
        if mailbox is None:
            self._log.warning("Dequeue for unregistered endpoint %s", endpoint_id)
            raise RoutingError(endpoint_id)
        if not mailbox:
            return None
        data = mailbox.popleft()
        self._log.info("Endpoint %s received %d bytes", endpoint_id, len(data))
        return data

    def has_pending(self, endpoint_id: Hashable) -> bool:
        """True if the endpoint is registered and its mailbox is non-empty."""
        return bool(self._mailboxes.get(endpoint_id))

    def pending_count(self, endpoint_id: Hashable) -> int:
        """Number of buffers waiting; 0 for unregistered endpoints."""
        return len(self._mailboxes.get(endpoint_id, ()))

    def close(self) -> None:
        """Drop every mailbox and registration."""
        if not self._mailboxes:
            return
        dropped = sum(len(m) for m in self._mailboxes.values())
        self._mailboxes.clear()
        self._log.info(
            "Delivery queue closed, %d undelivered buffer(s) dropped", dropped
        )
