"""A host attached to the simulated link.

The endpoint turns application messages into frames, pushes them
through a shared :class:`DeliveryQueue` and validates what it receives.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable

from ..errors import DecodeError, RoutingError
from ..protocol.address import LinkAddress
from ..protocol.framing import Frame
from .delivery_queue import DeliveryQueue

logger = logging.getLogger(__name__)


class _EndpointLogAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        return f"[Endpoint {self.extra['endpoint_id']}] {msg}", kwargs


class Endpoint:
    """A single host with an id on the queue and a link address.

    The endpoint registers itself with ``queue`` when created.
    """

    def __init__(
        self,
        endpoint_id: Hashable,
        address: LinkAddress,
        queue: DeliveryQueue,
        log: logging.Logger | None = None,
    ) -> None:
        self._endpoint_id = endpoint_id
        self._address = address
        self._queue = queue
        self._log = _EndpointLogAdapter(log or logger, {"endpoint_id": endpoint_id})
        self._queue.register(endpoint_id)
        self._log.info("Initialized with address %s", address)

    @property
    def endpoint_id(self) -> Hashable:
        return self._endpoint_id

    @property
    def address(self) -> LinkAddress:
        return self._address

    def send_message(
        self,
        destination_id: Hashable,
        destination_address: LinkAddress,
        message: str | bytes,
    ) -> Frame:
        """Frame ``message`` and queue it for ``destination_id``.

        Returns:
            The frame that was sent.

        Raises:
            RoutingError: If the destination is not registered.
        """
        frame = Frame.build(destination_address, self._address, message)
        self._log.info(
            "Sending %d-byte payload to endpoint %s (%s)",
            frame.payload_length,
            destination_id,
            destination_address,
        )
        try:
            self._queue.enqueue(self._endpoint_id, destination_id, frame.linearize())
        except RoutingError:
            self._log.error("Send failed: endpoint %s is not registered", destination_id)
            raise
        return frame

    def has_incoming_messages(self) -> bool:
        return self._queue.has_pending(self._endpoint_id)

    def receive_frame(self) -> Frame | None:
        """Take the next buffer from the mailbox and return it as a frame.

        Buffers that do not parse, fail checksum verification, or are
        addressed to another link address are logged and discarded.

        Returns:
            The accepted frame, or ``None`` if nothing was waiting or the
            buffer was discarded.
        """
        data = self._queue.dequeue(self._endpoint_id)
        if data is None:
            self._log.info("No incoming messages")
            return None

        try:
            frame = Frame.parse(data)
        except DecodeError as e:
            self._log.warning("Discarding malformed frame: %s", e)
            return None

        if not frame.verify_checksum():
            self._log.warning(
                "Discarding frame from %s: checksum mismatch\n%s",
                frame.source,
                frame.describe(),
            )
            return None

        if frame.destination != self._address:
            self._log.warning(
                "Discarding frame for %s (this endpoint is %s)",
                frame.destination,
                self._address,
            )
            return None

        self._log.debug("Accepted frame\n%s", frame.describe())
        return frame

    def receive_message(self) -> str | None:
        """Return the text of the next accepted frame, or ``None``."""
        frame = self.receive_frame()
        if frame is None:
            return None
        message = frame.text
        self._log.info("Received message from %s: %r", frame.source, message)
        return message
