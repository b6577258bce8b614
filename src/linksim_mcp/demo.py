"""Two endpoints exchanging a greeting over a shared delivery queue."""

from __future__ import annotations

import logging
import os
import time

from .errors import LinkSimError
from .protocol.address import parse_address
from .transport.delivery_queue import DeliveryQueue
from .transport.endpoint import Endpoint

logger = logging.getLogger(__name__)

TRAVEL_TIME = 0.05  # seconds, simulated time on the wire

NODE1_ADDRESS = "00:11:22:33:44:01"
NODE2_ADDRESS = "00:11:22:33:44:02"


def _deliver(receiver: Endpoint, received: list[str]) -> None:
    if not receiver.has_incoming_messages():
        logger.info("Endpoint %s has no messages", receiver.endpoint_id)
        return
    message = receiver.receive_message()
    if message is not None:
        received.append(message)


def run_demo(
    queue: DeliveryQueue | None = None,
    travel_time: float = TRAVEL_TIME,
) -> list[str]:
    """Send a message from endpoint 1 to 2 and a reply back.

    Args:
        queue: Queue to attach the endpoints to; a new one is created and
            closed when omitted.
        travel_time: Pause between each send and the matching receive.

    Returns:
        The messages received, in delivery order.
    """
    owned = queue is None
    if queue is None:
        queue = DeliveryQueue()

    received: list[str] = []
    try:
        node1 = Endpoint(1, parse_address(NODE1_ADDRESS), queue)
        node2 = Endpoint(2, parse_address(NODE2_ADDRESS), queue)

        logger.info("--- Endpoint 1 sending message to endpoint 2 ---")
        try:
            node1.send_message(node2.endpoint_id, node2.address, "Hello Node 2 from Node 1!")
        except LinkSimError as e:
            logger.error("Send failed: %s", e)
        time.sleep(travel_time)
        _deliver(node2, received)

        logger.info("--- Endpoint 2 sending reply to endpoint 1 ---")
        try:
            node2.send_message(
                node1.endpoint_id,
                node1.address,
                "Hi Node 1! Got your message. Greeting from Node 2!",
            )
        except LinkSimError as e:
            logger.error("Send failed: %s", e)
        time.sleep(travel_time)
        _deliver(node1, received)
    finally:
        if owned:
            queue.close()

    return received


def main():
    """Run the demo with console logging."""
    level = os.environ.get("LINKSIM_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO))
    run_demo()


if __name__ == "__main__":
    main()
