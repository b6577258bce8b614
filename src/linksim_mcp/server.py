"""MCP server entry point for the simulated data-link network.

Exposes tools, resources, and prompts via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from mcp.server.fastmcp import FastMCP

from .errors import DecodeError, FormatError, RoutingError
from .protocol.address import LinkAddress, parse_address
from .protocol.framing import (
    HEADER_SIZE,
    MAX_PAYLOAD_SIZE,
    MIN_FRAME_SIZE,
    Frame,
    build_frame,
    parse_frame,
)
from .transport.delivery_queue import DeliveryQueue
from .transport.endpoint import Endpoint
from .utils.checksum import checksum16

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "linksim",
    instructions="Simulated data-link network: frame codec and endpoint mailboxes",
)

# Network state owned by this server process
_queue = DeliveryQueue()
_endpoints: dict[LinkAddress, Endpoint] = {}


def _get_endpoint(address: str) -> Endpoint:
    """Look up a registered endpoint by its address text.

    Raises:
        FormatError: If the address is malformed.
        RoutingError: If no endpoint has that address.
    """
    link_address = parse_address(address)
    endpoint = _endpoints.get(link_address)
    if endpoint is None:
        raise RoutingError(link_address)
    return endpoint


def _frame_to_dict(frame: Frame) -> dict[str, Any]:
    return {
        "destination": str(frame.destination),
        "source": str(frame.source),
        "payload_length": frame.payload_length,
        "message": frame.text,
        "checksum": f"0x{frame.checksum:04X}",
        "checksum_valid": frame.verify_checksum(),
    }


# ─── NETWORK TOOLS ────────────────────────────────────────────────────

@mcp.tool()
def register_endpoint(address: str) -> dict[str, Any]:
    """Attach a new endpoint to the network.

    Registering an address that already exists is a no-op.

    Args:
        address: Link address, e.g. "00:11:22:33:44:01".
    """
    try:
        link_address = parse_address(address)
    except FormatError as e:
        return {"error": str(e)}

    if link_address in _endpoints:
        return {"registered": True, "address": str(link_address), "message": "Already registered"}

    _endpoints[link_address] = Endpoint(link_address, link_address, _queue)
    return {"registered": True, "address": str(link_address)}


@mcp.tool()
def list_endpoints() -> dict[str, Any]:
    """List registered endpoints and how many frames each has waiting."""
    endpoints = [
        {"address": str(address), "pending": _queue.pending_count(address)}
        for address in _endpoints
    ]
    return {"endpoints": endpoints}


@mcp.tool()
def send_message(source: str, destination: str, message: str) -> dict[str, Any]:
    """Send a text message from one endpoint to another.

    Args:
        source: Address of the sending endpoint.
        destination: Address of the receiving endpoint.
        message: Text payload (at most 65535 bytes once UTF-8 encoded).
    """
    try:
        sender = _get_endpoint(source)
        destination_address = parse_address(destination)
        frame = sender.send_message(destination_address, destination_address, message)
    except (FormatError, RoutingError, ValueError) as e:
        return {"error": str(e)}

    return {
        "sent": True,
        "frame_size": len(frame.linearize()),
        "checksum": f"0x{frame.checksum:04X}",
    }


@mcp.tool()
def receive_message(endpoint: str) -> dict[str, Any]:
    """Take the next message from an endpoint's mailbox.

    Frames that fail validation are discarded by the endpoint.

    Args:
        endpoint: Address of the receiving endpoint.
    """
    try:
        receiver = _get_endpoint(endpoint)
    except (FormatError, RoutingError) as e:
        return {"error": str(e)}

    if not receiver.has_incoming_messages():
        return {"received": False, "message": None}

    frame = receiver.receive_frame()
    if frame is None:
        return {"received": False, "message": None, "discarded": True}

    result = _frame_to_dict(frame)
    result["received"] = True
    return result


@mcp.tool()
def has_pending(endpoint: str) -> dict[str, Any]:
    """Check whether an endpoint has frames waiting.

    Args:
        endpoint: Address of the endpoint.
    """
    try:
        link_address = parse_address(endpoint)
    except FormatError as e:
        return {"error": str(e)}

    return {
        "endpoint": str(link_address),
        "registered": _queue.is_registered(link_address),
        "pending": _queue.has_pending(link_address),
    }


@mcp.tool()
def reset_network() -> dict[str, Any]:
    """Discard every endpoint and undelivered frame and start a fresh queue."""
    global _queue
    dropped = sum(_queue.pending_count(address) for address in _endpoints)
    _queue.close()
    _queue = DeliveryQueue()
    _endpoints.clear()
    return {"reset": True, "dropped_frames": dropped}


# ─── FRAME CODEC TOOLS ────────────────────────────────────────────────

@mcp.tool()
def encode_frame(destination: str, source: str, message: str) -> dict[str, Any]:
    """Build a frame and return its wire bytes as hex.

    Args:
        destination: Destination link address.
        source: Source link address.
        message: Text payload.
    """
    try:
        data = build_frame(parse_address(destination), parse_address(source), message)
    except (FormatError, ValueError) as e:
        return {"error": str(e)}

    return {"frame_hex": data.hex(), "length": len(data)}


@mcp.tool()
def decode_frame(frame_hex: str) -> dict[str, Any]:
    """Parse hex wire bytes into frame fields and verify the checksum.

    Args:
        frame_hex: Linearized frame as a hex string (whitespace allowed).
    """
    try:
        data = bytes.fromhex(frame_hex)
    except ValueError as e:
        return {"error": f"Invalid hex: {e}"}

    try:
        frame = parse_frame(data)
    except DecodeError as e:
        return {"error": str(e)}

    result = _frame_to_dict(frame)
    result["description"] = frame.describe()
    return result


@mcp.tool()
def compute_checksum(message: str) -> dict[str, Any]:
    """Compute the 16-bit additive checksum of a UTF-8 message.

    Args:
        message: Text to checksum.
    """
    value = checksum16(message.encode("utf-8"))
    return {"checksum": value, "checksum_hex": f"0x{value:04X}"}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("linksim://network/endpoints")
def resource_endpoints() -> str:
    """Registered endpoints and their pending frame counts."""
    return json.dumps(list_endpoints())


@mcp.resource("linksim://protocol/frame-layout")
def resource_frame_layout() -> str:
    """Wire layout of a frame."""
    return json.dumps({
        "fields": [
            {"name": "destination", "size": 6},
            {"name": "source", "size": 6},
            {"name": "payload_length", "size": 2, "byte_order": "big"},
            {"name": "payload", "size": "payload_length"},
            {"name": "checksum", "size": 2, "byte_order": "big"},
        ],
        "header_size": HEADER_SIZE,
        "min_frame_size": MIN_FRAME_SIZE,
        "max_payload_size": MAX_PAYLOAD_SIZE,
    })


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def exchange_messages(first: str, second: str) -> str:
    """Walk through a message exchange between two endpoints.

    Args:
        first: Link address of the first endpoint.
        second: Link address of the second endpoint.
    """
    return f"""Set up two endpoints and exchange messages between them.

1. Use register_endpoint for {first} and {second}.
2. Use send_message to send a greeting from {first} to {second}.
3. Use has_pending and receive_message on {second} to read it.
4. Reply from {second} to {first} and read the reply the same way.

Use encode_frame and decode_frame to inspect the wire bytes of any message."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    level = os.environ.get("LINKSIM_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO))
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
