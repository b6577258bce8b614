"""Data-link frame builder and parser.

Frame layout::

    +-------------+---------+----------------+------------------+----------+
    | Destination | Source  | Payload Length |     Payload      | Checksum |
    | 6 bytes     | 6 bytes | 2 bytes        |  variable length | 2 bytes  |
    +-------------+---------+----------------+------------------+----------+

- Destination / Source: raw link-layer address bytes
- Payload Length: big-endian count of payload bytes
- Checksum: 16-bit additive checksum over the payload only, big-endian

The checksum of a parsed frame is the value read from the wire, so
:meth:`Frame.verify_checksum` can tell whether the payload was altered
in transit.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import DecodeError
from ..utils.checksum import checksum16
from .address import ADDRESS_LENGTH, LinkAddress, format_address

BYTE_ORDER = "big"
LENGTH_FIELD_SIZE = 2
CHECKSUM_SIZE = 2
HEADER_SIZE = 2 * ADDRESS_LENGTH + LENGTH_FIELD_SIZE  # 14
TRAILER_SIZE = CHECKSUM_SIZE
MIN_FRAME_SIZE = HEADER_SIZE + TRAILER_SIZE  # 16
MAX_PAYLOAD_SIZE = 0xFFFF


@dataclass(frozen=True)
class Frame:
    """A data-link frame.

    Build one with :meth:`build` or :meth:`parse`. Direct construction is
    checked: the declared length must match the payload and both 16-bit
    fields must fit on the wire. The checksum itself is not verified here.
    """

    destination: LinkAddress
    source: LinkAddress
    payload_length: int
    payload: bytes
    checksum: int

    def __post_init__(self) -> None:
        payload = bytes(self.payload)
        object.__setattr__(self, "payload", payload)
        if len(payload) > MAX_PAYLOAD_SIZE:
            raise ValueError(
                f"Payload must be at most {MAX_PAYLOAD_SIZE} bytes, got {len(payload)}"
            )
        if self.payload_length != len(payload):
            raise ValueError(
                f"Declared payload length {self.payload_length} does not match "
                f"payload of {len(payload)} bytes"
            )
        if not 0 <= self.checksum <= 0xFFFF:
            raise ValueError(f"Checksum must be 0-0xFFFF, got {self.checksum}")

    @classmethod
    def build(
        cls,
        destination: LinkAddress,
        source: LinkAddress,
        payload: bytes | bytearray | str = b"",
    ) -> Frame:
        """Create a frame from its addresses and payload.

        Text payloads are encoded as UTF-8. The length and checksum
        fields are derived from the payload.

        Raises:
            ValueError: If the payload is longer than 65535 bytes.
        """
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        payload = bytes(payload)
        return cls(
            destination=destination,
            source=source,
            payload_length=len(payload),
            payload=payload,
            checksum=checksum16(payload),
        )

    @classmethod
    def parse(cls, data: bytes | bytearray) -> Frame:
        """Rebuild a frame from its linearized bytes.

        Raises:
            DecodeError: If the buffer is shorter than a minimal frame,
                the declared payload length runs past the end of the
                buffer, or bytes remain after the checksum.
        """
        data = bytes(data)
        if len(data) < MIN_FRAME_SIZE:
            raise DecodeError(
                f"Frame too short: need at least {MIN_FRAME_SIZE} bytes, "
                f"got {len(data)}"
            )

        destination = LinkAddress(data[0:ADDRESS_LENGTH])
        source = LinkAddress(data[ADDRESS_LENGTH : 2 * ADDRESS_LENGTH])
        payload_length = int.from_bytes(
            data[2 * ADDRESS_LENGTH : HEADER_SIZE], BYTE_ORDER
        )

        expected_size = HEADER_SIZE + payload_length + TRAILER_SIZE
        if expected_size > len(data):
            raise DecodeError(
                f"Declared payload length {payload_length} needs {expected_size} "
                f"bytes, buffer has {len(data)}"
            )
        if expected_size < len(data):
            raise DecodeError(
                f"{len(data) - expected_size} trailing byte(s) after frame"
            )

        payload = data[HEADER_SIZE : HEADER_SIZE + payload_length]
        checksum = int.from_bytes(data[HEADER_SIZE + payload_length :], BYTE_ORDER)
        return cls(
            destination=destination,
            source=source,
            payload_length=payload_length,
            payload=payload,
            checksum=checksum,
        )

    @property
    def text(self) -> str:
        """The payload decoded as UTF-8, with undecodable bytes replaced."""
        return self.payload.decode("utf-8", errors="replace")

    def linearize(self) -> bytes:
        """Serialize the frame into its wire form."""
        return (
            self.destination.octets
            + self.source.octets
            + self.payload_length.to_bytes(LENGTH_FIELD_SIZE, BYTE_ORDER)
            + self.payload
            + self.checksum.to_bytes(CHECKSUM_SIZE, BYTE_ORDER)
        )

    def verify_checksum(self) -> bool:
        """Return True if the stored checksum matches the payload."""
        return checksum16(self.payload) == self.checksum

    def describe(self) -> str:
        """Multi-line dump of every field, for logs and debugging."""
        valid = "valid" if self.verify_checksum() else "INVALID"
        return "\n".join(
            [
                f"Destination:    {format_address(self.destination)}",
                f"Source:         {format_address(self.source)}",
                f"Payload length: {self.payload_length}",
                f"Payload:        {self.text!r}",
                f"Checksum:       0x{self.checksum:04X} ({valid})",
            ]
        )

    def __repr__(self) -> str:
        return (
            f"Frame(destination={format_address(self.destination)}, "
            f"source={format_address(self.source)}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'}, "
            f"checksum=0x{self.checksum:04X})"
        )


def build_frame(
    destination: LinkAddress,
    source: LinkAddress,
    payload: bytes | bytearray | str = b"",
) -> bytes:
    """Build a frame and return its linearized bytes."""
    return Frame.build(destination, source, payload).linearize()


def parse_frame(data: bytes | bytearray) -> Frame:
    """Parse linearized bytes into a :class:`Frame` (checksum not verified)."""
    return Frame.parse(data)
