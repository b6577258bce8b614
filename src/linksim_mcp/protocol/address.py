"""Link-layer address type and its colon-hex text form.

A :class:`LinkAddress` is six opaque bytes. Its canonical text form is six
uppercase, zero-padded hex groups joined by ``:`` (``AA:BB:CC:DD:EE:FF``).
Parsing is strict: malformed text raises :class:`FormatError` rather than
yielding an all-zero address.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..errors import FormatError

ADDRESS_LENGTH = 6
SEPARATOR = ":"

_HEX_GROUP = re.compile(r"[0-9A-Fa-f]+")


@dataclass(frozen=True)
class LinkAddress:
    """A 6-byte link-layer address."""

    octets: bytes

    def __post_init__(self) -> None:
        if isinstance(self.octets, (int, str)):
            raise TypeError(
                f"Link address needs bytes, got {type(self.octets).__name__}"
            )
        octets = bytes(self.octets)
        if len(octets) != ADDRESS_LENGTH:
            raise ValueError(
                f"Link address must be {ADDRESS_LENGTH} bytes, got {len(octets)}"
            )
        object.__setattr__(self, "octets", octets)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | list[int]) -> LinkAddress:
        return cls(data)

    @classmethod
    def from_string(cls, text: str) -> LinkAddress:
        return parse_address(text)

    @property
    def is_zero(self) -> bool:
        return not any(self.octets)

    def __bytes__(self) -> bytes:
        return self.octets

    def __getitem__(self, index: int) -> int:
        return self.octets[index]

    def __str__(self) -> str:
        return format_address(self)

    def __repr__(self) -> str:
        return f"LinkAddress({format_address(self)!r})"


ZERO_ADDRESS = LinkAddress(bytes(ADDRESS_LENGTH))


def format_address(address: LinkAddress) -> str:
    """Render an address as ``AA:BB:CC:DD:EE:FF``."""
    return SEPARATOR.join(f"{b:02X}" for b in address.octets)


def parse_address(text: str) -> LinkAddress:
    """Parse six colon-separated hex groups into a :class:`LinkAddress`.

    Hex digits are case-insensitive. Each group may be any number of hex
    digits as long as its value fits in a byte.

    Raises:
        FormatError: If a group is not hex, a group exceeds 0xFF, a
            separator is missing or is not ``:``, or characters follow
            the sixth group.
    """
    octets = bytearray()
    pos = 0
    for group in range(ADDRESS_LENGTH):
        match = _HEX_GROUP.match(text, pos)
        if match is None:
            raise FormatError(
                f"Group {group}: expected hex digits at offset {pos}", text, group
            )
        value = int(match.group(), 16)
        if value > 0xFF:
            raise FormatError(
                f"Group {group}: value 0x{value:X} is out of range 0-255",
                text,
                group,
            )
        octets.append(value)
        pos = match.end()

        if group < ADDRESS_LENGTH - 1:
            if pos >= len(text):
                raise FormatError(
                    f"Group {group}: missing separator, expected "
                    f"{ADDRESS_LENGTH} groups",
                    text,
                    group,
                )
            if text[pos] != SEPARATOR:
                raise FormatError(
                    f"Group {group}: invalid separator {text[pos]!r}", text, group
                )
            pos += 1

    if pos != len(text):
        raise FormatError(f"Unexpected trailing characters at offset {pos}", text)

    return LinkAddress(bytes(octets))
