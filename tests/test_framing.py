"""Tests for frame building and parsing."""

from dataclasses import FrozenInstanceError, replace

import pytest

from linksim_mcp.errors import DecodeError
from linksim_mcp.protocol.address import parse_address
from linksim_mcp.protocol.framing import (
    HEADER_SIZE,
    MAX_PAYLOAD_SIZE,
    MIN_FRAME_SIZE,
    Frame,
    build_frame,
    parse_frame,
)
from linksim_mcp.utils.checksum import checksum16

DST = parse_address("AA:BB:CC:DD:EE:FF")
SRC = parse_address("00:11:22:33:44:55")


def test_build_sets_length_and_checksum():
    """Length and checksum are derived from the payload."""
    frame = Frame.build(DST, SRC, b"Hello")
    assert frame.payload_length == 5
    assert frame.checksum == 500
    assert frame.verify_checksum()


def test_build_from_text():
    """Text payloads are carried as their UTF-8 bytes."""
    frame = Frame.build(DST, SRC, "Hello")
    assert frame.payload == b"Hello"
    assert frame.text == "Hello"


def test_linearize_layout():
    """Field order: dst, src, length (big-endian), payload, checksum."""
    data = Frame.build(DST, SRC, b"Hello").linearize()
    assert len(data) == MIN_FRAME_SIZE + 5
    assert data[0:6] == bytes([0xAA, 0xBB, 0xCC, 0xDD, 0xEE, 0xFF])
    assert data[6:12] == bytes([0x00, 0x11, 0x22, 0x33, 0x44, 0x55])
    assert data[12] == 0x00  # length high byte
    assert data[13] == 0x05  # length low byte
    assert data[14:19] == b"Hello"
    assert data[19] == 0x01  # checksum 500 = 0x01F4
    assert data[20] == 0xF4


def test_build_frame_helper_matches_method():
    """build_frame returns the linearized bytes."""
    assert build_frame(DST, SRC, b"abc") == Frame.build(DST, SRC, b"abc").linearize()


def test_roundtrip_parse():
    """Build a frame and parse it back."""
    original = Frame.build(DST, SRC, b"Hello Node 2")
    parsed = parse_frame(original.linearize())

    assert parsed.destination == DST
    assert parsed.source == SRC
    assert parsed.payload == b"Hello Node 2"
    assert parsed.payload_length == original.payload_length
    assert parsed.checksum == original.checksum
    assert parsed == original


def test_roundtrip_empty_payload():
    """Empty payloads produce a minimal 16-byte frame."""
    data = build_frame(DST, SRC)
    assert len(data) == MIN_FRAME_SIZE
    parsed = Frame.parse(data)
    assert parsed.payload == b""
    assert parsed.payload_length == 0
    assert parsed.checksum == 0


def test_roundtrip_binary_payload():
    """All byte values survive a round trip."""
    payload = bytes(range(256)) * 4
    parsed = Frame.parse(build_frame(DST, SRC, payload))
    assert parsed.payload == payload
    assert parsed.checksum == checksum16(payload)


def test_roundtrip_max_payload():
    """A 65535-byte payload still fits the length field."""
    payload = b"\x7f" * MAX_PAYLOAD_SIZE
    parsed = Frame.parse(build_frame(DST, SRC, payload))
    assert parsed.payload_length == MAX_PAYLOAD_SIZE
    assert parsed.verify_checksum()


def test_oversized_payload_fails_loudly():
    """Payloads above 65535 bytes raise instead of wrapping."""
    with pytest.raises(ValueError):
        Frame.build(DST, SRC, b"\x00" * (MAX_PAYLOAD_SIZE + 1))


def test_parse_too_short():
    """Anything under 16 bytes is not a frame."""
    with pytest.raises(DecodeError):
        parse_frame(b"")
    with pytest.raises(DecodeError):
        parse_frame(b"\x00" * (MIN_FRAME_SIZE - 1))


def test_parse_declared_length_overruns_buffer():
    """A length field promising more bytes than exist fails."""
    data = bytearray(build_frame(DST, SRC, b"Hello"))
    data[13] = 0x09
    with pytest.raises(DecodeError, match="Declared payload length 9"):
        parse_frame(bytes(data))


def test_parse_truncated_frame():
    """Dropping the last checksum byte fails."""
    data = build_frame(DST, SRC, b"Hello")
    with pytest.raises(DecodeError):
        parse_frame(data[:-1])


def test_parse_trailing_bytes():
    """Extra bytes after the checksum fail."""
    data = build_frame(DST, SRC, b"Hello") + b"\x00"
    with pytest.raises(DecodeError, match="trailing"):
        parse_frame(data)


def test_decode_error_is_value_error():
    """DecodeError can be caught as ValueError."""
    with pytest.raises(ValueError):
        parse_frame(b"\x01")


def test_parse_keeps_wire_checksum():
    """A corrupted checksum field is carried as-is and fails verification."""
    data = bytearray(build_frame(DST, SRC, b"Hello"))
    data[-2] = 0x00
    data[-1] = 0x00
    parsed = parse_frame(bytes(data))
    assert parsed.checksum == 0
    assert not parsed.verify_checksum()


def test_single_byte_flip_detected():
    """Changing any one payload byte makes verification fail."""
    data = build_frame(DST, SRC, b"Hello")
    for offset in range(HEADER_SIZE, HEADER_SIZE + 5):
        for mask in (0x01, 0x80, 0xFF):
            corrupted = bytearray(data)
            corrupted[offset] ^= mask
            assert not parse_frame(bytes(corrupted)).verify_checksum()


def test_compensating_flips_go_undetected():
    """Two changes that cancel out in the sum pass verification (known weakness)."""
    corrupted = bytearray(build_frame(DST, SRC, b"Hello"))
    corrupted[HEADER_SIZE] += 1      # 'H' -> 'I'
    corrupted[HEADER_SIZE + 1] -= 1  # 'e' -> 'd'
    parsed = parse_frame(bytes(corrupted))
    assert parsed.payload == b"Idllo"
    assert parsed.verify_checksum()


def test_swapped_payload_bytes_go_undetected():
    """Reordering payload bytes keeps the checksum (known weakness)."""
    corrupted = bytearray(build_frame(DST, SRC, b"Hello"))
    corrupted[HEADER_SIZE], corrupted[HEADER_SIZE + 4] = (
        corrupted[HEADER_SIZE + 4],
        corrupted[HEADER_SIZE],
    )
    assert parse_frame(bytes(corrupted)).verify_checksum()


def test_describe_lists_fields():
    """describe() shows addresses, payload and checksum verdict."""
    text = Frame.build(DST, SRC, "Hello").describe()
    assert "AA:BB:CC:DD:EE:FF" in text
    assert "00:11:22:33:44:55" in text
    assert "'Hello'" in text
    assert "0x01F4" in text
    assert "(valid)" in text


def test_describe_flags_bad_checksum():
    """describe() marks a frame whose checksum does not match."""
    frame = replace(Frame.build(DST, SRC, "Hello"), checksum=0)
    assert "INVALID" in frame.describe()


def test_frame_repr():
    """Frame repr should be readable."""
    r = repr(Frame.build(DST, SRC, b"\x02"))
    assert "AA:BB:CC:DD:EE:FF" in r
    assert "0x0002" in r


def test_direct_construction_checks_length():
    """A declared length that disagrees with the payload is rejected."""
    with pytest.raises(ValueError, match="does not match"):
        Frame(DST, SRC, 3, b"Hello", 500)


def test_direct_construction_checks_field_range():
    """Length and checksum must fit in 16 bits."""
    with pytest.raises(ValueError):
        Frame(DST, SRC, 0, b"", 0x10000)
    with pytest.raises(ValueError):
        Frame(DST, SRC, 0, b"", -1)
    with pytest.raises(ValueError):
        Frame(DST, SRC, MAX_PAYLOAD_SIZE + 1, b"\x00" * (MAX_PAYLOAD_SIZE + 1), 0)


def test_direct_construction_roundtrips():
    """A consistent hand-built frame parses back to itself."""
    frame = Frame(DST, SRC, 5, b"Hello", 0x1234)
    parsed = parse_frame(frame.linearize())
    assert parsed == frame
    assert not parsed.verify_checksum()


def test_frame_is_immutable():
    """Frames are values and cannot be modified in place."""
    frame = Frame.build(DST, SRC, "Hello")
    with pytest.raises(FrozenInstanceError):
        frame.checksum = 0
