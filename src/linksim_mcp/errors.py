"""Exception types raised by the frame codec and the delivery queue."""

from __future__ import annotations

from collections.abc import Hashable


class LinkSimError(Exception):
    """Base class for all data-driven failures in this package."""


class FormatError(LinkSimError, ValueError):
    """A link address string could not be parsed.

    ``group`` is the zero-based index of the offending hex group, or
    ``None`` when the problem is not tied to a single group (trailing data).
    """

    def __init__(self, message: str, text: str, group: int | None = None) -> None:
        super().__init__(f"{message} in {text!r}")
        self.text = text
        self.group = group


class DecodeError(LinkSimError, ValueError):
    """A linearized frame buffer is truncated or has trailing bytes."""


class RoutingError(LinkSimError, LookupError):
    """An endpoint id is not registered with the delivery queue."""

    def __init__(self, endpoint_id: Hashable) -> None:
        super().__init__(f"Endpoint {endpoint_id!r} is not registered")
        self.endpoint_id = endpoint_id
