"""Protocol layer: link addresses, frame building and parsing."""

from .address import LinkAddress, format_address, parse_address
from .framing import Frame, build_frame, parse_frame
