"""Protocol layer: frame codec, command builders, and response parsing."""

from .framing import encode_frame, try_extract_frame
from .commands import Command, to_fixed_point
from .parser import parse_code
