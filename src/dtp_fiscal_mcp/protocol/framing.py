"""Frame encoder and stream extractor for the DTP TCP protocol.

Frame layout::

    +-----+---------+----+---------+----+-----+---------+-----+
    | STX | field 0 | FS | field 1 | FS | ... | field n | ETX |
    | 02  |         | 1C |         | 1C |     |         | 03  |
    +-----+---------+----+---------+----+-----+---------+-----+

- Requests carry the command mnemonic in field 0.
- Responses carry the numeric result code in field 0.
- Text is single-byte ISO-8859-1, matching the printer firmware.
- Delimiter bytes are never escaped; field text must not contain them.
"""

from __future__ import annotations

from typing import Sequence

STX = 0x02
ETX = 0x03
FS = 0x1C

ENCODING = "latin-1"


def encode_frame(fields: Sequence[str]) -> bytes:
    """Build one request frame from a list of string fields.

    Characters outside ISO-8859-1 are replaced with ``?``.

    Args:
        fields: Command mnemonic followed by its positional arguments.

    Returns:
        The framed bytes ready to write to the socket.
    """
    body = bytes([FS]).join(f.encode(ENCODING, errors="replace") for f in fields)
    return bytes([STX]) + body + bytes([ETX])


def try_extract_frame(buffer: bytes) -> tuple[list[str], bytes] | None:
    """Extract the first complete frame from an accumulated byte buffer.

    Bytes before the frame's STX are discarded along with it. Bytes
    after the consumed ETX are returned untouched so the caller can keep
    them for the next read.

    Returns:
        ``(fields, remainder)`` for a complete frame, or ``None`` when the
        buffer does not yet hold one.
    """
    start = buffer.find(STX)
    if start == -1:
        return None

    end = buffer.find(ETX, start + 1)
    if end == -1:
        return None

    # An STX with no ETX before the next STX is an aborted frame
    start = buffer.rfind(STX, start, end)

    body = bytes(buffer[start + 1 : end])
    fields = body.decode(ENCODING).split(chr(FS))
    return fields, bytes(buffer[end + 1 :])
