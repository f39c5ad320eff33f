"""Xing VBR header synthesis.

Layout written into the lead frame, after header and side info:

    "Xing" | flags (4) | frame count (4) | byte count (4) | ToC (100) | zeros

All integers are big endian. The frame count includes the Xing frame;
the byte count covers the whole output. ToC entry i is the position,
scaled to 0..255 of the output size, where the i-th percentile of the
frames starts.
"""
import logging
import struct
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .bitops import be32
from .errors import NoValidFramesError, XingHeaderError
from .mp3_parser import Frame, frame_offsets, frame_start_offset
from .tags import XING_MAGICS

logger = logging.getLogger(__name__)

FRAMES = 1
BYTES = 2
TOC = 4
QUALITY = 8

TOC_SIZE = 100


@dataclass
class XingHeader:
    magic: bytes
    flags: int
    frames: Optional[int] = None
    total_bytes: Optional[int] = None
    toc: Optional[bytes] = None
    quality: Optional[int] = None
    frame_offset: int = 0


def _toc(offsets, frame_size: int, total_size: int) -> bytes:
    offs = np.asarray(offsets, dtype=np.int64)
    idx = (len(offs) * np.arange(TOC_SIZE, dtype=np.int64)) // TOC_SIZE
    toc = ((offs[idx] + frame_size) * 256) // total_size
    return (toc & 0xFF).astype(np.uint8).tobytes()


def add_xing_header(data: bytes) -> bytes:
    """Prefix the first frame with a new Xing frame carrying counts and a ToC."""
    if not data:
        return data
    data = bytes(data)

    first = frame_start_offset(data)
    if first is None:
        raise NoValidFramesError()
    xo = Frame.parse(data, first).xing_offset

    frame = bytearray(data[first:first + xo])
    frame[1] |= 0x01  # no CRC follows the header
    frame += b"Xing" + be32(FRAMES | BYTES | TOC)

    scan = frame_offsets(data, first)
    frames = len(scan.offsets)
    frame += be32(frames + 1)

    total_bytes_offset = len(frame)
    toc_offset = total_bytes_offset + 4
    target_size = toc_offset + TOC_SIZE

    # lowest bitrate whose frame holds the counts and the ToC
    for bitrate_index in range(1, 16):
        frame[2] = (frame[2] & 0x0F) | (bitrate_index << 4)
        length = Frame.parse(frame, 0).frame_length_or_none
        if length is not None and length >= target_size:
            frame += bytes(length - len(frame))
            logger.debug("Xing frame uses bitrate index %d, %d bytes", bitrate_index, length)
            break
    else:
        raise XingHeaderError(
            f"No bitrate gives a frame of {target_size} bytes for the Xing header")

    total_size = scan.data_end + len(frame)
    frame[total_bytes_offset:toc_offset] = be32(total_size)
    frame[toc_offset:toc_offset + TOC_SIZE] = _toc(scan.offsets, len(frame), total_size)

    out = data[:first] + bytes(frame) + data[first:]
    return out[:total_size]


def _need(data: bytes, pos: int, size: int, what: str) -> None:
    if len(data) < pos + size:
        raise XingHeaderError(f"Truncated Xing header: {what} needs {size} bytes at {pos}")


def read_xing_header(data: bytes) -> Optional[XingHeader]:
    """Decode a Xing/Info tag from the first frame, or None when absent.

    Raises XingHeaderError when the flags announce a field the buffer
    is too short to hold.
    """
    data = bytes(data)
    first = frame_start_offset(data)
    if first is None:
        return None
    pos = first + Frame.parse(data, first).xing_offset
    magic = data[pos:pos + 4]
    if magic not in XING_MAGICS or len(data) < pos + 8:
        return None
    flags, = struct.unpack_from(">I", data, pos + 4)
    header = XingHeader(magic=magic, flags=flags, frame_offset=first)
    pos += 8
    if flags & FRAMES:
        _need(data, pos, 4, "frame count")
        header.frames, = struct.unpack_from(">I", data, pos)
        pos += 4
    if flags & BYTES:
        _need(data, pos, 4, "byte count")
        header.total_bytes, = struct.unpack_from(">I", data, pos)
        pos += 4
    if flags & TOC:
        _need(data, pos, TOC_SIZE, "ToC")
        header.toc = data[pos:pos + TOC_SIZE]
        pos += TOC_SIZE
    if flags & QUALITY:
        _need(data, pos, 4, "quality")
        header.quality, = struct.unpack_from(">I", data, pos)
    return header
