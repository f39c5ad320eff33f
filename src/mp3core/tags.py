import logging
from typing import Optional

from .errors import NoValidFramesError
from .mp3_parser import Frame, end_of_last_valid_frame, frame_start_offset

logger = logging.getLogger(__name__)

XING_MAGICS = (b"Xing", b"Info")
VBRI_MAGIC = b"VBRI"
VBRI_OFFSET = 4 + 32

ID3V1_MAGIC = b"TAG"
ID3V1_LENGTH = 128
ID3V1_ENHANCED_MAGIC = b"TAG+"
ID3V1_ENHANCED_LENGTH = 227 + ID3V1_LENGTH


def vbr_tag_at(data: bytes, offset: int, frame: Frame) -> Optional[bytes]:
    """Return the VBR index magic carried by the frame at offset, if any."""
    xo = offset + frame.xing_offset
    magic = bytes(data[xo:xo + 4])
    if magic in XING_MAGICS:
        return magic
    if bytes(data[offset + VBRI_OFFSET:offset + VBRI_OFFSET + 4]) == VBRI_MAGIC:
        return VBRI_MAGIC
    return None


def crop_tag(data: bytes, magic: bytes, length: int) -> bytes:
    """Drop the trailing `length` bytes when they start with magic."""
    if len(data) < length:
        return data
    if data[-length:-length + len(magic)] == magic:
        logger.debug("Cropping %d byte %r tag", length, magic)
        return data[:-length]
    return data


def remove_tags_and_xing(data: bytes) -> bytes:
    """Strip everything around the audio frames.

    Leading ID3v2 tags, junk and Xing/Info/VBRI frames go first, then
    anything after the last decodable frame, then a trailing ID3v1 or
    enhanced ID3v1 tag.
    """
    data = bytes(data)
    while True:
        offset = frame_start_offset(data)
        if offset is None:
            raise NoValidFramesError()
        frame = Frame.parse(data, offset)
        magic = vbr_tag_at(data, offset, frame)
        if magic is None:
            break
        nxt = frame.next_frame_offset(data, offset)
        if nxt is None:
            raise NoValidFramesError()
        logger.debug("Dropping %r frame at %d", magic, offset)
        data = data[nxt:]

    data = data[offset:]
    data = data[:end_of_last_valid_frame(data)]

    cropped = crop_tag(data, ID3V1_ENHANCED_MAGIC, ID3V1_ENHANCED_LENGTH)
    if cropped is data:
        cropped = crop_tag(data, ID3V1_MAGIC, ID3V1_LENGTH)
    return cropped
