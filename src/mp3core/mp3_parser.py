"""MPEG audio frame headers and frame boundary scanning.

Header layout (32 bits, MSB first):

    sync(11) version(2) layer(2) protection(1) bitrate(4)
    frequency(2) padding(1) private(1) channel_mode(2)

The remaining low bits of the 4th byte (mode extension, copyright,
original, emphasis) are not decoded.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .bitops import unpack
from .errors import FrameSyncError, InvalidFrameError, NoValidFramesError

logger = logging.getLogger(__name__)

HEADER_WIDTHS = (11, 2, 2, 1, 4, 2, 1, 1, 2)
SYNC = (1 << 11) - 1

MPEG25 = "MPEG2.5"
MPEG_RESERVED = "reserved"
MPEG2 = "MPEG2"
MPEG1 = "MPEG1"

LAYER_I = "Layer I"
LAYER_II = "Layer II"
LAYER_III = "Layer III"

STEREO = "stereo"
JOINT_STEREO = "joint_stereo"
DUAL_CHANNEL = "dual_channel"
MONO = "mono"

VERSIONS = (MPEG25, MPEG_RESERVED, MPEG2, MPEG1)
LAYERS = (None, LAYER_III, LAYER_II, LAYER_I)
CHANNEL_MODES = (STEREO, JOINT_STEREO, DUAL_CHANNEL, MONO)

SAMPLERATES = (44100, 48000, 32100)
# by version_index; the reserved version has no divisor
SAMPLERATE_DIVISORS = (4, None, 2, 1)

# kbps, [MPEG1 | MPEG2/2.5][layer_index][bitrate_index]; index 0 is free
# format and index 15 is bad, neither has a rate
BITRATES = (
    (
        None,
        (None, 32, 40, 48,  56,  64,  80,  96, 112, 128, 160, 192, 224, 256, 320, None),
        (None, 32, 48, 56,  64,  80,  96, 112, 128, 160, 192, 224, 256, 320, 384, None),
        (None, 32, 64, 96, 128, 160, 192, 224, 256, 288, 320, 352, 384, 416, 448, None),
    ),
    (
        None,
        (None,  8, 16, 24,  32,  40,  48,  56,  64,  80,  96, 112, 128, 144, 160, None),
        (None,  8, 16, 24,  32,  40,  48,  56,  64,  80,  96, 112, 128, 144, 160, None),
        (None, 32, 48, 56,  64,  80,  96, 112, 128, 144, 160, 176, 192, 224, 256, None),
    ),
)

# side info bytes before an embedded VBR tag, [MPEG1 | MPEG2/2.5][mono | other]
SIDE_INFO_SIZES = ((17, 32), (9, 17))


@dataclass
class Frame:
    version_index: int
    layer_index: int
    crc_protected: int
    bitrate_index: int
    freq_index: int
    padding: int
    private_bit: int
    channel_mode_index: int

    @classmethod
    def parse(cls, data: bytes, offset: Optional[int] = None) -> "Frame":
        """Decode the header at offset, or at the first sync when offset is None."""
        if offset is None:
            offset = frame_start_offset(data)
            if offset is None:
                raise NoValidFramesError()
        header = bytes(data[offset:offset + 4])
        if len(header) < 4:
            raise FrameSyncError(f"Truncated frame header at offset {offset}")
        sync, *fields = unpack(header, HEADER_WIDTHS)
        if sync != SYNC:
            raise FrameSyncError(f"Not at frame boundary (offset {offset}); internal error")
        return cls(*fields)

    @property
    def version(self) -> str:
        return VERSIONS[self.version_index]

    @property
    def layer(self) -> Optional[str]:
        return LAYERS[self.layer_index]

    @property
    def channel_mode(self) -> str:
        return CHANNEL_MODES[self.channel_mode_index]

    @property
    def sample_rate(self) -> int:
        divisor = SAMPLERATE_DIVISORS[self.version_index]
        if divisor is None or self.freq_index >= len(SAMPLERATES):
            raise InvalidFrameError(
                f"No sample rate for version {self.version_index}, frequency {self.freq_index}")
        return SAMPLERATES[self.freq_index] // divisor

    @property
    def bitrate(self) -> int:
        rates = BITRATES[0 if self.version == MPEG1 else 1][self.layer_index]
        kbps = rates[self.bitrate_index] if rates is not None else None
        if kbps is None:
            raise InvalidFrameError(
                f"No bitrate for layer {self.layer_index}, bitrate index {self.bitrate_index}")
        return kbps * 1000

    @property
    def frame_length(self) -> int:
        if self.layer == LAYER_I:
            return ((12 * self.bitrate) // self.sample_rate + self.padding) * 4
        coefficient = 144 if (self.layer == LAYER_II or self.version == MPEG1) else 72
        return (coefficient * self.bitrate) // self.sample_rate + self.padding

    @property
    def frame_length_or_none(self) -> Optional[int]:
        try:
            return self.frame_length
        except InvalidFrameError:
            return None

    @property
    def samples_per_frame(self) -> int:
        if self.layer == LAYER_I:
            return 384
        if self.layer == LAYER_III and self.version != MPEG1:
            return 576
        return 1152

    @property
    def xing_offset(self) -> int:
        """Offset of a Xing/Info tag from the frame start: header plus side info."""
        sizes = SIDE_INFO_SIZES[0 if self.version == MPEG1 else 1]
        return 4 + sizes[0 if self.channel_mode == MONO else 1]

    def next_frame_offset(self, data: bytes, offset: int) -> Optional[int]:
        length = self.frame_length_or_none
        if length is None:
            logger.debug("Frame at %d has no computable length; resyncing", offset)
        step = max(4 + 2 * self.crc_protected, length or 0)
        return frame_start_offset(data, offset + step)


@dataclass
class FrameScan:
    offsets: List[int] = field(default_factory=list)
    data_end: int = 0

    def __len__(self):
        return len(self.offsets)


def _is_sync(data: bytes, offset: int) -> bool:
    return (data[offset + 1] >> 5) == 7


def frame_start_offset(data: bytes, offset: int = 0) -> Optional[int]:
    """Offset of the next frame sync at or after offset, or None."""
    last = len(data) - 4
    offset = max(offset, 0)
    while offset <= last:
        offset = data.find(b"\xff", offset, last + 1)
        if offset < 0:
            return None
        if _is_sync(data, offset):
            return offset
        offset += 1
    return None


def frame_start_offset_backward(data: bytes, offset: Optional[int] = None) -> Optional[int]:
    """Offset of the closest frame sync at or before offset, or None."""
    if offset is None:
        offset = len(data)
    offset = min(offset, len(data) - 4)
    while offset >= 0:
        offset = data.rfind(b"\xff", 0, offset + 1)
        if offset < 0:
            return None
        if _is_sync(data, offset):
            return offset
        offset -= 1
    return None


def frame_offsets(data: bytes, offset: Optional[int] = 0) -> FrameScan:
    """Walk the frame chain from offset until no further sync is found.

    Frames of unknown length are listed but do not move data_end, which
    starts out at the buffer length.
    """
    scan = FrameScan(data_end=len(data))
    while offset is not None:
        scan.offsets.append(offset)
        frame = Frame.parse(data, offset)
        length = frame.frame_length_or_none
        if length is not None:
            scan.data_end = offset + length
        offset = frame.next_frame_offset(data, offset)
    return scan


def end_of_last_valid_frame(data: bytes) -> int:
    offset = len(data)
    while offset >= 0:
        offset = frame_start_offset_backward(data, offset)
        if offset is None:
            break
        length = Frame.parse(data, offset).frame_length_or_none
        if length is not None:
            return offset + length
        offset -= 1
    raise NoValidFramesError()
