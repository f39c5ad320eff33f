from typing import Tuple

import numpy as np

from .mp3_parser import MONO, STEREO, Frame, frame_offsets, frame_start_offset
from .errors import NoValidFramesError

def mp3_type(data: bytes) -> Tuple[int, str]:
    frame = Frame.parse(bytes(data))
    return frame.sample_rate, MONO if frame.channel_mode == MONO else STEREO

def analyze(data: bytes) -> dict:
    """Summarise the frame chain starting at the first sync."""
    data = bytes(data)
    first = frame_start_offset(data)
    if first is None:
        raise NoValidFramesError()
    frame = Frame.parse(data, first)
    scan = frame_offsets(data, first)

    sizes = np.diff(np.asarray(scan.offsets + [scan.data_end], dtype=np.int64))
    mean_size = float(sizes.mean()) if sizes.size else 0.0
    sample_rate = frame.sample_rate
    duration = len(scan.offsets) * frame.samples_per_frame / float(sample_rate)
    audio_bytes = scan.data_end - first
    return {
        "first_frame": first,
        "data_end": scan.data_end,
        "total_frames": len(scan.offsets),
        "version": frame.version,
        "layer": frame.layer,
        "sample_rate": sample_rate,
        "channel_mode": frame.channel_mode,
        "bitrate": frame.bitrate if frame.frame_length_or_none else None,
        "mean_frame_size": mean_size,
        "average_bitrate": int(audio_bytes * 8 / duration) if duration else 0,
        "vbr": bool(sizes.size and sizes.max() - sizes.min() > 1),
        "duration_sec": duration,
    }
