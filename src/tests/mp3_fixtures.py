"""Synthetic MPEG audio streams for the tests.

Payload bytes are zero so no false frame sync appears inside a frame.
"""
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

# MPEG1 Layer III, no CRC, 128 kbps, 44100 Hz, no padding
STEREO_HEADER = bytes([0xFF, 0xFB, 0x90, 0x00])
MONO_HEADER = bytes([0xFF, 0xFB, 0x90, 0xC0])
FRAME_LEN = 417  # 144 * 128000 // 44100

# MPEG2 Layer III, 64 kbps, 22050 Hz, joint stereo
MPEG2_HEADER = bytes([0xFF, 0xF3, 0x80, 0x40])

# reserved version: sample rate and so frame length are unknown
RESERVED_HEADER = bytes([0xFF, 0xEB, 0x90, 0x00])

ID3V2 = b"ID3\x04\x00\x00\x00\x00\x00\x14" + bytes(20)
ID3V1 = b"TAG" + b"\x20" * 125


def frame(header: bytes = STEREO_HEADER, length: int = FRAME_LEN) -> bytes:
    return header + bytes(length - len(header))


def frames(n: int, header: bytes = STEREO_HEADER, length: int = FRAME_LEN) -> bytes:
    return frame(header, length) * n


def tagged_frame(magic: bytes, at: int, header: bytes = STEREO_HEADER,
                 length: int = FRAME_LEN) -> bytes:
    body = bytearray(frame(header, length))
    body[at:at + len(magic)] = magic
    return bytes(body)
