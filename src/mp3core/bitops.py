import struct
from typing import Iterable, List

def iter_bits(data: bytes):
    for byte in data:
        for i in range(8):
            yield (byte >> (7 - i)) & 1

def unpack(data: bytes, widths: Iterable[int]) -> List[int]:
    """Split data into unsigned integers of the given bit widths, MSB first.

    Fields are not byte aligned, so a field may straddle a byte boundary.
    The caller guarantees len(data) * 8 >= sum(widths).
    """
    bits = iter_bits(data)
    out = []
    for width in widths:
        val = 0
        for _ in range(width):
            val = (val << 1) | next(bits)
        out.append(val)
    return out

def be32(value: int) -> bytes:
    return struct.pack(">I", int(value) & 0xFFFFFFFF)
