from typing import Optional

from pydub import AudioSegment

def duration_seconds(path: str) -> Optional[float]:
    """Decoded duration of an audio file, or None when it cannot be decoded.

    pydub hands decoding to ffmpeg, which may be missing or may reject the file.
    """
    try:
        return float(AudioSegment.from_file(path).duration_seconds)
    except Exception:
        return None
