from dataclasses import dataclass
from typing import Optional, Tuple

MP3_SUFFIXES = (".mp3",)

@dataclass
class CleanConfig:
    add_xing: bool = True
    recursive: bool = False
    dry_run: bool = False
    verify: bool = False
    suffixes: Tuple[str, ...] = MP3_SUFFIXES
    output_dir: Optional[str] = None  # None rewrites files in place
