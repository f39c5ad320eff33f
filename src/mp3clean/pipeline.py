import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from mp3core.errors import Mp3FormatError
from mp3core.mp3_parser import frame_offsets, frame_start_offset
from mp3core.tags import remove_tags_and_xing
from mp3core.xing import add_xing_header

from .config import CleanConfig, MP3_SUFFIXES
from .verify import duration_seconds

logger = logging.getLogger(__name__)


@dataclass
class CleanResult:
    path: str
    output_path: Optional[str] = None
    size_before: int = 0
    size_after: int = 0
    frames: int = 0
    written: bool = False
    duration_before: Optional[float] = None
    duration_after: Optional[float] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def clean_bytes(data: bytes, add_xing: bool = True) -> bytes:
    """Strip tags and VBR frames, then optionally add a fresh Xing header."""
    cleaned = remove_tags_and_xing(data)
    return add_xing_header(cleaned) if add_xing else cleaned


def _write_atomic(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile("wb", delete=False, dir=str(path.parent),
                                         suffix=".tmp") as tmp:
            tmp_path = tmp.name
            tmp.write(data)
        if path.exists():
            shutil.copymode(str(path), tmp_path)
        os.replace(tmp_path, str(path))
        tmp_path = None
    finally:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)


def clean_file(src: str, dst: Optional[str] = None,
               config: Optional[CleanConfig] = None) -> CleanResult:
    """Clean one file; dst defaults to config.output_dir or to src itself."""
    config = config or CleanConfig()
    src_path = Path(src)
    if dst is None:
        dst_path = Path(config.output_dir) / src_path.name if config.output_dir else src_path
    else:
        dst_path = Path(dst)

    data = src_path.read_bytes()
    cleaned = clean_bytes(data, add_xing=config.add_xing)
    res = CleanResult(path=str(src_path), output_path=str(dst_path),
                      size_before=len(data), size_after=len(cleaned),
                      frames=len(frame_offsets(cleaned, frame_start_offset(cleaned))))

    if config.dry_run:
        logger.info("[dry-run] %s: %d -> %d bytes", src_path, res.size_before, res.size_after)
        return res

    if config.verify:
        res.duration_before = duration_seconds(str(src_path))
    _write_atomic(dst_path, cleaned)
    res.written = True
    if config.verify:
        res.duration_after = duration_seconds(str(dst_path))
        if res.duration_before is None or res.duration_after is None:
            logger.warning("Could not decode %s for verification", src_path)

    logger.info("Cleaned %s -> %s (%d -> %d bytes, %d frames)",
                src_path, dst_path, res.size_before, res.size_after, res.frames)
    return res


def iter_mp3s(root: str, recursive: bool = False,
              suffixes: Tuple[str, ...] = MP3_SUFFIXES) -> Iterator[str]:
    """Yield matching file paths under root in sorted order."""
    suffixes = tuple(s.lower() for s in suffixes)
    if recursive:
        for current, dirs, filenames in os.walk(root):
            dirs.sort()
            for name in sorted(filenames):
                full = os.path.join(current, name)
                if name.lower().endswith(suffixes) and os.path.isfile(full):
                    yield full
    else:
        for name in sorted(os.listdir(root)):
            full = os.path.join(root, name)
            if name.lower().endswith(suffixes) and os.path.isfile(full):
                yield full


def clean_directory(root: str, config: Optional[CleanConfig] = None) -> List[CleanResult]:
    """Clean every matching file under root, skipping files that fail."""
    config = config or CleanConfig()
    results = []
    for path in iter_mp3s(root, config.recursive, config.suffixes):
        dst = None
        if config.output_dir:
            dst = os.path.join(config.output_dir, os.path.relpath(path, root))
        try:
            results.append(clean_file(path, dst, config))
        except (Mp3FormatError, OSError) as exc:
            logger.warning("Skipping %s: %s", path, exc)
            results.append(CleanResult(path=path, error=str(exc)))
    return results
