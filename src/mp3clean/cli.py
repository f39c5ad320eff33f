import argparse
import logging
import os
import sys

from mp3core.errors import Mp3FormatError
from mp3core.probe import analyze
from mp3core.xing import read_xing_header

from .config import CleanConfig
from .pipeline import clean_directory, clean_file

logger = logging.getLogger("mp3clean")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mp3clean",
        description="Strip ID3/Xing/VBRI tags from MP3 files and add a fresh Xing header.")
    parser.add_argument("path", help="MP3 file or folder to process")
    parser.add_argument("-r", "--recursive", action="store_true",
                        help="Walk folders recursively.")
    parser.add_argument("--no-xing", dest="add_xing", action="store_false",
                        help="Only strip tags, do not add a Xing header.")
    parser.add_argument("--dry-run", action="store_true",
                        help="Report what would change without writing files.")
    parser.add_argument("--verify", action="store_true",
                        help="Compare decoded durations before and after (needs ffmpeg).")
    parser.add_argument("-o", "--output-dir", default=None,
                        help="Write cleaned files here instead of in place.")
    parser.add_argument("--info", action="store_true",
                        help="Print frame statistics of a single file and exit.")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def _print_info(path: str) -> None:
    with open(path, "rb") as fh:
        data = fh.read()
    for key, val in analyze(data).items():
        print(f"{key}: {val}")
    xing = read_xing_header(data)
    if xing is not None:
        print(f"vbr_tag: {xing.magic.decode('ascii')} frames={xing.frames} bytes={xing.total_bytes}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    config = CleanConfig(add_xing=args.add_xing, recursive=args.recursive,
                         dry_run=args.dry_run, verify=args.verify,
                         output_dir=args.output_dir)
    try:
        if os.path.isdir(args.path):
            if args.info:
                logger.error("--info needs a file, not a folder")
                return 1
            results = clean_directory(args.path, config)
            failed = [r for r in results if not r.ok]
            logger.info("Done. Cleaned %d file(s); skipped %d.",
                        len(results) - len(failed), len(failed))
            return 1 if failed else 0
        if not os.path.isfile(args.path):
            logger.error("No such file or folder: %s", args.path)
            return 1
        if args.info:
            _print_info(args.path)
            return 0
        res = clean_file(args.path, config=config)
        if res.duration_before is not None and res.duration_after is not None:
            print(f"duration: {res.duration_before:.3f}s -> {res.duration_after:.3f}s")
        return 0
    except (Mp3FormatError, OSError) as exc:
        logger.error("%s: %s", args.path, exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
