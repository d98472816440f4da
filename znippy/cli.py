"""Command-line front end: compress, decompress, list and verify archives."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from .decompress import extract_archive, verify_archive_integrity
from .index import VerifyReport, list_archive_contents
from .meta import CompressionReport
from .packer import compress_dir

LOG_LEVEL_VARIABLE = "ZNIPPY_LOG"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="znippy",
        description="Znippy: fast archive format with per-file compression",
    )
    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    compress = commands.add_parser(
        "compress", help="Compress a directory into a .znippy archive"
    )
    compress.add_argument("-i", "--input", type=Path, required=True)
    compress.add_argument("-o", "--output", type=Path, required=True)
    compress.add_argument(
        "--no-skip",
        action="store_true",
        help="compress files even when they look already compressed",
    )

    decompress = commands.add_parser("decompress", help="Decompress a .znippy archive")
    decompress.add_argument("-i", "--input", type=Path, required=True)
    decompress.add_argument("-o", "--output", type=Path, required=True)

    listing = commands.add_parser("list", help="List contents of a .znippy archive")
    listing.add_argument("-i", "--input", type=Path, required=True)

    verify = commands.add_parser("verify", help="Verify archive integrity (checksum)")
    verify.add_argument("-i", "--input", type=Path, required=True)

    return parser


def _configure_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_VARIABLE, "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _print_compression_report(report: CompressionReport) -> None:
    print("\nCompression finished:")
    print(f"Total files:             {report.total_files}")
    print(f"Total directories:       {report.total_dirs}")
    print(f"Files compressed:        {report.compressed_files}")
    print(f"Files not compressed:    {report.uncompressed_files}")
    print(f"Total bytes read:        {report.total_bytes_in}")
    print(f"Total bytes written:     {report.total_bytes_out}")
    print(f"Bytes compressed:        {report.compressed_bytes}")
    print(f"Bytes not compressed:    {report.uncompressed_bytes}")
    print(f"Compression ratio:       {report.compression_ratio:.2f}%")


def _print_verify_report(title: str, report: VerifyReport) -> None:
    print(f"\n{title}")
    print(f"Total files:       {report.total_files}")
    print(f"Verified files:    {report.verified_files}")
    print(f"Corrupt files:     {report.corrupt_files}")
    print(f"Total bytes:       {report.total_bytes}")
    print(f"Verified bytes:    {report.verified_bytes}")
    print(f"Corrupt bytes:     {report.corrupt_bytes}")


def _run(args: argparse.Namespace) -> None:
    if args.command == "compress":
        _print_compression_report(compress_dir(args.input, args.output, args.no_skip))
    elif args.command == "decompress":
        _print_verify_report(
            "Decompression and verification finished:",
            extract_archive(args.input, args.output),
        )
    elif args.command == "list":
        list_archive_contents(args.input)
    elif args.command == "verify":
        _print_verify_report(
            "Verification finished:", verify_archive_integrity(args.input)
        )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the process exit status."""
    _configure_logging()
    args = _build_parser().parse_args(argv)
    try:
        _run(args)
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())