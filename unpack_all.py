#!/usr/bin/env python3
"""Batch dump all watch face files in a folder."""
from __future__ import annotations

import argparse
from pathlib import Path

from facen import DumpFormat
from unpack import main as unpack_main


def _iter_sources(folder: Path, pattern: str) -> list[Path]:
    sources = sorted(folder.glob(pattern))
    return [p for p in sources if p.is_file()]


def run(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Batch dump watch face files in a folder")
    parser.add_argument("folder", type=Path, help="Folder containing watch face files")
    parser.add_argument(
        "-p",
        "--pattern",
        default="*.bin",
        help="Glob pattern to match watch face files (default: *.bin)",
    )
    parser.add_argument(
        "-o",
        "--out-root",
        type=Path,
        help="Optional output root; defaults to creating *_unpacked next to each source",
    )
    parser.add_argument(
        "--format",
        default=DumpFormat.BMP.value,
        choices=[f.value for f in DumpFormat],
        help="Image file format (default: bmp)",
    )
    parser.add_argument("--log-file", help="Log file (default: log/runtime.log)")
    args = parser.parse_args(argv)

    folder = args.folder
    if not folder.is_dir():
        raise SystemExit(f"Folder not found: {folder}")

    sources = _iter_sources(folder, args.pattern)
    if not sources:
        raise SystemExit(f"No files matched {args.pattern} in {folder}")

    failed = []
    for src in sources:
        out_root = args.out_root or src.parent
        out_dir = out_root / f"{src.name}_unpacked"
        argv = [str(src), "-o", str(out_dir), "--format", args.format, "--no-progress"]
        if args.log_file:
            argv += ["--log-file", args.log_file]
        try:
            unpack_main(argv)
        except SystemExit as e:
            # one bad file doesn't stop the batch
            if e.code:
                failed.append(src)

    if failed:
        raise SystemExit(f"{len(failed)} of {len(sources)} files failed: " + ", ".join(p.name for p in failed))


if __name__ == "__main__":
    run()
