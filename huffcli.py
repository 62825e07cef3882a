"""
huffcode: compress / decompress files with a byte-level Huffman code

How to run:
  huffcode compress notes.txt                      -> notes.txt.huf + notes.txt.codes
  huffcode compress notes.txt -o out.huf -t out.codes
  huffcode decompress notes.txt.huf -t notes.txt.codes -o notes.restored.txt
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import codec
from codetable import CodeTableFormatError, deserialize_code_table, serialize_code_table
from huffman import HuffmanError

COMPRESSED_SUFFIX = ".huf"
TABLE_SUFFIX = ".codes"


class FileSource:
    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> bytes:
        return self.path.read_bytes()


class FileSink:
    def __init__(self, path: Path):
        self.path = Path(path)

    def write(self, data: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(data)


def load_code_table(source: FileSource):
    raw = source.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CodeTableFormatError(f"{source.path}: code table is not UTF-8 text") from e
    return deserialize_code_table(text)


def save_code_table(sink: FileSink, code_map) -> None:
    sink.write(serialize_code_table(code_map).encode("utf-8"))


def default_decompressed_path(path: Path) -> Path:
    if path.suffix == COMPRESSED_SUFFIX:
        return path.with_suffix("")
    return path.with_name(path.name + ".out")


def cmd_compress(args: argparse.Namespace) -> int:
    src = Path(args.input)
    out = Path(args.output) if args.output else src.with_name(src.name + COMPRESSED_SUFFIX)
    table_path = Path(args.table) if args.table else src.with_name(src.name + TABLE_SUFFIX)

    data = FileSource(src).read()
    compressed, code_map = codec.compress(data)

    # both results exist in memory before anything is written
    FileSink(out).write(compressed)
    save_code_table(FileSink(table_path), code_map)

    ratio = len(compressed) / max(1, len(data))
    print(f"{src}: {len(data)} -> {len(compressed)} bytes (ratio {ratio:.3f}), {len(code_map)} symbols")
    print(f"Wrote {out}")
    print(f"Wrote code table to {table_path}")
    return 0


def cmd_decompress(args: argparse.Namespace) -> int:
    src = Path(args.input)
    out = Path(args.output) if args.output else default_decompressed_path(src)

    code_map = load_code_table(FileSource(Path(args.table)))
    data = codec.decompress(FileSource(src).read(), code_map)

    FileSink(out).write(data)
    print(f"{src}: restored {len(data)} bytes")
    print(f"Wrote {out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffcode", description="Byte-level Huffman compression")
    sub = ap.add_subparsers(dest="command", required=True)

    c = sub.add_parser("compress", help="Compress a file and write its code table")
    c.add_argument("input", type=str, help="File to compress")
    c.add_argument("-o", "--output", type=str, default=None, help=f"Compressed output (default: INPUT{COMPRESSED_SUFFIX})")
    c.add_argument("-t", "--table", type=str, default=None, help=f"Code table output (default: INPUT{TABLE_SUFFIX})")
    c.set_defaults(func=cmd_compress)

    d = sub.add_parser("decompress", help="Restore a file from its compressed form and code table")
    d.add_argument("input", type=str, help="Compressed file")
    d.add_argument("-t", "--table", type=str, required=True, help="Code table written by compress")
    d.add_argument("-o", "--output", type=str, default=None, help=f"Restored output (default: INPUT without {COMPRESSED_SUFFIX})")
    d.set_defaults(func=cmd_decompress)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (HuffmanError, OSError) as e:
        print(f"huffcode: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
