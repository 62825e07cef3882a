"""
Whole-buffer Huffman compression.

Compressed layout: one header byte holding the number of zero bits padding
the final payload byte (0-7), followed by the packed payload. Empty input
compresses to an empty byte string with no header. The code table travels
separately (see codetable.py).
"""

from typing import Dict, Tuple

from bitpack import DecodeError, pack_bits_from_codes, unpack_and_decode
from huffman import build_code_table

HEADER_SIZE = 1


def compress_with_table(data: bytes, code_map: Dict[int, str]) -> bytes:
    if not data:
        return b""
    packed, pad_bits = pack_bits_from_codes(data, code_map)
    return bytes([pad_bits]) + packed


def compress(data: bytes) -> Tuple[bytes, Dict[int, str]]:
    code_map = build_code_table(data)
    return compress_with_table(data, code_map), code_map


def decompress(compressed: bytes, code_map: Dict[int, str]) -> bytes:
    if not compressed:
        return b""
    pad_bits = compressed[0]
    if pad_bits > 7:
        raise DecodeError(f"bad header: padding of {pad_bits} bits")
    return unpack_and_decode(compressed[HEADER_SIZE:], pad_bits, code_map)
