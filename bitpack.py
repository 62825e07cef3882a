from typing import Dict, List, Optional, Tuple, Union

from huffman import HuffmanError


class UnknownSymbolError(HuffmanError):
    def __init__(self, symbol: int, position: int):
        super().__init__(f"byte {symbol} at position {position} has no entry in the code table")
        self.symbol = symbol
        self.position = position


class DecodeError(HuffmanError):
    pass


def pack_bits_from_codes(data: bytes, code_map: Dict[int, str]) -> Tuple[bytes, int]:
    """
    Converts Huffman codes into packed bytes, most significant bit first
    Returns (packed_bytes, pad_bits) where pad_bits is number of 0 bits added at the end
    """
    # symbol -> (code as int, code length); Python ints hold any number of pending bits
    lookup = {symbol: (int(code, 2), len(code)) for symbol, code in code_map.items()}

    out = bytearray()
    acc = 0
    acc_bits = 0

    for position, b in enumerate(data):
        entry = lookup.get(b)
        if entry is None:
            raise UnknownSymbolError(b, position)
        value, length = entry
        acc = (acc << length) | value
        acc_bits += length
        while acc_bits >= 8:
            acc_bits -= 8
            out.append((acc >> acc_bits) & 0xFF)
        acc &= (1 << acc_bits) - 1

    pad_bits = 0
    if acc_bits != 0:
        pad_bits = 8 - acc_bits
        out.append((acc << pad_bits) & 0xFF)

    return bytes(out), pad_bits


class TrieNode:
    __slots__ = ("children", "symbol")

    def __init__(self):
        self.children: List[Optional["TrieNode"]] = [None, None]
        self.symbol: Optional[int] = None


class DecodeTrie:
    """
    Binary trie over the codes of a table. Decoding follows one edge per
    input bit instead of comparing the pending bits against every code.
    """

    def __init__(self, code_map: Dict[int, str]):
        self.root = TrieNode()
        self.max_code_len = 0
        for symbol, code in code_map.items():
            self._insert(symbol, code)

    def _insert(self, symbol: int, code: str) -> None:
        if not code:
            raise DecodeError(f"symbol {symbol} has an empty code")
        node = self.root
        for ch in code:
            if node.symbol is not None:
                raise DecodeError(f"code of symbol {node.symbol} is a prefix of the code of symbol {symbol}")
            bit = 1 if ch == "1" else 0
            if node.children[bit] is None:
                node.children[bit] = TrieNode()
            node = node.children[bit]
        if node.symbol is not None or node.children != [None, None]:
            raise DecodeError(f"code {code!r} of symbol {symbol} collides with another code")
        node.symbol = symbol
        self.max_code_len = max(self.max_code_len, len(code))

    def decode(self, packed: bytes, total_bits: int) -> bytes:
        decoded = bytearray()
        root = self.root
        node = root
        depth = 0
        bit_index = 0

        for byte in packed:
            for i in range(7, -1, -1):
                if bit_index >= total_bits:
                    break
                bit = (byte >> i) & 1
                node = node.children[bit]
                depth += 1
                if node is None:
                    raise DecodeError(
                        f"bits {bit_index - depth + 1}..{bit_index} match no code "
                        f"(longest code is {self.max_code_len} bits)"
                    )

                # Leaf
                if node.symbol is not None:
                    decoded.append(node.symbol)
                    node = root
                    depth = 0
                bit_index += 1

        if depth:
            raise DecodeError(f"stream ends with {depth} unmatched bits; input is truncated or corrupt")
        return bytes(decoded)


def unpack_and_decode(packed: bytes, pad_bits: int, code_map: Union[Dict[int, str], DecodeTrie]) -> bytes:
    """
    Decode packed bits using the code table (or a trie already built from it)
    """
    if not 0 <= pad_bits <= 7:
        raise DecodeError(f"padding must be 0-7 bits, got {pad_bits}")
    if not packed:
        if pad_bits:
            raise DecodeError("padding declared for an empty payload")
        return b""

    mask = (1 << pad_bits) - 1
    if packed[-1] & mask:
        raise DecodeError("padding bits of the final byte are not zero")

    trie = code_map if isinstance(code_map, DecodeTrie) else DecodeTrie(code_map)
    total_bits = len(packed) * 8 - pad_bits
    return trie.decode(packed, total_bits)
