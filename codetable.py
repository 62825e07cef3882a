from typing import Dict

from huffman import HuffmanError

DELIMITER = "\t"


class CodeTableFormatError(HuffmanError):
    pass


def serialize_code_table(table: Dict[int, str]) -> str:
    """
    One "<symbol><TAB><bits>" record per line, in ascending symbol order
    """
    lines = [f"{symbol}{DELIMITER}{table[symbol]}\n" for symbol in sorted(table)]
    return "".join(lines)


def check_prefix_free(table: Dict[int, str]) -> None:
    # after sorting, a code that prefixes another sorts directly before one of them
    codes = sorted((code, symbol) for symbol, code in table.items())
    for (a, sa), (b, sb) in zip(codes, codes[1:]):
        if b.startswith(a):
            raise CodeTableFormatError(f"code {a!r} of symbol {sa} is a prefix of code {b!r} of symbol {sb}")


def deserialize_code_table(text: str) -> Dict[int, str]:
    table: Dict[int, str] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue

        fields = line.split(DELIMITER)
        if len(fields) != 2:
            raise CodeTableFormatError(f"line {lineno}: expected 2 fields, got {len(fields)}")
        raw_symbol, code = fields

        if not (raw_symbol.isascii() and raw_symbol.isdigit()):
            raise CodeTableFormatError(f"line {lineno}: symbol {raw_symbol!r} is not a decimal number")
        symbol = int(raw_symbol)
        if symbol > 255:
            raise CodeTableFormatError(f"line {lineno}: symbol {symbol} out of range 0-255")

        if not code:
            raise CodeTableFormatError(f"line {lineno}: empty code for symbol {symbol}")
        if set(code) - {"0", "1"}:
            raise CodeTableFormatError(f"line {lineno}: code {code!r} contains characters other than 0/1")

        if symbol in table:
            raise CodeTableFormatError(f"line {lineno}: symbol {symbol} appears twice")
        table[symbol] = code

    check_prefix_free(table)
    return table
