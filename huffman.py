from typing import Dict, Iterator, List, Optional, Tuple


class HuffmanError(ValueError):
    """Base class for every error raised by the coder."""


class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol, weight, left=None, right=None):
        self.symbol = symbol    # byte or None
        self.weight = weight
        self.left = left
        self.right = right

    def is_leaf(self) -> bool:
        return self.symbol is not None

    def __repr__(self):
        if self.is_leaf():
            return f"HuffmanNode(symbol={self.symbol}, weight={self.weight})"
        return f"HuffmanNode(weight={self.weight})"


def freq_table(data: bytes) -> Dict[int, int]: # byte value -> number of occurrences
    counts = [0] * 256
    for b in data:
        counts[b] += 1
    return {symbol: count for symbol, count in enumerate(counts) if count > 0}


def sorted_frequencies(ft: Dict[int, int]) -> List[Tuple[int, int]]:
    """
    Ascending by count; equal counts keep ascending symbol order so that
    two runs over the same input always build the same tree
    """
    return sorted(((s, c) for s, c in ft.items() if c > 0), key=lambda sc: (sc[1], sc[0]))


def _insert_sorted(nodes: List[HuffmanNode], node: HuffmanNode) -> None:
    # goes in front of the first node that is strictly heavier
    i = 0
    while i < len(nodes) and nodes[i].weight <= node.weight:
        i += 1
    nodes.insert(i, node)


def build_huffman_tree(frequencies: List[Tuple[int, int]]) -> Optional[HuffmanNode]: # frequencies: ascending (symbol, count) pairs
    nodes = [HuffmanNode(symbol, count) for symbol, count in frequencies]
    if not nodes:
        return None

    # Build the tree
    while len(nodes) > 1:
        left = nodes.pop(0)
        right = nodes.pop(0)
        merged_node = HuffmanNode(None, left.weight + right.weight, left, right) # internal node with combined weight
        _insert_sorted(nodes, merged_node)

    return nodes[0] # root of the tree


def generate_huffman_codes(root: Optional[HuffmanNode]) -> Dict[int, str]: # root: root of the Huffman tree
    codes: Dict[int, str] = {}
    if root is None:
        return codes

    # A lone leaf has no edge to walk; it gets "0" so decoding has a bit to match
    if root.is_leaf():
        codes[root.symbol] = "0"
        return codes

    stack = [(root, "")]
    while stack:
        node, prefix = stack.pop()
        if node.is_leaf():
            codes[node.symbol] = prefix
            continue
        assert node.left is not None and node.right is not None, "internal node must have two children"
        # right first so the left subtree is visited first
        stack.append((node.right, prefix + "1"))
        stack.append((node.left, prefix + "0"))

    return codes


def iter_leaves(root: Optional[HuffmanNode]) -> Iterator[HuffmanNode]:
    if root is None:
        return
    if root.is_leaf():
        yield root
        return
    yield from iter_leaves(root.left)
    yield from iter_leaves(root.right)


def build_code_table(data: bytes) -> Dict[int, str]:
    root = build_huffman_tree(sorted_frequencies(freq_table(data)))
    return generate_huffman_codes(root)
