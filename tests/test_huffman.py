import heapq
import random

import pytest

from huffman import (
    HuffmanNode,
    build_code_table,
    build_huffman_tree,
    freq_table,
    generate_huffman_codes,
    iter_leaves,
    sorted_frequencies,
)


def _random_bytes(seed, n, alphabet=256):
    rng = random.Random(seed)
    return bytes(rng.randrange(alphabet) for _ in range(n))


def _optimal_cost(counts):
    # classic heap formulation: total encoded bits = sum of all merge weights
    heap = list(counts)
    heapq.heapify(heap)
    cost = 0
    while len(heap) > 1:
        a = heapq.heappop(heap)
        b = heapq.heappop(heap)
        cost += a + b
        heapq.heappush(heap, a + b)
    return cost


def test_freq_table_counts_only_present_bytes():
    ft = freq_table(b"abracadabra")
    assert ft == {ord("a"): 5, ord("b"): 2, ord("r"): 2, ord("c"): 1, ord("d"): 1}


def test_freq_table_empty():
    assert freq_table(b"") == {}


def test_sorted_frequencies_ascending_with_symbol_tiebreak():
    ft = {ord("z"): 2, ord("a"): 2, ord("m"): 1, ord("q"): 7}
    assert sorted_frequencies(ft) == [(ord("m"), 1), (ord("a"), 2), (ord("z"), 2), (ord("q"), 7)]


def test_sorted_frequencies_drops_zero_counts():
    assert sorted_frequencies({1: 0, 2: 3}) == [(2, 3)]


def test_build_tree_empty_is_none():
    assert build_huffman_tree([]) is None
    assert generate_huffman_codes(None) == {}


def test_single_symbol_tree_is_a_leaf_with_code_zero():
    root = build_huffman_tree([(65, 1000)])
    assert root.is_leaf()
    assert root.weight == 1000
    assert generate_huffman_codes(root) == {65: "0"}


def test_two_symbols_first_removed_goes_left():
    root = build_huffman_tree(sorted_frequencies(freq_table(b"AAB")))
    assert root.weight == 3
    assert root.left.symbol == ord("B")
    assert root.right.symbol == ord("A")
    assert generate_huffman_codes(root) == {ord("A"): "1", ord("B"): "0"}


def test_merged_node_goes_after_equal_weights():
    # a+b (weight 2) is re-inserted after c (weight 2), so c is merged first as the left child
    root = build_huffman_tree([(ord("a"), 1), (ord("b"), 1), (ord("c"), 2)])
    codes = generate_huffman_codes(root)
    assert codes == {ord("c"): "0", ord("a"): "10", ord("b"): "11"}


def test_merged_node_goes_before_heavier():
    root = build_huffman_tree([(1, 1), (2, 1), (3, 3)])
    assert root.left.weight == 2
    assert root.right.symbol == 3


def test_generate_codes_walks_left_zero_right_one():
    tree = HuffmanNode(None, 6,
                       HuffmanNode(10, 3),
                       HuffmanNode(None, 3, HuffmanNode(11, 1), HuffmanNode(12, 2)))
    assert generate_huffman_codes(tree) == {10: "0", 11: "10", 12: "11"}


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_leaf_weights_sum_to_input_length(seed):
    data = _random_bytes(seed, 3000, alphabet=40 + seed * 50)
    root = build_huffman_tree(sorted_frequencies(freq_table(data)))
    assert sum(leaf.weight for leaf in iter_leaves(root)) == len(data)
    assert root.weight == len(data)


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_codes_are_prefix_free(seed):
    codes = build_code_table(_random_bytes(seed, 5000, alphabet=200))
    items = list(codes.items())
    for i, (s1, c1) in enumerate(items):
        for s2, c2 in items[i + 1:]:
            assert not c1.startswith(c2), (s1, s2)
            assert not c2.startswith(c1), (s1, s2)


@pytest.mark.parametrize("seed", [5, 6, 7])
def test_code_lengths_are_optimal(seed):
    data = _random_bytes(seed, 4000, alphabet=64)
    ft = freq_table(data)
    codes = build_code_table(data)
    total_bits = sum(ft[s] * len(c) for s, c in codes.items())
    assert total_bits == _optimal_cost(ft.values())


def test_table_has_one_entry_per_distinct_byte():
    data = b"the quick brown fox jumps over the lazy dog"
    assert set(build_code_table(data)) == set(data)


def test_skewed_frequencies_build_long_codes():
    # fibonacci counts give a maximally unbalanced tree
    fib = [1, 1]
    while len(fib) < 40:
        fib.append(fib[-1] + fib[-2])
    codes = generate_huffman_codes(build_huffman_tree(list(enumerate(fib))))
    assert max(len(c) for c in codes.values()) == 39


def test_build_is_deterministic():
    data = _random_bytes(11, 2000)
    assert build_code_table(data) == build_code_table(data)
