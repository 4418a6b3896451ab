import io
import random
from fractions import Fraction

import pytest

from huffman_core import Code, DecodeTrie, HuffmanLogic, HuffmanNode
from huffman_errors import CodeLengthError, FormatViolationError


@pytest.fixture
def logic():
	return HuffmanLogic()


def test_count_frequencies(logic):
	freqs = logic.count_frequencies(b"aaabbc")
	assert freqs == {ord("a"): 3, ord("b"): 2, ord("c"): 1}
	assert logic.count_frequencies(b"") == {}


def test_count_stream_frequencies_matches_in_memory(logic):
	data = bytes(random.Random(7).getrandbits(8) for _ in range(5000))
	streamed = logic.count_stream_frequencies(io.BytesIO(data), chunk_size=13)
	assert streamed == logic.count_frequencies(data)
	assert sum(streamed.values()) == len(data)


def test_build_tree_empty(logic):
	assert logic.build_tree({}) is None
	assert logic.generate_codes(None) == {}


def test_literal_scenario(logic):
	codes = logic.build_codes(logic.count_frequencies(b"aaabbc"))
	a, b, c = codes[ord("a")], codes[ord("b")], codes[ord("c")]
	assert a.length <= b.length <= c.length
	assert logic.kraft_sum(codes) == 1
	assert logic.is_prefix_free(codes)
	# ties break by arrival order, so the assignment is fixed
	assert codes == {ord("a"): Code(1, "0"), ord("c"): Code(2, "10"), ord("b"): Code(2, "11")}


def test_tree_leaves_are_exactly_the_symbols(logic):
	freqs = {0: 5, 1: 1, 200: 9, 255: 3}
	root = logic.build_tree(freqs)
	assert root.freq == sum(freqs.values())

	leaves, stack = [], [root]
	while stack:
		node = stack.pop()
		if node.is_leaf:
			leaves.append(node.char)
		else:
			assert node.char is None
			assert node.left is not None and node.right is not None
			assert node.freq == node.left.freq + node.right.freq
			stack.extend([node.left, node.right])
	assert sorted(leaves) == sorted(freqs)


def test_null_byte_is_a_leaf(logic):
	codes = logic.build_codes({0: 4, 1: 4})
	assert set(codes) == {0, 1}
	assert all(code.length == 1 for code in codes.values())


def test_single_symbol_gets_one_bit_code(logic):
	root = logic.build_tree({0x41: 10000})
	assert not root.is_leaf
	assert root.left.char == 0x41 and root.right is None
	assert logic.generate_codes(root) == {0x41: Code(1, "0")}


def test_build_is_deterministic(logic):
	freqs = {s: 1 for s in range(256)}
	assert logic.build_codes(freqs) == HuffmanLogic().build_codes(dict(reversed(list(freqs.items()))))


def test_random_inputs_are_prefix_free_and_complete(logic):
	rng = random.Random(1234)
	for _ in range(20):
		n = rng.randint(2, 256)
		freqs = {s: rng.randint(1, 1000) for s in rng.sample(range(256), n)}
		codes = logic.build_codes(freqs)
		assert set(codes) == set(freqs)
		assert logic.is_prefix_free(codes)
		assert logic.kraft_sum(codes) == Fraction(1)
		assert all(1 <= code.length <= 255 for code in codes.values())


def test_skewed_frequencies_reach_depth_255(logic):
	freqs = {0: 1}
	freqs.update({s: 2 ** (s - 1) for s in range(1, 256)})
	codes = logic.build_codes(freqs)
	assert max(code.length for code in codes.values()) == 255
	assert logic.is_prefix_free(codes)


def test_code_longer_than_header_field_is_rejected(logic):
	node = HuffmanNode(7, 1)
	for _ in range(256):
		node = HuffmanNode(None, 1, left=node, right=HuffmanNode(9, 1))
	with pytest.raises(CodeLengthError):
		logic.generate_codes(node)


def test_is_prefix_free_detects_prefix():
	assert not HuffmanLogic.is_prefix_free({1: Code(1, "0"), 2: Code(2, "01")})
	assert HuffmanLogic.is_prefix_free({1: Code(1, "0"), 2: Code(2, "10"), 3: Code(2, "11")})


def test_decode_trie_resumes_mid_code():
	trie = DecodeTrie()
	trie.insert("0", 0x61)
	trie.insert("10", 0x63)
	trie.insert("11", 0x62)
	assert len(trie) == 3

	out = bytearray()
	cursor = trie.decode([0, 1, 1, 1], out)
	assert out == b"ab"
	assert cursor is not trie.root
	cursor = trie.decode([0], out, cursor)
	assert out == b"abc"
	assert cursor is trie.root


@pytest.mark.parametrize("first, second", [("01", "01"), ("0", "01"), ("01", "0")])
def test_decode_trie_rejects_duplicate_and_prefix_codes(first, second):
	trie = DecodeTrie()
	trie.insert(first, 1)
	with pytest.raises(FormatViolationError):
		trie.insert(second, 2)


def test_decode_trie_rejects_empty_code():
	with pytest.raises(FormatViolationError):
		DecodeTrie().insert("", 1)


def test_decode_trie_rejects_unknown_branch():
	trie = DecodeTrie()
	trie.insert("0", 0x41)
	with pytest.raises(FormatViolationError):
		trie.decode([1], bytearray())
