# filename: huffman_core.py

import heapq
import itertools
from collections import Counter, namedtuple
from fractions import Fraction
from typing import BinaryIO, Dict, Optional

from loguru import logger

from huffman_config import MAX_CODE_LENGTH
from huffman_errors import CodeLengthError, FormatViolationError

Code = namedtuple("Code", ["length", "bits"])


class HuffmanNode:
    __slots__ = ("char", "freq", "left", "right")

    def __init__(self, char, freq, left=None, right=None):
        self.char = char
        self.freq = freq
        self.left = left
        self.right = right

    @property
    def is_leaf(self):
        return self.left is None and self.right is None

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode(leaf {self.char:#04x}, freq={self.freq})"
        return f"HuffmanNode(internal, freq={self.freq})"


class HuffmanLogic:
    def count_frequencies(self, data) -> Counter:
        # Frequency analysis of the input byte data
        return Counter(data)

    def count_stream_frequencies(self, source: BinaryIO, chunk_size: int = 64 * 1024) -> Counter:
        freqs = Counter()
        while True:
            chunk = source.read(chunk_size)
            if not chunk:
                break
            freqs.update(chunk)
        return freqs

    def build_tree(self, freqs: Dict[int, int]) -> Optional[HuffmanNode]:
        if not freqs:
            return None

        # (freq, arrival, node): arrival keeps equal frequencies in push order
        arrival = itertools.count()
        priority_queue = [(freq, next(arrival), HuffmanNode(char, freq))
                          for char, freq in sorted(freqs.items())]
        heapq.heapify(priority_queue)

        if len(priority_queue) == 1:
            freq, _, leaf = priority_queue[0]
            return HuffmanNode(None, freq, left=leaf)

        # Iteratively merge nodes to form the binary tree
        while len(priority_queue) > 1:
            left_freq, _, left = heapq.heappop(priority_queue)
            right_freq, _, right = heapq.heappop(priority_queue)
            merged = HuffmanNode(None, left_freq + right_freq, left, right)
            heapq.heappush(priority_queue, (merged.freq, next(arrival), merged))

        return priority_queue[0][2]

    def generate_codes(self, node: Optional[HuffmanNode]) -> Dict[int, Code]:
        codes = {}
        if node is None:
            return codes

        stack = [(node, "")]
        while stack:
            current, path = stack.pop()
            if current.is_leaf:
                if len(path) > MAX_CODE_LENGTH:
                    raise CodeLengthError(
                        f"code for byte {current.char:#04x} is {len(path)} bits, "
                        f"header allows {MAX_CODE_LENGTH}")
                codes[current.char] = Code(len(path), path)
                continue
            if current.right is not None:
                stack.append((current.right, path + "1"))
            if current.left is not None:
                stack.append((current.left, path + "0"))

        logger.debug("assigned {} codes, longest {} bits",
                     len(codes), max(c.length for c in codes.values()))
        return codes

    def build_codes(self, freqs: Dict[int, int]) -> Dict[int, Code]:
        return self.generate_codes(self.build_tree(freqs))

    @staticmethod
    def is_prefix_free(codes: Dict[int, Code]) -> bool:
        # after sorting, a prefix always sits directly before some word it prefixes
        words = sorted(code.bits for code in codes.values())
        return all(not b.startswith(a) for a, b in zip(words, words[1:]))

    @staticmethod
    def kraft_sum(codes: Dict[int, Code]):
        return sum((Fraction(1, 2 ** code.length) for code in codes.values()), Fraction(0))


class DecodeTrie:
    """Binary trie over code bits. Leaves hold the decoded byte."""

    class _Node:
        __slots__ = ("children", "symbol")

        def __init__(self):
            self.children = [None, None]
            self.symbol = None

    def __init__(self):
        self.root = self._Node()
        self.size = 0

    def __len__(self):
        return self.size

    def insert(self, bits: str, symbol: int) -> None:
        if not bits:
            raise FormatViolationError(f"empty code for byte {symbol:#04x}")

        node = self.root
        for bit in bits:
            if node.symbol is not None:
                raise FormatViolationError(
                    f"code {bits} for byte {symbol:#04x} extends the code of byte {node.symbol:#04x}")
            idx = 1 if bit == "1" else 0
            if node.children[idx] is None:
                node.children[idx] = self._Node()
            node = node.children[idx]

        if node.symbol is not None:
            raise FormatViolationError(
                f"duplicate code {bits} for bytes {node.symbol:#04x} and {symbol:#04x}")
        if node.children[0] is not None or node.children[1] is not None:
            raise FormatViolationError(f"code {bits} for byte {symbol:#04x} is a prefix of another code")
        node.symbol = symbol
        self.size += 1

    def decode(self, bits, out: bytearray, cursor=None):
        """Walk ``bits`` (an iterable of 0/1 ints) through the trie, appending
        each completed symbol to ``out``. Returns the node the walk stopped at,
        so a later call can resume mid-code by passing it back as ``cursor``."""
        root = self.root
        node = root if cursor is None else cursor
        for bit in bits:
            node = node.children[bit]
            if node is None:
                raise FormatViolationError("payload contains a bit sequence no code starts with")
            if node.symbol is not None:
                out.append(node.symbol)
                node = root
        return node
