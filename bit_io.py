# filename: bit_io.py
"""
Bit packing helpers. All conversions are MSB-first; a partial final byte is
completed with zero bits on the right.
"""

from typing import Iterator

from huffman_config import BITS_PER_BYTE
from huffman_errors import EncodingInternalError, FormatViolationError


def pack_bits(bits: str) -> bytes:
    """Turn a string of '0'/'1' into the minimal byte sequence holding it."""
    out = bytearray()
    current = 0
    for i, bit in enumerate(bits):
        if bit != "0" and bit != "1":
            raise EncodingInternalError(f"cannot pack {bit!r} at position {i}: not a bit")
        current = (current << 1) | (bit == "1")
        if (i + 1) % BITS_PER_BYTE == 0:
            out.append(current)
            current = 0

    tail = len(bits) % BITS_PER_BYTE
    if tail:
        out.append(current << (BITS_PER_BYTE - tail))
    return bytes(out)


def byte_width(length: int) -> int:
    return (length + BITS_PER_BYTE - 1) // BITS_PER_BYTE


def unpack_bits(data: bytes, length: int) -> str:
    """Read the first ``length`` bits of ``data`` back as a '0'/'1' string."""
    needed = byte_width(length)
    if len(data) < needed:
        raise FormatViolationError(f"need {needed} bytes for {length} bits, got {len(data)}")
    text = "".join(format(b, "08b") for b in data[:needed])
    return text[:length]


class BitWriter:
    """Accumulates codes and hands back whole bytes as soon as they form."""

    def __init__(self):
        self._acc = 0
        self._nbits = 0

    def write(self, value: int, length: int) -> bytes:
        self._acc = (self._acc << length) | value
        self._nbits += length

        if self._nbits < BITS_PER_BYTE:
            return b""
        whole = self._nbits // BITS_PER_BYTE
        self._nbits -= whole * BITS_PER_BYTE
        ready = (self._acc >> self._nbits).to_bytes(whole, "big")
        self._acc &= (1 << self._nbits) - 1
        return ready

    def flush(self) -> bytes:
        """Zero-pad whatever is left to one byte. Empty when nothing is pending."""
        if not self._nbits:
            return b""
        byte = self._acc << (BITS_PER_BYTE - self._nbits)
        self._acc = 0
        self._nbits = 0
        return bytes([byte])


class BitReader:
    """Bytes plus a bit cursor; ``limit`` drops trailing padding bits."""

    def __init__(self, data: bytes, limit: int = None):
        self.data = data
        self.limit = len(data) * BITS_PER_BYTE if limit is None else limit
        self.pos = 0

    def __iter__(self) -> Iterator[int]:
        data = self.data
        while self.pos < self.limit:
            byte_idx, offset = divmod(self.pos, BITS_PER_BYTE)
            self.pos += 1
            yield (data[byte_idx] >> (7 - offset)) & 1
