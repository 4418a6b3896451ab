# filename: huffman_stream.py
"""
Reads and writes the compressed stream:

    [count:2 BE]? [symbol:1 | length:1 | code bytes]* [terminator:1] ([padding:1] [payload])?

The count is present in COUNTED header mode only. Each entry's code is packed
MSB-first and padded to its own byte boundary. The payload is the input's
codes packed back to back; the padding byte in front of it says how many
zero bits complete its final byte. An empty input has no payload section.
"""

import io
import struct
from dataclasses import dataclass
from typing import BinaryIO, Dict, Optional, Tuple

from loguru import logger

from bit_io import BitReader, BitWriter, byte_width, pack_bits, unpack_bits
from huffman_config import BITS_PER_BYTE, MAX_SYMBOLS, TERMINATOR, HeaderMode
from huffman_core import Code, DecodeTrie, HuffmanLogic
from huffman_errors import FormatViolationError, InputUnavailableError, TerminatorCollisionError

COUNT_FORMAT = ">H"
COUNT_SIZE = struct.calcsize(COUNT_FORMAT)


@dataclass
class StreamStats:
    bytes_in: int = 0
    bytes_out: int = 0
    symbols: int = 0
    header_bytes: int = 0


# ── encode side ──────────────────────────────────────────────────────────────

def serialize_header(codes: Dict[int, Code], header_mode: HeaderMode = HeaderMode.COUNTED) -> bytes:
    header = bytearray()
    if header_mode == HeaderMode.COUNTED:
        header += struct.pack(COUNT_FORMAT, len(codes))
    elif TERMINATOR in codes:
        raise TerminatorCollisionError(
            f"byte {TERMINATOR:#04x} occurs in the input and would end a sentinel header early; "
            f"use the counted header mode")

    for symbol in sorted(codes):
        code = codes[symbol]
        header.append(symbol)
        header.append(code.length)
        header += pack_bits(code.bits)

    header.append(TERMINATOR)
    return bytes(header)


def _start_offset(source: BinaryIO) -> int:
    try:
        return source.tell()
    except (OSError, io.UnsupportedOperation) as e:
        raise InputUnavailableError(f"source must support seeking: {e}") from e


def write_stream(source: BinaryIO, sink: BinaryIO,
                 header_mode: HeaderMode = HeaderMode.COUNTED,
                 chunk_size: int = 64 * 1024,
                 logic: Optional[HuffmanLogic] = None) -> StreamStats:
    """Compress everything readable from ``source`` into ``sink``.

    The source is read twice: once for frequencies, then again from the same
    starting offset to emit the payload.
    """
    logic = logic or HuffmanLogic()
    start = _start_offset(source)

    freqs = logic.count_stream_frequencies(source, chunk_size)
    codes = logic.build_codes(freqs)
    header = serialize_header(codes, header_mode)
    sink.write(header)

    stats = StreamStats(bytes_in=sum(freqs.values()), symbols=len(codes), header_bytes=len(header))
    stats.bytes_out = len(header)
    logger.debug("header: {} symbols, {} bytes ({} mode)", len(codes), len(header), header_mode.value)

    if not stats.bytes_in:
        return stats

    total_bits = sum(freqs[symbol] * code.length for symbol, code in codes.items())
    padding = -total_bits % BITS_PER_BYTE
    sink.write(bytes([padding]))
    stats.bytes_out += 1

    table = {symbol: (int(code.bits, 2), code.length) for symbol, code in codes.items()}
    writer = BitWriter()
    source.seek(start)
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            break
        out = bytearray()
        for byte in chunk:
            value, length = table[byte]
            out += writer.write(value, length)
        sink.write(out)
        stats.bytes_out += len(out)

    tail = writer.flush()
    sink.write(tail)
    stats.bytes_out += len(tail)

    return stats


# ── decode side ──────────────────────────────────────────────────────────────

def _read_exact(source: BinaryIO, size: int, what: str) -> bytes:
    data = source.read(size)
    if len(data) != size:
        raise FormatViolationError(f"stream truncated while reading {what}: "
                                   f"wanted {size} bytes, got {len(data)}")
    return data


def _read_entry(source: BinaryIO, symbol: int, trie: DecodeTrie) -> int:
    length = _read_exact(source, 1, f"code length of byte {symbol:#04x}")[0]
    if length == 0:
        raise FormatViolationError(f"byte {symbol:#04x} has a zero-length code")
    width = byte_width(length)
    packed = _read_exact(source, width, f"{length}-bit code of byte {symbol:#04x}")
    trie.insert(unpack_bits(packed, length), symbol)
    return 1 + width


def parse_header(source: BinaryIO, header_mode: HeaderMode = HeaderMode.COUNTED) -> Tuple[DecodeTrie, int]:
    """Read the code table. Returns the trie and the header size in bytes,
    terminator included."""
    trie = DecodeTrie()

    if header_mode == HeaderMode.COUNTED:
        count = struct.unpack(COUNT_FORMAT, _read_exact(source, COUNT_SIZE, "symbol count"))[0]
        if count > MAX_SYMBOLS:
            raise FormatViolationError(f"header declares {count} symbols, at most {MAX_SYMBOLS} exist")
        size = COUNT_SIZE + 1
        for _ in range(count):
            symbol = _read_exact(source, 1, "header symbol")[0]
            size += 1 + _read_entry(source, symbol, trie)
        terminator = _read_exact(source, 1, "header terminator")[0]
        if terminator != TERMINATOR:
            raise FormatViolationError(f"expected header terminator {TERMINATOR:#04x}, found {terminator:#04x}")
        return trie, size

    size = 1
    while True:
        symbol = _read_exact(source, 1, "header symbol or terminator")[0]
        if symbol == TERMINATOR:
            return trie, size
        if len(trie) == MAX_SYMBOLS:
            raise FormatViolationError(f"header lists more than {MAX_SYMBOLS} symbols")
        size += 1 + _read_entry(source, symbol, trie)


def read_stream(source: BinaryIO, sink: BinaryIO,
                header_mode: HeaderMode = HeaderMode.COUNTED,
                chunk_size: int = 64 * 1024) -> StreamStats:
    """Decompress ``source`` into ``sink``. Malformed input raises
    FormatViolationError; whatever was already written to ``sink`` is the
    caller's to discard."""
    trie, header_bytes = parse_header(source, header_mode)
    stats = StreamStats(bytes_in=header_bytes, symbols=len(trie), header_bytes=header_bytes)

    pad = source.read(1)
    if not pad:
        if len(trie):
            raise FormatViolationError(f"header lists {len(trie)} symbols but the payload is missing")
        return stats
    if not len(trie):
        raise FormatViolationError("payload present after an empty header")

    padding = pad[0]
    if padding >= BITS_PER_BYTE:
        raise FormatViolationError(f"padding byte {padding} is not in 0..7")

    chunk = source.read(chunk_size)
    if not chunk:
        raise FormatViolationError("padding byte is not followed by any payload")
    stats.bytes_in += 1

    cursor = None
    while chunk:
        following = source.read(chunk_size)
        limit = len(chunk) * BITS_PER_BYTE - (0 if following else padding)
        out = bytearray()
        cursor = trie.decode(BitReader(chunk, limit), out, cursor)
        sink.write(out)
        stats.bytes_in += len(chunk)
        stats.bytes_out += len(out)
        chunk = following

    if cursor is not trie.root:
        logger.debug("discarding an incomplete code at the end of the payload")
    return stats
