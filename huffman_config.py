# filename: huffman_config.py

import enum
import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

TERMINATOR = 0x00
MAX_CODE_LENGTH = 255
MAX_SYMBOLS = 256
BITS_PER_BYTE = 8

# modules that log; silent until configure_logging turns them on
LOGGED_MODULES = ("huffman_core", "huffman_stream", "huffman_service", "huffman_cli")


class HeaderMode(str, enum.Enum):
    # symbol count in front of the entries, terminator checked as a separator
    COUNTED = "counted"
    # entries run until the first terminator byte
    SENTINEL = "sentinel"


@dataclass(frozen=True)
class CodecConfig:
    header_mode: HeaderMode = HeaderMode.COUNTED
    chunk_size: int = 64 * 1024
    compressed_ext: str = "huf"
    original_ext: str = "txt"
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "CodecConfig":
        mode = os.getenv("HUFFMAN_HEADER_MODE", cls.header_mode.value).strip().lower()
        try:
            header_mode = HeaderMode(mode)
        except ValueError:
            raise ValueError(f"HUFFMAN_HEADER_MODE must be 'counted' or 'sentinel', got {mode!r}")

        raw_chunk = os.getenv("HUFFMAN_CHUNK_SIZE", str(cls.chunk_size))
        try:
            chunk_size = int(raw_chunk)
        except ValueError:
            raise ValueError(f"HUFFMAN_CHUNK_SIZE is not an integer: {raw_chunk!r}")
        if chunk_size <= 0:
            raise ValueError(f"HUFFMAN_CHUNK_SIZE must be positive, got {chunk_size}")

        compressed_ext = os.getenv("HUFFMAN_COMPRESSED_EXT", cls.compressed_ext).lstrip(".")
        original_ext = os.getenv("HUFFMAN_ORIGINAL_EXT", cls.original_ext).lstrip(".")
        if not compressed_ext or not original_ext or compressed_ext == original_ext:
            raise ValueError("compressed and original extensions must be distinct and non-empty")

        log_level = os.getenv("HUFFMAN_LOG_LEVEL", cls.log_level).strip().upper()
        try:
            logger.level(log_level)
        except ValueError:
            raise ValueError(f"HUFFMAN_LOG_LEVEL is not a known log level: {log_level!r}")

        return cls(
            header_mode=header_mode,
            chunk_size=chunk_size,
            compressed_ext=compressed_ext,
            original_ext=original_ext,
            log_level=log_level,
        )


def configure_logging(level: str = "WARNING") -> None:
    """Route loguru output to stderr at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level, format="{time:HH:mm:ss} | {level:<7} | {name}:{line} - {message}")
    for name in LOGGED_MODULES:
        logger.enable(name)


def quiet_logging() -> None:
    """Silence the codec modules, the state a library import starts in."""
    for name in LOGGED_MODULES:
        logger.disable(name)


quiet_logging()
