# filename: huffman_service.py

import io
from pathlib import Path
from typing import BinaryIO, Optional

from loguru import logger

from huffman_config import CodecConfig
from huffman_core import HuffmanLogic
from huffman_errors import InputUnavailableError, OutputOverwritesInputError, UnsupportedExtensionError
from huffman_stream import StreamStats, read_stream, write_stream


class HuffmanService:
    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig.from_env()
        self.logic = HuffmanLogic()
        self.stats: Optional[StreamStats] = None

    # ── in-memory ───────────────────────────────────────────────────────

    def compress(self, data: bytes) -> bytes:
        sink = io.BytesIO()
        self.compress_stream(io.BytesIO(data), sink)
        return sink.getvalue()

    def decompress(self, data: bytes) -> bytes:
        sink = io.BytesIO()
        self.decompress_stream(io.BytesIO(data), sink)
        return sink.getvalue()

    # ── streams ─────────────────────────────────────────────────────────

    def compress_stream(self, source: BinaryIO, sink: BinaryIO) -> StreamStats:
        self.stats = write_stream(source, sink, self.config.header_mode,
                                  self.config.chunk_size, logic=self.logic)
        return self.stats

    def decompress_stream(self, source: BinaryIO, sink: BinaryIO) -> StreamStats:
        self.stats = read_stream(source, sink, self.config.header_mode, self.config.chunk_size)
        return self.stats

    # ── files ───────────────────────────────────────────────────────────

    def output_path(self, path, ext: str) -> Path:
        return Path(path).with_suffix("." + ext)

    def compress_file(self, path, out_path=None) -> Path:
        out_path = Path(out_path) if out_path else self.output_path(path, self.config.compressed_ext)
        self._run_file(path, out_path, self.compress_stream)
        logger.info("compressed {} -> {} ({} -> {} bytes, {} symbols)",
                    path, out_path, self.stats.bytes_in, self.stats.bytes_out, self.stats.symbols)
        return out_path

    def decompress_file(self, path, out_path=None) -> Path:
        out_path = Path(out_path) if out_path else self.output_path(path, self.config.original_ext)
        self._run_file(path, out_path, self.decompress_stream)
        logger.info("decompressed {} -> {} ({} bytes)", path, out_path, self.stats.bytes_out)
        return out_path

    def process(self, path) -> Path:
        """Compress or decompress ``path`` depending on its extension."""
        ext = Path(path).suffix.lstrip(".")
        if ext == self.config.original_ext:
            return self.compress_file(path)
        if ext == self.config.compressed_ext:
            return self.decompress_file(path)
        raise UnsupportedExtensionError(
            f"{path}: expected a .{self.config.original_ext} or .{self.config.compressed_ext} file")

    def _run_file(self, path, out_path: Path, transform) -> None:
        if Path(path).resolve() == out_path.resolve():
            raise OutputOverwritesInputError(f"{path}: output would overwrite the input")
        try:
            source = open(path, "rb")
        except OSError as e:
            raise InputUnavailableError(f"cannot open {path}: {e.strerror or e}") from e

        with source:
            try:
                with open(out_path, "wb") as sink:
                    transform(source, sink)
            except Exception:
                logger.error("failed on {}, removing partial output {}", path, out_path)
                out_path.unlink(missing_ok=True)
                raise
