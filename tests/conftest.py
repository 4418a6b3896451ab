import os
import sys

import pytest
from loguru import logger

# Make the top-level modules importable without installing the project
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from huffman_config import CodecConfig, HeaderMode, quiet_logging  # noqa: E402
from huffman_service import HuffmanService  # noqa: E402


@pytest.fixture
def service():
	return HuffmanService(CodecConfig())


@pytest.fixture
def sentinel_service():
	return HuffmanService(CodecConfig(header_mode=HeaderMode.SENTINEL))


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
	for name in ("HUFFMAN_HEADER_MODE", "HUFFMAN_CHUNK_SIZE", "HUFFMAN_COMPRESSED_EXT",
				 "HUFFMAN_ORIGINAL_EXT", "HUFFMAN_LOG_LEVEL"):
		monkeypatch.delenv(name, raising=False)
	yield
	# sinks added by the CLI point at capture streams that pytest closes
	logger.remove()
	quiet_logging()
