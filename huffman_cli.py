# filename: huffman_cli.py
"""Command line front end: compress a .txt file into .huf or back."""

import argparse
import dataclasses
import sys

from loguru import logger

from huffman_config import CodecConfig, HeaderMode, configure_logging
from huffman_errors import HuffmanError
from huffman_service import HuffmanService

EPILOG = """\
Examples:
  huffman-codec notes.txt              # writes notes.huf
  huffman-codec notes.huf              # writes notes.txt
  huffman-codec --mode compress data.bin
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="huffman-codec",
        description="Huffman compressor / decompressor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    parser.add_argument("path", help="file to compress or decompress")
    parser.add_argument("--mode", choices=("auto", "compress", "decompress"), default="auto",
                        help="auto picks the direction from the file extension")
    parser.add_argument("--header-mode", choices=[m.value for m in HeaderMode], default=None,
                        help="header layout (default: HUFFMAN_HEADER_MODE or counted)")
    parser.add_argument("-o", "--output", default=None, help="output path (default: swap the extension)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress to stderr")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = CodecConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if args.header_mode:
        config = dataclasses.replace(config, header_mode=HeaderMode(args.header_mode))
    configure_logging("DEBUG" if args.verbose else config.log_level)

    service = HuffmanService(config)
    try:
        if args.mode == "compress":
            out = service.compress_file(args.path, args.output)
        elif args.mode == "decompress":
            out = service.decompress_file(args.path, args.output)
        elif args.output:
            print("Error: --output needs an explicit --mode", file=sys.stderr)
            return 1
        else:
            out = service.process(args.path)
    except (HuffmanError, OSError) as e:
        logger.debug("run failed: {!r}", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
