# filename: huffman_errors.py


class HuffmanError(Exception):
    """Base class for every failure raised by the codec."""


class InputUnavailableError(HuffmanError, OSError):
    """The source cannot be opened or read."""


class FormatViolationError(HuffmanError, ValueError):
    """A compressed stream is malformed: truncated header, bad code length,
    duplicate or conflicting code, or a broken padding byte."""


class EncodingInternalError(HuffmanError, RuntimeError):
    """An encoder invariant was broken. Not a user error."""


class CodeLengthError(EncodingInternalError):
    """A code does not fit the header's 8-bit length field."""


class TerminatorCollisionError(EncodingInternalError):
    """Sentinel headers cannot carry the terminator byte as a symbol."""


class UnsupportedExtensionError(HuffmanError, ValueError):
    pass


class OutputOverwritesInputError(HuffmanError, ValueError):
    """The output path resolves to the file being read."""
