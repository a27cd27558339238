"""Pack a source tree into one Markdown document and unpack it again."""

__version__ = "0.1.0"
