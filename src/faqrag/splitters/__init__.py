from .base import BaseTextSplitter
from .recursive import DEFAULT_SEPARATORS, MIN_EXPECTED_CHUNKS, RecursiveTextSplitter

TextSplitter = RecursiveTextSplitter

__all__ = [
    "BaseTextSplitter",
    "DEFAULT_SEPARATORS",
    "MIN_EXPECTED_CHUNKS",
    "RecursiveTextSplitter",
    "TextSplitter",
]
