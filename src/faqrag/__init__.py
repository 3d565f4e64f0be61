"""Retrieval-augmented question answering over a single FAQ document."""

__version__ = "0.1.0"
