from .base import BaseDocumentLoader
from .text import TextDocumentLoader

DocumentLoader = TextDocumentLoader

__all__ = ["BaseDocumentLoader", "DocumentLoader", "TextDocumentLoader"]
