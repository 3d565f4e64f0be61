from pathlib import Path

from llama_index.core import SimpleDirectoryReader
from llama_index.core.schema import Document as LlamaDocument

from faqrag.errors import NotFoundError
from .base import BaseDocumentLoader


class TextDocumentLoader(BaseDocumentLoader):
    """Loads a single plain-text document using llama-index.

    The document's path is recorded as ``source`` in its metadata so that
    chunks can name where they came from.
    """

    def __init__(self, file_path: Path | str, encoding: str = "utf-8"):
        self.file_path = Path(file_path)
        self.encoding = encoding

    def load(self) -> list[LlamaDocument]:
        if not self.file_path.is_file():
            raise NotFoundError(f"Document not found: {self.file_path}")

        reader = SimpleDirectoryReader(
            input_files=[str(self.file_path)],
            encoding=self.encoding,
        )
        documents = reader.load_data()
        for document in documents:
            document.metadata["source"] = str(self.file_path)
        return documents
