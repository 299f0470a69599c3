from typing import List, Optional

from ..errors import DocumentReadError
from .preprocess import PreprocessingPipeline
from .tokenizer import RegexMatchTokenizer, Tokenizer, join_lines


class Document:
    """
    Represents a document in the information retrieval system.
    Stores document contents and preprocessed data.
    """

    def __init__(self, id: str, content: str = "", path: Optional[str] = None):
        """
        Initialize a document with content.

        Args:
            id: Document name, unique within the collection and free of commas
            content: Document text with line breaks already joined
            path: File the document was read from, if any
        """
        self.id = id
        self.content = content
        self.path = path
        self.tokens = None
        self.processed_tokens = None

    @classmethod
    def from_file(cls, id: str, path: str, encoding: str = "utf-8") -> "Document":
        """
        Read a document from disk, joining hyphenated line breaks.

        Args:
            id: Document name
            path: Path to the text file
            encoding: File encoding

        Returns:
            Document with its content loaded

        Raises:
            DocumentReadError: If the file cannot be read or decoded
        """
        try:
            with open(path, "r", encoding=encoding) as f:
                # only \n, \r and \r\n end a line; other separators stay in the text
                lines = [line.rstrip("\n") for line in f]
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(path, e) from e

        return cls(id=id, content=join_lines(lines), path=path)

    def tokenize(self, tokenizer: Tokenizer = None) -> "Document":
        """
        Tokenize the document content.

        Args:
            tokenizer: Tokenizer to use (defaults to RegexMatchTokenizer)

        Returns:
            Self for chaining operations
        """
        tokenizer = tokenizer or RegexMatchTokenizer()
        self.tokens = tokenizer.tokenize(self.content)
        return self

    def preprocess(self, preprocessing_pipeline: PreprocessingPipeline) -> "Document":
        if self.tokens is None:
            self.tokenize()

        self.processed_tokens = preprocessing_pipeline.preprocess(self.tokens, self.content)
        return self

    def get_preprocessed_terms(self) -> List[str]:
        """
        Get the preprocessed terms from the document.

        Returns:
            List of preprocessed terms (non-empty), in document order
        """
        if not self.processed_tokens:
            return []

        return [token.processed_form for token in self.processed_tokens
                if token.processed_form]
