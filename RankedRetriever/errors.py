"""Exceptions raised by the indexing and search components."""


class RetrieverError(Exception):
    """Base class for all errors that should stop the program."""


class StopwordsNotFoundError(RetrieverError):
    def __init__(self, path):
        super().__init__(f"No stopwords list found at {path}")
        self.path = path


class StopwordsReadError(RetrieverError):
    def __init__(self, path, reason):
        super().__init__(f"Could not read stopwords list {path}: {reason}")
        self.path = path
        self.reason = reason


class CollectionNotFoundError(RetrieverError):
    def __init__(self, path):
        super().__init__(f"Collection directory {path} does not exist")
        self.path = path


class EmptyCollectionError(RetrieverError):
    def __init__(self, path, detail="contains no documents"):
        super().__init__(f"Collection directory {path} {detail}")
        self.path = path


class IndexNotFoundError(RetrieverError):
    def __init__(self, path):
        super().__init__(f"Index file {path} not found. Run the index command first.")
        self.path = path


class IndexReadError(RetrieverError):
    def __init__(self, path, reason):
        super().__init__(f"Could not read index file {path}: {reason}")
        self.path = path
        self.reason = reason


class IndexWriteError(RetrieverError):
    def __init__(self, path, reason):
        super().__init__(f"Could not write index file {path}: {reason}")
        self.path = path
        self.reason = reason


class IndexFormatError(RetrieverError):
    def __init__(self, line, reason):
        super().__init__(f"Malformed index line {line!r}: {reason}")
        self.line = line
        self.reason = reason


class DocumentReadError(Exception):
    """A single document could not be read. Indexing skips it and continues."""

    def __init__(self, path, reason):
        super().__init__(f"Error reading document {path}: {reason}")
        self.path = path
        self.reason = reason
