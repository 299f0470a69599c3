import logging
import math
import os
from collections import Counter
from typing import Iterable, List, Optional, Tuple

from ..build_inverted_index import InvertedIndexBuilder, build_stopwords
from ..config import load_config
from ..errors import IndexNotFoundError, IndexReadError
from ..index_format import (
    parse_index_line,
    sort_index_lines,
    split_index_line,
    substring_document_names,
    substring_term_frequency,
)

logger = logging.getLogger(__name__)


def compute_cosine_similarity(query: List[float], document: List[float]) -> float:
    """
    Compute cosine similarity between two term-aligned vectors.

    Args:
        query: Query vector
        document: Document vector with the same slot order

    Returns:
        Cosine similarity score, 0.0 if either vector has zero magnitude

    Raises:
        ValueError: If the vectors have different lengths
    """
    if len(query) != len(document):
        raise ValueError(f"Vector lengths differ: {len(query)} != {len(document)}")

    dot_product = 0.0
    query_length_squared = 0.0
    document_length_squared = 0.0
    for q, w in zip(query, document):
        dot_product += q * w
        query_length_squared += q * q
        document_length_squared += w * w

    # Avoid division by zero
    if query_length_squared == 0 or document_length_squared == 0:
        return 0.0

    return dot_product / (math.sqrt(query_length_squared) * math.sqrt(document_length_squared))


class SearchResults:
    """Ranked ``(document name, score)`` pairs for one query."""

    def __init__(self, results: List[Tuple[str, float]], requested: int):
        self.results = results
        self.requested = requested

    @property
    def found(self) -> int:
        return len(self.results)

    @property
    def is_empty(self) -> bool:
        return not self.results

    @property
    def is_partial(self) -> bool:
        """True when some, but fewer than the requested number, matched."""
        return 0 < self.found < self.requested

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.results]

    def __iter__(self):
        return iter(self.results)

    def __len__(self):
        return len(self.results)


class TFIDFSearchEngine:
    """
    TF-IDF search over a persisted inverted index.

    The index lines are sorted once on load; that order fixes the slot of
    every term in all document vectors and in every query vector.
    """

    def __init__(self, index_lines: Iterable[str], config=None, indexer: Optional[InvertedIndexBuilder] = None):
        """
        Args:
            index_lines: Lines of the index file, in any order
            config: Configuration dictionary, defaults to DEFAULT_CONFIG
            indexer: Builder whose pipeline tokenises queries; by default one
                without stopwords. Stopwords never reach the index, so they
                add nothing to a query vector either way.
        """
        self.config = config or load_config()
        self.document_matching = self.config["search"]["document_matching"]
        self.indexer = indexer or InvertedIndexBuilder(config=self.config)

        self.index_lines = sort_index_lines(index_lines)
        self.terms = []   # term of each vector slot
        self.idfs = []    # idf of each vector slot
        self.vectors = {}  # document name -> tf-idf vector
        self.build_document_vectors()

    @classmethod
    def load(cls, index_lines: Iterable[str], config=None, indexer=None) -> "TFIDFSearchEngine":
        return cls(index_lines, config=config, indexer=indexer)

    @classmethod
    def from_index_dir(cls, index_dir: str, config=None, indexer=None) -> "TFIDFSearchEngine":
        """
        Load ``index_dir/index.txt``.

        Raises:
            IndexNotFoundError: If the index file does not exist
            IndexReadError: If it exists but cannot be read or decoded
        """
        config = config or load_config()
        index_file = os.path.join(index_dir, config["index"]["file_name"])

        try:
            with open(index_file, "r", encoding=config["preprocessing"]["encoding"]) as f:
                lines = f.read().splitlines()
        except FileNotFoundError as e:
            raise IndexNotFoundError(index_file) from e
        except (OSError, UnicodeDecodeError) as e:
            raise IndexReadError(index_file, e) from e

        logger.info("Loaded %d index lines from %s", len(lines), index_file)
        return cls(lines, config=config, indexer=indexer)

    @property
    def vocabulary_size(self) -> int:
        return len(self.terms)

    @property
    def document_names(self) -> List[str]:
        return list(self.vectors)

    def build_document_vectors(self) -> None:
        """Build one tf-idf vector per document, one slot per sorted index line."""
        if self.document_matching == "substring":
            self._build_substring_vectors()
        else:
            self._build_anchored_vectors()

        logger.debug("Built %d document vectors of length %d", len(self.vectors), len(self.terms))

    def _build_anchored_vectors(self) -> None:
        entries = [parse_index_line(line) for line in self.index_lines]

        self.vectors = {}
        for entry in entries:
            for document in entry.postings:
                self.vectors.setdefault(document, [])

        self.terms = [entry.term for entry in entries]
        self.idfs = [entry.idf for entry in entries]

        for entry in entries:
            for document, weights in self.vectors.items():
                weights.append(entry.postings.get(document, 0) * entry.idf)

    def _build_substring_vectors(self) -> None:
        split_lines = [split_index_line(line) for line in self.index_lines]

        self.vectors = {}
        for _, postings_text, _ in split_lines:
            for document in substring_document_names(postings_text):
                self.vectors.setdefault(document, [])

        self.terms = [term for term, _, _ in split_lines]
        self.idfs = [idf for _, _, idf in split_lines]

        for _, postings_text, idf in split_lines:
            for document, weights in self.vectors.items():
                weights.append(substring_term_frequency(postings_text, document) * idf)

    def create_query_vector(self, query_terms: List[str]) -> List[float]:
        """
        Build a query vector aligned with the document vectors.

        Args:
            query_terms: Preprocessed query terms

        Returns:
            tf-idf weight per index term; terms not in the index are ignored
        """
        query_tf = Counter(query_terms)
        return [query_tf.get(term, 0) * idf for term, idf in zip(self.terms, self.idfs)]

    def rank(self, query_vector: List[float], top_k: int = 5) -> SearchResults:
        """
        Rank documents by similarity to a query vector.

        Documents with equal scores keep the order in which they appear in
        the index. Documents scoring 0 or less are left out.

        Args:
            query_vector: Vector from create_query_vector or relevance feedback
            top_k: Maximum number of results to return

        Returns:
            SearchResults with at most top_k entries
        """
        similarities = []
        for document, vector in self.vectors.items():
            similarities.append((document, compute_cosine_similarity(query_vector, vector)))

        # sorted() is stable, so ties keep document order
        similarities = sorted(similarities, key=lambda x: x[1], reverse=True)
        positive = [(document, score) for document, score in similarities if score > 0]

        return SearchResults(positive[:top_k], top_k)

    def search(self, query: str, top_k: int = 5) -> SearchResults:
        """
        Search for documents matching the query.

        Args:
            query: Query string
            top_k: Number of top results to return

        Returns:
            SearchResults ranked by cosine similarity
        """
        terms = self.indexer.tokenise_query(query)
        logger.debug("Query terms: %s", terms)
        return self.rank(self.create_query_vector(terms), top_k)


def search(index_dir: str, k: int, query_string: str, config=None,
           stopwords_path: Optional[str] = None) -> SearchResults:
    """
    Load ``index_dir/index.txt`` and rank its documents against a query.

    Args:
        index_dir: Directory holding the index file
        k: Maximum number of results
        query_string: Free text query
        config: Optional configuration dictionary
        stopwords_path: Optional stopwords file for the query pipeline

    Returns:
        SearchResults

    Raises:
        ValueError: If k is not positive
        IndexNotFoundError: If the index file is missing
    """
    if k < 1:
        raise ValueError(f"Number of results must be positive, got {k}")

    config = config or load_config()
    stop_words = build_stopwords(stopwords_path, config["preprocessing"]["encoding"]) if stopwords_path else set()
    indexer = InvertedIndexBuilder(config=config, stop_words=stop_words)

    engine = TFIDFSearchEngine.from_index_dir(index_dir, config=config, indexer=indexer)
    return engine.search(query_string, top_k=k)
