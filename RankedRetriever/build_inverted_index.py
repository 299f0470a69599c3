import logging
import math
import os
import time
from collections import defaultdict
from typing import Dict, List, Optional, Set

from RankedRetriever.config import load_config, localisation_file
from RankedRetriever.errors import (
    CollectionNotFoundError,
    DocumentReadError,
    EmptyCollectionError,
    IndexWriteError,
    StopwordsNotFoundError,
    StopwordsReadError,
)
from RankedRetriever.index_format import format_idf, format_index_line, sort_index_lines
from RankedRetriever.preprocessing.document import Document
from RankedRetriever.preprocessing.preprocess import (
    LocalisationPreprocessor,
    LowercasePreprocessor,
    PreprocessingPipeline,
    RemoveCommasPreprocessor,
    RemoveEmptyTokensPreprocessor,
    StopWordsPreprocessor,
)
from RankedRetriever.preprocessing.stem_preprocessor import StemPreprocessor
from RankedRetriever.preprocessing.tokenizer import RegexMatchTokenizer

logger = logging.getLogger(__name__)


def build_stopwords(path: str, encoding: str = "utf-8") -> Set[str]:
    """
    Read a newline-delimited stopwords list.

    Args:
        path: Path to the stopwords file
        encoding: File encoding

    Returns:
        Set of stopwords

    Raises:
        StopwordsNotFoundError: If the file does not exist. Indexing without
            the requested stopwords is not allowed.
        StopwordsReadError: If the path exists but cannot be read or decoded
    """
    try:
        with open(path, "r", encoding=encoding) as f:
            return set(f.read().splitlines())
    except FileNotFoundError as e:
        raise StopwordsNotFoundError(path) from e
    except (OSError, UnicodeDecodeError) as e:
        raise StopwordsReadError(path, e) from e


def build_localisation(path: str, encoding: str = "utf-8") -> Dict[str, str]:
    """
    Read a British to American spelling list.

    The first half of the lines holds the British spellings, the second half
    the American spellings in the same order.

    Args:
        path: Path to the localisation file
        encoding: File encoding

    Returns:
        Mapping from British to American spelling. Empty if the file is
        missing or unreadable.
    """
    try:
        with open(path, "r", encoding=encoding) as f:
            lines = f.read().splitlines()
    except FileNotFoundError:
        logger.warning("Localisation file %s not found, spellings will not be localised", path)
        return {}
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read localisation file %s (%s), spellings will not be localised", path, e)
        return {}

    if len(lines) % 2 != 0:
        logger.warning("Localisation file %s has an odd number of lines (%d), pairing may be wrong",
                       path, len(lines))

    half = len(lines) // 2
    return dict(zip(lines[:half], lines[half:half * 2]))


def compute_idf(postings: Dict[str, int], total_documents: int) -> float:
    """
    IDF(t) = ln(N / (DF(t) + 1))

    The +1 keeps the value finite; a term found in every document gets a
    slightly negative IDF.
    """
    return math.log(total_documents / (len(postings) + 1))


def document_names(collection_dir: str, paths: List[str]) -> Dict[str, str]:
    """
    Name every document after its path relative to the collection.

    The suffix is dropped (``sub/doc1.txt`` becomes ``sub/doc1``) unless
    that would give two documents the same name. Commas are removed because
    they delimit fields in the index file. If two paths still give the same
    name (``a,b.txt`` and ``ab.txt``), the later one in ``paths`` gets a
    ``_2``, ``_3``, ... suffix that no other document uses.

    Returns:
        Mapping of document name to file path, in the order of ``paths``
    """
    relative = [os.path.relpath(path, collection_dir).replace(os.sep, "/").replace(",", "")
                for path in paths]
    stems = [os.path.splitext(name)[0] for name in relative]

    stem_counts = defaultdict(int)
    for name in stems:
        stem_counts[name] += 1

    candidates = [stem_name if stem_counts[stem_name] == 1 else full_name
                  for full_name, stem_name in zip(relative, stems)]
    reserved = set(candidates)

    names = {}
    for path, name in zip(paths, candidates):
        if name in names:
            counter = 2
            while f"{name}_{counter}" in names or f"{name}_{counter}" in reserved:
                counter += 1
            unique = f"{name}_{counter}"
            logger.warning("Document name %s is already used by %s, naming %s %s",
                           name, names[name], path, unique)
            name = unique
        names[name] = path
    return names


def collection_files(collection_dir: str) -> List[str]:
    """Regular files below ``collection_dir``, in sorted path order."""
    files = []
    for root, dirs, filenames in os.walk(collection_dir):
        dirs.sort()
        for filename in sorted(filenames):
            path = os.path.join(root, filename)
            if os.path.isfile(path):
                files.append(path)
    return files


class InvertedIndexBuilder:
    """
    Builds a term -> {document: frequency} index from a collection of text files.

    The index maps are owned by the instance; nothing is shared between
    builders.
    """

    def __init__(self, stopwords_path: Optional[str] = None, config=None,
                 stop_words: Optional[Set[str]] = None, localisation: Optional[Dict[str, str]] = None):
        """
        Args:
            stopwords_path: Stopwords file; None indexes without stopwords
            config: Configuration dictionary, defaults to DEFAULT_CONFIG
            stop_words: Stopword set, used instead of reading ``stopwords_path``
            localisation: Spelling table, used instead of the configured file
        """
        self.config = config or load_config()
        self.encoding = self.config["preprocessing"]["encoding"]

        if stop_words is None:
            stop_words = build_stopwords(stopwords_path, self.encoding) if stopwords_path else set()
        if localisation is None:
            localisation = build_localisation(localisation_file(self.config), self.encoding)

        self.stop_words = frozenset(stop_words)
        self.localisation = dict(localisation)

        self.index = defaultdict(dict)  # term -> {document name: frequency}
        self.document_count = 0

        self.tokenizer = RegexMatchTokenizer()
        self.preprocessors = self._create_preprocessing_pipeline()

    def _create_preprocessing_pipeline(self) -> PreprocessingPipeline:
        """The order of these steps is fixed; stemming must come last."""
        preprocessors = [
            LocalisationPreprocessor(self.localisation),
            LowercasePreprocessor(),
            RemoveCommasPreprocessor(),
            StopWordsPreprocessor(self.stop_words),
            RemoveEmptyTokensPreprocessor(),
            StemPreprocessor(),
        ]
        return PreprocessingPipeline(preprocessors, name="IndexingPipeline")

    def _terms(self, document: Document) -> List[str]:
        document.tokenize(self.tokenizer)
        document.preprocess(self.preprocessors)
        return document.get_preprocessed_terms()

    def tokenise_query(self, query: str) -> List[str]:
        """Run a query string through the same pipeline as documents."""
        return self._terms(Document(id="query", content=query))

    def tokenise_document(self, path: str) -> List[str]:
        """
        Read and tokenise one document.

        Raises:
            DocumentReadError: If the file cannot be read
        """
        document = Document.from_file(os.path.basename(path), path, encoding=self.encoding)
        return self._terms(document)

    def index_document(self, document_id: str, terms: List[str]) -> None:
        """
        Add the terms of one document to the index.

        Args:
            document_id: Document name, unique within the collection
            terms: Preprocessed terms of the document
        """
        self.document_count += 1

        for term in terms:
            postings = self.index[term]
            postings[document_id] = postings.get(document_id, 0) + 1

    def build_from_directory(self, collection_dir: str) -> int:
        """
        Index every regular file below a directory.

        Documents that cannot be read are skipped with a warning.

        Args:
            collection_dir: Directory holding the collection

        Returns:
            Number of documents indexed

        Raises:
            CollectionNotFoundError: If the directory does not exist
            EmptyCollectionError: If it contains no files, or none of them
                could be read
        """
        if not os.path.isdir(collection_dir):
            raise CollectionNotFoundError(collection_dir)

        paths = collection_files(collection_dir)
        if not paths:
            raise EmptyCollectionError(collection_dir)

        start_time = time.time()
        indexed = 0
        skipped = 0

        for name, path in document_names(collection_dir, paths).items():
            try:
                terms = self.tokenise_document(path)
            except DocumentReadError as e:
                logger.warning("%s, skipping it", e)
                skipped += 1
                continue

            self.index_document(name, terms)
            indexed += 1
            logger.debug("Indexed %s (%d terms)", name, len(terms))

        logger.info("Indexed %d documents in %.2f seconds", indexed, time.time() - start_time)
        if skipped:
            logger.warning("%d documents could not be read and were skipped", skipped)
        if not indexed:
            raise EmptyCollectionError(collection_dir, "contains no readable documents")
        logger.info("Total terms in inverted index: %d", len(self.index))

        return indexed

    def to_lines(self) -> List[str]:
        """Serialise the index, one sorted line per term."""
        decimals = self.config["index"]["idf_decimals"]
        rounding = self.config["index"]["idf_rounding"]

        lines = []
        for term, postings in self.index.items():
            idf = compute_idf(postings, self.document_count)
            lines.append(format_index_line(term, postings, format_idf(idf, decimals, rounding)))

        return sort_index_lines(lines)

    def save(self, index_dir: str) -> str:
        """
        Write the index to ``index_dir``, creating the directory if needed.

        Returns:
            Path of the written index file

        Raises:
            IndexWriteError: If the directory or the file cannot be written
        """
        output_file = os.path.join(index_dir, self.config["index"]["file_name"])

        try:
            os.makedirs(index_dir, exist_ok=True)
            with open(output_file, "w", encoding=self.encoding) as f:
                for line in self.to_lines():
                    f.write(line + "\n")
        except OSError as e:
            raise IndexWriteError(output_file, e) from e

        logger.info("Inverted index saved to %s", output_file)
        return output_file


def index(collection_dir: str, index_output_dir: str, stopwords_path: str, config=None) -> str:
    """
    Index a collection and write ``index_output_dir/index.txt``.

    Args:
        collection_dir: Directory of text files
        index_output_dir: Directory to write the index to
        stopwords_path: Stopwords file (required)
        config: Optional configuration dictionary

    Returns:
        Path of the written index file
    """
    builder = InvertedIndexBuilder(stopwords_path, config=config)
    builder.build_from_directory(collection_dir)
    return builder.save(index_output_dir)
