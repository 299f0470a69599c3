"""
Reading and writing the lines of the persisted inverted index.

Each line holds one term::

    term,doc1,count1,doc2,count2,...,idf

Commas are field delimiters and never occur inside a term or a document
name. ``sort_index_lines`` defines the single term ordering shared by the
index writer and by every vector built from the index.
"""
import re
from decimal import ROUND_CEILING, ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List

from .errors import IndexFormatError

ROUNDING_MODES = {
    "ceiling": ROUND_CEILING,
    "half_up": ROUND_HALF_UP,
    "half_even": ROUND_HALF_EVEN,
}

_COUNT_PATTERN = re.compile(r"[0-9]+")


def format_idf(idf: float, decimals: int = 3, rounding: str = "ceiling") -> str:
    """
    Render an IDF value with a fixed number of decimals.

    Ceiling rounding (towards positive infinity) is the default, so
    ``-0.4054`` becomes ``-0.405`` and ``0.1231`` becomes ``0.124``.

    Args:
        idf: Value to render
        decimals: Number of digits after the decimal point
        rounding: One of ``ceiling``, ``half_up`` or ``half_even``

    Returns:
        Formatted value
    """
    quantum = Decimal(1).scaleb(-decimals)
    value = Decimal(repr(idf)).quantize(quantum, rounding=ROUNDING_MODES[rounding])
    if value.is_zero():
        value = value.copy_abs()
    return f"{value:f}"


def format_index_line(term: str, postings: Dict[str, int], idf_text: str) -> str:
    fields = [term]
    for document, count in postings.items():
        fields.append(document)
        fields.append(str(count))
    fields.append(idf_text)
    return ",".join(fields)


def sort_index_lines(lines: Iterable[str]) -> List[str]:
    """
    Sort index lines lexicographically, dropping blank lines.

    Every line starts with ``term,`` so this is the term order used for the
    slots of document and query vectors.
    """
    return sorted(line.strip() for line in lines if line.strip())


def split_index_line(line: str):
    """
    Split a line into its term, its raw postings text and its IDF.

    Returns:
        Tuple ``(term, postings_text, idf)``

    Raises:
        IndexFormatError: If the line has no postings or the IDF is not a number
    """
    first = line.find(",")
    last = line.rfind(",")
    if first == -1 or first == last:
        raise IndexFormatError(line, "expected term, postings and idf fields")

    try:
        idf = float(line[last + 1:])
    except ValueError:
        raise IndexFormatError(line, "idf is not a number")

    return line[:first], line[first + 1:last], idf


class IndexEntry:
    """One parsed line of the index: a term, its postings and its IDF."""

    def __init__(self, term: str, postings: Dict[str, int], idf: float):
        self.term = term
        self.postings = postings
        self.idf = idf

    def __repr__(self):
        return f"IndexEntry({self.term!r}, {self.postings!r}, {self.idf!r})"


def parse_index_line(line: str) -> IndexEntry:
    """
    Parse a line positionally into ``(document, count)`` pairs.

    Document names are read by position, so a name that is a substring of
    another name, or a purely numeric name, is resolved correctly.

    Raises:
        IndexFormatError: If the postings are not ``name,count`` pairs
    """
    term, postings_text, idf = split_index_line(line)
    fields = postings_text.split(",")
    if len(fields) % 2 != 0:
        raise IndexFormatError(line, "postings are not document,count pairs")

    postings = {}
    for document, count in zip(fields[0::2], fields[1::2]):
        if not _COUNT_PATTERN.fullmatch(count):
            raise IndexFormatError(line, f"count {count!r} for {document!r} is not a number")
        postings[document] = postings.get(document, 0) + int(count)

    return IndexEntry(term, postings, idf)


def substring_document_names(postings_text: str) -> List[str]:
    """Posting fields that are not integers, in order of appearance."""
    return [field for field in postings_text.split(",")
            if field and not _COUNT_PATTERN.fullmatch(field)]


def substring_term_frequency(postings_text: str, document: str) -> int:
    """
    Count for ``document`` found by substring search in the postings text.

    The number after the first occurrence of the name is used. When one
    document name is contained in another this can pick up the wrong
    posting; it is kept only to reproduce older indexes' scores.
    """
    start = postings_text.find(document)
    if start == -1:
        return 0

    rest = postings_text[start + len(document) + 1:]
    count = rest.split(",", 1)[0]
    if not _COUNT_PATTERN.fullmatch(count):
        return 0
    return int(count)
