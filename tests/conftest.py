"""Shared test fixtures."""

from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from RankedRetriever.build_inverted_index import InvertedIndexBuilder  # noqa: E402


def write_collection(root: Path, documents: dict) -> Path:
    """Write ``{relative path: text}`` below ``root`` and return it."""
    root.mkdir(parents=True, exist_ok=True)
    for name, text in documents.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def plain_builder() -> InvertedIndexBuilder:
    """Builder with no stopwords and no localisation."""
    return InvertedIndexBuilder(stop_words=set(), localisation={})


@pytest.fixture
def cat_dog_collection(tmp_path: Path) -> Path:
    return write_collection(tmp_path / "collection", {
        "doc1.txt": "cat dog cat",
        "doc2.txt": "dog bird",
    })


@pytest.fixture
def three_doc_lines(plain_builder: InvertedIndexBuilder, tmp_path: Path) -> list:
    collection = write_collection(tmp_path / "three", {
        "doc1.txt": "cat dog cat",
        "doc2.txt": "dog bird",
        "doc3.txt": "fish bird",
    })
    plain_builder.build_from_directory(str(collection))
    return plain_builder.to_lines()
