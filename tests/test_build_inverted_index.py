"""Unit tests for the inverted index builder."""

import logging
import math
from pathlib import Path

import pytest

from RankedRetriever.build_inverted_index import (
    InvertedIndexBuilder,
    build_localisation,
    build_stopwords,
    collection_files,
    compute_idf,
    document_names,
    index,
)
from RankedRetriever.errors import (
    CollectionNotFoundError,
    DocumentReadError,
    EmptyCollectionError,
    IndexWriteError,
    StopwordsNotFoundError,
    StopwordsReadError,
)
from RankedRetriever.preprocessing.document import Document

from conftest import write_collection


def test_two_document_scenario(plain_builder, cat_dog_collection):
    indexed = plain_builder.build_from_directory(str(cat_dog_collection))

    assert indexed == 2
    assert plain_builder.to_lines() == [
        "bird,doc2,1,0.000",
        "cat,doc1,2,0.000",
        "dog,doc1,1,doc2,1,-0.405",
    ]


def test_index_writes_index_file(tmp_path, cat_dog_collection):
    stopwords = tmp_path / "stopwords.txt"
    stopwords.write_text("", encoding="utf-8")

    output_file = index(str(cat_dog_collection), str(tmp_path / "out"), str(stopwords))

    assert Path(output_file) == tmp_path / "out" / "index.txt"
    lines = Path(output_file).read_text(encoding="utf-8").splitlines()
    assert "dog,doc1,1,doc2,1,-0.405" in lines
    assert len(lines) == 3


def test_index_requires_stopwords_file(tmp_path, cat_dog_collection):
    with pytest.raises(StopwordsNotFoundError):
        index(str(cat_dog_collection), str(tmp_path / "out"), str(tmp_path / "missing.txt"))


def test_stopwords_are_removed_from_index(tmp_path):
    collection = write_collection(tmp_path / "c", {"a.txt": "the cat and the dog"})
    builder = InvertedIndexBuilder(stop_words={"the", "and"}, localisation={})
    builder.build_from_directory(str(collection))
    assert set(builder.index) == {"cat", "dog"}


def test_index_document_counts_term_frequency(plain_builder):
    plain_builder.index_document("d1", ["cat", "dog", "cat"])
    plain_builder.index_document("d2", ["cat"])

    assert plain_builder.index["cat"] == {"d1": 2, "d2": 1}
    assert plain_builder.index["dog"] == {"d1": 1}
    assert plain_builder.document_count == 2


def test_posting_counts_sum_to_surviving_tokens(tmp_path):
    text = "The Quick brown fox, the lazy dog's 'big bone' and www.example.com -- visit again!"
    collection = write_collection(tmp_path / "c", {"doc.txt": text})
    builder = InvertedIndexBuilder(stop_words={"the", "and"}, localisation={})

    terms = builder.tokenise_document(str(collection / "doc.txt"))
    builder.build_from_directory(str(collection))

    recorded = sum(postings.get("doc", 0) for postings in builder.index.values())
    assert recorded == len(terms)


def test_compute_idf():
    assert compute_idf({"a": 1}, 2) == pytest.approx(0.0)
    assert compute_idf({"a": 1, "b": 1}, 2) == pytest.approx(math.log(2 / 3))


def test_idf_decreases_with_document_frequency():
    total = 10
    values = [compute_idf({f"d{i}": 1 for i in range(df)}, total) for df in range(1, total + 1)]
    assert all(earlier > later for earlier, later in zip(values, values[1:]))


def test_hyphenated_line_break_is_joined(tmp_path, plain_builder):
    collection = write_collection(tmp_path / "c", {"doc.txt": "infor-\nmation\nretrieval"})
    assert plain_builder.tokenise_document(str(collection / "doc.txt")) == ["inform", "retriev"]


def test_unreadable_document_is_skipped(tmp_path, plain_builder, caplog):
    collection = write_collection(tmp_path / "c", {"good.txt": "cat", "other.txt": "dog"})
    (collection / "bad.txt").write_bytes(b"\xff\xfe\xfa broken")

    with caplog.at_level(logging.WARNING):
        indexed = plain_builder.build_from_directory(str(collection))

    assert indexed == 2
    assert plain_builder.document_count == 2
    assert "bad.txt" in caplog.text


def test_tokenise_document_raises_for_missing_file(tmp_path, plain_builder):
    with pytest.raises(DocumentReadError):
        plain_builder.tokenise_document(str(tmp_path / "nope.txt"))


def test_missing_collection_is_fatal(tmp_path, plain_builder):
    with pytest.raises(CollectionNotFoundError):
        plain_builder.build_from_directory(str(tmp_path / "missing"))


def test_empty_collection_is_fatal(tmp_path, plain_builder):
    (tmp_path / "empty").mkdir()
    with pytest.raises(EmptyCollectionError):
        plain_builder.build_from_directory(str(tmp_path / "empty"))


def test_build_stopwords(tmp_path):
    path = tmp_path / "stop.txt"
    path.write_text("the\na\nof\n", encoding="utf-8")
    assert build_stopwords(str(path)) == {"the", "a", "of"}


def test_build_stopwords_missing_file(tmp_path):
    with pytest.raises(StopwordsNotFoundError):
        build_stopwords(str(tmp_path / "missing.txt"))


def test_build_localisation_pairs_halves(tmp_path):
    path = tmp_path / "loc.txt"
    path.write_text("colour\ncentre\ncolor\ncenter\n", encoding="utf-8")
    assert build_localisation(str(path)) == {"colour": "color", "centre": "center"}


def test_build_localisation_missing_file_is_empty(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        assert build_localisation(str(tmp_path / "missing.txt")) == {}
    assert "not found" in caplog.text


def test_bundled_localisation_applies(tmp_path):
    collection = write_collection(tmp_path / "c", {"doc.txt": "colour"})
    builder = InvertedIndexBuilder(stop_words=set())
    builder.build_from_directory(str(collection))
    assert "color" in builder.index


def test_document_names(tmp_path):
    collection = write_collection(tmp_path / "c", {
        "a.txt": "x",
        "a.md": "x",
        "sub/b.txt": "x",
        "c,d.txt": "x",
    })
    names = document_names(str(collection), collection_files(str(collection)))
    assert set(names) == {"a.md", "a.txt", "sub/b", "cd"}


def test_collection_files_are_sorted(tmp_path):
    collection = write_collection(tmp_path / "c", {"b.txt": "x", "a.txt": "x", "sub/c.txt": "x"})
    files = [Path(p).relative_to(collection).as_posix() for p in collection_files(str(collection))]
    assert files == ["a.txt", "b.txt", "sub/c.txt"]


def test_idf_rounding_follows_config(cat_dog_collection):
    config = {
        "preprocessing": {"encoding": "utf-8", "localisation_file": None},
        "index": {"file_name": "index.txt", "idf_decimals": 2, "idf_rounding": "half_even"},
        "search": {"document_matching": "anchored"},
        "relevance_feedback": {"relevant_weight": 0.5, "non_relevant_weight": 0.25},
    }
    builder = InvertedIndexBuilder(config=config, stop_words=set(), localisation={})
    builder.build_from_directory(str(cat_dog_collection))
    assert "dog,doc1,1,doc2,1,-0.41" in builder.to_lines()


def test_names_colliding_after_comma_removal_are_made_unique(tmp_path):
    collection = write_collection(tmp_path / "c", {"a,b.txt": "cat", "ab.txt": "dog"})
    names = document_names(str(collection), collection_files(str(collection)))

    assert list(names) == ["ab.txt", "ab.txt_2"]
    assert Path(names["ab.txt"]).name == "a,b.txt"
    assert Path(names["ab.txt_2"]).name == "ab.txt"


def test_unique_suffix_does_not_take_another_documents_name(tmp_path):
    collection = write_collection(tmp_path / "c", {
        "a,b.txt": "x",
        "ab.txt": "x",
        "ab.txt_2": "x",
    })
    names = document_names(str(collection), collection_files(str(collection)))

    assert len(names) == 3
    assert Path(names["ab.txt_2"]).name == "ab.txt_2"
    assert Path(names["ab.txt_3"]).name == "ab.txt"


def test_readable_documents_with_colliding_names_are_all_indexed(tmp_path, plain_builder):
    collection = write_collection(tmp_path / "c", {"a,b.txt": "cat", "ab.txt": "dog"})

    assert plain_builder.build_from_directory(str(collection)) == 2
    assert plain_builder.index["cat"] == {"ab.txt": 1}
    assert plain_builder.index["dog"] == {"ab.txt_2": 1}


def test_collection_without_readable_documents_is_fatal(tmp_path, plain_builder):
    collection = tmp_path / "c"
    collection.mkdir()
    (collection / "bad.txt").write_bytes(b"\xff\xfe\xfa broken")

    with pytest.raises(EmptyCollectionError, match="no readable documents"):
        plain_builder.build_from_directory(str(collection))


def test_build_stopwords_directory_is_fatal(tmp_path):
    with pytest.raises(StopwordsReadError):
        build_stopwords(str(tmp_path))


def test_build_stopwords_undecodable_file_is_fatal(tmp_path):
    path = tmp_path / "stop.txt"
    path.write_bytes(b"\xff\xfe\xfa")
    with pytest.raises(StopwordsReadError):
        build_stopwords(str(path))


def test_build_localisation_unreadable_file_is_empty(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        assert build_localisation(str(tmp_path)) == {}
    assert "Could not read localisation file" in caplog.text


def test_save_to_unwritable_location_is_fatal(tmp_path, plain_builder, cat_dog_collection):
    plain_builder.build_from_directory(str(cat_dog_collection))
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(IndexWriteError):
        plain_builder.save(str(blocker))


def test_only_newlines_end_document_lines(tmp_path):
    path = tmp_path / "doc.txt"
    path.write_bytes(b"form-\x0cfeed\r\ninfor-\nmation\n")

    document = Document.from_file("doc", str(path))

    assert document.content == "form-\x0cfeed information "
