"""Unit tests for reading corpus sources from disk."""

import json

import pytest

from corpus_search.config import Settings
from corpus_search.corpus.loader import extract_contents_literal, group_flat_entries, load_corpus, load_records
from corpus_search.errors import CorpusLoadError
from corpus_search.search.engine import SearchEngine


def _write_chunks(directory, chunks):
    directory.mkdir()
    names = []
    for position, records in enumerate(chunks):
        name = f"chunk-{position:03d}.json"
        (directory / name).write_text(json.dumps(records), encoding="utf-8")
        names.append(name)
    (directory / "manifest.json").write_text(json.dumps({"chunks": names}), encoding="utf-8")


@pytest.mark.unit
class TestGroupFlatEntries:
    def test_groups_triples(self):
        assert group_flat_entries(["c1", "t1", "p1", "c2", "t2", "p2"]) == [
            {"content": "c1", "title": "t1", "path": "p1"},
            {"content": "c2", "title": "t2", "path": "p2"},
        ]

    def test_incomplete_trailing_triple_is_ignored(self):
        assert group_flat_entries(["c1", "t1", "p1", "c2", "t2"]) == [{"content": "c1", "title": "t1", "path": "p1"}]

    def test_missing_values_become_empty_strings(self):
        assert group_flat_entries([None, 7, "p"]) == [{"content": "", "title": "7", "path": "p"}]


@pytest.mark.unit
class TestLoadRecords:
    def test_chunk_directory_in_manifest_order(self, tmp_path):
        directory = tmp_path / "chunks"
        _write_chunks(
            directory,
            [
                [{"content": "a", "title": "A", "path": "topics/x/a.html"}],
                [{"content": "b", "title": "B", "path": "topics/x/b.html"}, {"content": "c", "title": "C"}],
            ],
        )
        records = load_records(directory)
        assert [record["title"] for record in records] == ["A", "B", "C"]
        assert records[2]["path"] == ""

    def test_json_array_of_objects(self, tmp_path):
        source = tmp_path / "corpus.json"
        source.write_text(json.dumps([{"content": "x", "title": "T", "path": "p"}]), encoding="utf-8")
        assert load_records(source) == [{"content": "x", "title": "T", "path": "p"}]

    def test_json_flat_array(self, tmp_path):
        source = tmp_path / "corpus.json"
        source.write_text(json.dumps(["x", "T", "p"]), encoding="utf-8")
        assert load_records(str(source)) == [{"content": "x", "title": "T", "path": "p"}]

    def test_legacy_script(self, tmp_path):
        source = tmp_path / "data.js"
        source.write_text(
            '// generated\nvar contents = ["body [1]", "Title \\"q\\"", "topics/a/b.html"];\nmodule.exports = contents;\n',
            encoding="utf-8",
        )
        assert load_records(source) == [{"content": "body [1]", "title": 'Title "q"', "path": "topics/a/b.html"}]

    def test_missing_source(self, tmp_path):
        with pytest.raises(CorpusLoadError, match="not found"):
            load_records(tmp_path / "nope")

    def test_directory_without_manifest(self, tmp_path):
        with pytest.raises(CorpusLoadError, match="not found"):
            load_records(tmp_path)

    def test_manifest_without_chunks_list(self, tmp_path):
        (tmp_path / "manifest.json").write_text('{"generatedAt": "now"}', encoding="utf-8")
        with pytest.raises(CorpusLoadError, match="chunks"):
            load_records(tmp_path)

    def test_malformed_json(self, tmp_path):
        source = tmp_path / "corpus.json"
        source.write_text("[not json", encoding="utf-8")
        with pytest.raises(CorpusLoadError, match="Malformed JSON"):
            load_records(source)

    def test_json_that_is_not_an_array(self, tmp_path):
        source = tmp_path / "corpus.json"
        source.write_text('{"content": "x"}', encoding="utf-8")
        with pytest.raises(CorpusLoadError, match="array"):
            load_records(source)

    def test_unsupported_extension(self, tmp_path):
        source = tmp_path / "corpus.txt"
        source.write_text("x", encoding="utf-8")
        with pytest.raises(CorpusLoadError, match="Unsupported"):
            load_records(source)

    def test_legacy_script_with_non_json_literal(self, tmp_path):
        source = tmp_path / "data.js"
        source.write_text("const contents = ['single', 'quoted', 'strings'];", encoding="utf-8")
        with pytest.raises(CorpusLoadError, match="JSON-compatible"):
            load_records(source)


@pytest.mark.unit
class TestExtractContentsLiteral:
    def test_nested_brackets_and_strings(self):
        script = 'let contents = [["x]"], "a\\\\", "]"]; other = [1];'
        assert extract_contents_literal(script) == '[["x]"], "a\\\\", "]"]'

    def test_missing_assignment(self):
        with pytest.raises(CorpusLoadError, match="assignment"):
            extract_contents_literal("var other = [];")

    def test_unterminated_array(self):
        with pytest.raises(CorpusLoadError, match="Unterminated"):
            extract_contents_literal('contents = ["a", "b"')


@pytest.mark.unit
class TestLoadCorpus:
    def test_loads_into_engine(self, tmp_path):
        source = tmp_path / "corpus.json"
        source.write_text(json.dumps(["guide text", "Guide", "topics/basics/g.html"]), encoding="utf-8")
        engine = SearchEngine(Settings())
        assert load_corpus(engine, source) == 1
        assert engine.search("guide").total == 1

    def test_failure_starts_with_empty_corpus(self, tmp_path, caplog):
        engine = SearchEngine(Settings())
        engine.load([{"content": "old", "title": "Old", "path": ""}])
        assert load_corpus(engine, tmp_path / "missing.json") == 0
        assert engine.stats().documents == 0
        assert "Failed to load corpus" in caplog.text
