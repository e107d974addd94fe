# tests/test_loader.py

from __future__ import annotations

import pytest

from codex_merge.core.exceptions import CorpusLoadError
from codex_merge.loader import CorpusLoader


def test_pair_is_loaded_from_both_trees(corpus):
    corpus.write("feats.json", {"feat": [{"name": "Alert"}]}, {"feat": [{"name": "警觉"}]})
    pair = CorpusLoader(corpus.primary_dir, corpus.secondary_dir).load("feats.json")

    assert pair.relative_path == "feats.json"
    assert pair.primary["feat"][0]["name"] == "Alert"
    assert pair.secondary["feat"][0]["name"] == "警觉"


def test_missing_required_file_names_the_stage(corpus):
    corpus.write("feats.json", {"feat": []})
    loader = CorpusLoader(corpus.primary_dir, corpus.secondary_dir)

    with pytest.raises(CorpusLoadError) as excinfo:
        loader.load("feats.json", stage="feats")
    assert excinfo.value.stage == "feats"
    assert "file not found" in str(excinfo.value)


def test_invalid_json_is_a_load_error(corpus):
    (corpus.primary_dir / "books.json").write_text("{not json", encoding="utf-8")
    (corpus.secondary_dir / "books.json").write_text("{}", encoding="utf-8")

    with pytest.raises(CorpusLoadError):
        CorpusLoader(corpus.primary_dir, corpus.secondary_dir).load("books.json", stage="books")


def test_optional_files_resolve_to_none(corpus):
    loader = CorpusLoader(corpus.primary_dir, corpus.secondary_dir)
    pair = loader.load_optional("fluff-items.json")
    assert pair.primary is None
    assert pair.secondary is None


def test_secondary_can_be_optional_alone(corpus):
    corpus.write("spells/index.json", {"PHB": "spells-phb.json"})
    pair = CorpusLoader(corpus.primary_dir, corpus.secondary_dir).load(
        "spells/index.json", secondary_required=False
    )
    assert pair.primary == {"PHB": "spells-phb.json"}
    assert pair.secondary is None
