import shutil

import pytest

from goya.dict.builder import compile_dictionary
from goya.dict.double_array import DoubleArray
from goya.dict.prefix_tree import CommonPrefixTree
from goya.dictionary import DictionaryArtifacts, load
from goya.errors import DictionaryLoadError
from goya.util import read_json, write_json

from conftest import UNK_DEF, WID, write_source


def copy_dict(dicdir, tmp_path):
    out = tmp_path / "dict"
    shutil.copytree(dicdir, out)
    return out


def test_compile_result(source_dir, tmp_path):
    res = compile_dictionary(source_dir, tmp_path / "out")
    assert res.words == len(WID)
    # も is stored once in the trie
    assert res.surfaces == len(WID) - 1
    assert res.unknown_entries == 9
    for path in (res.artifacts.da_path, res.artifacts.dict_path, res.artifacts.features_path):
        assert path.exists()
    assert res.da_bytes == res.artifacts.da_path.stat().st_size
    assert res.da_slots > res.surfaces


def test_loaded_dictionary(dictionary):
    assert len(dictionary.vocabulary) == len(WID)
    entry = dictionary.vocabulary.entry(WID["東京"])
    assert (entry.surface_form, entry.left_context_id, entry.right_context_id, entry.cost) == ("東京", 1, 1, 800)
    unk = dictionary.vocabulary.unknown_entry(0)
    assert (unk.surface_form, unk.cost) == ("DEFAULT", 5000)
    with pytest.raises(IndexError):
        dictionary.vocabulary.entry(len(WID))
    assert dictionary.lookup("東京都", 0) == [(1, WID["東"]), (2, WID["東京"])]


def test_missing_artifacts(tmp_path):
    with pytest.raises(DictionaryLoadError) as err:
        load(tmp_path)
    assert err.value.path == DictionaryArtifacts.from_dir(tmp_path).da_path


def test_corrupt_json(dicdir, tmp_path):
    d = copy_dict(dicdir, tmp_path)
    (d / "dict.json").write_text('{"version": 1, "vocab', encoding="utf-8")
    with pytest.raises(DictionaryLoadError):
        load(d)


def test_wrong_version(dicdir, tmp_path):
    d = copy_dict(dicdir, tmp_path)
    data = read_json(d / "dict.json")
    data["version"] = 42
    write_json(d / "dict.json", data)
    with pytest.raises(DictionaryLoadError):
        load(d)


def test_trie_word_id_out_of_range(dicdir, tmp_path):
    d = copy_dict(dicdir, tmp_path)
    tree = CommonPrefixTree()
    for wid in range(len(WID) + 5):
        tree.append(wid, f"w{wid}")
    write_json(d / "da.json", DoubleArray.from_prefix_tree(tree).to_payload())
    with pytest.raises(DictionaryLoadError):
        load(d)


def test_context_id_outside_matrix(dicdir, tmp_path):
    d = copy_dict(dicdir, tmp_path)
    data = read_json(d / "dict.json")
    data["vocabulary"]["known"]["left"][0] = 99
    write_json(d / "dict.json", data)
    with pytest.raises(DictionaryLoadError):
        load(d)


def test_vocabulary_columns_differ(dicdir, tmp_path):
    d = copy_dict(dicdir, tmp_path)
    data = read_json(d / "dict.json")
    data["vocabulary"]["unknown"]["cost"].pop()
    write_json(d / "dict.json", data)
    with pytest.raises(DictionaryLoadError):
        load(d)


def test_compile_missing_unk_def(tmp_path):
    src = write_source(tmp_path / "src")
    (src / "unk.def").unlink()
    with pytest.raises(DictionaryLoadError):
        compile_dictionary(src, tmp_path / "out")
    assert not (tmp_path / "out" / "da.json").exists()


def test_compile_without_lexicon(tmp_path):
    src = write_source(tmp_path / "src")
    for p in src.glob("*.csv"):
        p.unlink()
    with pytest.raises(DictionaryLoadError):
        compile_dictionary(src, tmp_path / "out")


def test_compile_bad_row(tmp_path):
    src = write_source(tmp_path / "src")
    (src / "zz.csv").write_text("ねこ,1,one,100,名詞\n", encoding="utf-8")
    with pytest.raises(DictionaryLoadError) as err:
        compile_dictionary(src, tmp_path / "out")
    assert "zz.csv" in str(err.value)


def test_compile_context_id_outside_matrix(tmp_path):
    src = write_source(tmp_path / "src")
    (src / "zz.csv").write_text("ねこ,7,7,100,名詞\n", encoding="utf-8")
    with pytest.raises(DictionaryLoadError):
        compile_dictionary(src, tmp_path / "out")


def test_compile_incomplete_unk_def(tmp_path):
    src = write_source(tmp_path / "src")
    rows = [r for r in UNK_DEF.splitlines() if not r.startswith(("DEFAULT", "KANJI"))]
    (src / "unk.def").write_text("\n".join(rows) + "\n", encoding="utf-8")
    with pytest.raises(DictionaryLoadError):
        compile_dictionary(src, tmp_path / "out")


def test_trie_terminator_without_word_id(dicdir, tmp_path):
    d = copy_dict(dicdir, tmp_path)
    data = read_json(d / "da.json")
    base, check = data["base"], data["check"]
    terminators = [t for t, parent in enumerate(check) if parent and t == base[parent]]
    assert terminators
    for t in terminators:
        base[t] = 0
    write_json(d / "da.json", data)
    with pytest.raises(DictionaryLoadError):
        load(d)


def test_homonyms_out_of_range(dictionary):
    with pytest.raises(IndexError):
        dictionary.vocabulary.homonyms(-1)
    with pytest.raises(IndexError):
        dictionary.vocabulary.homonyms(len(WID))
