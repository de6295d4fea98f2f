import pytest

from goya.dict.charclasses import (
    CharCategory,
    CharClassifier,
    CharRange,
    UnknownWordModel,
    group_unknown_entries,
)
from goya.errors import DictionaryLoadError

# unk.def row order in conftest
UNK = {"DEFAULT": 0, "SPACE": 1, "KANJI": 2, "SYMBOL": 3, "NUMERIC": 4, "ALPHA": (5, 6), "HIRAGANA": 7, "KATAKANA": 8}


def test_classify(dictionary):
    c = dictionary.classifier
    assert c.classify("あ").name == "HIRAGANA"
    assert c.classify("ー").name == "KATAKANA"
    assert c.classify("々").name == "KANJI"
    assert c.classify("★").name == "SYMBOL"
    assert c.classify("7").name == "NUMERIC"
    # no range covers it
    assert c.classify("Ω").name == "DEFAULT"
    assert c.categories_of("Ω") == ("DEFAULT",)


def test_first_matching_range_wins(tmp_path):
    path = tmp_path / "char.def"
    path.write_text(
        "NUMERIC 1 1 0\nALPHA 1 1 0\n0x0030..0x0039 NUMERIC\n0x0030 ALPHA\n",
        encoding="utf-8",
    )
    c = CharClassifier.from_def(path)
    assert c.classify("0").name == "NUMERIC"
    # DEFAULT is always available
    assert "DEFAULT" in c.categories


def test_compatible_categories_extend_runs():
    c = CharClassifier(
        {"KANJI": CharCategory("KANJI", 0, 1, 0), "HIRAGANA": CharCategory("HIRAGANA", 0, 1, 0)},
        [CharRange(0x3005, 0x3005, "KANJI", ("HIRAGANA",)), CharRange(0x3041, 0x309F, "HIRAGANA")],
    )
    assert c.categories_of("々") == ("KANJI", "HIRAGANA")
    hira = c.categories["HIRAGANA"]
    assert c.run_length(hira, "あ々い", 0, 10) == 3
    assert c.run_length(hira, "あ々い", 0, 2) == 2


@pytest.mark.parametrize(
    "body",
    [
        "NUMERIC 1 1\n",
        "NUMERIC x 1 0\n",
        "NUMERIC 1 1 0\n0x0030..0x0039 ALPHA\n",
        "NUMERIC 1 1 0\n0xZZ NUMERIC\n",
        "NUMERIC 1 1 0\n0x0030\n",
    ],
)
def test_bad_char_def(tmp_path, body):
    path = tmp_path / "char.def"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(DictionaryLoadError):
        CharClassifier.from_def(path)


def test_missing_char_def(tmp_path):
    with pytest.raises(DictionaryLoadError):
        CharClassifier.from_def(tmp_path / "char.def")


def test_payload_reload(dictionary):
    c = dictionary.classifier
    again = CharClassifier.from_payload(c.to_payload())
    assert again.categories == c.categories
    assert again.ranges == c.ranges


def test_group_and_length_candidates(dictionary):
    unk = dictionary.unknown
    k = UNK["KATAKANA"]
    assert unk.candidates("カタカナ", 0) == [(1, k), (2, k), (4, k)]
    assert unk.candidates("カタカナ", 3) == [(4, k)]
    # group only, every entry of the category
    assert unk.candidates("ABc1", 0) == [(3, 5), (3, 6)]
    # length only
    assert unk.candidates("東西南", 0) == [(1, UNK["KANJI"]), (2, UNK["KANJI"])]


def test_fallback_category_yields_to_known_words(dictionary):
    unk = dictionary.unknown
    assert unk.candidates("すし", 0, has_known=True) == []
    assert unk.candidates("すし", 0, has_known=False) == [(1, 7), (2, 7)]
    # invoke=1 fires regardless
    assert unk.candidates("カナ", 0, has_known=True)


def test_default_category(dictionary):
    assert dictionary.unknown.candidates("ΩΩx", 0) == [(2, UNK["DEFAULT"])]


def test_group_run_is_capped(dictionary):
    capped = UnknownWordModel(dictionary.classifier, dictionary.unknown.by_category, max_group_len=3)
    assert capped.candidates("1234567", 0) == [(3, UNK["NUMERIC"])]
    assert capped.candidates("1234567", 5) == [(7, UNK["NUMERIC"])]


def test_nothing_past_the_end(dictionary):
    assert dictionary.unknown.candidates("a", 1) == []


def test_check_complete():
    c = CharClassifier({"ALPHA": CharCategory("ALPHA", 1, 1, 0)}, [CharRange(0x61, 0x7A, "ALPHA")])
    UnknownWordModel(c, {"ALPHA": [0], "DEFAULT": [1]}).check_complete()
    # DEFAULT stands in for categories without their own entries
    UnknownWordModel(c, {"DEFAULT": [0]}).check_complete()
    with pytest.raises(DictionaryLoadError):
        UnknownWordModel(c, {"ALPHA": [0]}).check_complete()


def test_group_unknown_entries():
    assert group_unknown_entries(["DEFAULT", "ALPHA", "ALPHA", "KANJI"]) == {
        "DEFAULT": [0],
        "ALPHA": [1, 2],
        "KANJI": [3],
    }
