from pathlib import Path

import pytest

from goya.dict.builder import compile_dictionary
from goya.dictionary import DictionaryArtifacts, load
from goya.features import FeatureStore

# context ids: 0 BOS/EOS, 1 noun, 2 particle, 3 symbol
MATRIX_DEF = """4 4
0 0 0
0 1 0
0 2 1000
0 3 0
1 0 0
1 1 500
1 2 -200
1 3 200
2 0 500
2 1 -100
2 2 800
2 3 200
3 0 0
3 1 200
3 2 200
3 3 400
"""

ID_DEF = """0 BOS/EOS,*,*,*,*,*,*,*,*
1 名詞,一般,*,*,*,*,*
2 助詞,*,*,*,*,*,*
3 記号,*,*,*,*,*,*
"""

CHAR_DEF = """# category invoke group length
DEFAULT 0 1 0
SPACE 0 1 0
KANJI 0 0 2
SYMBOL 1 1 0
NUMERIC 1 1 0
ALPHA 1 1 0
HIRAGANA 0 1 2
KATAKANA 1 1 2

0x0020 SPACE
0x0030..0x0039 NUMERIC
0x0041..0x005A ALPHA
0x0061..0x007A ALPHA
0x0021..0x002F SYMBOL
0x2605 SYMBOL
0x3005 KANJI    # 々
0x3041..0x309F HIRAGANA
0x30A1..0x30FF KATAKANA
0x4E00..0x9FFF KANJI
"""

UNK_DEF = """DEFAULT,3,3,5000,記号,一般,*,*,*,*,*
SPACE,3,3,5000,記号,空白,*,*,*,*,*
KANJI,1,1,6000,名詞,一般,*,*,*,*,*
SYMBOL,3,3,5000,記号,一般,*,*,*,*,*
NUMERIC,1,1,3000,名詞,数,*,*,*,*,*
ALPHA,1,1,4000,名詞,固有名詞,組織,*,*,*,*
ALPHA,1,1,4500,名詞,一般,*,*,*,*,*
HIRAGANA,1,1,6000,名詞,一般,*,*,*,*,*
KATAKANA,1,1,4000,名詞,一般,*,*,*,*,*
"""

NOUNS_CSV = """すもも,1,1,1000,名詞,一般,*,*,*,*,すもも,スモモ,スモモ
もも,1,1,1000,名詞,一般,*,*,*,*,もも,モモ,モモ
うち,1,1,1000,名詞,非自立,副詞可能,*,*,*,うち,ウチ,ウチ
も,1,1,4000,名詞,一般,*,*,*,*,藻,モ,モ
東京,1,1,800,名詞,固有名詞,地域,一般,*,*,東京,トウキョウ,トーキョー
京都,1,1,800,名詞,固有名詞,地域,一般,*,*,京都,キョウト,キョート
東,1,1,1500,名詞,一般,*,*,*,*,東,ヒガシ,ヒガシ
都,1,1,1500,名詞,一般,*,*,*,*,都,ミヤコ,ミヤコ
"""

PARTICLES_CSV = """も,2,2,500,助詞,係助詞,*,*,*,*,も,モ,モ
の,2,2,300,助詞,連体化,*,*,*,*,の,ノ,ノ
"""

# word ids follow file name order: nouns.csv then particles.csv
WID = {
    "すもも": 0,
    "もも": 1,
    "うち": 2,
    "も/名詞": 3,
    "東京": 4,
    "京都": 5,
    "東": 6,
    "都": 7,
    "も": 8,
    "の": 9,
}


def write_source(src: Path) -> Path:
    src.mkdir(parents=True, exist_ok=True)
    (src / "matrix.def").write_text(MATRIX_DEF, encoding="utf-8")
    (src / "left-id.def").write_text(ID_DEF, encoding="utf-8")
    (src / "right-id.def").write_text(ID_DEF, encoding="utf-8")
    (src / "char.def").write_text(CHAR_DEF, encoding="utf-8")
    (src / "unk.def").write_text(UNK_DEF, encoding="utf-8")
    (src / "nouns.csv").write_text(NOUNS_CSV, encoding="utf-8")
    (src / "particles.csv").write_text(PARTICLES_CSV, encoding="utf-8")
    return src


@pytest.fixture(scope="session")
def source_dir(tmp_path_factory):
    return write_source(tmp_path_factory.mktemp("mecab") / "src")


@pytest.fixture(scope="session")
def dicdir(source_dir, tmp_path_factory):
    out = tmp_path_factory.mktemp("dict")
    compile_dictionary(source_dir, out)
    return out


@pytest.fixture(scope="session")
def dictionary(dicdir):
    return load(dicdir)


@pytest.fixture(scope="session")
def feature_store(dicdir):
    return FeatureStore.load(DictionaryArtifacts.from_dir(dicdir).features_path)
