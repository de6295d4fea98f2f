from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List
from tqdm import tqdm
from ..dictionary import Dictionary, DictionaryArtifacts
from ..errors import DictionaryLoadError
from ..features import FeatureStore
from ..util import write_json
from .charclasses import CharClassifier
from .connection import ConnectionCostMatrix
from .double_array import DoubleArray
from .lexicon import LexEntry, iter_lexicon_csv, load_lexicon
from .prefix_tree import CommonPrefixTree
from .vocabulary import EntryTable, Vocabulary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompileResult:
    artifacts: DictionaryArtifacts
    words: int
    surfaces: int
    unknown_entries: int
    da_slots: int
    da_bytes: int
    dict_bytes: int
    features_bytes: int
    seconds: float


def _lexicon_files(src_dir: Path) -> List[Path]:
    files = sorted(p for p in src_dir.glob("*.csv") if p.is_file())
    if not files:
        raise DictionaryLoadError("no lexicon *.csv files", src_dir)
    return files


def compile_dictionary(src_dir: Path, dist_dir: Path, encoding: str = "utf-8", progress: bool = False) -> CompileResult:
    """
    compile a MeCab-format source dictionary (char.def, matrix.def, unk.def,
    *.csv, optional left-id.def/right-id.def) into da.json, dict.json and
    features.json under dist_dir. word ids follow csv file name order, then
    row order
    """
    src_dir = Path(src_dir)
    t0 = time.perf_counter()
    logger.info("[1/4] loading dictionary sources from %s", src_dir)
    classifier = CharClassifier.from_def(src_dir / "char.def", encoding)
    matrix = ConnectionCostMatrix.from_def(
        src_dir / "matrix.def",
        left_id_def_path=src_dir / "left-id.def",
        right_id_def_path=src_dir / "right-id.def",
        encoding=encoding,
    )
    unk_path = src_dir / "unk.def"
    if not unk_path.exists():
        raise DictionaryLoadError("missing unk.def", unk_path)
    unknown: List[LexEntry] = list(iter_lexicon_csv(unk_path, encoding))
    files = _lexicon_files(src_dir)
    known = load_lexicon(tqdm(files, desc="lexicon", unit="file", disable=not progress), encoding)

    logger.info("[2/4] analyzing vocabulary: %d entries", len(known))
    tree = CommonPrefixTree()
    for wid, e in enumerate(known):
        if e.surface:
            tree.append(wid, e.surface)

    logger.info("[3/4] recompiling %d surfaces into a double array", len(tree))
    da = DoubleArray.from_prefix_tree(tree)
    vocabulary = Vocabulary(
        EntryTable.from_rows([(e.surface, e.left_id, e.right_id, e.cost) for e in known]),
        EntryTable.from_rows([(e.surface, e.left_id, e.right_id, e.cost) for e in unknown]),
    )
    # validates context ids and unknown coverage before anything is written
    dictionary = Dictionary(da, vocabulary, matrix, classifier)
    store = FeatureStore.from_rows([e.features for e in known], [e.features for e in unknown])

    logger.info("[4/4] exporting dictionary to %s", dist_dir)
    artifacts = DictionaryArtifacts.from_dir(dist_dir)
    da_bytes = write_json(artifacts.da_path, da.to_payload())
    dict_bytes = write_json(artifacts.dict_path, dictionary.payload())
    features_bytes = write_json(artifacts.features_path, store.to_payload())

    res = CompileResult(
        artifacts=artifacts,
        words=len(known),
        surfaces=len(tree),
        unknown_entries=len(unknown),
        da_slots=len(da),
        da_bytes=da_bytes,
        dict_bytes=dict_bytes,
        features_bytes=features_bytes,
        seconds=time.perf_counter() - t0,
    )
    logger.info("done in %.3fs: %s", res.seconds, res)
    return res
