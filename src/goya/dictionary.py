from __future__ import annotations
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Tuple, Union
from .config import DA_FILE, DICT_FILE, FEATURES_FILE, AnalyzerConfig
from .dict.charclasses import CharClassifier, UnknownWordModel, group_unknown_entries
from .dict.connection import ConnectionCostMatrix
from .dict.double_array import DoubleArray
from .dict.vocabulary import Vocabulary
from .errors import DictionaryLoadError
from .util import read_json

logger = logging.getLogger(__name__)

DICT_FORMAT_VERSION = 1


@dataclass(frozen=True)
class DictionaryArtifacts:
    da_path: Path
    dict_path: Path
    features_path: Path

    @classmethod
    def from_dir(cls, dicdir: Union[str, Path]) -> "DictionaryArtifacts":
        d = Path(dicdir)
        return cls(d / DA_FILE, d / DICT_FILE, d / FEATURES_FILE)


def read_artifact(path: Path) -> Any:
    if not path.exists():
        raise DictionaryLoadError("missing dictionary artifact", path)
    try:
        return read_json(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DictionaryLoadError(f"unreadable artifact: {e}", path) from e


class Dictionary:
    """
    segmentation side of a compiled dictionary. immutable after construction,
    safe to share between threads
    """
    def __init__(
        self,
        da: DoubleArray,
        vocabulary: Vocabulary,
        matrix: ConnectionCostMatrix,
        classifier: CharClassifier,
        config: AnalyzerConfig = AnalyzerConfig(),
    ) -> None:
        self.da = da
        self.vocabulary = vocabulary
        self.matrix = matrix
        self.classifier = classifier
        self.config = config
        self.unknown = UnknownWordModel(
            classifier,
            group_unknown_entries(vocabulary.unknown.surfaces),
            max_group_len=config.max_group_len,
        )
        self._validate()

    def _validate(self) -> None:
        self.vocabulary.check_context_ids(self.matrix.right_size, self.matrix.left_size)
        n = len(self.vocabulary)
        for wid in self.da.wids():
            if not 0 <= wid < n:
                raise DictionaryLoadError(f"trie refers to word id {wid}, vocabulary has {n}")
        self.unknown.check_complete()

    def lookup(self, text: str, start: int) -> List[Tuple[int, int]]:
        """(end_offset, word_id) for every known word starting at start, homonyms expanded"""
        out: List[Tuple[int, int]] = []
        for end, wid in self.da.lookup(text, start, self.config.max_word_len):
            out.extend((end, h) for h in self.vocabulary.homonyms(wid))
        return out

    def payload(self) -> dict:
        return {
            "version": DICT_FORMAT_VERSION,
            "vocabulary": self.vocabulary.to_payload(),
            "matrix": self.matrix.to_payload(),
            "char_classes": self.classifier.to_payload(),
        }


def load(artifacts: Union[DictionaryArtifacts, str, Path], config: AnalyzerConfig = AnalyzerConfig()) -> Dictionary:
    """load da.json + dict.json. features.json is left to FeatureStore"""
    if not isinstance(artifacts, DictionaryArtifacts):
        artifacts = DictionaryArtifacts.from_dir(artifacts)
    t0 = time.perf_counter()
    da = DoubleArray.from_payload(read_artifact(artifacts.da_path))
    data = read_artifact(artifacts.dict_path)
    if not isinstance(data, dict) or data.get("version") != DICT_FORMAT_VERSION:
        raise DictionaryLoadError("unsupported dictionary format", artifacts.dict_path)
    dictionary = Dictionary(
        da=da,
        vocabulary=Vocabulary.from_payload(data.get("vocabulary")),
        matrix=ConnectionCostMatrix.from_payload(data.get("matrix")),
        classifier=CharClassifier.from_payload(data.get("char_classes")),
        config=config,
    )
    logger.info(
        "dictionary loaded from %s: %d words, %d unknown entries in %.2fs",
        artifacts.dict_path.parent,
        len(dictionary.vocabulary),
        len(dictionary.vocabulary.unknown),
        time.perf_counter() - t0,
    )
    return dictionary
