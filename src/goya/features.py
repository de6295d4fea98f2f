from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from .errors import DictionaryLoadError, UnknownWordIdError
from .types import FeatureRecord, WordIdentifier

logger = logging.getLogger(__name__)

FEATURES_FORMAT_VERSION = 1


class FeatureStore:
    """
    word id -> feature columns (pos hierarchy, conjugation, base form, reading,
    pronunciation, ...). loaded independently from the segmentation
    dictionary. each distinct string is stored once in `index`; records are
    lists of positions into it
    """
    def __init__(self, index: List[str], known: List[List[int]], unknown: List[List[int]], width: int) -> None:
        self.index = index
        self.known = known
        self.unknown = unknown
        self.width = width

    def __len__(self) -> int:
        return len(self.known)

    @classmethod
    def from_rows(cls, known: Sequence[Sequence[str]], unknown: Sequence[Sequence[str]]) -> "FeatureStore":
        index: List[str] = []
        positions: Dict[str, int] = {}

        def intern(row: Sequence[str]) -> List[int]:
            out = []
            for s in row:
                pos = positions.get(s)
                if pos is None:
                    pos = positions[s] = len(index)
                    index.append(s)
                out.append(pos)
            return out

        width = max((len(r) for r in list(known) + list(unknown)), default=0)
        return cls(index, [intern(r) for r in known], [intern(r) for r in unknown], width)

    def _expand(self, row: List[int]) -> Tuple[str, ...]:
        fields = [self.index[i] for i in row]
        if len(fields) < self.width:
            fields.extend([""] * (self.width - len(fields)))
        return tuple(fields)

    def get(self, word_id: int) -> FeatureRecord:
        if not isinstance(word_id, int) or not 0 <= word_id < len(self.known):
            raise UnknownWordIdError(word_id)
        return FeatureRecord(word_id, self._expand(self.known[word_id]))

    def unknown_features(self, unk_id: int) -> Tuple[str, ...]:
        if not 0 <= unk_id < len(self.unknown):
            raise UnknownWordIdError(unk_id)
        return self._expand(self.unknown[unk_id])

    def to_payload(self) -> Dict[str, Any]:
        return {
            "version": FEATURES_FORMAT_VERSION,
            "width": self.width,
            "index": self.index,
            "known": self.known,
            "unknown": self.unknown,
        }

    @classmethod
    def from_payload(cls, data: Any) -> "FeatureStore":
        if not isinstance(data, dict) or data.get("version") != FEATURES_FORMAT_VERSION:
            raise DictionaryLoadError("unsupported feature table format")
        try:
            index = [str(s) for s in data["index"]]
            known = [[int(i) for i in row] for row in data["known"]]
            unknown = [[int(i) for i in row] for row in data["unknown"]]
            width = int(data["width"])
        except (KeyError, TypeError, ValueError) as e:
            raise DictionaryLoadError(f"feature table is malformed: {e}") from e
        for row in known + unknown:
            if len(row) > width or any(not 0 <= i < len(index) for i in row):
                raise DictionaryLoadError("feature record refers outside the string table")
        return cls(index, known, unknown, width)

    @classmethod
    def load(cls, path: Path) -> "FeatureStore":
        from .dictionary import read_artifact
        store = cls.from_payload(read_artifact(path))
        logger.info("feature table loaded from %s: %d records, %d strings", path, len(store), len(store.index))
        return store


def features(
    word_ids: Sequence[Union[int, WordIdentifier]],
    feature_store: FeatureStore,
) -> List[Optional[FeatureRecord]]:
    """
    batched lookup. unknown words and ids without a record come back as None;
    one bad id never fails the batch
    """
    out: List[Optional[FeatureRecord]] = []
    for wid in word_ids:
        if isinstance(wid, WordIdentifier):
            if not wid.known:
                out.append(None)
                continue
            wid = wid.id
        try:
            out.append(feature_store.get(wid))
        except UnknownWordIdError:
            out.append(None)
    return out
