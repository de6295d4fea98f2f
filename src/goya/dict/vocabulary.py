from __future__ import annotations
from typing import Any, Dict, List, Sequence, Tuple
import numpy as np
from ..errors import DictionaryLoadError
from ..types import DictionaryEntry


class EntryTable:
    """columnar (surface, left_id, right_id, cost) table, row index == id"""
    def __init__(self, surfaces: Sequence[str], left: np.ndarray, right: np.ndarray, cost: np.ndarray) -> None:
        self.surfaces = list(surfaces)
        self.left = left
        self.right = right
        self.cost = cost

    def __len__(self) -> int:
        return len(self.surfaces)

    def entry(self, word_id: int) -> DictionaryEntry:
        if not 0 <= word_id < len(self.surfaces):
            raise IndexError(word_id)
        return DictionaryEntry(
            word_id=word_id,
            surface_form=self.surfaces[word_id],
            left_context_id=int(self.left[word_id]),
            right_context_id=int(self.right[word_id]),
            cost=int(self.cost[word_id]),
        )

    @classmethod
    def from_rows(cls, rows: Sequence[Tuple[str, int, int, int]]) -> "EntryTable":
        return cls(
            [r[0] for r in rows],
            np.asarray([r[1] for r in rows], dtype=np.int32),
            np.asarray([r[2] for r in rows], dtype=np.int32),
            np.asarray([r[3] for r in rows], dtype=np.int32),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "surfaces": self.surfaces,
            "left": self.left.tolist(),
            "right": self.right.tolist(),
            "cost": self.cost.tolist(),
        }

    @classmethod
    def from_payload(cls, data: Any, what: str) -> "EntryTable":
        try:
            surfaces = [str(s) for s in data["surfaces"]]
            left = np.asarray(data["left"], dtype=np.int32)
            right = np.asarray(data["right"], dtype=np.int32)
            cost = np.asarray(data["cost"], dtype=np.int32)
        except (KeyError, TypeError, ValueError) as e:
            raise DictionaryLoadError(f"{what} table is malformed: {e}") from e
        n = len(surfaces)
        if any(a.ndim != 1 or a.shape[0] != n for a in (left, right, cost)):
            raise DictionaryLoadError(f"{what} table columns differ in length")
        return cls(surfaces, left, right, cost)


class Vocabulary:
    """
    known entries (lexicon csv rows) and unknown entries (unk.def rows).
    the two id spaces are independent
    """
    def __init__(self, known: EntryTable, unknown: EntryTable) -> None:
        self.known = known
        self.unknown = unknown
        groups: Dict[str, List[int]] = {}
        for wid, surface in enumerate(known.surfaces):
            groups.setdefault(surface, []).append(wid)
        self._homonyms: Dict[str, Tuple[int, ...]] = {s: tuple(ids) for s, ids in groups.items()}

    def __len__(self) -> int:
        return len(self.known)

    def entry(self, word_id: int) -> DictionaryEntry:
        return self.known.entry(word_id)

    def unknown_entry(self, unk_id: int) -> DictionaryEntry:
        return self.unknown.entry(unk_id)

    def homonyms(self, word_id: int) -> Tuple[int, ...]:
        """every id sharing word_id's surface form, ascending"""
        if not 0 <= word_id < len(self.known):
            raise IndexError(word_id)
        return self._homonyms[self.known.surfaces[word_id]]

    def check_context_ids(self, right_size: int, left_size: int) -> None:
        for what, table in (("vocabulary", self.known), ("unknown", self.unknown)):
            if len(table) == 0:
                continue
            if (table.left < 0).any() or int(table.left.max()) >= left_size:
                raise DictionaryLoadError(f"{what} left context id outside the connection matrix ({left_size})")
            if (table.right < 0).any() or int(table.right.max()) >= right_size:
                raise DictionaryLoadError(f"{what} right context id outside the connection matrix ({right_size})")

    def to_payload(self) -> Dict[str, Any]:
        return {"known": self.known.to_payload(), "unknown": self.unknown.to_payload()}

    @classmethod
    def from_payload(cls, data: Any) -> "Vocabulary":
        if not isinstance(data, dict):
            raise DictionaryLoadError("vocabulary payload must be an object")
        return cls(
            EntryTable.from_payload(data.get("known"), "vocabulary"),
            EntryTable.from_payload(data.get("unknown"), "unknown"),
        )
