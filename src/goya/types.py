from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class DictionaryEntry:
    word_id: int
    surface_form: str
    left_context_id: int
    right_context_id: int
    # lower is more probable
    cost: int


@dataclass(frozen=True)
class WordIdentifier:
    # known words index the vocabulary, unknown words index the unk rule table
    id: int
    surface: str
    known: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "known" if self.known else "unknown", "id": self.id, "surface": self.surface}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WordIdentifier":
        return cls(id=int(data["id"]), surface=str(data.get("surface", "")), known=data.get("kind", "known") == "known")


@dataclass(frozen=True)
class LatticeNode:
    start: int
    end: int
    # None for BOS/EOS
    wid: Optional[WordIdentifier]
    left_id: int
    right_id: int
    cost: int

    @property
    def surface(self) -> str:
        return self.wid.surface if self.wid is not None else ""


@dataclass(frozen=True)
class BestWord:
    word_id: int
    surface_form: str
    start_offset: int
    end_offset: int
    is_known: bool
    left_context_id: int
    right_context_id: int
    cost: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BestPath:
    # node indices into the lattice arena, BOS first, EOS last
    nodes: Tuple[int, ...]
    total_cost: int


@dataclass(frozen=True)
class FeatureRecord:
    word_id: int
    fields: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"word_id": self.word_id, "fields": list(self.fields)}
