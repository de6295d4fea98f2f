from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple
from ..errors import DictionaryLoadError

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "DEFAULT"


@dataclass(frozen=True)
class CharCategory:
    name: str
    # 1: always emit unknown candidates, 0: only where no known word starts
    invoke: int
    # 1: emit the whole run of same-category chars as one candidate
    group: int
    # also emit prefixes of length 1..length (0 disables)
    length: int


@dataclass(frozen=True)
class CharRange:
    start: int
    end: int  # inclusive
    category: str
    compatible: Tuple[str, ...] = ()


class CharClassifier:
    """
    mecab char.def: code point ranges -> character category.
    the first range containing a code point decides its category
    """
    def __init__(self, categories: Dict[str, CharCategory], ranges: List[CharRange]) -> None:
        if DEFAULT_CATEGORY not in categories:
            categories = dict(categories)
            categories[DEFAULT_CATEGORY] = CharCategory(DEFAULT_CATEGORY, 0, 1, 0)
        self.categories = categories
        self.ranges = ranges
        self._default_names = (DEFAULT_CATEGORY,)

    @classmethod
    def from_def(cls, char_def_path: Path, encoding: str = "utf-8") -> "CharClassifier":
        if not char_def_path.exists():
            raise DictionaryLoadError("missing char.def", char_def_path)
        raw = char_def_path.read_text(encoding=encoding, errors="ignore")
        lines = raw.replace("\r\n", "\n").replace("\r", "\n").split("\n")

        # two kinds of lines:
        # 1) CATEGORY invoke group length
        # 2) 0xXXXX[..0xYYYY] CATEGORY [COMPATIBLE...]
        categories: Dict[str, CharCategory] = {}
        ranges: List[CharRange] = []
        for line_no, line in enumerate(lines, start=1):
            line = line.split("#", 1)[0].strip()
            if not line:
                continue
            parts = line.split()
            if parts[0].startswith("0x"):
                if len(parts) < 2:
                    raise DictionaryLoadError(f"line {line_no}: range without category", char_def_path)
                try:
                    if ".." in parts[0]:
                        a, b = parts[0].split("..")
                        start, end = int(a, 16), int(b, 16)
                    else:
                        start = end = int(parts[0], 16)
                except ValueError as e:
                    raise DictionaryLoadError(f"line {line_no}: {e}", char_def_path) from e
                ranges.append(CharRange(start, end, parts[1], tuple(parts[2:])))
                continue
            if len(parts) < 4:
                raise DictionaryLoadError(f"line {line_no}: expected 'NAME invoke group length'", char_def_path)
            try:
                invoke, group, length = int(parts[1]), int(parts[2]), int(parts[3])
            except ValueError as e:
                raise DictionaryLoadError(f"line {line_no}: {e}", char_def_path) from e
            categories[parts[0]] = CharCategory(parts[0], invoke, group, length)

        for r in ranges:
            for name in (r.category,) + r.compatible:
                if name not in categories:
                    raise DictionaryLoadError(f"range 0x{r.start:04X} refers to undefined category {name}", char_def_path)
        logger.debug("char.def: %d categories, %d ranges", len(categories), len(ranges))
        return cls(categories, ranges)

    def _find_range(self, ch: str) -> Optional[CharRange]:
        cp = ord(ch)
        for r in self.ranges:
            if r.start <= cp <= r.end:
                return r
        return None

    def classify(self, ch: str) -> CharCategory:
        r = self._find_range(ch)
        if r is None:
            return self.categories[DEFAULT_CATEGORY]
        return self.categories[r.category]

    def categories_of(self, ch: str) -> Tuple[str, ...]:
        """primary category first, then compatible ones"""
        r = self._find_range(ch)
        if r is None:
            return self._default_names
        return (r.category,) + r.compatible

    def run_length(self, category: CharCategory, text: str, start: int, limit: int) -> int:
        """count chars from start that belong to category, at most limit"""
        n = 0
        end = min(len(text), start + limit)
        for i in range(start, end):
            if i > start and category.name not in self.categories_of(text[i]):
                break
            n += 1
        return n

    def to_payload(self) -> Dict[str, Any]:
        return {
            "categories": [[c.name, c.invoke, c.group, c.length] for c in self.categories.values()],
            "ranges": [[r.start, r.end, r.category, list(r.compatible)] for r in self.ranges],
        }

    @classmethod
    def from_payload(cls, data: Any) -> "CharClassifier":
        try:
            categories = {
                str(name): CharCategory(str(name), int(invoke), int(group), int(length))
                for name, invoke, group, length in data["categories"]
            }
            ranges = [
                CharRange(int(a), int(b), str(cat), tuple(str(x) for x in compat))
                for a, b, cat, compat in data["ranges"]
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise DictionaryLoadError(f"char class payload is malformed: {e}") from e
        for r in ranges:
            if r.start > r.end or r.category not in categories:
                raise DictionaryLoadError(f"bad char range {r}")
        return cls(categories, ranges)


class UnknownWordModel:
    """
    synthesizes lattice candidates for spans the trie does not cover.
    by_category maps a char category to its unk.def entry ids
    """
    def __init__(self, classifier: CharClassifier, by_category: Dict[str, List[int]], max_group_len: int = 24) -> None:
        self.classifier = classifier
        self.by_category = by_category
        self.max_group_len = max(1, max_group_len)

    def entries_for(self, category: CharCategory) -> List[int]:
        return self.by_category.get(category.name) or self.by_category.get(DEFAULT_CATEGORY) or []

    def check_complete(self) -> None:
        """every category must resolve to at least one unknown entry"""
        missing = [name for name, cat in self.classifier.categories.items() if not self.entries_for(cat)]
        if missing:
            raise DictionaryLoadError(f"unk.def has no entries for categories {missing} and no DEFAULT fallback")

    def candidates(self, text: str, start: int, has_known: bool = False) -> List[Tuple[int, int]]:
        """
        (end_offset, unk_id) pairs starting at start. never empty for a
        non-empty remainder unless the category only fires as a fallback and
        known words already start here
        """
        if start >= len(text):
            return []
        cat = self.classifier.classify(text[start])
        if cat.invoke == 0 and has_known:
            return []

        ends = set()
        if cat.group:
            ends.add(start + self.classifier.run_length(cat, text, start, self.max_group_len))
        if cat.length > 0:
            run = self.classifier.run_length(cat, text, start, cat.length)
            ends.update(start + n for n in range(1, run + 1))
        if not ends:
            ends.add(start + 1)

        ids = self.entries_for(cat)
        return [(end, unk_id) for end in sorted(ends) for unk_id in sorted(ids)]


def group_unknown_entries(categories: Iterable[str]) -> Dict[str, List[int]]:
    """category name per unk id (list index) -> ids per category"""
    out: Dict[str, List[int]] = {}
    for unk_id, name in enumerate(categories):
        out.setdefault(name, []).append(unk_id)
    return out
