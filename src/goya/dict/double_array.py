from __future__ import annotations
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple
import numpy as np
from ..errors import DictionaryLoadError
from .prefix_tree import TERM_CHAR, CommonPrefixTree

logger = logging.getLogger(__name__)

INDEX_ROOT = 1
FORMAT_VERSION = 1


class DoubleArray:
    """
    double-array trie over characters.

    state s moves to t = base[s] + code(ch) iff check[t] == s. a key ends where
    the TERM_CHAR (code 0) transition exists; that slot stores -(word_id + 1)
    in base. internal states always have base >= 1, unused slots have check 0
    """
    def __init__(self, base: np.ndarray, check: np.ndarray, codes: Dict[str, int]) -> None:
        self.base = base
        self.check = check
        self.codes = codes

    def __len__(self) -> int:
        return int(self.base.shape[0])

    @classmethod
    def from_prefix_tree(cls, tree: CommonPrefixTree) -> "DoubleArray":
        codes: Dict[str, int] = {TERM_CHAR: 0}
        for ch in tree.chars():
            codes[ch] = len(codes)

        base: List[int] = [0, 0]
        check: List[int] = [0, 0]
        first_free = INDEX_ROOT + 1

        def grow(size: int) -> None:
            if size > len(base):
                extra = size - len(base)
                base.extend([0] * extra)
                check.extend([0] * extra)

        def is_free(t: int) -> bool:
            return t >= len(check) or (t > INDEX_ROOT and check[t] == 0)

        queue: List[Tuple[int, Any]] = [(INDEX_ROOT, tree.root)]
        head = 0
        while head < len(queue):
            s, node = queue[head]
            head += 1
            children = sorted((codes[ch], child) for ch, child in node.children.items())
            if not children:
                continue
            offsets = [c for c, _ in children]
            min_code = offsets[0]

            while not is_free(first_free):
                first_free += 1
            pos = max(first_free, min_code + 1)
            while True:
                b = pos - min_code
                if all(is_free(b + c) for c in offsets):
                    break
                pos += 1
                while not is_free(pos):
                    pos += 1

            grow(b + offsets[-1] + 1)
            base[s] = b
            for c, child in children:
                t = b + c
                check[t] = s
                if c == 0:
                    base[t] = -(child.word_id + 1)
                else:
                    queue.append((t, child))

        da = cls(np.asarray(base, dtype=np.int64), np.asarray(check, dtype=np.int64), codes)
        logger.debug("double array built: %d slots, %d codes, %d keys", len(base), len(codes), len(tree))
        return da

    def _next(self, s: int, ch: str) -> Optional[int]:
        code = self.codes.get(ch)
        if code is None:
            return None
        b = int(self.base[s])
        if b <= 0:
            return None
        t = b + code
        if t >= self.check.shape[0] or int(self.check[t]) != s:
            return None
        return t

    def _stop(self, s: int) -> Optional[int]:
        t = self._next(s, TERM_CHAR)
        if t is None:
            return None
        return -int(self.base[t]) - 1

    def lookup(self, text: str, start: int, max_len: Optional[int] = None) -> Iterator[Tuple[int, int]]:
        """
        yield (end_offset, word_id) for every key that is a prefix of
        text[start:], shortest first
        """
        end = len(text) if max_len is None else min(len(text), start + max_len)
        s = INDEX_ROOT
        for i in range(start, end):
            t = self._next(s, text[i])
            if t is None:
                return
            s = t
            wid = self._stop(s)
            if wid is not None:
                yield i + 1, wid

    def get_exact(self, term: str) -> Optional[int]:
        s = INDEX_ROOT
        for ch in term:
            t = self._next(s, ch)
            if t is None:
                return None
            s = t
        return self._stop(s)

    def wids(self) -> Iterator[int]:
        for v in self.base[self.base < 0]:
            yield -int(v) - 1

    def to_payload(self) -> Dict[str, Any]:
        chars = sorted((code, ch) for ch, code in self.codes.items() if code != 0)
        return {
            "version": FORMAT_VERSION,
            "codes": "".join(ch for _, ch in chars),
            "base": self.base.tolist(),
            "check": self.check.tolist(),
        }

    @classmethod
    def from_payload(cls, data: Any) -> "DoubleArray":
        if not isinstance(data, dict):
            raise DictionaryLoadError("double array payload must be an object")
        if data.get("version") != FORMAT_VERSION:
            raise DictionaryLoadError(f"unsupported double array version: {data.get('version')!r}")
        chars = data.get("codes")
        if not isinstance(chars, str) or TERM_CHAR in chars or len(set(chars)) != len(chars):
            raise DictionaryLoadError("double array code table is malformed")
        try:
            base = np.asarray(data["base"], dtype=np.int64)
            check = np.asarray(data["check"], dtype=np.int64)
        except (KeyError, TypeError, ValueError) as e:
            raise DictionaryLoadError(f"double array arrays are malformed: {e}") from e

        if base.ndim != 1 or check.ndim != 1 or base.shape != check.shape:
            raise DictionaryLoadError("base/check must be 1-d arrays of equal size")
        size = base.shape[0]
        if size <= INDEX_ROOT:
            raise DictionaryLoadError(f"double array too small: {size} slots")
        if (check < 0).any() or (check >= size).any():
            raise DictionaryLoadError("check value out of bounds")

        used = np.nonzero(check)[0]
        parents = check[used]
        parent_base = base[parents]
        if (parent_base <= 0).any():
            raise DictionaryLoadError("transition from a terminal or empty state")
        code_of_slot = used - parent_base
        if (code_of_slot < 0).any() or (code_of_slot > len(chars)).any():
            raise DictionaryLoadError("transition offset outside the code table")
        # leaves (negative base) may only sit behind the terminator
        leaves = base[used] < 0
        if (code_of_slot[leaves] != 0).any():
            raise DictionaryLoadError("word id stored on a non-terminal transition")
        # and every terminator must hold one
        if not leaves[code_of_slot == 0].all():
            raise DictionaryLoadError("terminator transition without a word id")

        codes: Dict[str, int] = {TERM_CHAR: 0}
        for i, ch in enumerate(chars, start=1):
            codes[ch] = i
        return cls(base, check, codes)
