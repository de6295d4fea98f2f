from __future__ import annotations
from typing import Dict, List, Optional

TERM_CHAR = "\0"


class TrieNode:
    __slots__ = ("children", "word_id")

    def __init__(self) -> None:
        self.children: Dict[str, TrieNode] = {}
        # set only on TERM_CHAR children
        self.word_id: Optional[int] = None


class CommonPrefixTree:
    """
    build-time trie. every key is stored with a trailing TERM_CHAR whose node
    carries the word id, so "a" and "ab" can both terminate.
    the first id appended for a surface wins; later ones are homonyms
    """
    def __init__(self) -> None:
        self.root = TrieNode()
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def append(self, word_id: int, word: str) -> bool:
        if not word or TERM_CHAR in word:
            raise ValueError(f"invalid trie key: {word!r}")
        node = self.root
        for ch in word + TERM_CHAR:
            nxt = node.children.get(ch)
            if nxt is None:
                nxt = TrieNode()
                node.children[ch] = nxt
            node = nxt
        if node.word_id is not None:
            return False
        node.word_id = word_id
        self._size += 1
        return True

    def chars(self) -> List[str]:
        seen = set()
        stack = [self.root]
        while stack:
            node = stack.pop()
            for ch, child in node.children.items():
                seen.add(ch)
                stack.append(child)
        seen.discard(TERM_CHAR)
        return sorted(seen)
