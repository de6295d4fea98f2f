from __future__ import annotations
from typing import Optional


class GoyaError(Exception):
    """base class for every error raised by goya"""


class DictionaryLoadError(GoyaError):
    """
    dictionary artifact (or MeCab source file) missing or malformed.
    fatal at startup
    """
    def __init__(self, message: str, path: Optional[object] = None) -> None:
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class NotReadyError(GoyaError):
    """request made before the dictionary finished loading"""


class UnknownWordIdError(GoyaError):
    def __init__(self, word_id: int) -> None:
        self.word_id = word_id
        super().__init__(f"no feature record for word id {word_id}")


class NoPathError(GoyaError):
    """
    EOS unreachable from BOS. only possible when the unknown word model
    failed to cover some offset, i.e. a defect, not bad input
    """
    def __init__(self, text: str, offset: int) -> None:
        self.text = text
        self.offset = offset
        super().__init__(f"no path through lattice (first unreachable offset {offset}) for {text!r}")
