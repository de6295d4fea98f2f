from __future__ import annotations
import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple
from ..errors import DictionaryLoadError

logger = logging.getLogger(__name__)

# mecab csv: surface,left_id,right_id,cost,feature...
COL_SURFACE_FORM = 0
COL_LEFT_CONTEXT_ID = 1
COL_RIGHT_CONTEXT_ID = 2
COL_COST = 3


@dataclass(frozen=True)
class LexEntry:
    surface: str
    left_id: int
    right_id: int
    cost: int
    # columns 5.. (pos hierarchy, conjugation, base form, reading, pronunciation)
    features: Tuple[str, ...]


def parse_row(row: Sequence[str], path: Path, line_no: int) -> LexEntry:
    if len(row) < COL_COST + 1:
        raise DictionaryLoadError(f"line {line_no}: expected at least 4 columns, got {len(row)}", path)
    try:
        left_id = int(row[COL_LEFT_CONTEXT_ID])
        right_id = int(row[COL_RIGHT_CONTEXT_ID])
        cost = int(row[COL_COST])
    except ValueError as e:
        raise DictionaryLoadError(f"line {line_no}: {e}", path) from e
    if left_id < 0 or right_id < 0:
        raise DictionaryLoadError(f"line {line_no}: negative context id", path)
    return LexEntry(row[COL_SURFACE_FORM], left_id, right_id, cost, tuple(row[COL_COST + 1:]))


def iter_lexicon_csv(path: Path, encoding: str = "utf-8") -> Iterator[LexEntry]:
    try:
        f = path.open("r", encoding=encoding, newline="")
    except OSError as e:
        raise DictionaryLoadError(f"cannot open lexicon: {e}", path) from e
    with f:
        reader = csv.reader(f)
        try:
            for row in reader:
                if not row or not any(row):
                    continue
                yield parse_row(row, path, reader.line_num)
        except UnicodeDecodeError as e:
            raise DictionaryLoadError(f"not {encoding}: {e}", path) from e


def load_lexicon(paths: Iterable[Path], encoding: str = "utf-8") -> List[LexEntry]:
    """
    read every lexicon csv, in the given order. list index == word id
    """
    out: List[LexEntry] = []
    for path in paths:
        before = len(out)
        out.extend(iter_lexicon_csv(path, encoding))
        logger.debug("%s: %d entries", path.name, len(out) - before)
    return out
