from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import numpy as np
from ..errors import DictionaryLoadError

logger = logging.getLogger(__name__)

BOS_EOS_LABELS = ("BOS/EOS", "BOS", "EOS")


@dataclass(frozen=True)
class IdDefInfo:
    count: int
    label_to_id: Dict[str, int]

    def find(self, *prefixes: str) -> Optional[int]:
        # ipadic labels carry the whole feature string: "BOS/EOS,*,*,..."
        for prefix in prefixes:
            for label, id_val in self.label_to_id.items():
                if label.split(",", 1)[0] == prefix:
                    return id_val
        return None


def _parse_id_def(path: Optional[Path], encoding: str = "utf-8") -> Optional[IdDefInfo]:
    if path is None or not path.exists():
        return None
    text = path.read_text(encoding=encoding, errors="ignore")
    label_to_id: Dict[str, int] = {}
    line_count = 0
    explicit = False
    max_id = -1
    for line in text.splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        parts = s.split()
        line_count += 1
        label = ""
        if parts[0].isdigit():
            explicit = True
            id_val = int(parts[0])
            max_id = max(max_id, id_val)
            if len(parts) > 1:
                label = parts[1]
        else:
            id_val = line_count - 1
            label = parts[0]
        if label:
            label_to_id[label] = id_val
    count = max_id + 1 if explicit and max_id >= 0 else line_count
    return IdDefInfo(count=count, label_to_id=label_to_id)


def _read_header(path: Path, encoding: str) -> Tuple[int, int]:
    with path.open("r", encoding=encoding, errors="ignore") as f:
        for line in f:
            s = line.strip()
            if not s or s.startswith("#"):
                continue
            parts = s.split()
            if len(parts) != 2:
                raise DictionaryLoadError(f"bad header {s!r}, expected two sizes", path)
            try:
                return int(parts[0]), int(parts[1])
            except ValueError as e:
                raise DictionaryLoadError(f"bad header {s!r}", path) from e
    raise DictionaryLoadError("matrix.def is empty", path)


class ConnectionCostMatrix:
    """
    dense transition costs, indexed cost(prev_right_id, next_left_id).
    lower is more probable; values are opaque pre-trained weights
    """
    def __init__(self, mat: np.ndarray, bos_right_id: int = 0, eos_left_id: int = 0) -> None:
        self.mat = mat
        self.right_size, self.left_size = (int(x) for x in mat.shape)
        self._bos_right_id = bos_right_id
        self._eos_left_id = eos_left_id

    def bos_right_id(self) -> int:
        return self._bos_right_id

    def eos_left_id(self) -> int:
        return self._eos_left_id

    def cost(self, prev_right_id: int, next_left_id: int) -> int:
        return int(self.mat[prev_right_id, next_left_id])

    def accepts(self, right_id: int, left_id: int) -> bool:
        return 0 <= right_id < self.right_size and 0 <= left_id < self.left_size

    @classmethod
    def from_def(
        cls,
        matrix_def_path: Path,
        left_id_def_path: Optional[Path] = None,
        right_id_def_path: Optional[Path] = None,
        encoding: str = "utf-8",
    ) -> "ConnectionCostMatrix":
        """
        load mecab matrix.def. header orientation (R L vs L R) is decided from
        the left-id.def / right-id.def line counts when they are available
        """
        if not matrix_def_path.exists():
            raise DictionaryLoadError("missing matrix.def", matrix_def_path)
        left_info = _parse_id_def(left_id_def_path, encoding)
        right_info = _parse_id_def(right_id_def_path, encoding)
        a, b = _read_header(matrix_def_path, encoding)

        # mode RL: header = (right_size left_size), lines = (right left cost)
        # mode LR: header = (left_size right_size), lines = (left right cost)
        modes = ["RL", "LR"]
        if left_info is not None and right_info is not None:
            if a == left_info.count and b == right_info.count and a != b:
                modes = ["LR", "RL"]

        failures: List[DictionaryLoadError] = []
        for mode in modes:
            try:
                mat = cls._load_with_mode(matrix_def_path, mode, a, b, encoding)
                break
            except DictionaryLoadError as e:
                logger.debug("matrix.def mode %s rejected: %s", mode, e)
                failures.append(e)
        else:
            raise failures[-1]

        bos = right_info.find(*BOS_EOS_LABELS) if right_info is not None else None
        eos = left_info.find(*BOS_EOS_LABELS) if left_info is not None else None
        logger.info("connection matrix %dx%d loaded (mode=%s)", mat.shape[0], mat.shape[1], mode)
        return cls(mat, bos_right_id=bos or 0, eos_left_id=eos or 0)

    @staticmethod
    def _load_with_mode(path: Path, mode: str, a: int, b: int, encoding: str) -> np.ndarray:
        right_size, left_size = (a, b) if mode == "RL" else (b, a)
        mat = np.zeros((right_size, left_size), dtype=np.int32)
        header_seen = False
        with path.open("r", encoding=encoding, errors="ignore") as f:
            for line_no, line in enumerate(f, start=1):
                s = line.strip()
                if not s or s.startswith("#"):
                    continue
                if not header_seen:
                    header_seen = True
                    continue
                p = s.split()
                if len(p) != 3:
                    raise DictionaryLoadError(f"line {line_no}: expected 3 columns", path)
                try:
                    i0, i1, c = int(p[0]), int(p[1]), int(p[2])
                except ValueError as e:
                    raise DictionaryLoadError(f"line {line_no}: {e}", path) from e
                r, l = (i0, i1) if mode == "RL" else (i1, i0)
                if not (0 <= r < right_size and 0 <= l < left_size):
                    raise DictionaryLoadError(
                        f"line {line_no}: (r={r}, l={l}) not in (right={right_size}, left={left_size}), mode={mode}",
                        path,
                    )
                mat[r, l] = c
        return mat

    def to_payload(self) -> Dict[str, Any]:
        return {
            "shape": [self.right_size, self.left_size],
            "bos_right_id": self._bos_right_id,
            "eos_left_id": self._eos_left_id,
            "costs": self.mat.ravel().tolist(),
        }

    @classmethod
    def from_payload(cls, data: Any) -> "ConnectionCostMatrix":
        try:
            right_size, left_size = (int(x) for x in data["shape"])
            costs: List[int] = data["costs"]
            bos = int(data.get("bos_right_id", 0))
            eos = int(data.get("eos_left_id", 0))
        except (KeyError, TypeError, ValueError) as e:
            raise DictionaryLoadError(f"connection matrix payload is malformed: {e}") from e
        if right_size <= 0 or left_size <= 0 or len(costs) != right_size * left_size:
            raise DictionaryLoadError(
                f"connection matrix has {len(costs)} costs for shape ({right_size}, {left_size})"
            )
        mat = np.asarray(costs, dtype=np.int32).reshape(right_size, left_size)
        out = cls(mat, bos_right_id=bos, eos_left_id=eos)
        if not out.accepts(bos, eos):
            raise DictionaryLoadError(f"BOS/EOS context ids ({bos}, {eos}) outside the matrix")
        return out
