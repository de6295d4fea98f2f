from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from platformdirs import user_data_dir


DA_FILE = "da.json"
DICT_FILE = "dict.json"
FEATURES_FILE = "features.json"


@dataclass(frozen=True)
class DictConfig:
    # MeCab-format source dictionary fetched by `goya download-dict`
    name: str = "unidic-mecab"
    version: str = "2.1.2"
    # ipadic sources are euc-jp
    encoding: str = "utf-8"
    root_dir: Path = Path(user_data_dir("goya", "goya"))
    auto_download: bool = False

    @property
    def source_dir(self) -> Path:
        return self.root_dir / "src" / f"{self.name}-{self.version}"

    @property
    def dicdir(self) -> Path:
        return self.root_dir / "dict"

    @property
    def da_path(self) -> Path:
        return self.dicdir / DA_FILE

    @property
    def dict_path(self) -> Path:
        return self.dicdir / DICT_FILE

    @property
    def features_path(self) -> Path:
        return self.dicdir / FEATURES_FILE


@dataclass(frozen=True)
class AnalyzerConfig:
    # longest known word tried at a single offset
    max_word_len: int = 64
    # cap for grouped unknown runs (mecab uses 24)
    max_group_len: int = 24
    workers: int = 4
