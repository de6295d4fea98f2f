from __future__ import annotations
import io
import logging
import tarfile
from dataclasses import dataclass
from pathlib import Path
import requests
from tqdm import tqdm
from ..config import DictConfig
from ..errors import DictionaryLoadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DownloadResult:
    installed_to: Path
    version: str


REQUIRED_SOURCE_FILES = (
    "matrix.def",
    "char.def",
    "unk.def",
)
# copied when present; lexicon csv files are matched by suffix
OPTIONAL_SOURCE_FILES = (
    "left-id.def",
    "right-id.def",
)


def source_files_present(src_dir: Path) -> bool:
    if not all((src_dir / name).exists() for name in REQUIRED_SOURCE_FILES):
        return False
    return any(src_dir.glob("*.csv"))


def _download_bytes(url: str) -> bytes:
    r = requests.get(url, stream=True, timeout=60)
    r.raise_for_status()
    total = int(r.headers.get("Content-Length", "0") or "0")
    buf = io.BytesIO()
    with tqdm(total=total if total > 0 else None, unit="B", unit_scale=True, desc="downloading") as pbar:
        for chunk in r.iter_content(chunk_size=1024 * 1024):
            if not chunk:
                continue
            buf.write(chunk)
            pbar.update(len(chunk))
    return buf.getvalue()


def source_url(cfg: DictConfig) -> str:
    return f"https://github.com/lindera/{cfg.name}/archive/refs/tags/{cfg.version}.tar.gz"


def ensure_source_dictionary(cfg: DictConfig = DictConfig(), force: bool = False) -> DownloadResult:
    """
    make sure a MeCab-format source dictionary sits in cfg.source_dir,
    fetching the GitHub tag tarball for cfg.name / cfg.version if needed.
    only the top level *.def and *.csv members are extracted
    """
    src_dir = cfg.source_dir
    if source_files_present(src_dir) and not force:
        return DownloadResult(installed_to=src_dir, version=cfg.version)
    if not cfg.auto_download and not force:
        missing = [name for name in REQUIRED_SOURCE_FILES if not (src_dir / name).exists()]
        raise DictionaryLoadError(
            f"source dictionary incomplete (missing: {', '.join(missing) or '*.csv'}). "
            "Run `goya download-dict` or pass a source directory to `goya compile`.",
            src_dir,
        )

    url = source_url(cfg)
    logger.info("fetching %s", url)
    try:
        data = _download_bytes(url)
    except requests.RequestException as e:
        raise DictionaryLoadError(f"download failed: {e}", url) from e

    src_dir.mkdir(parents=True, exist_ok=True)
    wanted = set(REQUIRED_SOURCE_FILES) | set(OPTIONAL_SOURCE_FILES)
    extracted = 0
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as tf:
        for m in tf.getmembers():
            if not m.isfile():
                continue
            parts = m.name.split("/")
            # <root>/<file> only
            if len(parts) != 2:
                continue
            fname = parts[1]
            if fname not in wanted and not fname.endswith(".csv"):
                continue
            f = tf.extractfile(m)
            if f is None:
                continue
            (src_dir / fname).write_bytes(f.read())
            extracted += 1

    if not source_files_present(src_dir):
        raise DictionaryLoadError(f"archive did not contain a MeCab dictionary ({extracted} files extracted)", url)
    logger.info("installed %d source files to %s", extracted, src_dir)
    return DownloadResult(installed_to=src_dir, version=cfg.version)
