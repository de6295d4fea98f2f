from __future__ import annotations
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from pathlib import Path
from typing import List, Optional, Sequence, Union
from .config import AnalyzerConfig
from .dictionary import Dictionary, DictionaryArtifacts, load
from .errors import NotReadyError
from .features import FeatureStore, features
from .lattice import Lattice, parse
from .types import FeatureRecord, WordIdentifier

logger = logging.getLogger(__name__)


class Analyzer:
    """
    process-wide handle around the shared read-only dictionary.

    loading is the only I/O bound phase: start() runs it on the worker pool
    and every request made before it completes raises NotReadyError instead
    of blocking. the feature table is loaded separately (load_features) so
    tokenization-only callers never pay for it
    """
    def __init__(
        self,
        artifacts: Union[DictionaryArtifacts, str, Path],
        config: AnalyzerConfig = AnalyzerConfig(),
    ) -> None:
        if not isinstance(artifacts, DictionaryArtifacts):
            artifacts = DictionaryArtifacts.from_dir(artifacts)
        self.artifacts = artifacts
        self.config = config
        self._dictionary: Optional[Dictionary] = None
        self._features: Optional[FeatureStore] = None
        self._lock = threading.RLock()
        # held for the whole load so concurrent callers share one result
        self._load_lock = threading.Lock()
        self._features_lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._loading: Optional[Future] = None
        self._features_loading: Optional[Future] = None

    def __enter__(self) -> "Analyzer":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _pool(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self.config.workers, thread_name_prefix="goya")
            return self._executor

    def close(self) -> None:
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None

    @property
    def ready(self) -> bool:
        return self._dictionary is not None

    @property
    def features_ready(self) -> bool:
        return self._features is not None

    def load(self) -> Dictionary:
        """blocking load; raises DictionaryLoadError"""
        with self._load_lock:
            if self._dictionary is None:
                self._dictionary = load(self.artifacts, self.config)
            return self._dictionary

    def start(self) -> Future:
        with self._lock:
            if self._loading is None:
                self._loading = self._pool().submit(self.load)
            return self._loading

    def wait_ready(self, timeout: Optional[float] = None) -> bool:
        """
        wait for a started load. False on timeout, re-raises a load failure
        """
        if self.ready:
            return True
        if self._loading is None:
            raise NotReadyError("dictionary loading was never started")
        try:
            self._loading.result(timeout=timeout)
        except FutureTimeout:
            return False
        return True

    def load_features(self) -> FeatureStore:
        with self._features_lock:
            if self._features is None:
                self._features = FeatureStore.load(self.artifacts.features_path)
            return self._features

    def start_features(self) -> Future:
        with self._lock:
            if self._features_loading is None:
                self._features_loading = self._pool().submit(self.load_features)
            return self._features_loading

    @property
    def dictionary(self) -> Dictionary:
        d = self._dictionary
        if d is None:
            raise NotReadyError("dictionary is not loaded yet")
        return d

    @property
    def feature_store(self) -> FeatureStore:
        f = self._features
        if f is None:
            raise NotReadyError("feature table is not loaded yet")
        return f

    def parse(self, text: str) -> Lattice:
        return parse(text, self.dictionary)

    def submit_parse(self, text: str) -> Future:
        # fail fast in the caller's thread, not inside the future
        dictionary = self.dictionary
        return self._pool().submit(parse, text, dictionary)

    def features(self, word_ids: Sequence[Union[int, WordIdentifier]]) -> List[Optional[FeatureRecord]]:
        return features(word_ids, self.feature_store)
