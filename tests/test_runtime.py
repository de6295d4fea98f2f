import threading
import time

import pytest

from goya import runtime
from goya.errors import DictionaryLoadError, NotReadyError
from goya.runtime import Analyzer
from goya.types import WordIdentifier

from conftest import WID

TEXTS = ["すもももももももものうち", "東京都", "東京タワー", "★★", ""]


def test_not_ready_before_load(dicdir):
    with Analyzer(dicdir) as analyzer:
        assert not analyzer.ready
        with pytest.raises(NotReadyError):
            analyzer.parse("東京")
        with pytest.raises(NotReadyError):
            analyzer.submit_parse("東京")
        with pytest.raises(NotReadyError):
            analyzer.features([0])
        with pytest.raises(NotReadyError):
            analyzer.wait_ready(timeout=0)
        with pytest.raises(NotReadyError):
            analyzer.dictionary


def test_start_and_wait(dicdir):
    with Analyzer(dicdir) as analyzer:
        fut = analyzer.start()
        assert analyzer.start() is fut
        assert analyzer.wait_ready(timeout=30)
        assert analyzer.ready
        assert analyzer.parse("東京都").wakachi() == ["東", "京都"]
        # features are loaded on their own
        assert not analyzer.features_ready
        with pytest.raises(NotReadyError):
            analyzer.feature_store


def test_blocking_load(dicdir):
    analyzer = Analyzer(dicdir)
    d = analyzer.load()
    assert analyzer.load() is d
    assert analyzer.wait_ready()
    analyzer.close()


def test_load_failure(tmp_path):
    with Analyzer(tmp_path) as analyzer:
        analyzer.start()
        with pytest.raises(DictionaryLoadError):
            analyzer.wait_ready(timeout=30)
        assert not analyzer.ready


def test_concurrent_parses_agree(dicdir):
    with Analyzer(dicdir) as analyzer:
        analyzer.load()
        expected = [analyzer.parse(t).find_best() for t in TEXTS]
        futures = [analyzer.submit_parse(t) for t in TEXTS * 8]
        got = [f.result(timeout=30).find_best() for f in futures]
        assert got == expected * 8


def test_features(dicdir):
    with Analyzer(dicdir) as analyzer:
        analyzer.start_features().result(timeout=30)
        assert analyzer.features_ready
        # the feature table does not need the dictionary
        assert not analyzer.ready
        recs = analyzer.features([WID["の"], WordIdentifier(0, "x", known=False)])
        assert recs[0].fields[0] == "助詞"
        assert recs[1] is None


def test_concurrent_loads_share_one_dictionary(dicdir, monkeypatch):
    calls = []
    real_load = runtime.load

    def counting_load(*args, **kwargs):
        calls.append(1)
        time.sleep(0.05)
        return real_load(*args, **kwargs)

    monkeypatch.setattr(runtime, "load", counting_load)
    with Analyzer(dicdir) as analyzer:
        fut = analyzer.start()
        threads = [threading.Thread(target=analyzer.load) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)
        assert fut.result(timeout=30) is analyzer.dictionary
        assert len(calls) == 1
