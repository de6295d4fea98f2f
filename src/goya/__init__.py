from .errors import DictionaryLoadError, GoyaError, NoPathError, NotReadyError, UnknownWordIdError

__all__ = [
    "Analyzer",
    "Dictionary",
    "DictionaryArtifacts",
    "FeatureStore",
    "Lattice",
    "load",
    "parse",
    "GoyaError",
    "DictionaryLoadError",
    "NotReadyError",
    "UnknownWordIdError",
    "NoPathError",
]

_LAZY = {
    "Analyzer": ("runtime", "Analyzer"),
    "Dictionary": ("dictionary", "Dictionary"),
    "DictionaryArtifacts": ("dictionary", "DictionaryArtifacts"),
    "load": ("dictionary", "load"),
    "FeatureStore": ("features", "FeatureStore"),
    "Lattice": ("lattice", "Lattice"),
    "parse": ("lattice", "parse"),
}


def __getattr__(name: str):
    # numpy is only imported once something dictionary-backed is requested
    if name in _LAZY:
        from importlib import import_module
        mod, attr = _LAZY[name]
        return getattr(import_module(f".{mod}", __name__), attr)
    raise AttributeError(name)
