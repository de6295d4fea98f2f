from .double_array import DoubleArray
from .prefix_tree import CommonPrefixTree
from .vocabulary import Vocabulary
from .connection import ConnectionCostMatrix
from .charclasses import CharClassifier, UnknownWordModel

__all__ = [
    "DoubleArray",
    "CommonPrefixTree",
    "Vocabulary",
    "ConnectionCostMatrix",
    "CharClassifier",
    "UnknownWordModel",
]
