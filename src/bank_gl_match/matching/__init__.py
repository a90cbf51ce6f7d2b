"""Matching engine, passes and the helpers they rely on."""

from .engine import MatchState, PassReport, ReconciliationEngine
from .similarity import similarity
from .splits import find_split
from .strategies import (
    MatchingPass,
    ExactPass,
    NearDatePass,
    SplitPass,
    FuzzyAmountPass,
    VendorTypePass,
)
from .vendors import VendorNormalizer, build_synonym_rules

__all__ = [
    "ReconciliationEngine",
    "MatchState",
    "PassReport",
    "MatchingPass",
    "ExactPass",
    "NearDatePass",
    "SplitPass",
    "FuzzyAmountPass",
    "VendorTypePass",
    "VendorNormalizer",
    "build_synonym_rules",
    "find_split",
    "similarity",
]
