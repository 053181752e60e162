"""Morphological analysis adapters."""

from novel_index.boundary.analyzer.morph_analyzer import (
    INDEXABLE_POS,
    AnalysisResult,
    AnalyzedToken,
    JanomeAnalyzer,
    KeywordTokenizer,
    MorphAnalyzer,
)

__all__ = [
    "INDEXABLE_POS",
    "AnalysisResult",
    "AnalyzedToken",
    "JanomeAnalyzer",
    "KeywordTokenizer",
    "MorphAnalyzer",
]
