"""
Morphological analysis adapter.

Wraps a Japanese morphological analyzer (Janome by default) behind a small
protocol and filters its output down to indexable keywords. Analyzer
failures never escape: the whitespace fallback runs instead and the result
says so.

Dependencies: janome
System role: Language-aware tokenization for the keyword backend
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from janome.tokenizer import Tokenizer

logger = logging.getLogger(__name__)

NOUN = "名詞"
VERB = "動詞"
ADJECTIVE = "形容詞"
ADVERB = "副詞"
INTERJECTION = "感動詞"
PRE_NOUN_ADJECTIVAL = "連体詞"

INDEXABLE_POS = frozenset({NOUN, VERB, ADJECTIVE, ADVERB, INTERJECTION, PRE_NOUN_ADJECTIVAL})


@dataclass(frozen=True)
class AnalyzedToken:
    """Single morpheme."""

    surface: str
    basic_form: str
    part_of_speech: str
    char_offset: int
    reading: str | None = None

    def terms(self) -> list[str]:
        """Lowercased surface and base form, without duplicates."""
        surface = self.surface.lower()
        basic = self.basic_form.lower()
        return [surface] if basic == surface or not basic else [surface, basic]


@dataclass
class AnalysisResult:
    """Filtered tokens plus whether the whitespace fallback produced them."""

    tokens: list[AnalyzedToken] = field(default_factory=list)
    fallback_used: bool = False

    def terms(self) -> list[str]:
        out: list[str] = []
        for token in self.tokens:
            out.extend(token.terms())
        return out


class MorphAnalyzer(Protocol):
    """Morphological analysis capability. May raise on any input."""

    def tokenize(self, text: str) -> list[AnalyzedToken]: ...


class JanomeAnalyzer:
    """
    MorphAnalyzer backed by Janome.

    The Janome dictionary load is expensive, so the tokenizer is built on
    first use and kept by this instance.
    """

    def __init__(self) -> None:
        self._tokenizer: Tokenizer | None = None

    def _get_tokenizer(self) -> Tokenizer:
        if self._tokenizer is None:
            logger.info(f"{__name__}:_get_tokenizer - Loading Janome dictionary")
            self._tokenizer = Tokenizer()
        return self._tokenizer

    def tokenize(self, text: str) -> list[AnalyzedToken]:
        tokens: list[AnalyzedToken] = []
        cursor = 0
        for token in self._get_tokenizer().tokenize(text):
            surface = token.surface
            offset = text.find(surface, cursor)
            if offset == -1:
                offset = cursor
            else:
                cursor = offset + len(surface)
            basic_form = token.base_form if token.base_form not in ("", "*") else surface
            reading = token.reading if token.reading not in ("", "*") else None
            tokens.append(
                AnalyzedToken(
                    surface=surface,
                    basic_form=basic_form,
                    part_of_speech=token.part_of_speech.split(",")[0],
                    char_offset=offset,
                    reading=reading,
                )
            )
        return tokens


def _has_letters(text: str) -> bool:
    return any(ch.isalpha() for ch in text)


class KeywordTokenizer:
    """
    Keyword extraction on top of a MorphAnalyzer.

    Keeps indexable parts of speech whose surface is at least
    min_word_length characters and contains a letter.
    """

    def __init__(self, analyzer: MorphAnalyzer, min_word_length: int = 2) -> None:
        self._analyzer = analyzer
        self._min_word_length = min_word_length

    @property
    def min_word_length(self) -> int:
        return self._min_word_length

    def analyze(self, text: str) -> AnalysisResult:
        """
        Extract indexable tokens from text.

        Args:
            text: Text to analyze

        Returns:
            AnalysisResult: tokens, with fallback_used set when the analyzer failed
        """
        if not text.strip():
            return AnalysisResult()
        try:
            raw = self._analyzer.tokenize(text)
        except Exception as e:
            logger.warning(
                f"{__name__}:analyze - Analyzer failed, using whitespace fallback: "
                f"{type(e).__name__}: {e}",
                extra={"text_length": len(text)},
            )
            return AnalysisResult(tokens=self._fallback(text), fallback_used=True)

        tokens = [
            token
            for token in raw
            if token.part_of_speech in INDEXABLE_POS
            and len(token.surface) >= self._min_word_length
            and _has_letters(token.surface)
        ]
        return AnalysisResult(tokens=tokens)

    def _fallback(self, text: str) -> list[AnalyzedToken]:
        tokens: list[AnalyzedToken] = []
        cursor = 0
        for word in text.split():
            offset = text.find(word, cursor)
            cursor = offset + len(word)
            if len(word) >= self._min_word_length and _has_letters(word):
                tokens.append(AnalyzedToken(word, word, NOUN, offset))
        return tokens
