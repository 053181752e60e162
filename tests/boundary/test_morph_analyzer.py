"""Tests for the morphological analysis adapter."""

from novel_index.boundary.analyzer.morph_analyzer import (
    AnalyzedToken,
    JanomeAnalyzer,
    KeywordTokenizer,
)


class StaticAnalyzer:
    """Returns a fixed token list."""

    def __init__(self, tokens: list[AnalyzedToken]) -> None:
        self.tokens = tokens

    def tokenize(self, text: str) -> list[AnalyzedToken]:
        return self.tokens


class TestKeywordTokenizer:
    """Part-of-speech and length filtering."""

    def test_filters_particles_and_short_tokens(self) -> None:
        analyzer = StaticAnalyzer(
            [
                AnalyzedToken("魔法", "魔法", "名詞", 0),
                AnalyzedToken("は", "は", "助詞", 2),
                AnalyzedToken("唱え", "唱える", "動詞", 3),
                AnalyzedToken("木", "木", "名詞", 5),
                AnalyzedToken("123", "123", "名詞", 6),
            ]
        )
        tokenizer = KeywordTokenizer(analyzer, min_word_length=2)

        result = tokenizer.analyze("魔法は唱え木123")

        assert [t.surface for t in result.tokens] == ["魔法", "唱え"]
        assert result.terms() == ["魔法", "唱え", "唱える"]
        assert result.fallback_used is False

    def test_terms_are_lowercased(self) -> None:
        token = AnalyzedToken("Wizard", "Wizard", "名詞", 0)

        assert token.terms() == ["wizard"]

    def test_empty_text_skips_analyzer(self, word_analyzer) -> None:
        tokenizer = KeywordTokenizer(word_analyzer)

        result = tokenizer.analyze("   ")

        assert result.tokens == []
        assert word_analyzer.calls == 0

    def test_analyzer_failure_uses_whitespace_fallback(self, failing_analyzer) -> None:
        """A failing analyzer degrades to whitespace words instead of raising."""
        tokenizer = KeywordTokenizer(failing_analyzer, min_word_length=3)

        result = tokenizer.analyze("The wizard is casting spells")

        assert result.fallback_used is True
        assert [t.surface for t in result.tokens] == ["The", "wizard", "casting", "spells"]
        assert result.tokens[1].char_offset == 4


class TestJanomeAnalyzer:
    """Real Janome dictionary."""

    def test_japanese_keywords(self) -> None:
        tokenizer = KeywordTokenizer(JanomeAnalyzer(), min_word_length=2)

        terms = tokenizer.analyze("魔法使いは呪文を唱える").terms()

        assert "呪文" in terms
        assert "は" not in terms

    def test_offsets_point_at_surface(self) -> None:
        text = "騎士が城へ向かう"

        for token in JanomeAnalyzer().tokenize(text):
            assert text[token.char_offset : token.char_offset + len(token.surface)] == token.surface
