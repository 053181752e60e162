"""
Keyword backend configuration settings.

Controls morphological filtering and BM25 scoring for the lexical index.
The profile selects a BM25 parameter preset.

Dependencies: pydantic, pydantic_settings
System role: KeywordIndex tuning
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

KeywordProfile = Literal["default", "match", "score", "speed"]

# (k1, b, delta) per profile
PROFILE_PARAMETERS: dict[str, tuple[float, float, float]] = {
    "default": (1.5, 0.75, 1.0),
    "match": (1.2, 0.5, 1.0),
    "score": (1.8, 0.75, 0.5),
    "speed": (1.2, 0.3, 1.0),
}


class KeywordSettings(BaseSettings):
    """Lexical index configuration."""

    model_config = SettingsConfigDict(
        env_prefix="KEYWORD_",
        case_sensitive=False,
        extra="ignore",
    )

    profile: KeywordProfile = Field(
        default="default",
        description="BM25 parameter preset: default, match, score or speed",
    )
    min_word_length: int = Field(
        default=2,
        ge=1,
        description="Minimum surface length of an indexed token",
    )
    snippet_length: int = Field(default=120, ge=1, description="Snippet window in characters")
    title_weight: float = Field(default=2.0, ge=0.0, description="Weight of title matches")
    tag_weight: float = Field(default=1.5, ge=0.0, description="Weight of tag matches")

    @property
    def bm25_parameters(self) -> tuple[float, float, float]:
        """Return (k1, b, delta) for the configured profile."""
        return PROFILE_PARAMETERS[self.profile]
