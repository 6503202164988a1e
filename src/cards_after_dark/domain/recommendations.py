"""Models for structured card recommendations."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from cards_after_dark.domain.cards import CardCategory


class RecommendedCard(BaseModel):
    """Single card proposed by the model."""

    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    kink_factor: Literal[1, 2, 3]
    category: CardCategory
    tags: list[str]

    @field_validator("title", "description")
    @classmethod
    def _strip(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, value: list[str]) -> list[str]:
        return [tag.strip() for tag in value if tag.strip()]


class RecommendationExtract(BaseModel):
    """Structured output envelope for recommendations."""

    reasoning: str | None = None
    cards: list[dict[str, object]]
