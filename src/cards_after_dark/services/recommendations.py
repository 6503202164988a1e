"""Card recommendation service backed by an LLM with a curated fallback."""

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Protocol
from uuid import uuid4

from pydantic import ValidationError

from cards_after_dark.domain.cards import (
    Card,
    CardCategory,
    CouplePreferences,
    Rating,
    RecommendationRequest,
    RecommendationResult,
)
from cards_after_dark.domain.recommendations import (
    RecommendationExtract,
    RecommendedCard,
)

_logger = logging.getLogger(__name__)

DEFAULT_MAX_KINK_FACTOR = 2
FALLBACK_REASONING = "Using curated fallback cards due to AI unavailability"

RECOMMENDATION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "reasoning": {"anyOf": [{"type": "string"}, {"type": "null"}]},
        "cards": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "kink_factor": {"type": "integer", "enum": [1, 2, 3]},
                    "category": {
                        "type": "string",
                        "enum": [category.value for category in CardCategory],
                    },
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
                "required": [
                    "title",
                    "description",
                    "kink_factor",
                    "category",
                    "tags",
                ],
                "additionalProperties": False,
            },
        },
    },
    "required": ["reasoning", "cards"],
    "additionalProperties": False,
}

FALLBACK_CARDS: tuple[Card, ...] = (
    Card(
        id="fallback-massage",
        title="Romantic Massage",
        description=(
            "Give your partner a relaxing 10-minute massage with scented oils "
            "and soft music. Focus on their shoulders and back."
        ),
        kink_factor=1,
        category=CardCategory.ROMANCE,
        tags=("massage", "romantic", "relaxing"),
    ),
    Card(
        id="fallback-wine",
        title="Wine & Share",
        description=(
            "Open a bottle of wine and take turns sharing three things you "
            "love about each other right now."
        ),
        kink_factor=1,
        category=CardCategory.DATE_NIGHT,
        tags=("wine", "sharing", "appreciation"),
    ),
    Card(
        id="fallback-dance",
        title="Dance in the Dark",
        description=(
            "Turn off the lights, play your favorite slow song, and dance "
            "together for the entire song."
        ),
        kink_factor=1,
        category=CardCategory.PLAYFUL,
        tags=("dancing", "music", "intimate"),
    ),
    Card(
        id="fallback-feeding",
        title="Sensual Feeding",
        description=(
            "Blindfold your partner and feed them different fruits or "
            "chocolates, letting them guess what each one is."
        ),
        kink_factor=2,
        category=CardCategory.SENSUAL,
        tags=("blindfold", "feeding", "sensual"),
    ),
    Card(
        id="fallback-body-art",
        title="Body Art",
        description=(
            "Use washable body paint to create art on each other's bodies. "
            "Be creative and playful."
        ),
        kink_factor=2,
        category=CardCategory.PLAYFUL,
        tags=("body paint", "art", "creative"),
    ),
    Card(
        id="fallback-ice",
        title="Ice Play",
        description=(
            "Use ice cubes to trace patterns on your partner's skin. "
            "Start gentle and see where it leads."
        ),
        kink_factor=3,
        category=CardCategory.INTIMATE,
        tags=("ice", "sensation", "teasing"),
    ),
    Card(
        id="fallback-truth-or-dare",
        title="Truth or Dare",
        description=(
            "Play an adult version of truth or dare with intimate questions "
            "and playful challenges."
        ),
        kink_factor=2,
        category=CardCategory.ADVENTURE,
        tags=("truth", "dare", "questions"),
    ),
)


class RecommendationClient(Protocol):
    """Interface for LLM card generation."""

    async def generate(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured recommendation data."""


class CardRecommender(Protocol):
    """Anything that can propose cards for a couple."""

    async def recommend(self, request: RecommendationRequest) -> RecommendationResult:
        """Return recommended cards for the request."""


@dataclass
class RecommendationService:
    """Prepares recommendation prompts and validates model output."""

    client: RecommendationClient
    model: str
    reasoning_effort: str | None = None
    store: bool = False
    cards_count: int = 7
    rng: random.Random = field(default_factory=random.Random)

    async def recommend(self, request: RecommendationRequest) -> RecommendationResult:
        """Return model-generated cards, or curated ones if the model fails."""
        try:
            raw = await self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                schema=RECOMMENDATION_SCHEMA,
                prompt=build_prompt(request, self.cards_count),
            )
            extract = RecommendationExtract.model_validate(raw)
        except Exception:
            _logger.exception(
                "Card recommendation failed", extra={"couple_id": request.couple_id}
            )
            return self.fallback(request.preferences)

        cards = _parse_cards(extract.cards)
        if not cards:
            _logger.warning("Model returned no valid cards, using fallback")
            return self.fallback(request.preferences)
        return RecommendationResult(cards=cards, reasoning=_clean(extract.reasoning))

    def fallback(self, preferences: CouplePreferences | None) -> RecommendationResult:
        """Pick curated cards that respect the couple's preferences."""
        available = [
            card for card in FALLBACK_CARDS if _allowed_by(card, preferences)
        ]
        if not available:
            available = [card for card in FALLBACK_CARDS if card.kink_factor == 1]
        while len(available) < self.cards_count:
            available = available + available
        shuffled = list(available)
        self.rng.shuffle(shuffled)
        cards = [
            replace(card, id=new_card_id()) for card in shuffled[: self.cards_count]
        ]
        return RecommendationResult(cards=cards, reasoning=FALLBACK_REASONING)


def new_card_id() -> str:
    """Return a fresh card identifier."""
    return f"card_{uuid4().hex}"


def build_prompt(request: RecommendationRequest, cards_count: int) -> str:
    """Build the card generation prompt for a couple."""
    preferences = request.preferences
    max_kink = (
        preferences.max_kink_factor if preferences else DEFAULT_MAX_KINK_FACTOR
    )
    categories = (
        ", ".join(category.value for category in preferences.categories)
        if preferences and preferences.categories
        else "all categories"
    )
    excluded = (
        ", ".join(preferences.excluded_tags)
        if preferences and preferences.excluded_tags
        else "none"
    )
    recent_titles = ", ".join(card.title for card in request.recent_history[-10:])
    highly_rated = ", ".join(
        f"Card {rating.card_id}: {rating.rating}/5"
        for rating in [r for r in request.user_ratings if r.rating >= 4][-5:]
    )
    return (
        f"Generate {cards_count} intimate activity cards for a couple. "
        "These should be creative, engaging, and appropriate for adults "
        "in a committed relationship.\n\n"
        "COUPLE PREFERENCES:\n"
        f"- Max spice level: {max_kink}/3 (1=romantic, 2=sensual, 3=intimate)\n"
        f"- Preferred categories: {categories}\n"
        f"- Excluded tags: {excluded}\n\n"
        "RECENT ACTIVITIES TO AVOID:\n"
        f"{recent_titles or 'none'}\n\n"
        "HIGHLY RATED ACTIVITIES (for inspiration):\n"
        f"{highly_rated or 'none'}\n"
        f"{rating_summary(request.user_ratings)}\n\n"
        "REQUIREMENTS:\n"
        f"1. Include variety in spice levels (1-{max_kink})\n"
        "2. Mix different categories: romance, sensual, date_night, playful, "
        "intimate, adventure\n"
        "3. Avoid recently played activities\n"
        "4. Consider both partners' comfort levels\n"
        "5. Be creative but tasteful\n"
        "6. Each activity should be completable in 30-60 minutes\n\n"
        "CATEGORIES:\n"
        "- romance: romantic gestures, emotional connection\n"
        "- sensual: sensory experiences, touch-focused\n"
        "- date_night: special activities, shared experiences\n"
        "- playful: fun, lighthearted, games\n"
        "- intimate: close physical connection, private moments\n"
        "- adventure: trying new things, exploring together\n\n"
        "Each description is 2-3 sentences with specific instructions, "
        "each card has 3-5 descriptive tags, kink_factor is 1, 2 or 3, "
        "and reasoning briefly explains the selection."
    )


def rating_summary(ratings: list[Rating]) -> str:
    """Summarize a rating history for prompt context."""
    if not ratings:
        return "No previous ratings"
    counts: dict[int, int] = {}
    for rating in ratings:
        counts[rating.rating] = counts.get(rating.rating, 0) + 1
    average = sum(rating.rating for rating in ratings) / len(ratings)
    histogram = ", ".join(f"{stars}*: {count}" for stars, count in sorted(counts.items()))
    return (
        f"Average rating: {average:.1f}/5 from {len(ratings)} activities. "
        f"Ratings: {histogram}"
    )


def _parse_cards(raw_cards: list[dict[str, object]]) -> list[Card]:
    cards: list[Card] = []
    for raw in raw_cards:
        try:
            parsed = RecommendedCard.model_validate(raw)
        except ValidationError:
            _logger.warning("Invalid card from model: %s", raw)
            continue
        cards.append(
            Card(
                id=new_card_id(),
                title=parsed.title,
                description=parsed.description,
                kink_factor=parsed.kink_factor,
                category=parsed.category,
                tags=tuple(parsed.tags),
            )
        )
    return cards


def _allowed_by(card: Card, preferences: CouplePreferences | None) -> bool:
    max_kink = (
        preferences.max_kink_factor if preferences else DEFAULT_MAX_KINK_FACTOR
    )
    if card.kink_factor > max_kink:
        return False
    if preferences is None:
        return True
    if preferences.categories and card.category not in preferences.categories:
        return False
    return not any(tag in card.tags for tag in preferences.excluded_tags)


def _clean(reasoning: str | None) -> str | None:
    if reasoning is None:
        return None
    stripped = reasoning.strip()
    return stripped or None
