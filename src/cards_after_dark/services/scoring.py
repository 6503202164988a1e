"""Points calculation for completed and selected activities."""

from cards_after_dark.domain.cards import Card

BASE_POINTS = 100
SPICE_MULTIPLIER: dict[int, int] = {1: 1, 2: 2, 3: 3}
STREAK_BONUS = 50
COMPLETION_BONUS = 25
RATING_BONUS: dict[int, int] = {1: 0, 2: 5, 3: 10, 4: 20, 5: 30}


def score_points(
    card: Card,
    has_streak: bool = False,
    is_completed: bool = False,
    rating: int | None = None,
) -> int:
    """Return the points a card is worth under the given bonuses."""
    total = BASE_POINTS * SPICE_MULTIPLIER[card.kink_factor]
    if has_streak:
        total += STREAK_BONUS
    if is_completed:
        total += COMPLETION_BONUS
    if rating is not None:
        total += RATING_BONUS[rating]
    return total
