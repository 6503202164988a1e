"""Domain models for daily game sessions."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from cards_after_dark.domain.cards import Card


class SessionStatus(StrEnum):
    """Lifecycle states of a daily session."""

    WAITING = "waiting"
    DRAWN = "drawn"
    VOTING = "voting"
    SELECTED = "selected"
    COMPLETED = "completed"


@dataclass(frozen=True)
class DrawnCard:
    """A card drawn by one partner."""

    user_id: UUID
    card: Card
    drawn_at: datetime


@dataclass(frozen=True)
class Vote:
    """One partner's vote for a drawn card."""

    user_id: UUID
    card_id: str
    voted_at: datetime


@dataclass(frozen=True)
class GameSession:
    """The one-per-couple-per-day game record."""

    id: UUID
    couple_id: UUID
    date: date
    created_at: datetime
    user_cards: tuple[DrawnCard, ...] = ()
    votes: tuple[Vote, ...] = ()
    selected_card: DrawnCard | None = None
    points: int = 0
    completed: bool = False
    status: SessionStatus = SessionStatus.WAITING
    completed_at: datetime | None = None
    notes: str | None = None
    version: int = 0

    def drawn_card_for(self, card_id: str) -> DrawnCard | None:
        """Return the drawn card with the given card id, if any."""
        for drawn in self.user_cards:
            if drawn.card.id == card_id:
                return drawn
        return None

    def has_drawn(self, user_id: UUID) -> bool:
        return any(drawn.user_id == user_id for drawn in self.user_cards)

    def has_voted(self, user_id: UUID) -> bool:
        return any(vote.user_id == user_id for vote in self.votes)
