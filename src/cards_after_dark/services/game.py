"""Daily game session engine.

A couple gets one session per UTC calendar day. Each partner draws one card,
both vote, the winner is scored, and the couple later completes it:

    waiting -> drawn -> voting -> selected -> completed

Sessions are written with a version check so that two partners acting at the
same time cannot silently overwrite each other; the loser gets ConflictError.
"""

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID, uuid4

from cards_after_dark.domain.cards import Card, Rating, RecommendationRequest
from cards_after_dark.domain.errors import (
    AlreadyCompletedError,
    AlreadyDrewError,
    AlreadyVotedError,
    ConflictError,
    DrawLimitExceededError,
    InvalidCardSelectionError,
    InvalidNotesError,
    NoActivitySelectedError,
    NoCardsAvailableError,
    NotEnoughCardsError,
)
from cards_after_dark.domain.sessions import DrawnCard, GameSession, SessionStatus, Vote
from cards_after_dark.services.couples import CoupleService
from cards_after_dark.services.events import EventPublisher, Topic
from cards_after_dark.services.ratings import RatingRepository, validate_rating
from cards_after_dark.services.recommendations import CardRecommender
from cards_after_dark.services.scoring import score_points

_logger = logging.getLogger(__name__)

DEFAULT_MAX_DRAWS_PER_DAY = 3
DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 100
CONTEXT_SESSIONS = 10
CONTEXT_CARDS = 20
CONTEXT_RATINGS = 50
MAX_NOTES_LENGTH = 500
PARTNERS_PER_COUPLE = 2
SPLIT_VOTE_ODDS = 0.5


class SessionRepository(Protocol):
    """Persistence interface for daily game sessions."""

    def get_session(self, couple_id: UUID, day: date) -> GameSession | None:
        """Return the session for a couple and day, if present."""

    def create_session(self, session: GameSession) -> GameSession:
        """Insert the session unless one exists for its key; return the stored one."""

    def update_session_if_unchanged(
        self, session: GameSession, expected_version: int
    ) -> bool:
        """Write the session only if the stored version matches."""

    def list_sessions(self, couple_id: UUID, limit: int) -> list[GameSession]:
        """Return a couple's sessions, most recent date first."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def resolve_winner(first: Vote, second: Vote, rng: random.Random) -> str:
    """Return the winning card id for a pair of votes.

    Matching votes win outright; split votes are a coin flip.
    """
    if first.card_id == second.card_id:
        return first.card_id
    return first.card_id if rng.random() < SPLIT_VOTE_ODDS else second.card_id


@dataclass
class GameService:
    """Runs the draw, vote and completion steps of a couple's daily game."""

    session_repository: SessionRepository
    rating_repository: RatingRepository
    couple_service: CoupleService
    recommender: CardRecommender
    publisher: EventPublisher
    max_draws_per_day: int = DEFAULT_MAX_DRAWS_PER_DAY
    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], datetime] = _utc_now

    def today(self) -> date:
        """Return the current UTC date."""
        return self.clock().astimezone(UTC).date()

    def get_or_create_session(self, couple_id: UUID, day: date) -> GameSession:
        """Return the session for the day, creating a waiting one if absent."""
        existing = self.session_repository.get_session(couple_id, day)
        if existing is not None:
            return existing
        return self.session_repository.create_session(
            GameSession(
                id=uuid4(),
                couple_id=couple_id,
                date=day,
                created_at=self.clock(),
            )
        )

    def get_current_session(self, couple_id: UUID) -> GameSession:
        """Return today's session for the couple."""
        return self.get_or_create_session(couple_id, self.today())

    def get_session_for_date(self, couple_id: UUID, day: date) -> GameSession | None:
        """Return the session for a given day without creating one."""
        return self.session_repository.get_session(couple_id, day)

    def get_history(
        self, couple_id: UUID, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[GameSession]:
        """Return past sessions, most recent first."""
        capped = max(1, min(limit, MAX_HISTORY_LIMIT))
        return self.session_repository.list_sessions(couple_id, capped)

    async def get_daily_cards(self, couple_id: UUID, user_id: UUID) -> list[Card]:
        """Return today's recommended cards without drawing one."""
        result = await self.recommender.recommend(
            self._recommendation_request(couple_id, user_id)
        )
        return result.cards

    async def draw_card(self, couple_id: UUID, user_id: UUID) -> DrawnCard:
        """Draw one recommended card for the user into today's session."""
        session = self.get_current_session(couple_id)
        if session.has_drawn(user_id):
            raise AlreadyDrewError
        if len(session.user_cards) >= self.max_draws_per_day * PARTNERS_PER_COUPLE:
            raise DrawLimitExceededError

        result = await self.recommender.recommend(
            self._recommendation_request(couple_id, user_id)
        )
        drawn_ids = {drawn.card.id for drawn in session.user_cards}
        available = [card for card in result.cards if card.id not in drawn_ids]
        if not available:
            raise NoCardsAvailableError

        drawn = DrawnCard(
            user_id=user_id, card=self.rng.choice(available), drawn_at=self.clock()
        )
        self._update_if_unchanged(
            session,
            replace(
                session,
                user_cards=(*session.user_cards, drawn),
                status=(
                    SessionStatus.DRAWN
                    if not session.user_cards
                    else SessionStatus.VOTING
                ),
            ),
        )
        await self._publish(
            Topic.PARTNER_CARD_DRAWN,
            {"couple_id": couple_id, "user_id": user_id, "drawn_card": drawn},
        )
        return drawn

    async def vote_for_card(
        self, couple_id: UUID, user_id: UUID, card_id: str
    ) -> GameSession:
        """Record the user's vote; the second vote selects the activity."""
        session = self.get_current_session(couple_id)
        if len(session.user_cards) < PARTNERS_PER_COUPLE:
            raise NotEnoughCardsError
        if session.has_voted(user_id):
            raise AlreadyVotedError
        if session.drawn_card_for(card_id) is None:
            raise InvalidCardSelectionError

        vote = Vote(user_id=user_id, card_id=card_id, voted_at=self.clock())
        votes = (*session.votes, vote)
        partner_vote = next((v for v in votes if v.user_id != user_id), None)

        if partner_vote is None:
            updated = self._update_if_unchanged(session, replace(session, votes=votes))
            await self._publish(
                Topic.PARTNER_VOTE,
                {"couple_id": couple_id, "user_id": user_id, "vote": vote},
            )
            return updated

        selected = session.drawn_card_for(resolve_winner(partner_vote, vote, self.rng))
        if selected is None:
            raise InvalidCardSelectionError
        points = score_points(selected.card)
        updated = self._update_if_unchanged(
            session,
            replace(
                session,
                votes=votes,
                selected_card=selected,
                points=points,
                status=SessionStatus.SELECTED,
            ),
        )
        await self._publish(
            Topic.VOTING_COMPLETE,
            {
                "couple_id": couple_id,
                "user_id": user_id,
                "selected_card": selected,
                "points": points,
                "votes": list(votes),
            },
        )
        return updated

    async def complete_activity(
        self,
        couple_id: UUID,
        user_id: UUID,
        rating: int | None = None,
        notes: str | None = None,
    ) -> GameSession:
        """Mark today's selected activity as done and award the points."""
        if rating is not None:
            validate_rating(rating)
        if notes is not None and len(notes) > MAX_NOTES_LENGTH:
            raise InvalidNotesError

        session = self.get_current_session(couple_id)
        if session.selected_card is None:
            raise NoActivitySelectedError
        if session.completed:
            raise AlreadyCompletedError

        card = session.selected_card.card
        points = session.points
        if rating is not None:
            points = score_points(card, has_streak=False, is_completed=True, rating=rating)
        now = self.clock()
        # The session write goes last: a completed session means points landed.
        self.couple_service.record_completion(couple_id, points)
        try:
            if rating is not None:
                self.rating_repository.save_rating(
                    Rating(
                        user_id=user_id, card_id=card.id, rating=rating, created_at=now
                    )
                )
            updated = self._update_if_unchanged(
                session,
                replace(
                    session,
                    completed=True,
                    status=SessionStatus.COMPLETED,
                    points=points,
                    completed_at=now,
                    notes=notes if notes is not None else session.notes,
                ),
            )
        except Exception:
            _logger.warning(
                "Completion not saved, reverting couple points",
                extra={"couple_id": couple_id},
            )
            self.couple_service.revert_completion(couple_id, points)
            raise
        await self._publish(
            Topic.ACTIVITY_COMPLETED,
            {
                "couple_id": couple_id,
                "user_id": user_id,
                "session": updated,
                "points_earned": points,
            },
        )
        return updated

    def _recommendation_request(
        self, couple_id: UUID, user_id: UUID
    ) -> RecommendationRequest:
        couple = self.couple_service.get_couple(couple_id)
        recent_sessions = self.session_repository.list_sessions(
            couple_id, CONTEXT_SESSIONS
        )
        recent_cards = [
            drawn.card
            for session in reversed(recent_sessions)
            for drawn in session.user_cards
        ][-CONTEXT_CARDS:]
        return RecommendationRequest(
            couple_id=couple_id,
            preferences=couple.preferences,
            recent_history=recent_cards,
            user_ratings=self.rating_repository.list_user_ratings(
                user_id, CONTEXT_RATINGS
            ),
        )

    def _update_if_unchanged(
        self, current: GameSession, updated: GameSession
    ) -> GameSession:
        versioned = replace(updated, version=current.version + 1)
        if not self.session_repository.update_session_if_unchanged(
            versioned, current.version
        ):
            raise ConflictError
        return versioned

    async def _publish(self, topic: Topic, payload: dict[str, object]) -> None:
        try:
            await self.publisher.publish(topic, payload)
        except Exception:
            _logger.exception("Failed to publish %s", topic)
