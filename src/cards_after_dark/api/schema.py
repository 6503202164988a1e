"""GraphQL schema for the game API, built with graphene.

Exposed operations:
* **Query**: ``getCurrentGameSession``, ``getGameSession``, ``getGameHistory``,
  ``getDailyCards``, ``getCardCategories``, ``getCouple``
* **Mutation**: ``drawCard``, ``voteForCard``, ``completeActivity``,
  ``rateCard``, ``updateRating``, ``updatePreferences``

The acting user comes from ``info.context["user_id"]``; services come from
``info.context["container"]``.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from datetime import date
from typing import TYPE_CHECKING, Any
from uuid import UUID

import graphene
from graphql import GraphQLError

from cards_after_dark.domain.cards import CardCategory, CouplePreferences
from cards_after_dark.domain.errors import SURFACED_ERRORS, GameError, UserInputError
from cards_after_dark.services.game import DEFAULT_HISTORY_LIMIT

if TYPE_CHECKING:
    from cards_after_dark.containers import AppContainer

_logger = logging.getLogger(__name__)

MIN_KINK_FACTOR = 1
MAX_KINK_FACTOR = 3


class CardType(graphene.ObjectType):
    id = graphene.ID(required=True)
    title = graphene.String(required=True)
    description = graphene.String(required=True)
    kink_factor = graphene.Int(required=True)
    category = graphene.String(required=True)
    tags = graphene.List(graphene.NonNull(graphene.String), required=True)

    def resolve_category(root, info):
        return root.category.value


class DrawnCardType(graphene.ObjectType):
    user_id = graphene.ID(required=True)
    card = graphene.Field(CardType, required=True)
    drawn_at = graphene.DateTime(required=True)


class VoteType(graphene.ObjectType):
    user_id = graphene.ID(required=True)
    card_id = graphene.ID(required=True)
    voted_at = graphene.DateTime(required=True)


class GameSessionType(graphene.ObjectType):
    id = graphene.ID(required=True)
    couple_id = graphene.ID(required=True)
    date = graphene.String(required=True)
    user_cards = graphene.List(graphene.NonNull(DrawnCardType), required=True)
    votes = graphene.List(graphene.NonNull(VoteType), required=True)
    selected_card = graphene.Field(DrawnCardType)
    points = graphene.Int(required=True)
    completed = graphene.Boolean(required=True)
    status = graphene.String(required=True)
    notes = graphene.String()
    version = graphene.Int(required=True)
    created_at = graphene.DateTime(required=True)
    completed_at = graphene.DateTime()

    def resolve_date(root, info):
        return root.date.isoformat()

    def resolve_status(root, info):
        return root.status.value


class PreferencesType(graphene.ObjectType):
    categories = graphene.List(graphene.NonNull(graphene.String), required=True)
    max_kink_factor = graphene.Int(required=True)
    excluded_tags = graphene.List(graphene.NonNull(graphene.String), required=True)
    notification_time = graphene.String(required=True)
    timezone = graphene.String()

    def resolve_categories(root, info):
        return [category.value for category in root.categories]


class CoupleType(graphene.ObjectType):
    id = graphene.ID(required=True)
    user_ids = graphene.List(graphene.NonNull(graphene.ID), required=True)
    total_points = graphene.Int(required=True)
    level = graphene.Int(required=True)
    points_for_next_level = graphene.Int(required=True)
    streak_days = graphene.Int(required=True)
    preferences = graphene.Field(PreferencesType)


class RatingType(graphene.ObjectType):
    user_id = graphene.ID(required=True)
    card_id = graphene.ID(required=True)
    rating = graphene.Int(required=True)
    created_at = graphene.DateTime()


class PreferencesInput(graphene.InputObjectType):
    categories = graphene.List(graphene.NonNull(graphene.String))
    max_kink_factor = graphene.Int()
    excluded_tags = graphene.List(graphene.NonNull(graphene.String))
    notification_time = graphene.String()
    timezone = graphene.String()


Resolver = Callable[..., Awaitable[Any]]


def handle_errors(failure_message: str) -> Callable[[Resolver], Resolver]:
    """Turn service errors into GraphQL errors with an ``extensions.code``.

    User-correctable errors keep their message; anything else is logged and
    reported with ``failure_message``.
    """

    def decorator(resolver: Resolver) -> Resolver:
        @functools.wraps(resolver)
        async def wrapper(root, info, **kwargs):  # type: ignore[no-untyped-def]
            try:
                return await resolver(root, info, **kwargs)
            except SURFACED_ERRORS as exc:
                raise GraphQLError(
                    exc.message, extensions={"code": exc.code}
                ) from exc
            except Exception as exc:
                _logger.exception(failure_message)
                extensions: dict[str, object] = {"code": "INTERNAL_SERVER_ERROR"}
                if isinstance(exc, GameError):
                    extensions["reason"] = exc.code
                raise GraphQLError(failure_message, extensions=extensions) from exc

        return wrapper

    return decorator


def _container(info) -> AppContainer:  # type: ignore[no-untyped-def]
    return info.context["container"]


def _viewer(info) -> tuple[UUID, UUID]:  # type: ignore[no-untyped-def]
    """Return (user_id, couple_id) for the authenticated caller."""
    user, couple_id = _container(info).user_service.require_couple(
        info.context.get("user_id")
    )
    return user.id, couple_id


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise UserInputError("Date must be formatted as YYYY-MM-DD") from exc


def _preferences_from_input(
    data: PreferencesInput, current: CouplePreferences | None
) -> CouplePreferences:
    base = current or CouplePreferences()
    try:
        categories = (
            tuple(CardCategory(value) for value in data.categories)
            if data.categories is not None
            else base.categories
        )
    except ValueError as exc:
        raise UserInputError("Unknown card category") from exc
    max_kink = (
        data.max_kink_factor
        if data.max_kink_factor is not None
        else base.max_kink_factor
    )
    if not MIN_KINK_FACTOR <= max_kink <= MAX_KINK_FACTOR:
        raise UserInputError("Spice level must be between 1 and 3")
    return CouplePreferences(
        categories=categories,
        max_kink_factor=max_kink,
        excluded_tags=(
            tuple(data.excluded_tags)
            if data.excluded_tags is not None
            else base.excluded_tags
        ),
        notification_time=data.notification_time or base.notification_time,
        timezone=data.timezone if data.timezone is not None else base.timezone,
    )


class Query(graphene.ObjectType):
    get_current_game_session = graphene.Field(GameSessionType)
    get_game_session = graphene.Field(
        GameSessionType, date=graphene.String(required=True)
    )
    get_game_history = graphene.List(
        graphene.NonNull(GameSessionType),
        limit=graphene.Int(default_value=DEFAULT_HISTORY_LIMIT),
    )
    get_daily_cards = graphene.List(graphene.NonNull(CardType))
    get_card_categories = graphene.List(graphene.NonNull(graphene.String))
    get_couple = graphene.Field(CoupleType)

    @handle_errors("Failed to get game session")
    async def resolve_get_current_game_session(root, info):
        _, couple_id = _viewer(info)
        return _container(info).game_service.get_current_session(couple_id)

    @handle_errors("Failed to get game session")
    async def resolve_get_game_session(root, info, date):
        _, couple_id = _viewer(info)
        return _container(info).game_service.get_session_for_date(
            couple_id, _parse_date(date)
        )

    @handle_errors("Failed to get game history")
    async def resolve_get_game_history(root, info, limit=DEFAULT_HISTORY_LIMIT):
        _, couple_id = _viewer(info)
        return _container(info).game_service.get_history(couple_id, limit)

    @handle_errors("Failed to get daily cards")
    async def resolve_get_daily_cards(root, info):
        user_id, couple_id = _viewer(info)
        return await _container(info).game_service.get_daily_cards(couple_id, user_id)

    @handle_errors("Failed to get card categories")
    async def resolve_get_card_categories(root, info):
        return [category.value for category in CardCategory]

    @handle_errors("Failed to get couple")
    async def resolve_get_couple(root, info):
        _, couple_id = _viewer(info)
        return _container(info).couple_service.get_couple(couple_id)


class Mutation(graphene.ObjectType):
    draw_card = graphene.Field(DrawnCardType)
    vote_for_card = graphene.Boolean(card_id=graphene.ID(required=True))
    complete_activity = graphene.Field(
        GameSessionType, rating=graphene.Int(), notes=graphene.String()
    )
    rate_card = graphene.Field(
        RatingType,
        card_id=graphene.ID(required=True),
        rating=graphene.Int(required=True),
    )
    update_rating = graphene.Field(
        RatingType,
        description="Sets the rating, creating it when none exists.",
        card_id=graphene.ID(required=True),
        rating=graphene.Int(required=True),
    )
    update_preferences = graphene.Field(
        CoupleType, input=PreferencesInput(required=True)
    )

    @handle_errors("Failed to draw card")
    async def resolve_draw_card(root, info):
        user_id, couple_id = _viewer(info)
        return await _container(info).game_service.draw_card(couple_id, user_id)

    @handle_errors("Failed to vote for card")
    async def resolve_vote_for_card(root, info, card_id):
        user_id, couple_id = _viewer(info)
        await _container(info).game_service.vote_for_card(couple_id, user_id, card_id)
        return True

    @handle_errors("Failed to complete activity")
    async def resolve_complete_activity(root, info, rating=None, notes=None):
        user_id, couple_id = _viewer(info)
        return await _container(info).game_service.complete_activity(
            couple_id, user_id, rating=rating, notes=notes
        )

    @handle_errors("Failed to rate card")
    async def resolve_rate_card(root, info, card_id, rating):
        user = _container(info).user_service.require_user(info.context.get("user_id"))
        return _container(info).rating_service.rate_card(user.id, card_id, rating)

    @handle_errors("Failed to update rating")
    async def resolve_update_rating(root, info, card_id, rating):
        user = _container(info).user_service.require_user(info.context.get("user_id"))
        return _container(info).rating_service.update_rating(user.id, card_id, rating)

    @handle_errors("Failed to update preferences")
    async def resolve_update_preferences(root, info, input):  # noqa: A002
        _, couple_id = _viewer(info)
        couple_service = _container(info).couple_service
        current = couple_service.get_couple(couple_id)
        return couple_service.update_preferences(
            couple_id, _preferences_from_input(input, current.preferences)
        )


schema = graphene.Schema(query=Query, mutation=Mutation)
