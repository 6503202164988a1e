"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from cards_after_dark.adapters.expo_push_client import ExpoPushClient
from cards_after_dark.adapters.openai_recommendation_client import (
    OpenAIRecommendationClient,
)
from cards_after_dark.adapters.supabase_couple_repository import (
    SupabaseCoupleRepository,
)
from cards_after_dark.adapters.supabase_rating_repository import (
    SupabaseRatingRepository,
)
from cards_after_dark.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from cards_after_dark.adapters.supabase_user_repository import SupabaseUserRepository
from cards_after_dark.config import Settings
from cards_after_dark.services.couples import CoupleService
from cards_after_dark.services.events import InMemoryEventBus
from cards_after_dark.services.game import GameService
from cards_after_dark.services.notifications import PartnerNotifier
from cards_after_dark.services.ratings import RatingService
from cards_after_dark.services.recommendations import RecommendationService
from cards_after_dark.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    event_bus: InMemoryEventBus
    user_service: UserService
    couple_service: CoupleService
    rating_service: RatingService
    recommendation_service: RecommendationService
    game_service: GameService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    user_repository = SupabaseUserRepository(supabase_client)
    couple_repository = SupabaseCoupleRepository(supabase_client)
    rating_repository = SupabaseRatingRepository(supabase_client)
    session_repository = SupabaseSessionRepository(supabase_client)
    user_service = UserService(user_repository)
    couple_service = CoupleService(couple_repository)
    rating_service = RatingService(rating_repository)
    openai_client = OpenAIRecommendationClient.create(
        resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.openai_timeout_seconds,
    )
    recommendation_service = RecommendationService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        cards_count=resolved_settings.daily_cards_count,
    )
    event_bus = InMemoryEventBus()
    push_client = ExpoPushClient.create(resolved_settings.expo_push_url)
    if resolved_settings.push_notifications_enabled:
        PartnerNotifier(push_client=push_client, user_service=user_service).attach(
            event_bus
        )
    game_service = GameService(
        session_repository=session_repository,
        rating_repository=rating_repository,
        couple_service=couple_service,
        recommender=recommendation_service,
        publisher=event_bus,
        max_draws_per_day=resolved_settings.max_card_draws_per_day,
    )

    async def close_resources() -> None:
        await push_client.close()
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        event_bus=event_bus,
        user_service=user_service,
        couple_service=couple_service,
        rating_service=rating_service,
        recommendation_service=recommendation_service,
        game_service=game_service,
        close_resources=close_resources,
    )
