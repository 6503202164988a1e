"""Shared test fixtures."""

import random
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

import pytest

from cards_after_dark.config import Settings
from cards_after_dark.containers import AppContainer
from cards_after_dark.domain.cards import (
    Card,
    CardCategory,
    Rating,
    RecommendationRequest,
    RecommendationResult,
)
from cards_after_dark.domain.couples import CoupleProfile, CoupleUpdate
from cards_after_dark.domain.models import UserRecord
from cards_after_dark.domain.sessions import GameSession
from cards_after_dark.services.couples import CoupleRepository, CoupleService
from cards_after_dark.services.events import EventPublisher, InMemoryEventBus
from cards_after_dark.services.game import GameService, SessionRepository
from cards_after_dark.services.notifications import PushClient
from cards_after_dark.services.ratings import RatingRepository, RatingService
from cards_after_dark.services.recommendations import (
    CardRecommender,
    RecommendationClient,
    RecommendationService,
)
from cards_after_dark.services.users import UserRepository, UserService

FIXED_NOW = datetime(2026, 2, 14, 20, 0, tzinfo=UTC)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_card(card_id: str, kink_factor: int = 1, **overrides) -> Card:  # type: ignore[no-untyped-def]
    values: dict[str, object] = {
        "id": card_id,
        "title": f"Card {card_id}",
        "description": "Do something nice together.",
        "kink_factor": kink_factor,
        "category": CardCategory.ROMANCE,
        "tags": ("romantic",),
    }
    values.update(overrides)
    return Card(**values)  # type: ignore[arg-type]


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[UUID, UserRecord] = field(default_factory=dict)

    def add(self, user: UserRecord) -> UserRecord:
        self.users[user.id] = user
        return user

    def get_user(self, user_id: UUID) -> UserRecord | None:
        return self.users.get(user_id)

    def list_couple_members(self, couple_id: UUID) -> list[UserRecord]:
        return [user for user in self.users.values() if user.couple_id == couple_id]


@dataclass
class InMemoryCoupleRepository(CoupleRepository):
    """In-memory couple repository for tests."""

    couples: dict[UUID, CoupleProfile] = field(default_factory=dict)

    def add(self, couple: CoupleProfile) -> CoupleProfile:
        self.couples[couple.id] = couple
        return couple

    def get_couple(self, couple_id: UUID) -> CoupleProfile | None:
        return self.couples.get(couple_id)

    def update_couple(self, couple_id: UUID, update: CoupleUpdate) -> CoupleProfile:
        current = self.couples[couple_id]
        updated = replace(
            current,
            total_points=(
                update.total_points
                if update.total_points is not None
                else current.total_points
            ),
            streak_days=(
                update.streak_days
                if update.streak_days is not None
                else current.streak_days
            ),
            preferences=(
                update.preferences
                if update.preferences is not None
                else current.preferences
            ),
        )
        self.couples[couple_id] = updated
        return updated


@dataclass
class InMemoryRatingRepository(RatingRepository):
    """In-memory rating repository keyed by user and card."""

    ratings: dict[tuple[UUID, str], Rating] = field(default_factory=dict)

    def save_rating(self, rating: Rating) -> Rating:
        self.ratings[(rating.user_id, rating.card_id)] = rating
        return rating

    def list_user_ratings(self, user_id: UUID, limit: int) -> list[Rating]:
        ratings = [r for r in self.ratings.values() if r.user_id == user_id]
        ratings.sort(key=lambda r: r.created_at or FIXED_NOW, reverse=True)
        return ratings[:limit]


@dataclass
class InMemoryGameSessionRepository(SessionRepository):
    """In-memory session store with version-checked writes."""

    sessions: dict[tuple[UUID, date], GameSession] = field(default_factory=dict)
    create_calls: int = 0

    def get_session(self, couple_id: UUID, day: date) -> GameSession | None:
        return self.sessions.get((couple_id, day))

    def create_session(self, session: GameSession) -> GameSession:
        self.create_calls += 1
        key = (session.couple_id, session.date)
        return self.sessions.setdefault(key, session)

    def update_session_if_unchanged(
        self, session: GameSession, expected_version: int
    ) -> bool:
        key = (session.couple_id, session.date)
        stored = self.sessions.get(key)
        if stored is None or stored.version != expected_version:
            return False
        self.sessions[key] = session
        return True

    def list_sessions(self, couple_id: UUID, limit: int) -> list[GameSession]:
        sessions = [s for s in self.sessions.values() if s.couple_id == couple_id]
        sessions.sort(key=lambda s: s.date, reverse=True)
        return sessions[:limit]


@dataclass
class FakeRecommender(CardRecommender):
    """Recommender returning a fixed list of cards."""

    cards: list[Card] = field(
        default_factory=lambda: [
            make_card("card-a", kink_factor=1),
            make_card("card-b", kink_factor=2),
            make_card("card-c", kink_factor=3),
        ]
    )
    requests: list[RecommendationRequest] = field(default_factory=list)

    async def recommend(self, request: RecommendationRequest) -> RecommendationResult:
        self.requests.append(request)
        return RecommendationResult(cards=list(self.cards))


@dataclass
class FakeRecommendationClient(RecommendationClient):
    """Fake model client returning a fixed payload or raising."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "reasoning": "A gentle mix for tonight",
            "cards": [
                {
                    "title": "Stargazing",
                    "description": "Lie outside and name the constellations.",
                    "kink_factor": 1,
                    "category": "romance",
                    "tags": ["outdoors", "romantic"],
                }
            ],
        }
    )
    error: Exception | None = None
    prompts: list[str] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class RecordingPublisher(EventPublisher):
    """Publisher that keeps every event in order."""

    events: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    async def publish(self, topic: str, payload: dict[str, object]) -> None:
        self.events.append((topic, payload))

    def topics(self) -> list[str]:
        return [topic for topic, _ in self.events]


class FailingPublisher(EventPublisher):
    """Publisher whose transport is down."""

    async def publish(self, topic: str, payload: dict[str, object]) -> None:
        raise RuntimeError("event transport unavailable")


@dataclass
class FakePushClient(PushClient):
    """Push client that records messages or fails on demand."""

    sent: list[dict[str, object]] = field(default_factory=list)
    fail: bool = False

    async def send(
        self, token: str, title: str, body: str, data: dict[str, object]
    ) -> None:
        if self.fail:
            raise RuntimeError("push service down")
        self.sent.append({"to": token, "title": title, "body": body, "data": data})


class NoRandom(random.Random):
    """Random source that fails the test if it is consulted."""

    def random(self) -> float:
        raise AssertionError("random source should not be used")

    def choice(self, seq):  # type: ignore[no-untyped-def]
        return seq[0]


@dataclass
class Household:
    """A couple with two partners stored in the in-memory repositories."""

    couple_id: UUID
    partner_a: UserRecord
    partner_b: UserRecord


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="eyJhbGciOiJIUzI1NiJ9.eyJyb2xlIjoic2VydmljZSJ9.signature",
        openai_api_key="openai-key",
    )


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def couple_repository() -> InMemoryCoupleRepository:
    return InMemoryCoupleRepository()


@pytest.fixture
def rating_repository() -> InMemoryRatingRepository:
    return InMemoryRatingRepository()


@pytest.fixture
def session_repository() -> InMemoryGameSessionRepository:
    return InMemoryGameSessionRepository()


@pytest.fixture
def recommender() -> FakeRecommender:
    return FakeRecommender()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def household(
    user_repository: InMemoryUserRepository,
    couple_repository: InMemoryCoupleRepository,
) -> Household:
    couple_id = uuid4()
    partner_a = user_repository.add(
        UserRecord(
            id=uuid4(),
            phone_number="+15550000001",
            first_name="Alex",
            couple_id=couple_id,
            push_token="ExponentPushToken[alex]",
        )
    )
    partner_b = user_repository.add(
        UserRecord(
            id=uuid4(),
            phone_number="+15550000002",
            first_name="Sam",
            couple_id=couple_id,
            push_token="ExponentPushToken[sam]",
        )
    )
    couple_repository.add(
        CoupleProfile(id=couple_id, user_ids=(partner_a.id, partner_b.id))
    )
    return Household(couple_id=couple_id, partner_a=partner_a, partner_b=partner_b)


@pytest.fixture
def game_service(
    session_repository: InMemoryGameSessionRepository,
    rating_repository: InMemoryRatingRepository,
    couple_repository: InMemoryCoupleRepository,
    recommender: FakeRecommender,
    publisher: RecordingPublisher,
) -> GameService:
    return GameService(
        session_repository=session_repository,
        rating_repository=rating_repository,
        couple_service=CoupleService(couple_repository),
        recommender=recommender,
        publisher=publisher,
        rng=random.Random(7),
        clock=fixed_clock,
    )


@pytest.fixture
def container(
    settings: Settings,
    user_repository: InMemoryUserRepository,
    couple_repository: InMemoryCoupleRepository,
    rating_repository: InMemoryRatingRepository,
    game_service: GameService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        event_bus=InMemoryEventBus(),
        user_service=UserService(user_repository),
        couple_service=game_service.couple_service,
        rating_service=RatingService(rating_repository, clock=fixed_clock),
        recommendation_service=RecommendationService(
            client=FakeRecommendationClient(), model=settings.openai_model
        ),
        game_service=game_service,
        close_resources=close_resources,
    )
