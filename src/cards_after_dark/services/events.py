"""Real-time game events and their in-process delivery."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol
from uuid import UUID

_logger = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, object]], Awaitable[None]]


class Topic(StrEnum):
    """Topics published by the game engine."""

    PARTNER_CARD_DRAWN = "PARTNER_CARD_DRAWN"
    PARTNER_VOTE = "PARTNER_VOTE"
    VOTING_COMPLETE = "VOTING_COMPLETE"
    ACTIVITY_COMPLETED = "ACTIVITY_COMPLETED"


class EventPublisher(Protocol):
    """Interface for publishing game events."""

    async def publish(self, topic: str, payload: dict[str, object]) -> None:
        """Deliver a payload to subscribers of a topic."""


@dataclass(eq=False)
class _Subscription:
    handler: EventHandler
    couple_id: UUID | None


@dataclass
class InMemoryEventBus(EventPublisher):
    """Publish/subscribe bus for a single process.

    Delivery is at most once. A failing subscriber is logged and skipped.
    Subscribers are awaited inline, so ``publish`` returns only after every
    handler (including a partner push) has finished. Serverless runtimes may
    freeze the process after the response, so delivery must complete here.
    """

    _subscriptions: dict[str, list[_Subscription]] = field(default_factory=dict)

    def subscribe(
        self, topic: str, handler: EventHandler, couple_id: UUID | None = None
    ) -> Callable[[], None]:
        """Register a handler; returns a callable that unsubscribes it."""
        subscription = _Subscription(handler=handler, couple_id=couple_id)
        self._subscriptions.setdefault(topic, []).append(subscription)

        def unsubscribe() -> None:
            subscriptions = self._subscriptions.get(topic, [])
            if subscription in subscriptions:
                subscriptions.remove(subscription)

        return unsubscribe

    async def publish(self, topic: str, payload: dict[str, object]) -> None:
        """Deliver the payload to every matching subscriber."""
        for subscription in list(self._subscriptions.get(topic, [])):
            if (
                subscription.couple_id is not None
                and payload.get("couple_id") != subscription.couple_id
            ):
                continue
            try:
                await subscription.handler(payload)
            except Exception:
                _logger.exception("Event subscriber failed", extra={"topic": topic})
