"""Push notifications sent to the partner when game events happen."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from cards_after_dark.domain.models import UserRecord
from cards_after_dark.domain.sessions import DrawnCard
from cards_after_dark.services.events import EventHandler, InMemoryEventBus, Topic
from cards_after_dark.services.users import UserService

_logger = logging.getLogger(__name__)


class PushClient(Protocol):
    """Interface for mobile push delivery."""

    async def send(
        self, token: str, title: str, body: str, data: dict[str, object]
    ) -> None:
        """Send a single push notification."""


@dataclass(frozen=True)
class PushMessage:
    """Title, body and routing data for a push notification."""

    title: str
    body: str
    kind: str


@dataclass
class PartnerNotifier:
    """Turns game events into push notifications for the other partner."""

    push_client: PushClient
    user_service: UserService

    def attach(self, bus: InMemoryEventBus) -> None:
        """Subscribe to every game topic on the bus."""
        for topic in Topic:
            bus.subscribe(topic, self._handler_for(topic))

    def _handler_for(self, topic: Topic) -> EventHandler:
        async def handle(payload: dict[str, object]) -> None:
            await self.notify(topic, payload)

        return handle

    async def notify(self, topic: str, payload: dict[str, object]) -> int:
        """Send the notification for an event; returns deliveries made."""
        couple_id = payload.get("couple_id")
        actor_id = payload.get("user_id")
        if not isinstance(couple_id, UUID) or not isinstance(actor_id, UUID):
            return 0
        message = _message_for(topic, payload)
        if message is None:
            return 0
        sent = 0
        for recipient in self.user_service.partners_of(couple_id, actor_id):
            if await self._deliver(recipient, message, couple_id):
                sent += 1
        return sent

    async def _deliver(
        self, recipient: UserRecord, message: PushMessage, couple_id: UUID
    ) -> bool:
        if not recipient.push_token:
            _logger.info("No push token for user %s, skipping", recipient.id)
            return False
        try:
            await self.push_client.send(
                recipient.push_token,
                message.title,
                message.body,
                {"type": message.kind, "coupleId": str(couple_id)},
            )
        except Exception:
            _logger.exception(
                "Failed to send push notification", extra={"user_id": recipient.id}
            )
            return False
        return True


def _message_for(topic: str, payload: dict[str, object]) -> PushMessage | None:
    if topic == Topic.PARTNER_CARD_DRAWN:
        drawn = payload.get("drawn_card")
        title = drawn.card.title if isinstance(drawn, DrawnCard) else "a card"
        return PushMessage(
            title="Your partner drew a card",
            body=f"They drew {title}. Draw yours to start voting!",
            kind="partner_drew_card",
        )
    if topic == Topic.PARTNER_VOTE:
        return PushMessage(
            title="Your partner voted",
            body="Cast your vote to reveal tonight's activity.",
            kind="partner_voted",
        )
    if topic == Topic.VOTING_COMPLETE:
        return PushMessage(
            title="Tonight's activity is set",
            body=f"You earned {payload.get('points', 0)} points. Time to play!",
            kind="voting_complete",
        )
    if topic == Topic.ACTIVITY_COMPLETED:
        return PushMessage(
            title="Activity completed",
            body=f"Nice work! +{payload.get('points_earned', 0)} points.",
            kind="activity_completed",
        )
    return None
