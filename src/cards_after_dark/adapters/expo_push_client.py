"""Expo push notification client adapter."""

from dataclasses import dataclass

import httpx

from cards_after_dark.services.notifications import PushClient

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"


@dataclass
class ExpoPushClient(PushClient):
    """Push client implemented with httpx against the Expo push API."""

    url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str = EXPO_PUSH_URL) -> "ExpoPushClient":
        """Create a push client with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient())

    async def send(
        self, token: str, title: str, body: str, data: dict[str, object]
    ) -> None:
        """Send one push message through Expo."""
        payload: dict[str, object] = {
            "to": token,
            "title": title,
            "body": body,
            "data": data,
            "sound": "default",
        }
        response = await self.http_client.post(self.url, json=payload, timeout=10)
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
