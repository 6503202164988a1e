"""Tests for the GraphQL HTTP endpoint."""

from fastapi.testclient import TestClient

from cards_after_dark.api.app import create_app
from tests.conftest import Household

DRAW = "mutation { drawCard { userId card { id title kinkFactor category } } }"
VOTE = "mutation Vote($cardId: ID!) { voteForCard(cardId: $cardId) }"
CURRENT = "{ getCurrentGameSession { status points completed userCards { userId } } }"


def _post(client: TestClient, query: str, user_id=None, variables=None):  # type: ignore[no-untyped-def]
    headers = {"X-User-Id": str(user_id)} if user_id else {}
    body: dict[str, object] = {"query": query}
    if variables is not None:
        body["variables"] = variables
    return client.post("/graphql", json=body, headers=headers)


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_empty_query_is_rejected(container) -> None:
    client = TestClient(create_app(container))

    response = _post(client, "  ")

    assert response.status_code == 400
    assert response.json() == {"errors": [{"message": "query is required"}]}


def test_missing_user_is_unauthorized(container) -> None:
    client = TestClient(create_app(container))

    response = _post(client, CURRENT)

    assert response.status_code == 200
    payload = response.json()
    assert payload["data"] == {"getCurrentGameSession": None}
    assert payload["errors"][0]["extensions"] == {"code": "UNAUTHORIZED"}


def test_full_game_over_graphql(container, household: Household) -> None:
    client = TestClient(create_app(container))
    partner_a = household.partner_a.id
    partner_b = household.partner_b.id

    first = _post(client, DRAW, partner_a).json()["data"]["drawCard"]
    _post(client, DRAW, partner_b)
    card_id = first["card"]["id"]
    assert first["userId"] == str(partner_a)

    assert _post(client, VOTE, partner_a, {"cardId": card_id}).json() == {
        "data": {"voteForCard": True}
    }
    _post(client, VOTE, partner_b, {"cardId": card_id})

    session = _post(client, CURRENT, partner_b).json()["data"]["getCurrentGameSession"]
    assert session["status"] == "selected"
    assert session["points"] == 100 * first["card"]["kinkFactor"]
    assert len(session["userCards"]) == 2

    completed = _post(
        client,
        'mutation { completeActivity(rating: 5, notes: "Again!") '
        "{ status points notes } }",
        partner_a,
    ).json()["data"]["completeActivity"]
    assert completed["status"] == "completed"
    assert completed["notes"] == "Again!"
    assert completed["points"] == 100 * first["card"]["kinkFactor"] + 25 + 30

    couple = _post(
        client, "{ getCouple { totalPoints streakDays level } }", partner_b
    ).json()["data"]["getCouple"]
    assert couple == {
        "totalPoints": completed["points"],
        "streakDays": 1,
        "level": 1,
    }


def test_rule_violation_is_reported_with_code(
    container, household: Household
) -> None:
    client = TestClient(create_app(container))
    _post(client, DRAW, household.partner_a.id)

    response = _post(client, DRAW, household.partner_a.id)

    error = response.json()["errors"][0]
    assert error["message"] == "You already drew a card today"
    assert error["extensions"] == {"code": "ALREADY_DREW_CARD"}
    assert error["path"] == ["drawCard"]


def test_get_game_session_validates_date(container, household: Household) -> None:
    client = TestClient(create_app(container))

    response = _post(
        client, '{ getGameSession(date: "14/02/2026") { id } }', household.partner_a.id
    )

    assert response.json()["errors"][0]["extensions"] == {"code": "BAD_USER_INPUT"}


def test_card_categories(container, household: Household) -> None:
    client = TestClient(create_app(container))

    response = _post(client, "{ getCardCategories }", household.partner_a.id)

    assert response.json()["data"]["getCardCategories"] == [
        "romance",
        "sensual",
        "date_night",
        "playful",
        "intimate",
        "adventure",
    ]


def test_update_preferences(container, household: Household) -> None:
    client = TestClient(create_app(container))
    mutation = (
        "mutation Prefs($input: PreferencesInput!) { updatePreferences(input: $input) "
        "{ preferences { categories maxKinkFactor excludedTags notificationTime } } }"
    )

    ok = _post(
        client,
        mutation,
        household.partner_a.id,
        {"input": {"categories": ["playful"], "maxKinkFactor": 3}},
    ).json()
    rejected = _post(
        client, mutation, household.partner_a.id, {"input": {"maxKinkFactor": 4}}
    ).json()

    assert ok["data"]["updatePreferences"]["preferences"] == {
        "categories": ["playful"],
        "maxKinkFactor": 3,
        "excludedTags": [],
        "notificationTime": "19:00",
    }
    assert rejected["errors"][0]["extensions"] == {"code": "BAD_USER_INPUT"}


def test_rate_card(container, household: Household) -> None:
    client = TestClient(create_app(container))

    response = _post(
        client,
        'mutation { rateCard(cardId: "card-a", rating: 4) { cardId rating } }',
        household.partner_a.id,
    )
    invalid = _post(
        client,
        'mutation { updateRating(cardId: "card-a", rating: 9) { rating } }',
        household.partner_a.id,
    )

    assert response.json()["data"]["rateCard"] == {"cardId": "card-a", "rating": 4}
    assert invalid.json()["errors"][0]["extensions"] == {"code": "INVALID_RATING"}
