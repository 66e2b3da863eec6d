"""Tests for the HTTP API."""

import base64
from datetime import UTC, datetime
from uuid import uuid4

from fastapi.testclient import TestClient

from macro_quest.api.app import create_app
from tests.conftest import FakeVisionClient, make_meal

PROFILE = {
    "name": "Ava",
    "gender": "male",
    "weight": 70,
    "height": 175,
    "age": 25,
    "activity_level": "moderate",
    "goal_type": "maintain",
}

MEAL = {
    "name": "Chicken rice bowl",
    "calories": 620,
    "carbs_g": 70,
    "protein_g": 45,
    "fat_g": 16,
}


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_goals_preview(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/goals/preview", json={**PROFILE, "goal_type": "cut"})

    assert response.status_code == 200
    assert response.json() == {
        "calories": 2094,
        "carbs_g": 209,
        "protein_g": 157,
        "fat_g": 70,
    }


def test_goals_preview_incomplete_profile_is_zero(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/goals/preview", json={"gender": "female", "weight": 60})

    assert response.json()["calories"] == 0


def test_profile_roundtrip(container) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()

    assert client.get(f"/users/{user_id}/profile").status_code == 404

    saved = client.put(f"/users/{user_id}/profile", json=PROFILE)
    assert saved.status_code == 200
    assert saved.json()["goals"]["calories"] == 2594

    patched = client.patch(f"/users/{user_id}/profile", json={"goal_type": "bulk"})
    assert patched.json()["profile"]["goal_type"] == "bulk"
    assert patched.json()["goals"]["calories"] == 3094

    goals = client.get(f"/users/{user_id}/goals", params={"goal_type": "cut"})
    assert goals.json()["calories"] == 2094


def test_profile_rejects_non_positive_weight(container) -> None:
    client = TestClient(create_app(container))

    response = client.put(f"/users/{uuid4()}/profile", json={**PROFILE, "weight": 0})

    assert response.status_code == 422


def test_create_meal_and_dashboard(container) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()
    client.put(f"/users/{user_id}/profile", json=PROFILE)

    created = client.post(f"/users/{user_id}/meals", json=MEAL)
    dashboard = client.get(f"/users/{user_id}/dashboard")

    assert created.status_code == 201
    assert created.json()["source"] == "manual"
    body = dashboard.json()
    assert body["totals"]["calories"] == 620
    assert body["totals"]["meal_count"] == 1
    assert body["xp_earned"] == 10
    assert body["goals"]["calories"] == 2594
    assert body["streak"]["current_streak"] == 1
    assert client.get(f"/users/{user_id}/streak").json()["longest_streak"] == 1


def test_create_meal_validation_errors(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        f"/users/{uuid4()}/meals", json={**MEAL, "name": " ", "calories": 2001}
    )

    assert response.status_code == 422
    assert response.json()["detail"]["errors"] == [
        "name required",
        "calories out of range",
    ]


def test_list_meals_filters(container, services) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()
    services.meal_repository.add(
        user_id,
        make_meal(name="Tuna salad", logged_at=datetime(2024, 6, 1, 12, tzinfo=UTC)),
    )
    services.meal_repository.add(
        user_id,
        make_meal(name="Pancakes", logged_at=datetime(2024, 6, 2, 9, tzinfo=UTC)),
    )

    matching = client.get(
        f"/users/{user_id}/meals", params={"q": "salad", "date": "2024-06-01"}
    )
    crossed = client.get(
        f"/users/{user_id}/meals", params={"q": "salad", "date": "2024-06-02"}
    )
    invalid = client.get(f"/users/{user_id}/meals", params={"macro": "keto"})

    assert [item["name"] for item in matching.json()["items"]] == ["Tuna salad"]
    assert crossed.json()["items"] == []
    assert crossed.json()["total_pages"] == 0
    assert invalid.status_code == 422


def test_update_and_delete_meal(container, services) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()
    meal = services.meal_repository.add(user_id, make_meal())

    updated = client.patch(
        f"/users/{user_id}/meals/{meal.id}", json={"name": "Cobb salad"}
    )
    deleted = client.delete(f"/users/{user_id}/meals/{meal.id}")
    missing = client.delete(f"/users/{user_id}/meals/{meal.id}")

    assert updated.json()["name"] == "Cobb salad"
    assert deleted.status_code == 204
    assert missing.status_code == 404


def test_analyze_logs_ai_meal(container, services) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()
    image = "data:image/png;base64," + base64.b64encode(b"\x89PNGdata").decode()

    response = client.post(
        f"/users/{user_id}/meals/analyze",
        json={"image": image, "extra_text": "large bowl"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["analysis"]["food_name"] == "Caesar salad"
    assert body["meal"]["source"] == "ai"
    assert len(services.meal_repository.list_meals(user_id)) == 1


def test_analyze_without_saving(container, services) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()
    image = base64.b64encode(b"jpeg-bytes").decode()

    response = client.post(
        f"/users/{user_id}/meals/analyze", json={"image": image, "save": False}
    )

    assert response.json()["meal"] is None
    assert services.meal_repository.list_meals(user_id) == []


def test_analyze_rejects_bad_base64(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(f"/users/{uuid4()}/meals/analyze", json={"image": "***"})

    assert response.status_code == 400


def test_analyze_failure_returns_bad_gateway(
    container, vision_client: FakeVisionClient
) -> None:
    vision_client.error = RuntimeError("quota exceeded")
    client = TestClient(create_app(container))
    image = base64.b64encode(b"jpeg-bytes").decode()

    response = client.post(f"/users/{uuid4()}/meals/analyze", json={"image": image})

    assert response.status_code == 502
    assert response.json()["detail"].startswith("Food analysis failed")
    assert "quota" not in response.json()["detail"]


def test_export_meals(container, services) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()
    services.meal_repository.add(user_id, make_meal(name="Soup"))

    response = client.get(f"/users/{user_id}/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert response.json()[0]["name"] == "Soup"


def test_patch_meal_with_null_fields_keeps_stored_values(container, services) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()
    manual = services.meal_repository.add(user_id, make_meal())
    estimate = services.meal_repository.add(user_id, make_meal(source="ai"))

    manual_response = client.patch(
        f"/users/{user_id}/meals/{manual.id}", json={"calories": None}
    )
    ai_response = client.patch(
        f"/users/{user_id}/meals/{estimate.id}",
        json={"name": None, "calories": None},
    )

    assert manual_response.status_code == 200
    assert manual_response.json()["calories"] == manual.calories
    assert ai_response.status_code == 200
    assert ai_response.json()["name"] == estimate.name
    assert services.meal_repository.get_meal(user_id, estimate.id) == estimate
