"""
Integration tests for the insights API.

Tests that each analysis is reachable over HTTP and reads the logged data.
"""
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tests.factories import REFERENCE_NOW, create_meal, create_symptom


MILK_SHAKE_MOODS = ["Bad", "Bad", "Bad", "Good", "Very Bad"]


@pytest.fixture
def milk_shakes(db: Session):
    """Five Milk Shake meals on a Monday, mostly followed by bad moods."""
    return [
        create_meal(
            db,
            "Milk Shake",
            mood=mood,
            calories=600,
            protein_grams=12,
            timestamp=REFERENCE_NOW + timedelta(hours=i),
        )
        for i, mood in enumerate(MILK_SHAKE_MOODS)
    ]


class TestInsights:
    """Tests for GET /insights."""

    def test_keep_logging_hint(self, client: TestClient, db: Session):
        create_meal(db, "Toast")

        response = client.get("/insights")

        assert response.status_code == 200
        data = response.json()
        assert data["insights"] == []
        assert data["meals_logged"] == 1
        assert "Need at least 5 entries" in data["message"]

    def test_ranked_insights(self, client: TestClient, milk_shakes):
        response = client.get("/insights")

        data = response.json()
        assert "message" not in data
        assert [i["title"] for i in data["insights"]] == [
            "Trigger Food Detected",
            "Weekly Pattern",
            "Low Protein",
        ]
        assert data["insights"][0]["kind"] == "warning"


class TestStatistics:
    """Tests for summary, trends and stats endpoints."""

    def test_weekly_summary(self, client: TestClient, milk_shakes):
        response = client.get(
            "/insights/weekly-summary",
            params={"now": (REFERENCE_NOW + timedelta(days=1)).isoformat()},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_calories"] == 3000
        assert data["avg_daily_calories"] == 429
        assert data["mood_counts"] == {"Bad": 3, "Good": 1, "Very Bad": 1}
        assert data["total_entries"] == 5

    def test_weekly_summary_empty(self, client: TestClient):
        data = client.get("/insights/weekly-summary").json()

        assert data == {
            "total_calories": 0,
            "avg_daily_calories": 0,
            "mood_counts": {},
            "total_entries": 0,
        }

    def test_trends(self, client: TestClient, milk_shakes):
        trends = client.get("/insights/trends").json()["trends"]

        assert list(trends) == ["Very Bad", "Bad", "Good"]
        assert trends["Bad"]["count"] == 3
        assert trends["Bad"]["avg_protein"] == 12

    def test_stats(self, client: TestClient, milk_shakes):
        response = client.get(
            "/insights/stats", params={"today": REFERENCE_NOW.date().isoformat()}
        )

        data = response.json()
        assert data["total_logs"] == 5
        assert data["unique_foods"] == 1
        assert data["current_streak"] == 1
        assert data["good_mood_streak"] == 0


class TestCorrelations:
    """Tests for sensitivity and symptom correlation endpoints."""

    def test_sensitivity(self, client: TestClient, milk_shakes):
        data = client.get("/insights/sensitivity").json()

        assert data["safe"] == []
        trigger = data["triggers"][0]
        assert trigger["food_name"] == "Milk Shake"
        assert trigger["occurrences"] == 5
        assert trigger["negative_count"] == 4

    def test_symptom_correlations(self, client: TestClient, db: Session, milk_shakes):
        create_symptom(db, "bloating", linked_meal=milk_shakes[0], intensity=2)
        create_symptom(db, "bloating", linked_meal=milk_shakes[1], intensity=4)

        data = client.get("/insights/symptom-correlations").json()

        rows = data["correlations"]["bloating"]
        assert rows[0]["food_name"] == "Milk Shake"
        assert rows[0]["occurrences"] == 2
        assert rows[0]["avg_intensity"] == 3


class TestPatterns:
    """Tests for temporal pattern and deficiency endpoints."""

    def test_patterns(self, client: TestClient, milk_shakes):
        data = client.get("/insights/patterns").json()

        assert data["worst_days"] == [{"day": "Monday", "negative_ratio": 0.8}]
        assert [b["key"] for b in data["weekdays"]] == ["Monday"]
        assert [b["key"] for b in data["hours"]] == [12, 13, 14, 15, 16]

    def test_invalid_parameters(self, client: TestClient):
        response = client.get("/insights/patterns", params={"top_n": 0})

        assert response.status_code == 422
        assert "top_n" in response.json()["detail"]

    def test_deficiencies(self, client: TestClient, milk_shakes):
        data = client.get("/insights/deficiencies").json()

        assert [d["nutrient"] for d in data["deficiencies"]] == ["Protein", "Calories"]

    def test_deficiency_window_rejected(self, client: TestClient):
        assert client.get("/insights/deficiencies", params={"window": 0}).status_code == 422


class TestPrediction:
    """Tests for GET /insights/predict."""

    def test_unknown_food(self, client: TestClient):
        data = client.get("/insights/predict", params={"food": "Sushi"}).json()

        assert data["prediction"] == "unknown"
        assert data["confidence"] == 0
        assert "substitutions" not in data

    def test_bad_food_gets_substitutions(self, client: TestClient, milk_shakes):
        data = client.get("/insights/predict", params={"food": "shake"}).json()

        assert data["prediction"] == "bad"
        assert data["confidence"] == 20
        assert data["substitutions"] == [
            "Consult a nutritionist",
            "Try elimination diet",
            "Keep tracking",
        ]

    def test_food_required(self, client: TestClient):
        assert client.get("/insights/predict").status_code == 422


class TestMenuVerdicts:
    """Tests for classify and menu-scan endpoints."""

    @pytest.fixture
    def linked_symptoms(self, db: Session, milk_shakes):
        for meal in milk_shakes[:2]:
            create_symptom(db, "bloating", linked_meal=meal)

    def test_classify_trigger(self, client: TestClient, linked_symptoms):
        data = client.post(
            "/insights/classify", json={"item_name": "Chocolate Milk Shake"}
        ).json()

        assert data["status"] == "avoid"
        assert data["matched_terms"] == ["milk shake"]
        assert data["confidence"] == 0.8

    def test_classify_custom_allergens(self, client: TestClient):
        data = client.post(
            "/insights/classify",
            json={"item_name": "Grilled Cheese Sandwich", "allergens": ["dairy", "cheese"]},
        ).json()

        assert data["status"] == "caution"
        assert data["matched_terms"] == ["cheese"]
        assert data["confidence"] == 0.5

    def test_menu_scan(self, client: TestClient, linked_symptoms):
        response = client.post(
            "/insights/menu-scan",
            json={"raw_text": "APPETIZERS\nCaesar Salad $12\nThe soup of the day\nMilk Shake $6\nXX"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["items_found"] == 3
        assert [(i["name"], i["verdict"]["status"]) for i in data["analysis"]] == [
            ("Caesar Salad", "safe"),
            ("The soup of the day", "safe"),
            ("Milk Shake", "avoid"),
        ]

    def test_menu_scan_requires_text(self, client: TestClient):
        assert client.post("/insights/menu-scan", json={}).status_code == 422
