"""Shared fixtures for the test suite."""

from __future__ import annotations

from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from app.db import get_service
from app.fitness.models import FitnessData
from app.fitness.persistence import DirectoryTreeBackend
from app.fitness.service import FitnessService
from app.main import app


# ---------------------------------------------------------------------------
# Record helpers
# ---------------------------------------------------------------------------


def make_record(record_date: str = "2024-03-15", **overrides: Any) -> FitnessData:
    """Build a plausible daily record; overrides are merged at the top level."""
    payload: dict[str, Any] = {
        "date": record_date,
        "user_profile": {
            "age": 34,
            "weight_kg": 82.5,
            "height_cm": 178.0,
            "bmr_kcal": 1780,
            "tdee_maintenance_kcal": 2450,
            "target_lose_weight_kcal": 1950,
            "target_protein_g": 165,
            "goal_calories": 1950,
            "maintenance_protein_target_g": 132,
        },
        "food_diary": [
            {"time": "08:00", "item": "Oats", "calories": 380, "protein_g": 13.0, "carbs_g": 66.0, "fat_g": 7.0},
            {"time": "13:00", "item": "Chicken rice", "calories": 620, "protein_g": 45.0, "carbs_g": 70.0, "fat_g": 14.0},
        ],
        "exercise_summary": {"total_burned_calories": 420},
        "daily_total_stats": {
            "total_intake_calories": 1000,
            "total_burned_calories": 420,
            "net_calories": 580,
            "total_protein_g": 58.0,
            "total_carbs_g": 136.0,
            "total_fat_g": 21.0,
            "protein_per_kg": 0.7,
        },
        "ai_evaluation": {
            "muscle_maintenance": "at risk",
            "weight_loss_status": "on track",
            "recommendation": "Add a protein shake.",
        },
    }
    payload.update(overrides)
    return FitnessData.model_validate(payload)


def make_payload(record_date: str = "2024-03-15", **overrides: Any) -> dict[str, Any]:
    return make_record(record_date, **overrides).to_json_dict()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def data_dir(tmp_path):
    return tmp_path / "fitness_data"


@pytest.fixture()
def service(data_dir):
    """Service on a throwaway directory tree (no GitHub mirror)."""
    return FitnessService(DirectoryTreeBackend(data_dir))


@pytest.fixture()
def override_service(service):
    """Override the FastAPI dependency so the app never touches real storage."""
    async def _override():
        return service

    app.dependency_overrides[get_service] = _override
    yield service
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_service):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
