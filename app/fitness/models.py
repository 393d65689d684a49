"""Daily fitness record — Pydantic v2 models.

Every field except ``date`` defaults to its zero value so partial payloads
decode the same way older clients send them. Unknown keys are kept: record
shape drifts between client revisions and nothing here should drop data.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="allow")


class UserProfile(_Lenient):
    age: int = 0
    weight_kg: float = 0.0
    height_cm: float = 0.0
    bmr_kcal: int = 0
    tdee_maintenance_kcal: int = 0
    target_lose_weight_kcal: int = 0
    target_protein_g: int = 0
    goal_calories: int = 0
    maintenance_protein_target_g: int = 0


class FoodItem(_Lenient):
    time: str = ""
    item: str = ""
    calories: int = 0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0


class ExerciseSession(_Lenient):
    name: str = ""
    duration_min: float | None = None
    calories_burned: int = 0
    sets: int | None = None
    reps: int | None = None
    weight_kg: float | None = None


class ExerciseSummary(_Lenient):
    total_burned_calories: int = 0
    status: str | None = None
    cardio: list[ExerciseSession] = Field(default_factory=list)
    strength: list[ExerciseSession] = Field(default_factory=list)


class DailyTotalStats(_Lenient):
    total_intake_calories: int = 0
    total_burned_calories: int = 0
    net_calories: int = 0
    total_protein_g: float = 0.0
    total_carbs_g: float = 0.0
    total_fat_g: float = 0.0
    protein_per_kg: float = 0.0


class AIEvaluation(_Lenient):
    muscle_maintenance: str = ""
    weight_loss_status: str = ""
    recommendation: str = ""


class FitnessData(_Lenient):
    """One day of tracking, keyed by ``date`` (YYYY-MM-DD)."""

    date: str
    user_profile: UserProfile = Field(default_factory=UserProfile)
    food_diary: list[FoodItem] = Field(default_factory=list)
    exercise_summary: ExerciseSummary = Field(default_factory=ExerciseSummary)
    daily_total_stats: DailyTotalStats = Field(default_factory=DailyTotalStats)
    ai_evaluation: AIEvaluation = Field(default_factory=AIEvaluation)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
