"""API endpoints for logging meals, moods and symptoms."""
from datetime import datetime
from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from nutrimood.database import get_db
from nutrimood.services.log_store import LogStore, meal_to_log, symptom_to_log
from nutrimood.services.schemas import MoodLabel, SymptomType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/logs", tags=["logs"])


# =============================================================================
# Request Models
# =============================================================================

class MealCreate(BaseModel):
    food_name: str = Field(min_length=1, max_length=255)
    calories: int = Field(default=0, ge=0)
    protein_grams: float = Field(default=0, ge=0)
    carbs_grams: float = Field(default=0, ge=0)
    fats_grams: float = Field(default=0, ge=0)
    mood: Optional[MoodLabel] = None
    timestamp: Optional[datetime] = None

    @field_validator("mood", mode="before")
    @classmethod
    def _parse_mood(cls, value):
        return MoodLabel.parse(value) if value else None


class MoodUpdate(BaseModel):
    mood: MoodLabel

    @field_validator("mood", mode="before")
    @classmethod
    def _parse_mood(cls, value):
        return MoodLabel.parse(value)


class SymptomCreate(BaseModel):
    symptom_type: str = Field(min_length=1, max_length=50)
    intensity: int = Field(default=3, ge=1, le=5)
    hours_after_meal: float = Field(default=0, ge=0)
    linked_meal_id: Optional[int] = None
    notes: str = ""
    timestamp: Optional[datetime] = None


# =============================================================================
# Meals
# =============================================================================

@router.post("/meals", status_code=201)
async def create_meal(request: MealCreate, db: Session = Depends(get_db)):
    """Log a meal confirmed by the capture pipeline."""
    meal = LogStore(db).add_meal(
        food_name=request.food_name.strip(),
        calories=request.calories,
        protein_grams=request.protein_grams,
        carbs_grams=request.carbs_grams,
        fats_grams=request.fats_grams,
        mood=request.mood.value if request.mood else None,
        timestamp=request.timestamp,
    )
    return meal_to_log(meal)


@router.patch("/meals/{meal_id}/mood")
async def update_meal_mood(
    meal_id: int, request: MoodUpdate, db: Session = Depends(get_db)
):
    """Attach the mood the user reported after a meal."""
    meal = LogStore(db).attach_mood(meal_id, request.mood.value)
    if meal is None:
        raise HTTPException(status_code=404, detail="Meal not found")
    return meal_to_log(meal)


@router.delete("/meals/{meal_id}", status_code=204)
async def delete_meal(meal_id: int, db: Session = Depends(get_db)):
    """Delete a meal. Symptoms linked to it are kept."""
    if not LogStore(db).delete_meal(meal_id):
        raise HTTPException(status_code=404, detail="Meal not found")


@router.get("/meals/{meal_id}/symptoms")
async def get_meal_symptoms(meal_id: int, db: Session = Depends(get_db)):
    store = LogStore(db)
    if store.get_meal(meal_id) is None:
        raise HTTPException(status_code=404, detail="Meal not found")
    return {
        "symptoms": [symptom_to_log(s) for s in store.get_symptoms_for_meal(meal_id)]
    }


# =============================================================================
# Symptoms
# =============================================================================

@router.get("/symptom-types")
async def get_symptom_types():
    """The symptom catalogue offered by the logging UI."""
    return {
        "symptom_types": [
            {"id": symptom_type.value, "name": symptom_type.display_name}
            for symptom_type in SymptomType
        ]
    }


@router.get("/symptoms")
async def get_symptom_timeline(
    days: int = Query(7),
    now: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
):
    """Symptoms from the last ``days`` days, newest first."""
    symptoms = LogStore(db).symptom_timeline(days, now)
    return {"symptoms": [symptom_to_log(s) for s in symptoms]}


@router.post("/symptoms", status_code=201)
async def create_symptom(request: SymptomCreate, db: Session = Depends(get_db)):
    """Log a symptom, optionally linked to a meal."""
    store = LogStore(db)
    if request.linked_meal_id is not None and store.get_meal(request.linked_meal_id) is None:
        logger.warning(
            "Symptom linked to unknown meal %s; keeping link as given",
            request.linked_meal_id,
        )

    symptom = store.add_symptom(
        symptom_type=request.symptom_type.strip(),
        intensity=request.intensity,
        hours_after_meal=request.hours_after_meal,
        linked_meal_id=request.linked_meal_id,
        notes=request.notes,
        timestamp=request.timestamp,
    )
    return symptom_to_log(symptom)


@router.delete("/symptoms/{symptom_id}", status_code=204)
async def delete_symptom(symptom_id: int, db: Session = Depends(get_db)):
    if not LogStore(db).delete_symptom(symptom_id):
        raise HTTPException(status_code=404, detail="Symptom not found")
