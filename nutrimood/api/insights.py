"""Insight API endpoints: correlations, patterns, deficiencies and menu verdicts."""
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from nutrimood.database import get_db
from nutrimood.services.correlation_service import correlation_analyzer
from nutrimood.services.deficiency_service import deficiency_detector
from nutrimood.services.insight_service import insight_composer
from nutrimood.services.log_store import LogSnapshot, LogStore
from nutrimood.services.statistics_service import statistics_aggregator
from nutrimood.services.temporal_service import temporal_pattern_detector
from nutrimood.services.trigger_matcher import classify, scan_menu


router = APIRouter(prefix="/insights", tags=["insights"])


class MenuScanRequest(BaseModel):
    """Request model for classifying OCR'd menu text."""

    raw_text: str
    allergens: Optional[List[str]] = None  # Defaults to the common allergen list


class ClassifyRequest(BaseModel):
    item_name: str
    allergens: Optional[List[str]] = None


def get_snapshot(db: Session = Depends(get_db)) -> LogSnapshot:
    """Take one consistent snapshot per request."""
    return LogStore(db).snapshot()


@router.get("")
async def get_insights(snapshot: LogSnapshot = Depends(get_snapshot)):
    """
    Ranked insights for the user.

    Returns an empty list with a hint message until enough meals are logged.
    """
    meals = list(snapshot.meals)
    insights = insight_composer.compose_insights(meals, list(snapshot.symptoms))
    response = {"insights": insights, "meals_logged": len(meals)}
    if len(meals) < insight_composer.MIN_MEAL_LOGS:
        response["message"] = (
            f"Keep logging to unlock personalized insights! "
            f"(Need at least {insight_composer.MIN_MEAL_LOGS} entries)"
        )
    return response


@router.get("/weekly-summary")
async def get_weekly_summary(
    now: Optional[datetime] = Query(None),
    snapshot: LogSnapshot = Depends(get_snapshot),
):
    return statistics_aggregator.weekly_summary(list(snapshot.meals), now)


@router.get("/trends")
async def get_nutrient_trends(snapshot: LogSnapshot = Depends(get_snapshot)):
    """Average macros per mood."""
    return {
        "trends": statistics_aggregator.nutrient_trends_by_mood(list(snapshot.meals))
    }


@router.get("/stats")
async def get_engagement_stats(
    today: Optional[date] = Query(None),
    snapshot: LogSnapshot = Depends(get_snapshot),
):
    """Streak and volume figures for goals and achievements."""
    return statistics_aggregator.engagement_stats(list(snapshot.meals), today)


@router.get("/sensitivity")
async def get_sensitivity_report(snapshot: LogSnapshot = Depends(get_snapshot)):
    return correlation_analyzer.sensitivity_report(list(snapshot.meals))


@router.get("/symptom-correlations")
async def get_symptom_correlations(snapshot: LogSnapshot = Depends(get_snapshot)):
    return {
        "correlations": correlation_analyzer.symptom_correlations(
            list(snapshot.symptoms), list(snapshot.meals)
        )
    }


@router.get("/patterns")
async def get_temporal_patterns(
    min_samples: Optional[int] = Query(None),
    top_n: Optional[int] = Query(None),
    snapshot: LogSnapshot = Depends(get_snapshot),
):
    """Worst weekdays plus the raw weekday and hourly buckets."""
    meals = list(snapshot.meals)
    return {
        "worst_days": temporal_pattern_detector.worst_days(meals, min_samples, top_n),
        "weekdays": temporal_pattern_detector.weekday_pattern(meals),
        "hours": temporal_pattern_detector.hourly_pattern(meals),
    }


@router.get("/deficiencies")
async def get_deficiencies(
    window: Optional[int] = Query(None),
    snapshot: LogSnapshot = Depends(get_snapshot),
):
    return {
        "deficiencies": deficiency_detector.detect_deficiencies(
            list(snapshot.meals), window
        )
    }


@router.get("/predict")
async def predict_mood(
    food: str = Query(..., min_length=1),
    snapshot: LogSnapshot = Depends(get_snapshot),
):
    """Predict how a planned food will make the user feel."""
    prediction = insight_composer.predict_mood(food, list(snapshot.meals))
    response = prediction.model_dump()
    if prediction.prediction == "bad":
        response["substitutions"] = insight_composer.suggest_substitutions(food)
    return response


@router.post("/classify")
async def classify_item(
    request: ClassifyRequest = Body(...),
    snapshot: LogSnapshot = Depends(get_snapshot),
):
    """Safe/caution/avoid verdict for a single food or dish name."""
    trigger_foods = correlation_analyzer.menu_trigger_foods(
        list(snapshot.symptoms), list(snapshot.meals)
    )
    return classify(request.item_name, trigger_foods, request.allergens)


@router.post("/menu-scan")
async def scan_menu_text(
    request: MenuScanRequest = Body(...),
    snapshot: LogSnapshot = Depends(get_snapshot),
):
    """Classify every dish found in already-OCR'd menu text."""
    trigger_foods = correlation_analyzer.menu_trigger_foods(
        list(snapshot.symptoms), list(snapshot.meals)
    )
    items = scan_menu(request.raw_text, trigger_foods, request.allergens)
    return {"items_found": len(items), "analysis": items}
