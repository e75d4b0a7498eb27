from sqlalchemy import Column, Integer, String, DateTime, Float, Index
from sqlalchemy.sql import func

from nutrimood.database import Base


class Meal(Base):
    """Logged meal with estimated macros and an optional later-attached mood."""

    __tablename__ = "meal_logs"

    id = Column(Integer, primary_key=True)
    timestamp = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    food_name = Column(String(255))  # Nullable: capture pipelines can fail to name a dish
    calories = Column(Integer, nullable=False, default=0)
    protein_grams = Column(Float, nullable=False, default=0.0)
    carbs_grams = Column(Float, nullable=False, default=0.0)
    fats_grams = Column(Float, nullable=False, default=0.0)
    mood = Column(String(20))  # MoodLabel value, attached after the meal
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index("idx_meal_logs_timestamp", "timestamp"),
        Index("idx_meal_logs_food_name", "food_name"),
    )
