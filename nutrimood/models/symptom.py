from sqlalchemy import Column, Integer, String, Text, DateTime, Float, Index
from sqlalchemy.sql import func

from nutrimood.database import Base


class Symptom(Base):
    """Physical symptom, optionally linked back to the meal suspected of causing it."""

    __tablename__ = "symptom_logs"

    id = Column(Integer, primary_key=True)
    timestamp = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    symptom_type = Column(String(50), nullable=False)  # e.g. "bloating", "headache"
    intensity = Column(Integer, nullable=False, default=3)  # 1-5 scale
    hours_after_meal = Column(Float, nullable=False, default=0.0)

    # Plain column, not a foreign key: deleting a meal must not cascade here,
    # and a dangling id is skipped at correlation time.
    linked_meal_id = Column(Integer, nullable=True)

    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index("idx_symptom_logs_timestamp", "timestamp"),
        Index("idx_symptom_logs_symptom_type", "symptom_type"),
        Index("idx_symptom_logs_linked_meal_id", "linked_meal_id"),
    )
