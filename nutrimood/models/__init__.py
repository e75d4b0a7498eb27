"""
Database models for NutriMood.

Import all models here so ``Base.metadata`` sees every table.
"""

from nutrimood.database import Base
from nutrimood.models.meal import Meal
from nutrimood.models.symptom import Symptom

__all__ = [
    "Base",
    "Meal",
    "Symptom",
]
