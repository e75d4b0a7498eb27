"""NutriMood: food, mood and symptom correlation engine."""

__version__ = "0.1.0"
