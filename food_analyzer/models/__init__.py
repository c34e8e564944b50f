"""
Database models for the food analyzer.

Import all models here so init_db() can create their tables.
"""

from food_analyzer.database import Base
from food_analyzer.models.key_value_entry import KeyValueEntry

__all__ = [
    "Base",
    "KeyValueEntry",
]
