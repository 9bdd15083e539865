"""Database models."""
from dailyfocus.models.activity_log import (
    BinauralSession,
    DeepWorkSession,
    JournalEntry,
    MindfulnessLog,
    Task,
    Visualization,
)
from dailyfocus.models.favorite import ExercisePreference

__all__ = [
    "BinauralSession",
    "DeepWorkSession",
    "ExercisePreference",
    "JournalEntry",
    "MindfulnessLog",
    "Task",
    "Visualization",
]
