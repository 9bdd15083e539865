"""Repositories package."""
from dailyfocus.repositories.completion_repository import CompletionLogRepository
from dailyfocus.repositories.favorite_repository import FavoriteRepository

__all__ = [
    "CompletionLogRepository",
    "FavoriteRepository",
]
