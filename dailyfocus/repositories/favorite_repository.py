from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dailyfocus.models.favorite import ExercisePreference


class FavoriteRepository:
    """Favorite flags stored in user_exercise_preferences."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def list_favorite_ids(self, user_id: str) -> list[str]:
        async with self._session_maker() as session:
            result = await session.execute(
                select(ExercisePreference.exercise_id)
                .where(
                    ExercisePreference.user_id == user_id,
                    ExercisePreference.is_favorite.is_(True),
                )
                .order_by(ExercisePreference.id)
            )
            return list(result.scalars().all())

    async def set_favorite(self, user_id: str, exercise_id: str, is_favorite: bool) -> ExercisePreference:
        """Upsert the favorite flag for (user_id, exercise_id)."""
        async with self._session_maker() as session:
            async with session.begin():
                result = await session.execute(
                    select(ExercisePreference).where(
                        ExercisePreference.user_id == user_id,
                        ExercisePreference.exercise_id == exercise_id,
                    )
                )
                preference = result.scalar_one_or_none()
                if preference is None:
                    preference = ExercisePreference(
                        user_id=user_id,
                        exercise_id=exercise_id,
                        is_favorite=is_favorite,
                    )
                    session.add(preference)
                else:
                    preference.is_favorite = is_favorite
            return preference
