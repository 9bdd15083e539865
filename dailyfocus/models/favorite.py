from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint

from dailyfocus.db.database import Base
from dailyfocus.utils.datetime_utils import utcnow


class ExercisePreference(Base):
    __tablename__ = "user_exercise_preferences"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    exercise_id = Column(String(128), nullable=False)
    is_favorite = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "exercise_id", name="uq_user_exercise_preference"),
    )
