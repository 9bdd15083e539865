"""Activity-log tables written by the exercise screens.

Each table has its own schema; the completion aggregator reads them through
CompletionSourceConfig records rather than these classes.
"""
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from dailyfocus.db.database import Base
from dailyfocus.utils.datetime_utils import utcnow


class MindfulnessLog(Base):
    __tablename__ = "mindfulness_logs"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    response = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)


class Visualization(Base):
    __tablename__ = "visualizations"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    visualization_type = Column(String(64), nullable=True)
    affirmation = Column(Text, nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class BinauralSession(Base):
    __tablename__ = "binaural_sessions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    binaural_type = Column(String(64), nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class DeepWorkSession(Base):
    __tablename__ = "deep_work_sessions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    task_id = Column(Integer, nullable=True)
    duration = Column(Integer, nullable=True)
    actual_duration_seconds = Column(Integer, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    description = Column(Text, nullable=False)
    priority = Column(String(16), nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    prompt_type = Column(String(64), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
