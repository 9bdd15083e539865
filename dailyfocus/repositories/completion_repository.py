from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, column, func, select, table
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dailyfocus.config.daily_focus_config_loader import CompletionSourceConfig


class CompletionLogRepository:
    """Reads any activity-log table described by a CompletionSourceConfig."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    @staticmethod
    def build_query(config: CompletionSourceConfig, user_id: str, start: datetime, end: datetime):
        columns = [
            column(config.user_field, String),
            column(config.activity_timestamp_field, DateTime(timezone=True)),
        ]
        if config.completed_flag_field:
            columns.append(column(config.completed_flag_field, Boolean))
        log_table = table(config.table_name, *columns)

        timestamp = log_table.c[config.activity_timestamp_field]
        query = select(timestamp).where(
            log_table.c[config.user_field] == user_id,
            timestamp >= start,
            timestamp < end,
        )
        if config.completed_flag_field:
            query = query.where(log_table.c[config.completed_flag_field].is_(True))
        return query

    async def has_completion(
        self,
        config: CompletionSourceConfig,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> bool:
        """True when a qualifying row exists in [start, end)."""
        async with self._session_maker() as session:
            result = await session.execute(self.build_query(config, user_id, start, end).limit(1))
            return result.first() is not None

    async def count_completions(
        self,
        config: CompletionSourceConfig,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> int:
        """Number of qualifying rows in [start, end)."""
        rows = self.build_query(config, user_id, start, end).subquery()
        async with self._session_maker() as session:
            result = await session.execute(select(func.count()).select_from(rows))
            return result.scalar_one()
