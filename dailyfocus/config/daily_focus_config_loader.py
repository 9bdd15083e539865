"""
Daily Focus Configuration Loader

Loads the hour-of-day fallback buckets and the completion-source records from
daily_focus_config.yaml into frozen, validated dataclasses.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from threading import RLock
from typing import TYPE_CHECKING, Any

import yaml

from dailyfocus.core.logging import get_logger

if TYPE_CHECKING:
    from dailyfocus.services.exercise_catalog import ExerciseCatalog


logger = get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class DailyFocusConfigLoadError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.details = details or {}


class DailyFocusConfigValidationError(DailyFocusConfigLoadError):
    """Raised when configuration fails validation."""


@dataclass(frozen=True)
class TimeBucketConfig:
    """Exercise ids suggested for local hours [start_hour, end_hour)."""

    name: str
    start_hour: int
    end_hour: int
    exercise_ids: tuple[str, ...] = ()

    def __post_init__(self):
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise DailyFocusConfigValidationError(
                f"Bucket '{self.name}' has invalid hours {self.start_hour}-{self.end_hour}"
            )

    def contains(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour


@dataclass(frozen=True)
class CompletionSourceConfig:
    """One activity-log table that signals completion of some categories."""

    source_id: str
    table_name: str
    activity_timestamp_field: str
    completed_flag_field: str | None = None
    user_field: str = "user_id"
    categories: tuple[str, ...] = ()

    def __post_init__(self):
        if not self.source_id:
            raise DailyFocusConfigValidationError("Completion source requires a source_id")
        for name in (self.table_name, self.activity_timestamp_field, self.user_field, self.completed_flag_field):
            if name is not None and not _IDENTIFIER.match(name):
                raise DailyFocusConfigValidationError(
                    f"Invalid identifier '{name}' in completion source '{self.source_id}'"
                )


@dataclass(frozen=True)
class FallbackReasoningConfig:
    favorite: str = "One of your favorite practices"
    time_of_day: str = "Selected based on time of day and general wellness principles"
    catalog: str = "Something new to broaden your routine"


@dataclass(frozen=True)
class DailyFocusConfig:
    """Complete daily focus configuration."""

    version: str
    time_buckets: tuple[TimeBucketConfig, ...]
    completion_sources: tuple[CompletionSourceConfig, ...]
    fallback_reasoning: FallbackReasoningConfig = field(default_factory=FallbackReasoningConfig)
    last_updated: str = ""

    def __post_init__(self):
        for hour in range(24):
            owners = [b.name for b in self.time_buckets if b.contains(hour)]
            if len(owners) != 1:
                raise DailyFocusConfigValidationError(
                    f"Hour {hour} must belong to exactly one bucket, found {owners or 'none'}"
                )

        seen_sources: set[str] = set()
        seen_categories: dict[str, str] = {}
        for source in self.completion_sources:
            if source.source_id in seen_sources:
                raise DailyFocusConfigValidationError(
                    f"Duplicate completion source '{source.source_id}'"
                )
            seen_sources.add(source.source_id)
            for category in source.categories:
                if category in seen_categories:
                    raise DailyFocusConfigValidationError(
                        f"Category '{category}' mapped to both "
                        f"'{seen_categories[category]}' and '{source.source_id}'"
                    )
                seen_categories[category] = source.source_id

    def bucket_for_hour(self, hour: int) -> TimeBucketConfig:
        for bucket in self.time_buckets:
            if bucket.contains(hour):
                return bucket
        raise ValueError(f"No time bucket for hour {hour}")

    def get_source(self, source_id: str) -> CompletionSourceConfig | None:
        for source in self.completion_sources:
            if source.source_id == source_id:
                return source
        return None

    def source_for_category(self, category: str) -> CompletionSourceConfig | None:
        for source in self.completion_sources:
            if category in source.categories:
                return source
        return None


class DailyFocusConfigLoader:
    """Loader for the daily focus configuration file."""

    def __init__(self, config_path: Path | None = None):
        self._lock = RLock()
        self._config: DailyFocusConfig | None = None
        self._config_path = config_path or self._default_config_path()
        self._reload_count = 0

        self._load_config()

    @staticmethod
    def _default_config_path() -> Path:
        """Get default configuration file path."""
        return Path(__file__).parent / "daily_focus_config.yaml"

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            with open(self._config_path, "r") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise DailyFocusConfigLoadError(
                f"Configuration file not found: {self._config_path}"
            )
        except yaml.YAMLError as e:
            raise DailyFocusConfigLoadError(
                f"Failed to parse YAML configuration: {e}",
                details={"file_path": str(self._config_path)},
            )

        try:
            self._config = self._parse_config(data or {})
            self._reload_count += 1
        except DailyFocusConfigValidationError:
            raise
        except Exception as e:
            raise DailyFocusConfigLoadError(
                f"Failed to parse configuration: {e}",
                details={"file_path": str(self._config_path)},
            )

    def _parse_config(self, data: dict[str, Any]) -> DailyFocusConfig:
        """Parse raw YAML data into DailyFocusConfig.

        Raises:
            DailyFocusConfigValidationError: If validation fails.
        """
        buckets = tuple(
            TimeBucketConfig(
                name=b["name"],
                start_hour=int(b["start_hour"]),
                end_hour=int(b["end_hour"]),
                exercise_ids=tuple(b.get("exercise_ids") or ()),
            )
            for b in data.get("time_buckets", [])
        )

        sources = tuple(
            CompletionSourceConfig(
                source_id=s["source_id"],
                table_name=s["table_name"],
                activity_timestamp_field=s["activity_timestamp_field"],
                completed_flag_field=s.get("completed_flag_field"),
                user_field=s.get("user_field", "user_id"),
                categories=tuple(s.get("categories") or ()),
            )
            for s in data.get("completion_sources", [])
        )

        reasoning = FallbackReasoningConfig(**(data.get("fallback_reasoning") or {}))

        return DailyFocusConfig(
            version=str(data.get("version", "1.0.0")),
            last_updated=str(data.get("last_updated", "")),
            time_buckets=buckets,
            completion_sources=sources,
            fallback_reasoning=reasoning,
        )

    @property
    def config(self) -> DailyFocusConfig:
        """Get current configuration (thread-safe)."""
        with self._lock:
            if self._config is None:
                self._load_config()
            return self._config

    def reload(self) -> None:
        """Force reload configuration from file."""
        with self._lock:
            self._load_config()

    @property
    def reload_count(self) -> int:
        return self._reload_count


def check_catalog_references(
    config: DailyFocusConfig,
    catalog: ExerciseCatalog,
    strict: bool = False,
) -> list[str]:
    """Return bucket exercise ids missing from the catalog.

    In strict mode a missing id is a configuration error; otherwise it is
    logged and later skipped during the fallback pool walk.
    """
    unknown = [
        exercise_id
        for bucket in config.time_buckets
        for exercise_id in bucket.exercise_ids
        if exercise_id not in catalog
    ]
    if unknown and strict:
        raise DailyFocusConfigValidationError(
            f"Time bucket exercise ids not in catalog: {unknown}",
            details={"unknown_ids": unknown},
        )
    for exercise_id in unknown:
        logger.warning("fallback_id_not_in_catalog", exercise_id=exercise_id)
    return unknown


_loader_instance: DailyFocusConfigLoader | None = None


def get_daily_focus_config_loader(config_path: Path | None = None) -> DailyFocusConfigLoader:
    """Get or create the singleton DailyFocusConfigLoader instance."""
    global _loader_instance
    if _loader_instance is None:
        _loader_instance = DailyFocusConfigLoader(config_path)
    return _loader_instance


def get_daily_focus_config() -> DailyFocusConfig:
    """Get current daily focus configuration.

    Example:
        >>> config = get_daily_focus_config()
        >>> config.bucket_for_hour(9).name
        'morning'
    """
    return get_daily_focus_config_loader().config
