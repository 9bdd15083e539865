"""
AI Scoring Client

Asks the LLM coach to rank catalog exercises for a user and validates the
reply into a ScoringResponse. Any transport, timeout or parse failure is
reported as ScoringUnavailableError so the generator can fall back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from dailyfocus.config.settings import get_settings
from dailyfocus.core.exceptions import ScoringUnavailableError
from dailyfocus.core.logging import get_logger
from dailyfocus.llm.base import LLMConfig, LLMProvider, Message
from dailyfocus.llm.schemas import DAILY_FOCUS_RECOMMENDATION_SCHEMA
from dailyfocus.services.exercise_catalog import ExerciseCatalog


logger = get_logger(__name__)


@dataclass
class ScoringRequest:
    """Input to the AI scorer."""
    user_id: str
    requested_count: int
    local_hour: int | None = None
    # Completed activity per category over the history window
    recent_activity: dict[str, int] = field(default_factory=dict)
    history_days: int = 14


class ScoredExercise(BaseModel):
    """One ranked exercise returned by the scorer."""

    model_config = ConfigDict(populate_by_name=True)

    exercise_id: str
    priority_score: float | None = None
    reasoning: str | None = None
    personalization_note: str | None = Field(
        default=None,
        validation_alias=AliasChoices("personalization_note", "personalization"),
    )
    expected_benefit: str | None = None


class ScoringResponse(BaseModel):
    """Validated scorer output, recommendations in rank order."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    recommendations: list[ScoredExercise] = Field(default_factory=list)
    focus_theme: str | None = Field(
        default=None,
        validation_alias=AliasChoices("focus_theme", "overall_focus_theme"),
    )
    coach_note: str | None = None


class RecommendationScorer(Protocol):
    async def score(self, request: ScoringRequest) -> ScoringResponse:
        ...


SYSTEM_PROMPT = """You are an expert life coach AI that generates personalized daily exercise recommendations.

CURRENT USER CONTEXT:
Time of Day: {hour}
Recent Activity (last {history_days} days):
{activity}

AVAILABLE EXERCISES:
{exercises}

RECOMMENDATION CRITERIA:
1. PERSONALIZATION: Match exercises to the user's recent activity patterns
2. VARIETY: Avoid repeating the same practice every day unless clearly beneficial
3. TIMING: Factor in time of day for appropriate energy levels
4. GROWTH: Mix familiar practices with new growth opportunities

Use only exercise ids from the available list.
Generate exactly {count} recommendations, ranked by priority score (100 = perfect match).
RESPOND ONLY WITH VALID JSON."""


class LLMRecommendationScorer:
    """RecommendationScorer backed by a chat-completion provider."""

    def __init__(
        self,
        provider: LLMProvider,
        catalog: ExerciseCatalog,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ):
        settings = get_settings()
        self._provider = provider
        self._catalog = catalog
        self._model = model
        self._temperature = settings.openai_temperature if temperature is None else temperature
        self._max_tokens = max_tokens or settings.openai_max_tokens

    def build_messages(self, request: ScoringRequest) -> list[Message]:
        exercises = "\n".join(
            f"- {ex.id}: {ex.title} ({ex.category}) - {ex.description} [Tags: {', '.join(sorted(ex.tags))}]"
            for ex in self._catalog
        )
        hour = f"{request.local_hour}:00" if request.local_hour is not None else "unknown"
        activity = "\n".join(
            f"- {category}: {total} completed"
            for category, total in sorted(request.recent_activity.items(), key=lambda item: (-item[1], item[0]))
        ) or "- none recorded"
        system = SYSTEM_PROMPT.format(
            hour=hour,
            history_days=request.history_days,
            activity=activity,
            exercises=exercises,
            count=request.requested_count,
        )
        return [
            Message(role="system", content=system),
            Message(role="user", content=f"Recommend today's focus for user {request.user_id}."),
        ]

    async def score(self, request: ScoringRequest) -> ScoringResponse:
        config = LLMConfig(
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            json_schema=DAILY_FOCUS_RECOMMENDATION_SCHEMA,
        )

        try:
            response = await self._provider.chat(self.build_messages(request), config)
        except httpx.HTTPError as e:
            raise ScoringUnavailableError(f"LLM request failed: {e}") from e

        if response.structured_data is None:
            raise ScoringUnavailableError("LLM returned no parseable JSON")

        try:
            result = ScoringResponse.model_validate(response.structured_data)
        except PydanticValidationError as e:
            raise ScoringUnavailableError(
                "LLM returned JSON that does not match the recommendation schema",
                details={"errors": e.error_count()},
            ) from e

        logger.debug(
            "ai_scoring_completed",
            user_id=request.user_id,
            returned=len(result.recommendations),
            usage=response.usage,
        )
        return result
