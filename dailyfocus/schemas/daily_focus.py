"""Schemas for daily focus recommendations and completion status."""
from datetime import date, datetime

from pydantic import BaseModel, Field

from dailyfocus.services.completion_aggregator import CompletionReport
from dailyfocus.services.recommendation_cache import RecommendationResult
from dailyfocus.services.recommendation_generator import RecommendationEntry, explain


class ExerciseResponse(BaseModel):
    id: str
    title: str
    category: str
    description: str
    tags: list[str] = Field(default_factory=list)
    default_duration_seconds: int | None = None
    is_quick_start: bool = False


class RecommendationResponse(BaseModel):
    exercise: ExerciseResponse
    provenance: str = Field(..., description="ai or fallback")
    priority_score: float | None = None
    reasoning: str
    personalization_note: str | None = None
    expected_benefit: str | None = None
    fallback_source: str | None = Field(None, description="favorite, time_of_day or catalog")

    @classmethod
    def from_entry(cls, entry: RecommendationEntry) -> "RecommendationResponse":
        return cls(
            exercise=ExerciseResponse(**entry.exercise.to_dict()),
            provenance=entry.provenance.value,
            priority_score=entry.priority_score,
            reasoning=explain(entry),
            personalization_note=entry.personalization_note,
            expected_benefit=entry.expected_benefit,
            fallback_source=entry.fallback_source.value if entry.fallback_source else None,
        )


class DailyFocusResponse(BaseModel):
    recommendations: list[RecommendationResponse] = Field(default_factory=list)
    loading: bool = False
    error: str | None = None
    served_from_cache: bool = False
    ai_powered: bool = False
    focus_theme: str | None = None
    coach_note: str | None = None
    generated_at: datetime | None = None

    @classmethod
    def from_result(cls, result: RecommendationResult) -> "DailyFocusResponse":
        return cls(
            recommendations=[RecommendationResponse.from_entry(entry) for entry in result.entries],
            loading=result.loading,
            error=result.error,
            served_from_cache=result.served_from_cache,
            ai_powered=result.ai_powered,
            focus_theme=result.focus_theme,
            coach_note=result.coach_note,
            generated_at=result.generated_at,
        )


class CompletionSourceErrorResponse(BaseModel):
    code: str
    message: str


class CompletionStatusResponse(BaseModel):
    day: date
    status: dict[str, bool] = Field(default_factory=dict)
    unknown: list[str] = Field(default_factory=list, description="Ids reported False because their source failed")
    errors: dict[str, CompletionSourceErrorResponse] = Field(default_factory=dict)

    @classmethod
    def from_report(cls, report: CompletionReport) -> "CompletionStatusResponse":
        return cls(
            day=report.day,
            status=report.status,
            unknown=sorted(report.unknown),
            errors={
                source_id: CompletionSourceErrorResponse(code=error.code, message=error.message)
                for source_id, error in report.errors.items()
            },
        )
