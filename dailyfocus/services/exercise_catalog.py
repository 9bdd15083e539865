"""
Exercise Catalog

Static, read-only list of exercise definitions. Loaded once at start-up and
shared by the recommendation, favorites and completion services.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator


@dataclass(frozen=True)
class ExerciseDefinition:
    """A single exercise offered by the app."""

    id: str
    title: str
    category: str
    description: str
    tags: frozenset[str] = field(default_factory=frozenset)
    default_duration_seconds: int | None = None
    is_quick_start: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "description": self.description,
            "tags": sorted(self.tags),
            "default_duration_seconds": self.default_duration_seconds,
            "is_quick_start": self.is_quick_start,
        }


def _minutes(minutes: int) -> int:
    return minutes * 60


MASTER_EXERCISE_LIST: tuple[ExerciseDefinition, ...] = (
    # Mindfulness
    ExerciseDefinition(
        id="mindfulness_breath_5min",
        title="Breath Focus",
        category="Mindfulness",
        description="Anchor your attention on breathing",
        tags=frozenset({"stress_reduction", "focus", "calm", "short_session", "beginner"}),
        default_duration_seconds=_minutes(5),
    ),
    ExerciseDefinition(
        id="mindfulness_body_scan_8min",
        title="Body Scan",
        category="Mindfulness",
        description="Release tension through awareness",
        tags=frozenset({"relaxation", "body_awareness", "tension_release"}),
        default_duration_seconds=_minutes(8),
    ),
    ExerciseDefinition(
        id="mindfulness_senses_4min",
        title="Five Senses",
        category="Mindfulness",
        description="Connect with your surroundings",
        tags=frozenset({"grounding", "present_moment", "short_session"}),
        default_duration_seconds=_minutes(4),
    ),
    # Visualization
    ExerciseDefinition(
        id="visualization_goals_5min",
        title="Goal Achievement Visualization",
        category="Visualization",
        description="Visualize successfully achieving your goals",
        tags=frozenset({"goal_setting", "motivation", "success_mindset"}),
        default_duration_seconds=_minutes(5),
    ),
    ExerciseDefinition(
        id="visualization_ideal_life_5min",
        title="Ideal Life Visualization",
        category="Visualization",
        description="Envision your perfect future and lifestyle",
        tags=frozenset({"future_planning", "inspiration", "positive_outlook"}),
        default_duration_seconds=_minutes(5),
    ),
    ExerciseDefinition(
        id="visualization_confidence_5min",
        title="Self-Confidence Visualization",
        category="Visualization",
        description="Build confidence and positive self-image",
        tags=frozenset({"self_esteem", "confidence_boost", "positive_self_image"}),
        default_duration_seconds=_minutes(5),
    ),
    ExerciseDefinition(
        id="visualization_contentment_5min",
        title="Contentment Visualization",
        category="Visualization",
        description="Embrace gratitude and present moment awareness",
        tags=frozenset({"gratitude", "present_moment", "inner_peace"}),
        default_duration_seconds=_minutes(5),
    ),
    ExerciseDefinition(
        id="visualization_calm_5min",
        title="Inner Peace Visualization",
        category="Visualization",
        description="Find calmness and emotional balance",
        tags=frozenset({"calm", "emotional_regulation", "relaxation"}),
        default_duration_seconds=_minutes(5),
    ),
    # Task planning
    ExerciseDefinition(
        id="tasks_planner",
        title="Task Planning",
        category="Task Planning",
        description="Organize & Focus on your priorities",
        tags=frozenset({"organization", "productivity", "planning", "focus"}),
        default_duration_seconds=None,
        is_quick_start=True,
    ),
    # Deep work
    ExerciseDefinition(
        id="deepwork_pomodoro_25min",
        title="Pomodoro Session",
        category="Deep Work",
        description="Classic 25-minute focus interval",
        tags=frozenset({"focus", "productivity", "time_management", "pomodoro"}),
        default_duration_seconds=_minutes(25),
    ),
    ExerciseDefinition(
        id="deepwork_extended_45min",
        title="Extended Focus Session",
        category="Deep Work",
        description="45-minute focused work period",
        tags=frozenset({"focus", "deep_work", "productivity"}),
        default_duration_seconds=_minutes(45),
    ),
    ExerciseDefinition(
        id="deepwork_deep_50min",
        title="Deep Work Block",
        category="Deep Work",
        description="50-minute intense work session",
        tags=frozenset({"deep_work", "intense_focus", "productivity"}),
        default_duration_seconds=_minutes(50),
    ),
    # Binaural beats
    ExerciseDefinition(
        id="binaural_focus_beta_20min",
        title="Focus Beats (Beta)",
        category="Binaural Beats",
        description="Enhance concentration and mental clarity",
        tags=frozenset({"focus", "concentration", "study", "work", "beta_waves"}),
        default_duration_seconds=_minutes(20),
    ),
    ExerciseDefinition(
        id="binaural_meditation_theta_15min",
        title="Meditation Beats (Theta)",
        category="Binaural Beats",
        description="Deep relaxation and mindfulness support",
        tags=frozenset({"meditation", "relaxation", "mindfulness", "theta_waves"}),
        default_duration_seconds=_minutes(15),
    ),
    ExerciseDefinition(
        id="binaural_creativity_alpha_30min",
        title="Creativity Beats (Alpha)",
        category="Binaural Beats",
        description="Boost creative thinking and flow state",
        tags=frozenset({"creativity", "flow_state", "inspiration", "alpha_waves"}),
        default_duration_seconds=_minutes(30),
    ),
    ExerciseDefinition(
        id="binaural_sleep_theta_30min",
        title="Sleep Beats (Theta)",
        category="Binaural Beats",
        description="Aid in falling asleep and better rest",
        tags=frozenset({"sleep", "relaxation", "insomnia_aid", "theta_waves"}),
        default_duration_seconds=_minutes(30),
    ),
    # Journaling
    ExerciseDefinition(
        id="journaling_gratitude",
        title="Gratitude Journaling",
        category="Journaling",
        description="Express appreciation for positive aspects",
        tags=frozenset({"gratitude", "positive_psychology", "reflection", "well_being"}),
        is_quick_start=True,
    ),
    ExerciseDefinition(
        id="journaling_reflection",
        title="Daily Reflection",
        category="Journaling",
        description="Explore your thoughts and experiences",
        tags=frozenset({"self_reflection", "mindfulness", "personal_growth"}),
        is_quick_start=True,
    ),
    ExerciseDefinition(
        id="journaling_growth",
        title="Growth Journaling",
        category="Journaling",
        description="Focus on personal progress and improvement",
        tags=frozenset({"personal_development", "goal_setting", "learning"}),
        is_quick_start=True,
    ),
    ExerciseDefinition(
        id="journaling_free_write",
        title="Free Write",
        category="Journaling",
        description="Unstructured writing to clear your mind",
        tags=frozenset({"mind_clearing", "creativity", "self_expression"}),
        is_quick_start=True,
    ),
)


class ExerciseCatalog:
    """Read-only lookup over a fixed list of exercise definitions."""

    def __init__(self, exercises: Iterable[ExerciseDefinition] = MASTER_EXERCISE_LIST):
        self._exercises = tuple(exercises)
        self._by_id: dict[str, ExerciseDefinition] = {}
        for exercise in self._exercises:
            if exercise.id in self._by_id:
                raise ValueError(f"Duplicate exercise id in catalog: {exercise.id}")
            self._by_id[exercise.id] = exercise

    def get(self, exercise_id: str) -> ExerciseDefinition | None:
        return self._by_id.get(exercise_id)

    def __contains__(self, exercise_id: object) -> bool:
        return exercise_id in self._by_id

    def __iter__(self) -> Iterator[ExerciseDefinition]:
        return iter(self._exercises)

    def __len__(self) -> int:
        return len(self._exercises)

    def ids(self) -> list[str]:
        return [exercise.id for exercise in self._exercises]

    def categories(self) -> set[str]:
        return {exercise.category for exercise in self._exercises}


_catalog_instance: ExerciseCatalog | None = None


def get_exercise_catalog() -> ExerciseCatalog:
    """Get the process-wide catalog built from MASTER_EXERCISE_LIST."""
    global _catalog_instance
    if _catalog_instance is None:
        _catalog_instance = ExerciseCatalog()
    return _catalog_instance
