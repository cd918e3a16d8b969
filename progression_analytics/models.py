"""
Progression Analytics — Session input model

Immutable records handed to the engine by the session history.
The engine only reads them; it never assigns identity or mutates state.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Outcome(str, Enum):
    PROGRESS = "progress"
    STAY = "stay"
    REGRESS = "regress"


class ExerciseType(str, Enum):
    STRENGTH = "strength"
    CARDIO = "cardio"
    MOBILITY = "mobility"
    ISOMETRIC = "isometric"
    EXPLOSIVE = "explosive"


@dataclass(frozen=True)
class SetData:
    id: str = ""
    completed: bool = False
    weight: Optional[float] = None
    reps: Optional[int] = None
    duration: Optional[int] = None  # seconds
    distance: Optional[float] = None


@dataclass(frozen=True)
class SetGroup:
    id: str = ""
    sets: tuple = ()


@dataclass(frozen=True)
class ProgressionSuggestion:
    """System-calculated suggestion attached to a logged exercise."""

    base_value: float
    suggested_value: float
    confidence: Optional[float] = None
    decision_code: Optional[str] = None
    applied_outcome: Optional[Outcome] = None


@dataclass(frozen=True)
class SessionExercise:
    exercise_name: str
    exercise_type: ExerciseType = ExerciseType.STRENGTH
    id: str = ""
    set_groups: tuple = ()
    primary_muscles: tuple = ()
    progression_suggestion: Optional[ProgressionSuggestion] = None
    progression_recommendation: Optional[Outcome] = None

    @property
    def is_strength(self) -> bool:
        return self.exercise_type == ExerciseType.STRENGTH

    @property
    def is_cardio(self) -> bool:
        return self.exercise_type == ExerciseType.CARDIO

    def completed_sets(self):
        """Completed sets across every set group, in logged order."""
        for group in self.set_groups:
            for s in group.sets:
                if s.completed:
                    yield s


@dataclass(frozen=True)
class CompletedModule:
    id: str = ""
    name: str = ""
    skipped: bool = False
    exercises: tuple = ()


@dataclass(frozen=True)
class Session:
    id: str
    date: datetime
    modules: tuple = ()

    def active_exercises(self):
        """Exercises of every non-skipped module."""
        for module in self.modules:
            if module.skipped:
                continue
            yield from module.exercises

    def strength_exercises(self):
        return [ex for ex in self.active_exercises() if ex.is_strength]
