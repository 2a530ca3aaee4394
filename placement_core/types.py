from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, List, Literal, Optional, Tuple, Union

Level = Literal["A1", "A2", "B1", "B2"]
Skill = Literal["grammar", "vocabulary", "reading"]
ChoiceKind = Literal["multiple-choice", "reading-comprehension"]
ExamStatus = Literal["not_started", "in_progress", "completed"]


@dataclass(frozen=True)
class ChoiceItem:
    id: str; kind: ChoiceKind; level: Level; skill: Skill; points: int
    prompt: str
    options: Tuple[str, ...]
    correct_answer: str
    explanation: str = ""
    topics: Tuple[str, ...] = ()
    is_core: bool = False


@dataclass(frozen=True)
class FillBlankItem:
    id: str; level: Level; skill: Skill; points: int
    prompt: str
    correct_answer: str
    explanation: str = ""
    topics: Tuple[str, ...] = ()
    is_core: bool = False
    kind: Literal["fill-blank"] = "fill-blank"


AssessmentItem = Union[ChoiceItem, FillBlankItem]


@dataclass(frozen=True)
class PlacementResult:
    recommended_level: Level
    recommended_unit: int
    recommended_lesson: int
    confidence_score: int
    strengths: List[str]
    weaknesses: List[str]
    detailed_scores: Dict[str, int]
    skill_breakdown: Dict[str, int]
    recommendations: List[str]
    estimated_study_time: str
    questions_answered: int
    total_questions: int

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class ExamState:
    """Snapshot of one learner attempt; every action yields a new instance."""

    current_level: Level
    answers: Dict[str, str]
    asked: Tuple[str, ...]
    level_confidence: Dict[str, float]
    status: ExamStatus = "not_started"
    current: Optional[str] = None
