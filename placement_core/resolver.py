from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Optional, Sequence
import logging

from .question_bank import LEVELS, SKILLS
from .scoring import is_correct
from .types import AssessmentItem, PlacementResult
from .config import (
    LADDER_PASS_PCT,
    LADDER_PRIOR_PCT,
    GAP_PCT,
    STRENGTH_PCT,
    WEAKNESS_PCT,
    UNIT_ADVANCE_PCT,
)

log = logging.getLogger(__name__)

RECOMMENDATIONS: Dict[str, str] = {
    "grammar": "Focus on grammar fundamentals and verb conjugations",
    "vocabulary": "Build core vocabulary through daily practice",
    "reading": "Practice reading comprehension with graded texts",
}

STUDY_TIME: Dict[str, str] = {
    "A1": "2-3 months",
    "A2": "3-4 months",
    "B1": "4-6 months",
    "B2": "6-8 months",
}


def pct(num: float, den: float) -> int:
    """Whole-number percentage, rounded half up; 0 when den is 0."""
    if den <= 0:
        return 0
    return int(float(num) / float(den) * 100.0 + 0.5)


def _ladder(levels: Mapping[str, int]) -> str:
    # top-down: a tier needs its own pass mark plus a stronger showing one tier below
    for idx in range(len(LEVELS) - 1, 0, -1):
        here, below = LEVELS[idx], LEVELS[idx - 1]
        if levels.get(here, 0) >= LADDER_PASS_PCT and levels.get(below, 0) >= LADDER_PRIOR_PCT:
            return here
    return LEVELS[0]


def _gap_adjust(level: str, skills: Mapping[str, int]) -> str:
    if level == LEVELS[0]:
        return level
    if any(score < GAP_PCT for score in skills.values()):
        demoted = LEVELS[LEVELS.index(level) - 1]
        log.debug("gap adjustment %s->%s skills=%s", level, demoted, dict(skills))
        return demoted
    return level


def calculate_final_result(
    asked: Sequence[AssessmentItem],
    answers: Mapping[str, str],
    total_questions: int,
) -> PlacementResult:
    """Recompute a placement from the asked items and raw answers alone.

    Unweighted and independent of the running confidence scores, so the
    report is reproducible from the answer log.
    """
    level_score = {lvl: 0 for lvl in LEVELS}
    level_max = {lvl: 0 for lvl in LEVELS}
    skill_score = {sk: 0 for sk in SKILLS}
    skill_max = {sk: 0 for sk in SKILLS}
    total_points = 0
    earned_points = 0

    for it in asked:
        total_points += it.points
        level_max[it.level] += it.points
        skill_max[it.skill] += it.points
        if is_correct(it, answers.get(it.id)):
            earned_points += it.points
            level_score[it.level] += it.points
            skill_score[it.skill] += it.points

    detailed = {lvl: pct(level_score[lvl], level_max[lvl]) for lvl in LEVELS}
    breakdown = {sk: pct(skill_score[sk], skill_max[sk]) for sk in SKILLS}

    placed = _gap_adjust(_ladder(detailed), breakdown)

    strengths = [sk for sk in SKILLS if breakdown[sk] >= STRENGTH_PCT]
    weaknesses = [sk for sk in SKILLS if breakdown[sk] < WEAKNESS_PCT]
    recommendations = [RECOMMENDATIONS[sk] for sk in weaknesses]

    return PlacementResult(
        recommended_level=placed,
        recommended_unit=2 if detailed[placed] >= UNIT_ADVANCE_PCT else 1,
        recommended_lesson=1,
        confidence_score=pct(earned_points, total_points),
        strengths=strengths,
        weaknesses=weaknesses,
        detailed_scores=detailed,
        skill_breakdown=breakdown,
        recommendations=recommendations,
        estimated_study_time=STUDY_TIME[placed],
        questions_answered=len(asked),
        total_questions=int(total_questions),
    )


def score_answers(
    answers: Mapping[str, str],
    items: Iterable[AssessmentItem],
    total_questions: Optional[int] = None,
) -> PlacementResult:
    """Score a stored {item_id: answer} map without running the adaptive flow.

    Known ids count as asked, in bank order; unknown ids are ignored.
    """
    bank: List[AssessmentItem] = list(items)
    asked = [it for it in bank if it.id in answers]
    total = len(bank) if total_questions is None else total_questions
    return calculate_final_result(asked, answers, total)
