from __future__ import annotations

import pytest

from placement_core.question_bank import LEVELS, SKILLS
from placement_core.types import AssessmentItem, ChoiceItem, FillBlankItem


def make_item(
    item_id: str,
    level: str,
    skill: str,
    points: int = 1,
    *,
    core: bool = False,
    kind: str | None = None,
) -> AssessmentItem:
    kind = kind or ("fill-blank" if skill == "vocabulary" else
                    "reading-comprehension" if skill == "reading" else "multiple-choice")
    if kind == "fill-blank":
        return FillBlankItem(
            id=item_id, level=level, skill=skill, points=points,
            prompt=f"{item_id} ____", correct_answer="Canción", is_core=core,
        )
    return ChoiceItem(
        id=item_id, kind=kind, level=level, skill=skill, points=points,
        prompt=f"{item_id}?", options=("right", "wrong", "other"),
        correct_answer="right", is_core=core,
    )


def build_synthetic_bank(
    *,
    levels: list[str] | None = None,
    per_level: int = 8,
    core_per_level: int = 2,
    points: int | None = None,
) -> list[AssessmentItem]:
    """Deterministic bank: skills cycle grammar/vocabulary/reading, the first
    ``core_per_level`` items of each level are core, points default to the
    level's ordinal (A1=1 ... B2=4)."""

    items: list[AssessmentItem] = []
    for level in levels or LEVELS:
        pts = points if points is not None else LEVELS.index(level) + 1
        for idx in range(per_level):
            skill = SKILLS[idx % len(SKILLS)]
            items.append(
                make_item(f"{level.lower()}-{skill}-{idx}", level, skill, pts, core=idx < core_per_level)
            )
    return items


def right_answer(item: AssessmentItem) -> str:
    if isinstance(item, FillBlankItem):
        # accent and case variation must still count
        return item.correct_answer.upper().replace("Ó", "O") + "."
    return item.correct_answer


def wrong_answer(item: AssessmentItem) -> str:
    if isinstance(item, ChoiceItem):
        return next(o for o in item.options if o != item.correct_answer)
    return "no lo sé"


def run_exam(exam, answer_for) -> list[str]:
    """Drive an exam to completion; returns the level pointer after each draw."""

    levels: list[str] = []
    while True:
        item = exam.get_next_question()
        levels.append(exam.state.current_level)
        if item is None:
            return levels
        exam.submit_answer(item.id, answer_for(item))


@pytest.fixture
def synthetic_bank() -> list[AssessmentItem]:
    return build_synthetic_bank()
