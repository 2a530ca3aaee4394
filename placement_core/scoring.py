from __future__ import annotations
from typing import Optional

from .normalize import normalize
from .types import AssessmentItem, ChoiceItem, FillBlankItem


def is_correct(item: AssessmentItem, answer: Optional[str]) -> bool:
    """
    Fill-blank answers are compared after normalisation.
    Choice answers must equal the stored option string exactly; the UI only
    ever submits one of the offered options.
    A missing answer is never correct.
    """
    if answer is None:
        return False
    if isinstance(item, FillBlankItem):
        return normalize(answer) == normalize(item.correct_answer)
    if isinstance(item, ChoiceItem):
        return answer == item.correct_answer
    raise TypeError(f"unsupported item variant: {type(item).__name__}")
