from __future__ import annotations
from typing import Dict, Mapping, Optional, Tuple

from .config import CORE_WEIGHT, MISS_PENALTY
from .scoring import is_correct
from .types import AssessmentItem


def confidence_delta(item: AssessmentItem, correct: bool) -> float:
    weight = CORE_WEIGHT if item.is_core else 1.0
    if correct:
        return item.points * weight
    return -item.points * weight * MISS_PENALTY


def update_level_confidence(
    confidence: Mapping[str, float],
    item: Optional[AssessmentItem],
    answer: Optional[str],
) -> Tuple[Dict[str, float], bool, float]:
    """Return (new confidence map, correct, delta) for one submitted answer.

    Unknown items leave the map untouched. No floor is applied: a run of
    wrong core answers drives the level score negative.
    """
    out = dict(confidence)
    if item is None:
        return out, False, 0.0
    correct = is_correct(item, answer)
    delta = confidence_delta(item, correct)
    out[item.level] = out.get(item.level, 0.0) + delta
    return out, correct, delta
