# placement_core/policy.py
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple
import logging

from .question_bank import LEVELS
from .types import AssessmentItem, ExamState
from .config import (
    MIN_ITEMS_PER_LEVEL,
    GLOBAL_CAP,
    ESCALATE_RATIO,
    TRUNCATE_RATIO,
    ADVANCE_RATIO,
)


log = logging.getLogger(__name__)


def _safe_frac(num: float, den: float) -> float:
    return float(num) / float(den) if den > 0 else 0.0


def next_level(level: str) -> str:
    idx = LEVELS.index(level)
    return LEVELS[idx + 1] if idx < len(LEVELS) - 1 else LEVELS[-1]


class PlacementPolicy:
    """Core-first, bank-order item selection with per-level stop/advance rules.

    The bank is read-only: items are indexed once by level in declaration
    order and never re-sorted, so identical answers replay identical
    question sequences.
    """

    def __init__(self, items: Sequence[AssessmentItem]):
        self.items: List[AssessmentItem] = list(items)
        self._by_id: Dict[str, AssessmentItem] = {}
        self._level_index: Dict[str, List[AssessmentItem]] = {lvl: [] for lvl in LEVELS}
        self._max_points: Dict[str, int] = {lvl: 0 for lvl in LEVELS}
        for it in self.items:
            self._by_id.setdefault(it.id, it)
            self._level_index.setdefault(it.level, []).append(it)
            self._max_points[it.level] = self._max_points.get(it.level, 0) + int(it.points)

    def item(self, item_id: str) -> Optional[AssessmentItem]:
        return self._by_id.get(item_id)

    def max_points(self, level: str) -> int:
        return self._max_points.get(level, 0)

    def asked_at_level(self, st: ExamState, level: Optional[str] = None) -> int:
        lvl = level or st.current_level
        return sum(1 for iid in st.asked if iid in self._by_id and self._by_id[iid].level == lvl)

    def ratio(self, st: ExamState, level: Optional[str] = None) -> float:
        # weighted running score over the unweighted point total; may exceed 1 or go negative
        lvl = level or st.current_level
        return _safe_frac(st.level_confidence.get(lvl, 0.0), self.max_points(lvl))

    def should_stop(self, st: ExamState) -> bool:
        level = st.current_level
        total = len(st.asked)
        if total >= GLOBAL_CAP:
            log.debug("stop level=%s reason=global_cap asked=%d", level, total)
            return True

        if self.asked_at_level(st) < MIN_ITEMS_PER_LEVEL:
            return False

        ratio = self.ratio(st)
        if ratio > ESCALATE_RATIO and level != LEVELS[-1]:
            return False

        if ratio < TRUNCATE_RATIO and level != LEVELS[0]:
            log.debug("stop level=%s reason=truncate ratio=%.4f", level, ratio)
            return True

        return total >= GLOBAL_CAP

    def should_advance(self, st: ExamState, level: Optional[str] = None) -> bool:
        lvl = level or st.current_level
        return self.ratio(st, lvl) > ADVANCE_RATIO and lvl != LEVELS[-1]

    def _first_unasked(self, level: str, asked: Sequence[str]) -> Optional[AssessmentItem]:
        seen = set(asked)
        options = [it for it in self._level_index.get(level, []) if it.id not in seen]
        if not options:
            return None
        core = [it for it in options if it.is_core]
        return core[0] if core else options[0]

    def next_item(self, st: ExamState) -> Tuple[Optional[AssessmentItem], str]:
        """Return (item or None, level it was drawn from).

        The returned level may be above ``st.current_level`` when the
        current level ran dry and the advance rule fired.
        """
        level = st.current_level
        if self.should_stop(st):
            return None, level

        while True:
            item = self._first_unasked(level, st.asked)
            if item is not None:
                return item, level
            if not self.should_advance(st, level):
                log.debug("level %s exhausted without advance ratio=%.4f", level, self.ratio(st, level))
                return None, level
            log.debug("advance %s->%s ratio=%.4f", level, next_level(level), self.ratio(st, level))
            level = next_level(level)
