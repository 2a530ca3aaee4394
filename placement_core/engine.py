# placement_core/engine.py
from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Union
import logging

from .types import AssessmentItem, ExamState, PlacementResult
from .question_bank import load_bank, LEVELS
from .tracker import update_level_confidence
from .policy import PlacementPolicy
from . import resolver
from .config import (
    load_config,
    PROGRESS_EXPECTED_ITEMS,
    PROGRESS_CAP_PCT,
    DEBUG_TRACE,
    TRACE_FIELDS,
)


log = logging.getLogger(__name__)


def _emit_trace(**values: object) -> None:
    if not DEBUG_TRACE:
        return
    ordered = []
    for key in TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(str(val) for val in ordered))


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class Draw:
    pass


@dataclass(frozen=True)
class Submit:
    item_id: str
    answer: str


Action = Union[Reset, Draw, Submit]


def initial_state() -> ExamState:
    return ExamState(
        current_level=LEVELS[0],
        answers={},
        asked=(),
        level_confidence={lvl: 0.0 for lvl in LEVELS},
    )


def _apply_draw(state: ExamState, policy: PlacementPolicy) -> ExamState:
    if state.status == "completed":
        return state
    item, level = policy.next_item(state)
    if item is None:
        return replace(state, current_level=level, status="completed", current=None)
    return replace(
        state,
        current_level=level,
        asked=state.asked + (item.id,),
        status="in_progress",
        current=item.id,
    )


def _apply_submit(state: ExamState, policy: PlacementPolicy, item_id: str, answer: str) -> ExamState:
    if state.status == "completed":
        log.debug("ignoring answer for %s: exam already completed", item_id)
        return state
    item = policy.item(item_id)
    if item is None:
        log.debug("ignoring answer for unknown item %s", item_id)
        return state
    confidence, _, _ = update_level_confidence(state.level_confidence, item, answer)
    return replace(
        state,
        answers={**state.answers, item.id: "" if answer is None else str(answer)},
        level_confidence=confidence,
    )


def reduce(state: ExamState, action: Action, policy: PlacementPolicy) -> ExamState:
    """Pure transition: (state, action) -> new state. Never mutates ``state``."""
    if isinstance(action, Reset):
        return initial_state()
    if isinstance(action, Draw):
        return _apply_draw(state, policy)
    if isinstance(action, Submit):
        return _apply_submit(state, policy, action.item_id, action.answer)
    raise TypeError(f"unknown action: {action!r}")


def replay(actions: Iterable[Action], policy: PlacementPolicy, state: Optional[ExamState] = None) -> ExamState:
    st = state if state is not None else initial_state()
    for action in actions:
        st = reduce(st, action, policy)
    return st


class PlacementExam:
    """Mutable facade over the reducer: one instance per learner attempt.

    Not synchronised; hosts must serialise mutating calls per session.
    """

    def __init__(self, items: Optional[Sequence[AssessmentItem]] = None):
        if items is None:
            cfg = load_config()
            items = load_bank(cfg.get("PLACEMENT_BANK_PATH"))
        self.items: List[AssessmentItem] = list(items)
        self.policy = PlacementPolicy(self.items)
        self.state: ExamState = initial_state()
        self.audit_events: List[Dict[str, object]] = []

    @property
    def status(self) -> str:
        return self.state.status

    @property
    def asked_items(self) -> List[AssessmentItem]:
        return [self.policy.item(iid) for iid in self.state.asked]

    def dispatch(self, action: Action) -> ExamState:
        self.state = reduce(self.state, action, self.policy)
        return self.state

    def reset(self) -> None:
        self.dispatch(Reset())
        self.audit_events = []

    def get_next_question(self) -> Optional[AssessmentItem]:
        before = self.state
        after = self.dispatch(Draw())
        if after is before:
            return None

        if after.current_level != before.current_level:
            self._record(
                "advance",
                level=after.current_level,
                ratio=round(self.policy.ratio(before), 4),
            )
        if after.current is None:
            self._record("stop", level=after.current_level, ratio=round(self.policy.ratio(after), 4))
            log.debug("exam completed level=%s asked=%d", after.current_level, len(after.asked))
            return None

        item = self.policy.item(after.current)
        self._record("draw", item_id=item.id, level=item.level, skill=item.skill)
        log.debug("draw item=%s level=%s core=%s", item.id, item.level, item.is_core)
        return item

    def submit_answer(self, item_id: str, answer: str) -> None:
        before = self.state
        after = self.dispatch(Submit(item_id, answer))
        if after is before:
            return

        item = self.policy.item(item_id)
        prev = before.level_confidence.get(item.level, 0.0)
        now = after.level_confidence.get(item.level, 0.0)
        delta = now - prev
        self._record(
            "answer",
            item_id=item.id,
            level=item.level,
            skill=item.skill,
            correct=delta > 0,
            delta=delta,
            confidence_after=now,
            ratio=round(self.policy.ratio(after, item.level), 4),
        )
        log.debug(
            "confidence_update item=%s level=%s delta=%+.2f confidence=%.2f->%.2f",
            item.id, item.level, delta, prev, now,
        )

    def calculate_final_result(self) -> PlacementResult:
        return resolver.calculate_final_result(self.asked_items, self.state.answers, len(self.items))

    def progress(self) -> float:
        if self.state.status == "completed":
            return 100.0
        answered = len(self.state.answers)
        return min(answered / float(PROGRESS_EXPECTED_ITEMS) * 100.0, PROGRESS_CAP_PCT)

    def _record(self, event: str, **values: object) -> None:
        values.setdefault("asked_total", len(self.state.asked))
        entry: Dict[str, object] = {"t": datetime.now(timezone.utc).isoformat(), "event": event}
        entry.update(values)
        self.audit_events.append(entry)
        _emit_trace(event=event, **values)
